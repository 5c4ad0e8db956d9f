"""Registry compiler adapters."""
