"""Registry adapters."""
