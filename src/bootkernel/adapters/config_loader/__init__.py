"""Config loader adapters."""
