"""BOOTKERNEL

A small application bootstrap kernel. It resolves a conventional directory
layout from one application root, assembles a service registry from layered
YAML configuration, caches the compiled registry on disk for fast startups,
and dispatches calls to the registry's top-level ``app`` service.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
