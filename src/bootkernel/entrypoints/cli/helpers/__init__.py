"""CLI helpers for BOOTKERNEL.

Utilities used by the command-line interface: message emitters that write to
stderr with emoji→ASCII fallbacks, and the NAME=LEVEL logger-level parser.
"""

from .log_level_parser import parse_log_level
from .messages import success, warn

__all__ = ["parse_log_level", "success", "warn"]
