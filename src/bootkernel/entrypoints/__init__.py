"""Entry points into BOOTKERNEL (command-line interface)."""
