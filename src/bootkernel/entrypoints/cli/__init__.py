"""The ``bootkernel`` command-line interface."""
