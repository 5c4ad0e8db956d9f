"""Abstract collaborators of the kernel.

The kernel only talks to these interfaces; concrete implementations live in
`bootkernel.adapters` and are wired in `bootkernel.bootstrap`.
"""
