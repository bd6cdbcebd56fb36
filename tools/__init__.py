"""
Helper scripts for the terminal image grid viewer.

The tools package contains stand-alone utilities that support
development of the viewer, such as previewing grid layouts for a range
of terminal widths without rendering any images.

Modules in this package are intended for developer use, testing, or
command-line experimentation, and are not required by the core
library.
"""
