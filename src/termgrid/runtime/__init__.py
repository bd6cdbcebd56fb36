"""Runtime utilities for input validation and version lookup."""

from .validation import validate_max_images, validate_root_directory
from .version import resolve_project_version

__all__ = [
    "resolve_project_version",
    "validate_max_images",
    "validate_root_directory",
]
