"""Public package exports for the terminal image grid viewer."""

from __future__ import annotations

from .coordinator import ResizeCoordinator, ResizeNotifier
from .discovery import discover
from .layout import compute_layout
from .main import view_directory
from .render import Renderer
from .type_defs import GridLayout, ImageEntry, TerminalGeometry

__all__ = [
    "GridLayout",
    "ImageEntry",
    "Renderer",
    "ResizeCoordinator",
    "ResizeNotifier",
    "TerminalGeometry",
    "compute_layout",
    "discover",
    "view_directory",
]
