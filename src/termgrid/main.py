"""Top-level orchestration: discover, encode, render and watch for resizes."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import TYPE_CHECKING, BinaryIO

import termgrid.discovery as tg_discovery
import termgrid.image_io as tg_image_io
import termgrid.runtime as tg_runtime
from termgrid.coordinator import (
    ResizeCoordinator,
    ResizeNotifier,
    SignalResizeWatcher,
)
from termgrid.logging_utils import logger
from termgrid.protocols import select_protocol
from termgrid.render import Renderer
from termgrid.terminal import binary_stdout, get_terminal_geometry, stream_is_tty

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Mapping
    from pathlib import Path

    from termgrid.config import ViewerConfig
    from termgrid.terminal import GeometryProvider
    from termgrid.type_defs import GridLayout, WatchMode


@dataclass(slots=True)
class ViewResult:
    """Outcome of one viewer session."""

    discovered: int
    rendered: int
    layout: GridLayout
    protocol: str
    watched: bool


def should_watch(mode: WatchMode, stream: object) -> bool:
    """Decide whether to keep listening for resizes after startup."""
    if mode == "always":
        return True
    if mode == "never":
        return False
    return stream_is_tty(stream) and SignalResizeWatcher.supported()


def build_coordinator(
    root: str | Path,
    config: ViewerConfig,
    *,
    stream: BinaryIO,
    geometry_provider: GeometryProvider = get_terminal_geometry,
    environ: Mapping[str, str] | None = None,
    notifier: ResizeNotifier | None = None,
) -> tuple[ResizeCoordinator, int]:
    """
    Discover and encode images, then wire up renderer and coordinator.

    Nothing is written to ``stream`` here, so a directory failure leaves
    the output untouched.

    Returns:
        The coordinator and the number of discovered paths.

    Raises:
        DirectoryError: If ``root`` cannot be scanned.

    """
    tg_runtime.validate_max_images(config.discovery.max_images)
    root_path = tg_runtime.validate_root_directory(root)

    paths = tg_discovery.discover(
        root_path,
        recursive=config.discovery.recursive,
        max_count=config.discovery.max_images,
        extensions=frozenset(config.discovery.extensions),
    )
    entries = tg_image_io.load_entries(
        paths,
        thumbnail_px=config.render.thumbnail_px,
        report_skipped=config.output.report_skipped,
    )
    logger.info("Loaded %d of %d discovered image(s) from %s",
                len(entries), len(paths), root_path)

    protocol = select_protocol(
        config.render.protocol,
        stream=stream,
        environ=os.environ if environ is None else environ,
    )
    coordinator = ResizeCoordinator(
        entries,
        Renderer(stream, protocol),
        geometry_provider,
        min_cell_width=config.layout.min_cell_width,
        cell_height_ratio=config.layout.cell_height_ratio,
        notifier=notifier,
    )
    return coordinator, len(paths)


def view_directory(
    root: str | Path,
    config: ViewerConfig,
    *,
    stream: BinaryIO | None = None,
    geometry_provider: GeometryProvider = get_terminal_geometry,
    environ: Mapping[str, str] | None = None,
) -> ViewResult:
    """
    Top level viewer entry point.

    Renders the grid once and, when watching is enabled, keeps
    re-rendering on terminal resizes until the process is interrupted.
    """
    out = stream if stream is not None else binary_stdout()
    watched = should_watch(config.render.watch, out)
    notifier = ResizeNotifier()
    # SIGWINCH is blocked before the startup render reads the geometry.
    watcher = _start_watcher(notifier) if watched else None
    try:
        coordinator, discovered = build_coordinator(
            root,
            config,
            stream=out,
            geometry_provider=geometry_provider,
            environ=environ,
            notifier=notifier,
        )
        layout = coordinator.render("startup")
        if watcher is not None:
            _serve_resizes(coordinator)
    finally:
        if watcher is not None:
            watcher.stop()

    return ViewResult(
        discovered=discovered,
        rendered=len(coordinator.images),
        layout=coordinator.last_layout or layout,
        protocol=coordinator.renderer.protocol.name,
        watched=watched,
    )


def _start_watcher(notifier: ResizeNotifier) -> SignalResizeWatcher | None:
    """Start forwarding resize signals, or return None if unsupported."""
    if not SignalResizeWatcher.supported():
        logger.warning(
            "Terminal resize signals are not available; rendering once.")
        return None
    watcher = SignalResizeWatcher(notifier)
    watcher.start()
    return watcher


def _serve_resizes(coordinator: ResizeCoordinator) -> None:
    """Block serving resize renders until interrupted."""
    logger.debug("Waiting for terminal resizes (Ctrl-C to exit)")
    try:
        coordinator.serve_forever()
    except KeyboardInterrupt:
        logger.debug("Interrupted; stopping resize watch")
