"""
Resize-reactive render coordination.

The :class:`ResizeCoordinator` owns the frozen image sequence together
with the only mutable viewer state (last geometry and layout) and makes
sure renders never overlap. Resize notifications land in a single-slot
:class:`ResizeNotifier`, so any burst of resizes, including ones that
arrive mid-render, collapses into at most one pending re-render.

Signals are bridged by :class:`SignalResizeWatcher`: ``SIGWINCH`` is
blocked for the process and a daemon thread picks it up with
``signal.sigwait``. Rendering always runs on the consumer's normal
control path, never inside a signal handler.
"""

from __future__ import annotations

import signal
import threading
from enum import Enum
from typing import TYPE_CHECKING

from termgrid.config_defaults import (
    DEFAULT_CELL_HEIGHT_RATIO,
    DEFAULT_MIN_CELL_WIDTH,
)
from termgrid.constants import RESIZE_MESSAGE
from termgrid.layout import compute_layout
from termgrid.logging_utils import logger
from termgrid.terminal import get_terminal_geometry

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Iterable

    from termgrid.render import Renderer
    from termgrid.terminal import GeometryProvider
    from termgrid.type_defs import (
        GridLayout,
        ImageEntry,
        RenderReason,
        TerminalGeometry,
    )

_WATCHER_JOIN_TIMEOUT = 1.0


class RenderState(Enum):
    """Whether a render is currently in progress."""

    IDLE = "idle"
    RENDERING = "rendering"


class ResizeNotifier:
    """
    Coalescing, capacity-one notification slot.

    ``notify`` never blocks; any number of notifications before the next
    ``consume`` count as one.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()

    @property
    def pending(self) -> bool:
        """True when a notification is waiting to be consumed."""
        return self._event.is_set()

    def notify(self) -> None:
        """Record that a re-render is owed."""
        with self._lock:
            self._event.set()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until a notification is pending or ``timeout`` expires."""
        return self._event.wait(timeout)

    def consume(self) -> bool:
        """Clear the slot and report whether it held a notification."""
        with self._lock:
            pending = self._event.is_set()
            self._event.clear()
        return pending


class ResizeCoordinator:
    """Serialize startup and resize renders over a frozen image set."""

    def __init__(  # noqa: PLR0913
        self,
        images: Iterable[ImageEntry],
        renderer: Renderer,
        geometry_provider: GeometryProvider = get_terminal_geometry,
        *,
        min_cell_width: int = DEFAULT_MIN_CELL_WIDTH,
        cell_height_ratio: float = DEFAULT_CELL_HEIGHT_RATIO,
        notifier: ResizeNotifier | None = None,
    ) -> None:
        self._images: tuple[ImageEntry, ...] = tuple(images)
        self.renderer = renderer
        self.geometry_provider = geometry_provider
        self.min_cell_width = min_cell_width
        self.cell_height_ratio = cell_height_ratio
        self.notifier = notifier or ResizeNotifier()

        self.state = RenderState.IDLE
        self.last_geometry: TerminalGeometry | None = None
        self.last_layout: GridLayout | None = None
        self.render_count = 0
        self._render_lock = threading.Lock()
        self._stopping = threading.Event()

    @property
    def images(self) -> tuple[ImageEntry, ...]:
        """The frozen image sequence, in discovery order."""
        return self._images

    def render(self, reason: RenderReason = "startup") -> GridLayout:
        """
        Fetch geometry, compute the layout and render the full grid.

        Any pending resize notification is consumed before the geometry
        is read, so notifications that arrive while this render runs stay
        pending for the next one.

        Raises:
            RuntimeError: If another render is already in progress.

        """
        if not self._render_lock.acquire(blocking=False):
            msg = "A render is already in progress"
            raise RuntimeError(msg)
        try:
            self.state = RenderState.RENDERING
            self.notifier.consume()
            geometry = self.geometry_provider()
            layout = compute_layout(
                len(self._images),
                geometry,
                min_cell_width=self.min_cell_width,
                cell_height_ratio=self.cell_height_ratio,
            )
            if reason == "resize":
                logger.debug("Terminal resized to %dx%d",
                             geometry.columns, geometry.rows)
                self.renderer.clear()
                self.renderer.write_line(RESIZE_MESSAGE)
            self.renderer.render(self._images, layout)
            self.last_geometry = geometry
            self.last_layout = layout
            self.render_count += 1
            return layout
        finally:
            self.state = RenderState.IDLE
            self._render_lock.release()

    def notify_resize(self) -> None:
        """Record a terminal resize; coalesced with any pending one."""
        if self.state is RenderState.RENDERING:
            logger.debug("Resize during render; re-render deferred")
        self.notifier.notify()

    def process_pending(self) -> bool:
        """Render once if a resize is owed. Return True if it rendered."""
        if not self.notifier.pending:
            return False
        self.render("resize")
        return True

    def serve_forever(self) -> None:
        """
        Re-render on every owed resize until :meth:`stop` is called.

        In normal operation this only returns when the process is
        interrupted.
        """
        self._stopping.clear()
        while True:
            self.notifier.wait()
            if self._stopping.is_set():
                break
            self.render("resize")

    def stop(self) -> None:
        """Ask :meth:`serve_forever` to return after the current render."""
        self._stopping.set()
        self.notifier.notify()


class SignalResizeWatcher:
    """Forward ``SIGWINCH`` to a :class:`ResizeNotifier` from a thread."""

    def __init__(self, notifier: ResizeNotifier) -> None:
        self.notifier = notifier
        self._thread: threading.Thread | None = None
        self._previous_mask: set[signal.Signals] | None = None
        self._stopped = threading.Event()

    @staticmethod
    def supported() -> bool:
        """True on platforms that deliver terminal resize signals."""
        return all(
            hasattr(signal, name)
            for name in ("SIGWINCH", "sigwait", "pthread_sigmask",
                         "pthread_kill")
        )

    def start(self) -> None:
        """
        Block ``SIGWINCH`` for the calling thread and start watching.

        Must be called from the main thread before other threads are
        started so they inherit the blocked mask.
        """
        if not self.supported():
            msg = "Terminal resize signals are not supported on this platform"
            raise RuntimeError(msg)
        if self._thread is not None:
            msg = "Watcher already started"
            raise RuntimeError(msg)

        self._stopped.clear()
        self._previous_mask = signal.pthread_sigmask(
            signal.SIG_BLOCK, {signal.SIGWINCH})
        self._thread = threading.Thread(
            target=self._run, name="termgrid-resize-watcher", daemon=True)
        self._thread.start()
        logger.debug("Watching for terminal resize signals")

    def _run(self) -> None:
        while True:
            signal.sigwait({signal.SIGWINCH})
            if self._stopped.is_set():
                return
            self.notifier.notify()

    def stop(self) -> None:
        """Stop the watcher thread and restore the signal mask."""
        if self._thread is None:
            return
        self._stopped.set()
        if self._thread.ident is not None and self._thread.is_alive():
            signal.pthread_kill(self._thread.ident, signal.SIGWINCH)
        self._thread.join(_WATCHER_JOIN_TIMEOUT)
        self._thread = None
        if self._previous_mask is not None:
            signal.pthread_sigmask(signal.SIG_SETMASK, self._previous_mask)
            self._previous_mask = None

    def __enter__(self) -> SignalResizeWatcher:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()
