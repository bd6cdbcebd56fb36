"""
Tests for the resize coordinator, notifier and signal watcher.

Covers:
- Startup renders and the idle/rendering state machine
- Resize renders recompute the layout and announce themselves
- Coalescing of notifications that arrive during a render
- The serve loop and the SIGWINCH bridge
"""
from __future__ import annotations

import signal
import threading
from typing import TYPE_CHECKING

import pytest

from termgrid.coordinator import (
    RenderState,
    ResizeCoordinator,
    ResizeNotifier,
    SignalResizeWatcher,
)
from termgrid.protocols import KittyProtocol
from termgrid.render import Renderer
from termgrid.terminal import FixedGeometry, ScriptedGeometry
from termgrid.type_defs import GridLayout, TerminalGeometry

if TYPE_CHECKING:
    import io

    from termgrid.type_defs import ImageEntry

_WAIT = 5.0


class TestNotifier:
    def test_starts_empty(self) -> None:
        notifier = ResizeNotifier()
        assert notifier.pending is False
        assert notifier.consume() is False

    def test_notifications_coalesce(self) -> None:
        notifier = ResizeNotifier()
        for _ in range(10):
            notifier.notify()
        assert notifier.consume() is True
        assert notifier.consume() is False

    def test_wait_times_out(self) -> None:
        assert ResizeNotifier().wait(timeout=0.01) is False

    def test_wait_returns_when_notified(self) -> None:
        notifier = ResizeNotifier()
        threading.Timer(0.01, notifier.notify).start()
        assert notifier.wait(timeout=_WAIT) is True


class TestRender:
    def test_startup_render(
        self,
        entries: tuple[ImageEntry, ...],
        data_uri_renderer: Renderer,
        output_stream: io.BytesIO,
        wide_terminal: FixedGeometry,
    ) -> None:
        coordinator = ResizeCoordinator(entries, data_uri_renderer,
                                        wide_terminal)
        assert coordinator.state is RenderState.IDLE

        layout = coordinator.render()

        assert layout == GridLayout(rows=1, columns=5, cell_width=16,
                                    cell_height=8)
        assert coordinator.last_layout == layout
        assert coordinator.last_geometry == TerminalGeometry(80, 24)
        assert coordinator.render_count == 1
        assert coordinator.state is RenderState.IDLE
        text = output_stream.getvalue().decode()
        assert "rows: 1 columns: 5" in text
        assert "Handling window size change" not in text

    def test_images_are_frozen(
        self,
        entries: tuple[ImageEntry, ...],
        data_uri_renderer: Renderer,
    ) -> None:
        source = list(entries)
        coordinator = ResizeCoordinator(source, data_uri_renderer)
        source.clear()
        assert len(coordinator.images) == 5
        assert isinstance(coordinator.images, tuple)

    def test_empty_set_renders_message(
        self,
        data_uri_renderer: Renderer,
        output_stream: io.BytesIO,
        wide_terminal: FixedGeometry,
    ) -> None:
        coordinator = ResizeCoordinator((), data_uri_renderer, wide_terminal)
        layout = coordinator.render()
        assert layout.is_empty
        assert output_stream.getvalue() == b"No images found\n"

    def test_state_is_rendering_during_render(
        self,
        entries: tuple[ImageEntry, ...],
        data_uri_renderer: Renderer,
    ) -> None:
        seen: list[RenderState] = []

        def geometry() -> TerminalGeometry:
            seen.append(coordinator.state)
            return TerminalGeometry(80, 24)

        coordinator = ResizeCoordinator(entries, data_uri_renderer, geometry)
        coordinator.render()
        assert seen == [RenderState.RENDERING]
        assert coordinator.state is RenderState.IDLE

    def test_nested_render_is_rejected(
        self,
        entries: tuple[ImageEntry, ...],
        data_uri_renderer: Renderer,
    ) -> None:
        errors: list[Exception] = []

        def geometry() -> TerminalGeometry:
            try:
                coordinator.render("resize")
            except RuntimeError as exc:
                errors.append(exc)
            return TerminalGeometry(80, 24)

        coordinator = ResizeCoordinator(entries, data_uri_renderer, geometry)
        coordinator.render()
        assert len(errors) == 1
        assert "already in progress" in str(errors[0])
        assert coordinator.render_count == 1

    def test_state_resets_after_failure(
        self,
        entries: tuple[ImageEntry, ...],
        data_uri_renderer: Renderer,
    ) -> None:
        def geometry() -> TerminalGeometry:
            msg = "tty gone"
            raise OSError(msg)

        coordinator = ResizeCoordinator(entries, data_uri_renderer, geometry)
        with pytest.raises(OSError, match="tty gone"):
            coordinator.render()
        assert coordinator.state is RenderState.IDLE
        assert coordinator.render_count == 0


class TestResize:
    def test_resize_recomputes_layout(
        self,
        entries: tuple[ImageEntry, ...],
        data_uri_renderer: Renderer,
        output_stream: io.BytesIO,
    ) -> None:
        geometry = ScriptedGeometry([(80, 24), (40, 24)])
        coordinator = ResizeCoordinator(entries, data_uri_renderer, geometry)
        first = coordinator.render("startup")

        coordinator.notify_resize()
        assert coordinator.process_pending() is True

        second = coordinator.last_layout
        assert first.columns == 5
        assert second is not None
        assert second.columns == 2
        assert second.rows == 3
        assert coordinator.last_geometry == TerminalGeometry(40, 24)

        text = output_stream.getvalue().decode()
        assert text.count("Handling window size change") == 1
        resize_part = text.split("Handling window size change", 1)[1]
        assert "rows: 3 columns: 2" in resize_part
        assert resize_part.count("data:image/png;base64") == 5

    def test_positioned_resize_clears_previous_frame(
        self,
        entries: tuple[ImageEntry, ...],
        output_stream: io.BytesIO,
    ) -> None:
        renderer = Renderer(output_stream, KittyProtocol())
        geometry = ScriptedGeometry([(80, 24), (40, 24)])
        coordinator = ResizeCoordinator(entries, renderer, geometry)
        coordinator.render("startup")
        startup_len = len(output_stream.getvalue())
        assert KittyProtocol.clear not in output_stream.getvalue()

        coordinator.render("resize")

        resize_part = output_stream.getvalue()[startup_len:]
        assert resize_part.startswith(KittyProtocol.clear + b"\x1b[2J")
        assert resize_part.index(b"Handling window size change") > 0
        assert resize_part.count(KittyProtocol.marker) == 5

    def test_nothing_pending(
        self,
        entries: tuple[ImageEntry, ...],
        data_uri_renderer: Renderer,
        wide_terminal: FixedGeometry,
    ) -> None:
        coordinator = ResizeCoordinator(entries, data_uri_renderer,
                                        wide_terminal)
        coordinator.render()
        assert coordinator.process_pending() is False
        assert coordinator.render_count == 1

    def test_burst_during_render_coalesces_to_one(
        self,
        entries: tuple[ImageEntry, ...],
        data_uri_renderer: Renderer,
        output_stream: io.BytesIO,
    ) -> None:
        calls = 0

        def geometry() -> TerminalGeometry:
            nonlocal calls
            calls += 1
            if calls == 1:
                # three resizes arrive while the first render runs
                for _ in range(3):
                    coordinator.notify_resize()
            return TerminalGeometry(80 - 10 * calls, 24)

        coordinator = ResizeCoordinator(entries, data_uri_renderer, geometry)
        coordinator.render()
        assert coordinator.notifier.pending is True

        assert coordinator.process_pending() is True
        assert coordinator.process_pending() is False
        assert coordinator.render_count == 2
        assert output_stream.getvalue().count(
            b"Handling window size change") == 1

    def test_resize_before_startup_is_absorbed(
        self,
        entries: tuple[ImageEntry, ...],
        data_uri_renderer: Renderer,
        wide_terminal: FixedGeometry,
    ) -> None:
        coordinator = ResizeCoordinator(entries, data_uri_renderer,
                                        wide_terminal)
        coordinator.notify_resize()
        coordinator.render()
        assert coordinator.process_pending() is False


class TestServeForever:
    def test_serves_resizes_until_stopped(
        self,
        entries: tuple[ImageEntry, ...],
        data_uri_renderer: Renderer,
        wide_terminal: FixedGeometry,
    ) -> None:
        rendered = threading.Event()

        class Counting:
            def __call__(self) -> TerminalGeometry:
                if coordinator.render_count >= 1:
                    rendered.set()
                return wide_terminal()

        coordinator = ResizeCoordinator(entries, data_uri_renderer,
                                        Counting())
        coordinator.render()
        loop = threading.Thread(target=coordinator.serve_forever)
        loop.start()
        try:
            coordinator.notify_resize()
            assert rendered.wait(_WAIT)
        finally:
            coordinator.stop()
            loop.join(_WAIT)
        assert not loop.is_alive()
        assert coordinator.render_count == 2


@pytest.mark.skipif(not SignalResizeWatcher.supported(),
                    reason="SIGWINCH not available")
class TestSignalWatcher:
    def test_signal_notifies(self) -> None:
        notifier = ResizeNotifier()
        watcher = SignalResizeWatcher(notifier)
        with watcher:
            thread = watcher._thread
            assert thread is not None
            assert thread.ident is not None
            signal.pthread_kill(thread.ident, signal.SIGWINCH)
            assert notifier.wait(timeout=_WAIT)
        assert watcher._thread is None
        assert signal.SIGWINCH not in signal.pthread_sigmask(
            signal.SIG_BLOCK, set())

    def test_cannot_start_twice(self) -> None:
        watcher = SignalResizeWatcher(ResizeNotifier())
        with watcher, pytest.raises(RuntimeError, match="already started"):
            watcher.start()

    def test_stop_without_start_is_noop(self) -> None:
        SignalResizeWatcher(ResizeNotifier()).stop()


def test_unsupported_platform(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(SignalResizeWatcher, "supported",
                        staticmethod(lambda: False))
    with pytest.raises(RuntimeError, match="not supported"):
        SignalResizeWatcher(ResizeNotifier()).start()
