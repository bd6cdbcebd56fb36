"""
Inline terminal graphics protocols.

Each protocol wraps an entry's base64 payload in the escape sequence a
terminal expects and sizes it to a grid cell. Every protocol has a
``marker``: a byte string that appears exactly once per emitted image,
which is how callers (and tests) count images in raw output.

References:
    Kitty: https://sw.kovidgoyal.net/kitty/graphics-protocol/
    iTerm2: https://iterm2.com/documentation-images.html
"""

from __future__ import annotations

import base64
import os
from typing import TYPE_CHECKING, ClassVar, Protocol

from termgrid.constants import (
    BEL,
    DATA_URI_PREFIX,
    ESC,
    KITTY_CHUNK_SIZE,
    ST,
)
from termgrid.terminal import stream_is_tty

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Mapping

    from termgrid.type_defs import ImageEntry, ProtocolName

# Terminals known to implement the Kitty graphics protocol
_KITTY_TERMINALS = ("kitty", "ghostty", "wezterm", "konsole")
_ITERM_PROGRAMS = ("iterm.app", "iterm2")


class ImageProtocol(Protocol):
    """Turn an encoded entry into terminal bytes for one grid cell."""

    name: ClassVar[str]
    marker: ClassVar[bytes]
    positioned: ClassVar[bool]
    clear: ClassVar[bytes]

    def encode(
        self,
        entry: ImageEntry,
        width_cells: int,
        height_cells: int,
    ) -> bytes: ...


class KittyProtocol:
    """
    Kitty graphics protocol, direct PNG transmission.

    ``q=2`` suppresses terminal responses and ``C=1`` keeps the cursor in
    place so the renderer controls placement. Payloads longer than the
    chunk size are split; only the first chunk carries the control keys.
    """

    name: ClassVar[str] = "kitty"
    marker: ClassVar[bytes] = ESC + b"_Gf=100,a=T"
    positioned: ClassVar[bool] = True
    # delete every placement this client made
    clear: ClassVar[bytes] = ESC + b"_Ga=d,q=2" + ST

    def __init__(self, chunk_size: int = KITTY_CHUNK_SIZE) -> None:
        if chunk_size < 4 or chunk_size % 4:
            msg = f"chunk_size must be a positive multiple of 4, got {chunk_size}"
            raise ValueError(msg)
        self.chunk_size = chunk_size

    def encode(
        self,
        entry: ImageEntry,
        width_cells: int,
        height_cells: int,
    ) -> bytes:
        data = entry.payload
        chunks = [data[i:i + self.chunk_size]
                  for i in range(0, len(data), self.chunk_size)] or [b""]
        control = f"f=100,a=T,q=2,C=1,c={width_cells},r={height_cells}"
        out = bytearray()
        last = len(chunks) - 1
        for idx, chunk in enumerate(chunks):
            more = 0 if idx == last else 1
            keys = f"{control},m={more}" if idx == 0 else f"q=2,m={more}"
            out += ESC + b"_G" + keys.encode("ascii") + b";" + chunk + ST
        return bytes(out)


class ITerm2Protocol:
    """iTerm2 inline image protocol (OSC 1337)."""

    name: ClassVar[str] = "iterm2"
    marker: ClassVar[bytes] = ESC + b"]1337;File="
    positioned: ClassVar[bool] = True
    clear: ClassVar[bytes] = b""

    def encode(
        self,
        entry: ImageEntry,
        width_cells: int,
        height_cells: int,
    ) -> bytes:
        name = base64.standard_b64encode(os.fsencode(entry.path.name))
        size = len(base64.standard_b64decode(entry.payload))
        args = (f";size={size};inline=1;width={width_cells};"
                f"height={height_cells};preserveAspectRatio=1:")
        return (self.marker + b"name=" + name + args.encode("ascii")
                + entry.payload + BEL)


class DataUriProtocol:
    """
    Plain ``data:`` URI text, one per line.

    Used for pipes, logs and terminals without inline graphics.
    """

    name: ClassVar[str] = "data-uri"
    marker: ClassVar[bytes] = DATA_URI_PREFIX
    positioned: ClassVar[bool] = False
    clear: ClassVar[bytes] = b""

    def encode(
        self,
        entry: ImageEntry,
        width_cells: int,  # noqa: ARG002
        height_cells: int,  # noqa: ARG002
    ) -> bytes:
        return self.marker + entry.payload


PROTOCOLS: dict[str, type[ImageProtocol]] = {
    KittyProtocol.name: KittyProtocol,
    ITerm2Protocol.name: ITerm2Protocol,
    DataUriProtocol.name: DataUriProtocol,
}
PROTOCOL_CHOICES: tuple[ProtocolName, ...] = (
    "auto", "kitty", "iterm2", "data-uri",
)


def detect_protocol(stream: object, environ: Mapping[str, str]) -> str:
    """Pick the best protocol name for ``stream`` from the environment."""
    if not stream_is_tty(stream):
        return DataUriProtocol.name

    term_program = environ.get("TERM_PROGRAM", "").lower()
    lc_terminal = environ.get("LC_TERMINAL", "").lower()
    if term_program in _ITERM_PROGRAMS or lc_terminal in _ITERM_PROGRAMS:
        return ITerm2Protocol.name

    if environ.get("KITTY_WINDOW_ID"):
        return KittyProtocol.name
    term = environ.get("TERM", "").lower()
    for value in (term_program, term, lc_terminal):
        if any(t in value for t in _KITTY_TERMINALS):
            return KittyProtocol.name

    return DataUriProtocol.name


def select_protocol(
    name: str,
    *,
    stream: object = None,
    environ: Mapping[str, str] | None = None,
) -> ImageProtocol:
    """
    Return a protocol instance for ``name``.

    ``"auto"`` inspects ``stream`` and ``environ`` (``os.environ`` by
    default) via :func:`detect_protocol`.

    Raises:
        ValueError: If ``name`` is not a known protocol.

    """
    if name == "auto":
        name = detect_protocol(stream, os.environ if environ is None else environ)
    try:
        protocol_cls = PROTOCOLS[name]
    except KeyError as exc:
        msg = (f"Unknown protocol '{name}'. "
               f"Choose from: {', '.join(PROTOCOL_CHOICES)}")
        raise ValueError(msg) from exc
    return protocol_cls()
