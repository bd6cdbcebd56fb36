"""Image loading and thumbnail encoding for terminal display."""
from __future__ import annotations

import base64
import io
from pathlib import Path
from typing import TYPE_CHECKING

from PIL import Image, UnidentifiedImageError

from termgrid.config_defaults import DEFAULT_THUMBNAIL_PX
from termgrid.constants import (
    COLOR_BLACK,
    COLOR_MODE_RGB,
    MIN_THUMBNAIL_PX,
    PAYLOAD_FORMAT,
)
from termgrid.errors import EncodingError
from termgrid.logging_utils import logger
from termgrid.type_defs import ImageEntry

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Iterable

_RGB = tuple[int, int, int]


def to_rgb(img: Image.Image, *, bg_color: _RGB = COLOR_BLACK) -> Image.Image:
    """Convert PIL image to RGB, alpha compositing if needed."""
    if img.mode == COLOR_MODE_RGB:
        return img
    if img.mode in ("RGBA", "LA") or (
        img.mode == "P" and "transparency" in img.info
    ):
        bg = Image.new("RGBA", img.size, (*bg_color, 255))
        comp = Image.alpha_composite(bg, img.convert("RGBA"))
        return comp.convert(COLOR_MODE_RGB)
    return img.convert(COLOR_MODE_RGB)


def load_image(path: str | Path) -> Image.Image:
    """
    Load an image from a file path and decode its pixels.

    Args:
        path: Path to the image file

    Returns:
        Fully loaded PIL Image (first frame for animated formats)

    Raises:
        EncodingError: If the file is missing or is not a decodable image

    """
    try:
        with Image.open(path) as img:
            img.load()
            return img.copy()
    except FileNotFoundError as e:
        raise EncodingError(path, "file not found") from e
    except UnidentifiedImageError as e:
        raise EncodingError(path, "unrecognized image data") from e
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise EncodingError(path, str(e)) from e


def encode_payload(img: Image.Image) -> bytes:
    """Return the base64 text of ``img`` encoded as PNG."""
    buffer = io.BytesIO()
    img.save(buffer, format=PAYLOAD_FORMAT)
    return base64.standard_b64encode(buffer.getvalue())


def encode_image(
    path: str | Path,
    *,
    thumbnail_px: int = DEFAULT_THUMBNAIL_PX,
) -> ImageEntry:
    """
    Build an :class:`ImageEntry` for ``path``.

    The intrinsic size is recorded before the image is shrunk into a
    ``thumbnail_px`` square box, which bounds the payload size no matter
    how large the source is. Small images are never enlarged.

    Raises:
        EncodingError: If the file cannot be decoded or re-encoded.
        ValueError: If ``thumbnail_px`` is below the supported minimum.

    """
    if thumbnail_px < MIN_THUMBNAIL_PX:
        msg = (f"thumbnail_px must be at least {MIN_THUMBNAIL_PX}, "
               f"got {thumbnail_px}")
        raise ValueError(msg)

    img = load_image(path)
    width, height = img.size
    if width < 1 or height < 1:
        raise EncodingError(path, f"invalid size {width}x{height}")

    thumb = to_rgb(img)
    thumb.thumbnail((thumbnail_px, thumbnail_px), Image.Resampling.LANCZOS)
    try:
        payload = encode_payload(thumb)
    except (OSError, ValueError) as e:
        raise EncodingError(path, str(e)) from e

    return ImageEntry(path=Path(path), width=width, height=height,
                      payload=payload)


def load_entries(
    paths: Iterable[str | Path],
    *,
    thumbnail_px: int = DEFAULT_THUMBNAIL_PX,
    report_skipped: bool = True,
) -> tuple[ImageEntry, ...]:
    """
    Encode ``paths`` in order, skipping files that fail to encode.

    A single unreadable file never aborts the run. Skips are logged at
    WARNING when ``report_skipped`` is set and at DEBUG otherwise.

    Returns:
        The encoded entries as an immutable tuple in input order.

    """
    entries: list[ImageEntry] = []
    skipped = 0
    for path in paths:
        try:
            entries.append(encode_image(path, thumbnail_px=thumbnail_px))
        except EncodingError as exc:
            skipped += 1
            if report_skipped:
                logger.warning("Skipping unreadable image. %s", exc)
            else:
                logger.debug("Skipping unreadable image. %s", exc)

    if skipped:
        logger.debug("Skipped %d file(s) that could not be encoded", skipped)
    return tuple(entries)
