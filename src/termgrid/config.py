"""
Configuration schema and loader for the terminal image grid viewer.

Defines Pydantic models representing structured configuration sections
and a TOML-based config loader with validation support.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import tomlkit
from pydantic import BaseModel, Field, field_validator

from termgrid.config_defaults import (
    DEFAULT_CELL_HEIGHT_RATIO,
    DEFAULT_MAX_IMAGES,
    DEFAULT_MIN_CELL_WIDTH,
    DEFAULT_PROTOCOL,
    DEFAULT_RECURSIVE,
    DEFAULT_REPORT_SKIPPED,
    DEFAULT_THUMBNAIL_PX,
    DEFAULT_VERBOSE,
    DEFAULT_WATCH,
)
from termgrid.constants import IMAGE_EXTENSIONS, MIN_THUMBNAIL_PX
from termgrid.type_defs import ProtocolName, WatchMode


class DiscoveryConfig(BaseModel):
    """Control which files are collected and how many."""

    recursive: bool = DEFAULT_RECURSIVE
    max_images: int | None = Field(DEFAULT_MAX_IMAGES, ge=1)
    extensions: list[str] = Field(
        default_factory=lambda: sorted(IMAGE_EXTENSIONS),
        min_length=1,
    )

    @field_validator("extensions")
    @classmethod
    def _normalize_extensions(cls, value: list[str]) -> list[str]:
        normalized = []
        for ext in value:
            stripped = ext.strip().lower()
            if not stripped:
                msg = "extensions must not contain empty entries"
                raise ValueError(msg)
            normalized.append(
                stripped if stripped.startswith(".") else f".{stripped}")
        return normalized


class LayoutConfig(BaseModel):
    """Grid sizing constants."""

    min_cell_width: int = Field(DEFAULT_MIN_CELL_WIDTH, ge=1)
    cell_height_ratio: float = Field(DEFAULT_CELL_HEIGHT_RATIO, gt=0)


class RenderConfig(BaseModel):
    """Select the terminal protocol, thumbnail size and resize watching."""

    protocol: ProtocolName = Field(DEFAULT_PROTOCOL)
    thumbnail_px: int = Field(DEFAULT_THUMBNAIL_PX, ge=MIN_THUMBNAIL_PX)
    watch: WatchMode = Field(DEFAULT_WATCH)


class OutputConfig(BaseModel):
    """Diagnostics written to stderr."""

    report_skipped: bool = DEFAULT_REPORT_SKIPPED
    verbose: bool = DEFAULT_VERBOSE


class ViewerConfig(BaseModel):
    """
    Root configuration object combining all supported sections.

    Mirrors the structure of config.toml, grouping related parameters
    under logical categories.
    """

    discovery: DiscoveryConfig = Field(
        default_factory=lambda: DiscoveryConfig.model_validate({}),
    )
    layout: LayoutConfig = Field(
        default_factory=lambda: LayoutConfig.model_validate({}),
    )
    render: RenderConfig = Field(
        default_factory=lambda: RenderConfig.model_validate({}),
    )
    output: OutputConfig = Field(
        default_factory=lambda: OutputConfig.model_validate({}),
    )


class ConfigLoader:
    """
    Loads and parses a TOML configuration file into a typed config object.

    Falls back to defaults for any missing subsections or fields.
    """

    @staticmethod
    def load(path: str | Path) -> ViewerConfig:
        """
        Load a viewer configuration from a TOML file.

        Returns a validated ViewerConfig instance based on the file
        contents.
        """
        config_path = Path(path)
        if not config_path.is_file():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)

        with config_path.open("r", encoding="utf-8") as f:
            doc = tomlkit.load(f)

        return ViewerConfig.model_validate(doc.unwrap())


# CLI destination name -> (section, field)
_CLI_FIELDS: dict[str, tuple[str, str]] = {
    "recursive": ("discovery", "recursive"),
    "max_images": ("discovery", "max_images"),
    "min_cell_width": ("layout", "min_cell_width"),
    "protocol": ("render", "protocol"),
    "thumbnail_px": ("render", "thumbnail_px"),
    "watch": ("render", "watch"),
    "verbose": ("output", "verbose"),
}


def build_config_from_cli(
    args: dict[str, Any],
    base_config: ViewerConfig | None = None,
) -> ViewerConfig:
    """
    Overlay explicitly supplied CLI options on a base configuration.

    Options absent from ``args`` (argparse ``SUPPRESS`` defaults) keep
    the value from ``base_config``, or the built-in default when no base
    is given. ``quiet_skips`` turns off skip reporting. The merged result
    is validated as a whole.
    """
    base = base_config or ViewerConfig()
    data = base.model_dump()
    for dest, (section, field) in _CLI_FIELDS.items():
        if dest in args and args[dest] is not None:
            data[section][field] = args[dest]
    if args.get("quiet_skips"):
        data["output"]["report_skipped"] = False
    return ViewerConfig.model_validate(data)
