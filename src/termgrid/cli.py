"""CLI argument parsing and main entry point."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import TYPE_CHECKING, TypeVar

from pydantic import ValidationError

import termgrid.config as tg_config
import termgrid.main as tg_main
from termgrid.config_defaults import DEFAULT_MIN_CELL_WIDTH, DEFAULT_THUMBNAIL_PX
from termgrid.constants import (
    DISCOVERY_ERROR_PREFIX,
    MIN_THUMBNAIL_PX,
    MISSING_DIRECTORY_MESSAGE,
)
from termgrid.errors import DirectoryError, MissingArgumentError
from termgrid.logging_utils import logger, set_verbosity
from termgrid.protocols import PROTOCOL_CHOICES
from termgrid.runtime import resolve_project_version

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Callable, Sequence

T = TypeVar("T")

EXIT_OK = 0
EXIT_FAILURE = 1


def positive_int(text: str) -> int:
    """Argparse-style validator that enforces a strictly positive integer."""
    try:
        value = int(text)
    except ValueError as exc:
        msg = "must be an integer"
        raise ValueError(msg) from exc
    if value <= 0:
        msg = "must be positive"
        raise ValueError(msg)
    return value


def _wrap_validator(
    validator: Callable[[str], T],
    error_cls: type[argparse.ArgumentTypeError] = argparse.ArgumentTypeError,
) -> Callable[[str], T]:
    """Convert ``ValueError`` from a validator into ``ArgumentTypeError``."""

    def wrapper(text: str) -> T:
        try:
            return validator(text)
        except ValueError as exc:
            raise error_cls(str(exc)) from exc

    return wrapper


def build_arg_parser() -> argparse.ArgumentParser:
    """Construct the argument parser for the command-line interface."""
    p = argparse.ArgumentParser(
        prog="termgrid",
        description=(
            "Show the images in a directory as a grid of inline terminal "
            "graphics, re-laid out whenever the window is resized."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  termgrid ~/Pictures\n"
            "  termgrid -r -n 40 ~/Pictures\n"
            "  termgrid --protocol data-uri photos > grid.txt"
        ),
    )
    p.add_argument(
        "directory", nargs="?", type=Path,
        help="Directory to scan for images")
    p.add_argument(
        "--version", action="version",
        version=f"%(prog)s {resolve_project_version()}")

    discovery = p.add_argument_group("discovery")
    discovery.add_argument(
        "-r", "--recursive", action="store_true",
        default=argparse.SUPPRESS,
        help="Scan subdirectories recursively")
    discovery.add_argument(
        "-n", "--max-images", type=_wrap_validator(positive_int),
        default=argparse.SUPPRESS,
        help="Maximum number of images to display (default: no limit)")

    render = p.add_argument_group("render")
    render.add_argument(
        "--protocol", choices=list(PROTOCOL_CHOICES),
        default=argparse.SUPPRESS,
        help=("Inline image protocol. 'auto' picks kitty or iterm2 on a "
              "capable terminal and data-uri text otherwise"))
    render.add_argument(
        "--watch", choices=["auto", "always", "never"],
        default=argparse.SUPPRESS,
        help=("Keep running and re-render on terminal resize. 'auto' "
              "watches only when stdout is a terminal"))
    render.add_argument(
        "--min-cell-width", type=_wrap_validator(positive_int),
        default=argparse.SUPPRESS,
        help=("Narrowest thumbnail in character cells (default: "
              f"{DEFAULT_MIN_CELL_WIDTH})"))
    render.add_argument(
        "--thumbnail-px", type=_wrap_validator(positive_int),
        default=argparse.SUPPRESS,
        help=(f"Longest thumbnail side in pixels, at least {MIN_THUMBNAIL_PX} "
              f"(default: {DEFAULT_THUMBNAIL_PX})"))

    out = p.add_argument_group("output")
    out.add_argument(
        "--quiet-skips", action="store_true",
        help="Do not warn about files that cannot be decoded")
    out.add_argument(
        "-v", "--verbose", action="store_true",
        default=argparse.SUPPRESS,
        help="Enable debug logging on stderr")

    cfg = p.add_argument_group("config")
    cfg.add_argument(
        "--config", type=str,
        help="Path to config.toml file")
    cfg.add_argument(
        "--validate-config-only", action="store_true",
        help="Validate config file and exit without rendering")

    return p


def log_parameters(root: Path, cfg: tg_config.ViewerConfig) -> None:
    """Log the effective settings at debug level."""
    logger.debug("Directory: %s", root)
    logger.debug("Recursive: %s",
                 "Enabled" if cfg.discovery.recursive else "Disabled")
    logger.debug("Max Images: %s",
                 cfg.discovery.max_images or "(unlimited)")
    logger.debug("Extensions: %s", ", ".join(cfg.discovery.extensions))
    logger.debug("Min Cell Width: %d", cfg.layout.min_cell_width)
    logger.debug("Cell Height Ratio: %g", cfg.layout.cell_height_ratio)
    logger.debug("Protocol: %s", cfg.render.protocol)
    logger.debug("Thumbnail Size: %dpx", cfg.render.thumbnail_px)
    logger.debug("Watch: %s", cfg.render.watch)


def run_from_args(args: argparse.Namespace) -> int:
    """
    Run the viewer from parsed command-line arguments.

    Returns:
        The process exit code.

    Raises:
        MissingArgumentError: If no directory was given.
        DirectoryError: If the directory cannot be scanned.

    """
    base_cfg: tg_config.ViewerConfig | None = None
    if args.config:
        base_cfg = tg_config.ConfigLoader.load(args.config)
        if args.validate_config_only:
            logger.info("Config %s validated successfully.", args.config)
            return EXIT_OK

    if args.directory is None:
        raise MissingArgumentError(MISSING_DIRECTORY_MESSAGE)

    cfg = tg_config.build_config_from_cli(vars(args), base_config=base_cfg)
    set_verbosity(verbose=cfg.output.verbose)
    log_parameters(args.directory, cfg)

    tg_main.view_directory(args.directory, cfg)
    return EXIT_OK


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command-line interface and return the exit code."""
    arg_parser = build_arg_parser()
    args = arg_parser.parse_args(argv)
    if args.validate_config_only and not args.config:
        arg_parser.error("--validate-config-only requires --config")

    try:
        return run_from_args(args)
    except MissingArgumentError as exc:
        logger.error("%s", exc)
        return EXIT_FAILURE
    except DirectoryError as exc:
        logger.error("%s: %s", DISCOVERY_ERROR_PREFIX, exc)
        return EXIT_FAILURE
    except (FileNotFoundError, ValidationError) as exc:
        logger.error("Invalid configuration: %s", exc)
        return EXIT_FAILURE
    except KeyboardInterrupt:
        return EXIT_OK


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
