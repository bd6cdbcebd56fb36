"""Shared default values for user-facing configuration settings."""
from termgrid.constants import CELL_HEIGHT_RATIO, MIN_CELL_WIDTH
from termgrid.type_defs import ProtocolName, WatchMode

# Discovery
DEFAULT_RECURSIVE = False
DEFAULT_MAX_IMAGES: int | None = None

# Layout
DEFAULT_MIN_CELL_WIDTH = MIN_CELL_WIDTH
DEFAULT_CELL_HEIGHT_RATIO = CELL_HEIGHT_RATIO

# Render
DEFAULT_PROTOCOL: ProtocolName = "auto"
DEFAULT_THUMBNAIL_PX = 512
DEFAULT_WATCH: WatchMode = "auto"

# Output
DEFAULT_REPORT_SKIPPED = True
DEFAULT_VERBOSE = False
