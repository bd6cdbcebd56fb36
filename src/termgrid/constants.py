"""
Constants used internally by the terminal image grid viewer.

These are implementation-level values that should not be overridden
via config files or CLI arguments.
"""

# Recognized image file suffixes (compared lower-cased)
IMAGE_EXTENSIONS: frozenset[str] = frozenset({
    ".bmp",
    ".gif",
    ".jpeg",
    ".jpg",
    ".png",
    ".tif",
    ".tiff",
    ".webp",
})

# Layout: narrowest usable thumbnail, in character cells
MIN_CELL_WIDTH = 16
# Terminal cells are roughly 2:1 height:width, so a square thumbnail
# `w` cells wide occupies `w * 0.5` rows.
CELL_HEIGHT_RATIO = 0.5

# Fallback geometry when the terminal size cannot be queried
FALLBACK_COLUMNS = 80
FALLBACK_ROWS = 24

# Encoder
COLOR_MODE_RGB = "RGB"
COLOR_BLACK = (0, 0, 0)
PAYLOAD_FORMAT = "PNG"
MIN_THUMBNAIL_PX = 16

# Terminal graphics protocols
KITTY_CHUNK_SIZE = 4096
ESC = b"\x1b"
ST = b"\x1b\\"
BEL = b"\x07"
DATA_URI_PREFIX = b"data:image/png;base64,"

# User-facing status lines
NO_IMAGES_MESSAGE = "No images found"
RESIZE_MESSAGE = "Handling window size change"
MISSING_DIRECTORY_MESSAGE = "Please specify a directory"
DISCOVERY_ERROR_PREFIX = "Error discovering images"
