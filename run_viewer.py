"""
run_viewer.py — CLI Entry Point

This script serves as the command-line interface entry point for the
terminal image grid viewer. It forwards execution to the CLI logic
defined in `src/termgrid/cli.py`.

Usage:
    python run_viewer.py [-r] [-n N] path/to/images

This wrapper allows you to run the tool directly without needing to
modify PYTHONPATH or install the project as a package.

For help on available options, run:
    python run_viewer.py --help
"""
import sys
# Source code in src/ subdirectory
from pathlib import Path
sys.path.insert(0, str(Path(__file__).resolve().parent / "src"))

import termgrid.cli as tg_cli

if __name__ == "__main__":
    sys.exit(tg_cli.main())
