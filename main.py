#!/usr/bin/env python3
"""
CmdSense - real-time command suggestions for the terminal.

Development entry point; the installed package provides the ``cmdsense``
console script instead.
"""

import sys
from pathlib import Path

# Add src to path for development
src_path = Path(__file__).parent / "src"
if src_path.exists():
    sys.path.insert(0, str(src_path))

from cmdsense.main import main


if __name__ == "__main__":
    sys.exit(main())
