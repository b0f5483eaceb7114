#!/usr/bin/env python3
"""Script to mirror GitHub stars into a local SQLite database."""

import os
import sys

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from ghstars.application.cli import main


if __name__ == "__main__":
    sys.exit(main())
