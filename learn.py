#!/usr/bin/env python3
"""Learning demos: standalone entry point.

Usage:
    python learn.py               # List the available demos
    python learn.py Pointers      # Run one demo by name
"""

import os
import sys

# Ensure project root is on sys.path
_PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
if _PROJECT_ROOT not in sys.path:
    sys.path.insert(0, _PROJECT_ROOT)

from lessons.cli import run

if __name__ == "__main__":
    run()
