#!/usr/bin/env python3
"""BigTimer entry point.

Run with:
    python main.py start 5
    python -m bigtimer start 5
"""

import sys

from bigtimer.__main__ import main


if __name__ == "__main__":
    sys.exit(main())
