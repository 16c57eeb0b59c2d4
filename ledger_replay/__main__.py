#!/usr/bin/env python3
"""Main entry point for ``python -m ledger_replay``"""

import sys

from ledger_replay.cli import main

if __name__ == "__main__":
    sys.exit(main())
