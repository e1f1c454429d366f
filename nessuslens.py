#!/usr/bin/env python3
"""
NessusLens - Nessus Scan Findings Analysis
Copyright (C) 2026  Dorin Badea
GPLv3 License

Convenience launcher for running from a source checkout.

For installed usage, run:
  - nessuslens
  - or: python -m nessuslens
"""

import sys

from nessuslens.cli import main

if __name__ == "__main__":
    sys.exit(main())
