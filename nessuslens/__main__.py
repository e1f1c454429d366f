#!/usr/bin/env python3
"""
NessusLens - Entry point for `python -m nessuslens`
Copyright (C) 2026  Dorin Badea
GPLv3 License
"""

import sys

from nessuslens.cli import main

if __name__ == "__main__":
    sys.exit(main())
