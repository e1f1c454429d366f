#!/usr/bin/env python3
"""
NessusLens - Nessus Scan Findings Analysis
Copyright (C) 2026  Dorin Badea

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.

NessusLens package initialization.
"""

from nessuslens.utils.constants import VERSION

__all__ = ["VERSION", "__version__"]
__version__ = VERSION
