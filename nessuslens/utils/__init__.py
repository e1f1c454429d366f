#!/usr/bin/env python3
"""NessusLens utilities subpackage."""

from nessuslens.utils.constants import SCHEMA_VERSION, VERSION

__all__ = ["SCHEMA_VERSION", "VERSION"]
