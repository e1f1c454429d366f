#!/usr/bin/env python3
"""
NessusLens - CVE Field Helpers
Copyright (C) 2026  Dorin Badea
GPLv3 License

Findings carry their CVEs as a single comma-separated field.
"""

from typing import Any, List

from nessuslens.utils.constants import NO_CVE_KEY


def extract_cves(raw_cve: Any) -> List[str]:
    """
    Split a comma-separated CVE field into identifiers.

    Segments are trimmed, empty segments dropped, first-seen order kept.
    Absent or non-string input yields an empty list.

    Args:
        raw_cve: Raw CVE field, e.g. "CVE-2020-1, CVE-2020-2"

    Returns:
        List of CVE identifiers
    """
    if not raw_cve or not isinstance(raw_cve, str):
        return []

    seen = []
    for segment in raw_cve.split(","):
        cve = segment.strip()
        if cve and cve not in seen:
            seen.append(cve)
    return seen


def is_cve_placeholder(cve: str) -> bool:
    """True for the 'No CVE' placeholder some importers write instead of an empty field."""
    return cve.strip().lower() == NO_CVE_KEY.lower()
