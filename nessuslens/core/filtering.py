#!/usr/bin/env python3
"""
NessusLens - Filter and Sort Module
Copyright (C) 2026  Dorin Badea
GPLv3 License

Category filtering, free-text search and stable multi-field sorting over
finding collections.
"""

from typing import Any, Callable, Dict, Iterable, List

from nessuslens.core.cve import extract_cves, is_cve_placeholder
from nessuslens.core.models import Finding
from nessuslens.utils.constants import (
    CVE_SORT_PLACEHOLDER,
    FILTER_TYPES,
    SEVERITY_CRITICAL,
    SEVERITY_HIGH,
    SEVERITY_INFO,
    SEVERITY_LOW,
    SEVERITY_MEDIUM,
    SORT_DIRECTIONS,
)

_SEVERITY_FILTERS = {
    "critical": SEVERITY_CRITICAL,
    "high": SEVERITY_HIGH,
    "medium": SEVERITY_MEDIUM,
    "low": SEVERITY_LOW,
    "info": SEVERITY_INFO,
}


def _has_cve(finding: Finding) -> bool:
    return any(not is_cve_placeholder(c) for c in extract_cves(finding.cve))


def matches_category(finding: Finding, category: str) -> bool:
    """Check one finding against a filter category."""
    if category == "all":
        return True
    if category in _SEVERITY_FILTERS:
        return finding.severity_score == _SEVERITY_FILTERS[category]
    if category == "exploitable":
        return finding.exploit_available
    if category == "compliance":
        return finding.compliance
    if category == "has_cve":
        return _has_cve(finding)
    raise ValueError(f"Unknown filter category: {category}")


def _search_fields(finding: Finding) -> List[str]:
    return [
        finding.plugin_name or "",
        finding.host or "",
        finding.hostname or "",
        finding.ip_address or "",
        finding.synopsis or "",
        finding.description or "",
        finding.cve or "",
        str(finding.plugin_id) if finding.plugin_id is not None else "",
        finding.plugin_family or "",
        finding.solution or "",
    ]


def matches_search(finding: Finding, search_text: str) -> bool:
    """Case-insensitive substring match across the searchable text fields."""
    term = (search_text or "").strip().lower()
    if not term:
        return True
    return any(term in value.lower() for value in _search_fields(finding))


def filter_findings(
    findings: Iterable[Finding], category: str = "all", search_text: str = ""
) -> List[Finding]:
    """
    Filter findings by category and free-text search.

    Args:
        findings: Finding collection
        category: One of all, critical, high, medium, low, info,
            exploitable, compliance, has_cve
        search_text: Optional search term (empty matches everything)

    Returns:
        Matching findings in input order

    Raises:
        ValueError: If category is not a known filter
    """
    category = (category or "all").strip().lower()
    if category not in FILTER_TYPES:
        raise ValueError(f"Unknown filter category: {category}")

    return [
        f for f in findings if matches_category(f, category) and matches_search(f, search_text)
    ]


_SORT_KEYS: Dict[str, Callable[[Finding], Any]] = {
    "severity": lambda f: f.severity_score,
    "cvss_score": lambda f: f.cvss_base_score or 0.0,
    "host": lambda f: f.display_host,
    "plugin_name": lambda f: f.plugin_name or "",
    "plugin_family": lambda f: f.plugin_family or "",
    "port": lambda f: f.port or 0,
    "risk_factor": lambda f: f.risk_factor or "",
    "cve": lambda f: f.cve or CVE_SORT_PLACEHOLDER,
}


def sort_findings(
    findings: Iterable[Finding], field: str = "severity", direction: str = "desc"
) -> List[Finding]:
    """
    Stable sort of findings by one field.

    Ties keep their prior relative order in both directions. CVE header
    records always come before non-header records, whatever the field.
    Unknown fields (including 'scan_date', which findings do not carry)
    order by plugin name.

    Args:
        findings: Finding collection
        field: Sort field name
        direction: 'asc' or 'desc'

    Returns:
        New sorted list

    Raises:
        ValueError: If direction is not asc/desc
    """
    direction = (direction or "asc").strip().lower()
    if direction not in SORT_DIRECTIONS:
        raise ValueError(f"Unknown sort direction: {direction}")

    key = _SORT_KEYS.get(field, _SORT_KEYS["plugin_name"])
    # reverse=True keeps ties in original order, so both passes stay stable.
    ordered = sorted(findings, key=key, reverse=direction == "desc")
    return sorted(ordered, key=lambda f: not f.is_cve_header)
