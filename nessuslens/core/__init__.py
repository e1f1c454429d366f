#!/usr/bin/env python3
"""NessusLens core subpackage."""

from nessuslens.core.aggregate import (
    build_hosts_from_findings,
    calculate_scan_statistics,
    calculate_scan_summary,
)
from nessuslens.core.cve import extract_cves
from nessuslens.core.diff import compare_scans, summarize_comparison
from nessuslens.core.filtering import filter_findings, sort_findings
from nessuslens.core.grouping import group_findings_by_cve
from nessuslens.core.models import (
    ComparisonResult,
    Finding,
    Host,
    ScanSummary,
    SeverityChange,
)
from nessuslens.core.risk import calculate_risk_score
from nessuslens.core.severity import severity_label, severity_score

__all__ = [
    "ComparisonResult",
    "Finding",
    "Host",
    "ScanSummary",
    "SeverityChange",
    "build_hosts_from_findings",
    "calculate_risk_score",
    "calculate_scan_statistics",
    "calculate_scan_summary",
    "compare_scans",
    "extract_cves",
    "filter_findings",
    "group_findings_by_cve",
    "severity_label",
    "severity_score",
    "sort_findings",
    "summarize_comparison",
]
