#!/usr/bin/env python3
"""
NessusLens - Aggregation Module
Copyright (C) 2026  Dorin Badea
GPLv3 License

Per-host rollups, scan summary and scan statistics derived from a flat
finding collection.
"""

import re
from typing import Any, Dict, Iterable, List, Optional

from nessuslens.core.cve import extract_cves, is_cve_placeholder
from nessuslens.core.models import Finding, Host, ScanStatistics, ScanSummary
from nessuslens.utils.constants import (
    CREDENTIALED_PLUGIN_MARKER,
    SEVERITY_CRITICAL,
    SEVERITY_HIGH,
    SEVERITY_INFO,
    SEVERITY_LOW,
    SEVERITY_MEDIUM,
)

# Host counter attribute per normalized tier
_TIER_COUNTERS = {
    SEVERITY_CRITICAL: "critical_count",
    SEVERITY_HIGH: "high_count",
    SEVERITY_MEDIUM: "medium_count",
    SEVERITY_LOW: "low_count",
    SEVERITY_INFO: "info_count",
}


def _real_findings(findings: Iterable[Finding]) -> List[Finding]:
    # Header records from the CVE grouper are presentation-only.
    return [f for f in findings if not f.is_cve_header]


def build_hosts_from_findings(findings: Iterable[Finding]) -> List[Host]:
    """
    Build per-host rollups from findings.

    Hosts are keyed by host, falling back to hostname, IP and finally the
    'unknown' sentinel. Returned in order of first appearance.

    Args:
        findings: Finding collection for one scan

    Returns:
        List of Host aggregates
    """
    index: Dict[str, Host] = {}

    for finding in _real_findings(findings):
        key = finding.host_key
        host = index.get(key)
        if host is None:
            host = Host(
                id=key,
                report_id=finding.scan_id,
                hostname=finding.hostname or finding.host or key,
                ip_address=finding.ip_address or key,
            )
            index[key] = host

        host.total_vulnerabilities += 1
        counter = _TIER_COUNTERS[finding.severity_score]
        setattr(host, counter, getattr(host, counter) + 1)

    return list(index.values())


def calculate_scan_summary(findings: Iterable[Finding], hosts: Iterable[Host]) -> ScanSummary:
    """
    Compute scan-level counts.

    `hosts` is expected to come from build_hosts_from_findings() over the same
    findings. Passing hosts from another collection does not fail; the host
    counts simply will not reconcile with the finding counts.

    Args:
        findings: Finding collection
        hosts: Host aggregates derived from the same findings

    Returns:
        ScanSummary
    """
    items = _real_findings(findings)
    host_list = list(hosts)
    scores = [f.severity_score for f in items]

    unique_cves = {
        cve for f in items for cve in extract_cves(f.cve) if not is_cve_placeholder(cve)
    }
    unique_plugins = {f.plugin_id for f in items if f.plugin_id is not None}

    return ScanSummary(
        total_findings=len(items),
        critical_findings=scores.count(SEVERITY_CRITICAL),
        high_findings=scores.count(SEVERITY_HIGH),
        medium_findings=scores.count(SEVERITY_MEDIUM),
        low_findings=scores.count(SEVERITY_LOW),
        info_findings=scores.count(SEVERITY_INFO),
        total_hosts=len(host_list),
        vulnerable_hosts=sum(1 for h in host_list if h.total_vulnerabilities > 0),
        compliance_findings=sum(1 for f in items if f.compliance),
        exploitable_findings=sum(1 for f in items if f.exploit_available),
        unique_cves=len(unique_cves),
        unique_plugins=len(unique_plugins),
    )


def _duration_seconds(duration: Optional[str]) -> float:
    if not duration:
        return 0.0
    digits = re.sub(r"[^0-9.]", "", str(duration))
    try:
        return float(digits) if digits else 0.0
    except ValueError:
        return 0.0


def calculate_scan_statistics(
    findings: Iterable[Finding],
    hosts: Iterable[Host],
    scan_metadata: Optional[Dict[str, Any]] = None,
) -> ScanStatistics:
    """
    Compute coverage statistics for a scan.

    Credentialed percentage is estimated from plugin names mentioning
    'authenticated'. Average time per host uses the numeric part of the
    scan duration reported in the scan metadata.
    """
    items = _real_findings(findings)
    host_count = len(list(hosts))
    metadata = scan_metadata or {}
    duration = metadata.get("scanDuration") or metadata.get("scan_duration")

    credentialed = sum(
        1 for f in items if CREDENTIALED_PLUGIN_MARKER in (f.plugin_name or "").lower()
    )

    return ScanStatistics(
        plugins_used=len({f.plugin_id for f in items if f.plugin_id is not None}),
        credentialed_scan_percentage=(credentialed / len(items) * 100) if items else 0.0,
        total_open_ports=sum(1 for f in items if f.port and f.port > 0),
        scan_duration=str(duration) if duration else None,
        average_scan_time_per_host=(
            _duration_seconds(duration) / host_count if host_count else 0.0
        ),
    )
