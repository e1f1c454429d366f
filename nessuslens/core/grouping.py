#!/usr/bin/env python3
"""
NessusLens - CVE Grouping Module
Copyright (C) 2026  Dorin Badea
GPLv3 License

Flattens the finding <-> CVE many-to-many relation into display groups.
"""

import logging
from dataclasses import replace
from typing import Dict, Iterable, List

from nessuslens.core.cve import extract_cves, is_cve_placeholder
from nessuslens.core.models import Finding
from nessuslens.core.severity import severity_label
from nessuslens.utils.constants import (
    CVE_HEADER_HOSTS_SHOWN,
    CVE_HEADER_ID_PREFIX,
    NO_CVE_KEY,
)

logger = logging.getLogger("NessusLens")


def _bucket_findings(findings: Iterable[Finding]) -> Dict[str, List[Finding]]:
    groups: Dict[str, List[Finding]] = {}
    for finding in findings:
        if finding.is_cve_header:
            continue
        cves = [c for c in extract_cves(finding.cve) if not is_cve_placeholder(c)]
        if not cves:
            groups.setdefault(NO_CVE_KEY, []).append(finding)
            continue
        # One replica per CVE so every CVE can be grouped independently.
        for cve in cves:
            groups.setdefault(cve, []).append(replace(finding, cve=cve, extra=dict(finding.extra)))
    return groups


def _max_severity(items: List[Finding]) -> int:
    return max(f.severity_score for f in items)


def _affected_hosts(items: List[Finding]) -> List[str]:
    hosts: List[str] = []
    for f in items:
        host = f.display_host
        if host and host not in hosts:
            hosts.append(host)
    return hosts


def build_cve_header(cve: str, items: List[Finding]) -> Finding:
    """
    Synthetic header record summarizing one CVE group.

    The header is a copy of the first member with is_cve_header=True, so
    exporters and selection logic can skip it by checking that flag.
    """
    max_severity = _max_severity(items)
    hosts = _affected_hosts(items)
    shown = ", ".join(hosts[:CVE_HEADER_HOSTS_SHOWN])
    if len(hosts) > CVE_HEADER_HOSTS_SHOWN:
        shown += f" +{len(hosts) - CVE_HEADER_HOSTS_SHOWN} more"

    return replace(
        items[0],
        id=f"{CVE_HEADER_ID_PREFIX}{cve}",
        plugin_name=f"CVE Group: {cve}",
        description=f"{len(items)} finding(s) affecting {len(hosts)} host(s)",
        cve=cve,
        host=shown,
        severity=str(max_severity),
        risk_factor=severity_label(max_severity),
        is_cve_header=True,
        cve_group_size=len(items),
        extra=dict(items[0].extra),
    )


def group_findings_by_cve(
    findings: Iterable[Finding],
    include_headers: bool = True,
    collapse_members: bool = False,
) -> List[Finding]:
    """
    Group findings by CVE identifier for display.

    A finding with several CVEs is replicated once per CVE (each replica's
    `cve` holds a single identifier); findings without CVEs go to the
    'No CVE' bucket. Member counts are therefore finding-CVE pairs, not
    distinct findings.

    Group order: highest normalized severity first, then larger groups, then
    CVE identifier ascending. 'No CVE' is always last.

    Args:
        findings: Finding collection (input records are not modified)
        include_headers: Emit a header record before each CVE group
        collapse_members: Emit only headers for CVE groups; 'No CVE' members
            are always emitted individually

    Returns:
        Ordered list of headers and findings
    """
    groups = _bucket_findings(findings)
    if not groups:
        return []

    no_cve = groups.pop(NO_CVE_KEY, [])
    ordered = sorted(
        groups.items(),
        key=lambda item: (-_max_severity(item[1]), -len(item[1]), item[0]),
    )

    result: List[Finding] = []
    for cve, items in ordered:
        if include_headers:
            result.append(build_cve_header(cve, items))
        if not collapse_members:
            result.extend(items)
    result.extend(no_cve)

    logger.debug(
        "Grouped %d CVE group(s), %d finding(s) without CVE", len(ordered), len(no_cve)
    )
    return result
