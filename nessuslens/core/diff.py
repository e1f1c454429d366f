#!/usr/bin/env python3
"""
NessusLens - Differential Analysis Module
Copyright (C) 2026  Dorin Badea
GPLv3 License

Compare two scans' findings and generate delta analysis.
Identifies new findings, resolved findings, common findings and severity changes.
"""

from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from nessuslens.core.models import (
    ComparisonResult,
    ComparisonSummary,
    Finding,
    ScanData,
    SeverityChange,
)
from nessuslens.core.risk import calculate_risk_score
from nessuslens.core.severity import severity_label

FindingKey = Tuple[Optional[int], str]


def finding_key(finding: Finding) -> FindingKey:
    """Comparison key: (plugin_id, host-or-ip)."""
    return finding.plugin_id, finding.display_host


def extract_finding_index(findings: Iterable[Finding]) -> Dict[FindingKey, Finding]:
    """
    Create an index of findings by comparison key.

    Args:
        findings: Finding collection

    Returns:
        Dict mapping key to finding (a later duplicate key replaces the earlier one)
    """
    index: Dict[FindingKey, Finding] = {}
    for finding in findings:
        if finding.is_cve_header:
            continue
        index[finding_key(finding)] = finding
    return index


def compare_scans(
    baseline: Iterable[Finding], comparison: Iterable[Finding]
) -> ComparisonResult:
    """
    Diff two normalized finding collections.

    Keys only in `comparison` are new, keys only in `baseline` are resolved,
    keys in both are common (the comparison-side record is kept). Common keys
    whose normalized severity differs also produce a SeverityChange.

    Args:
        baseline: Earlier scan findings
        comparison: Later scan findings

    Returns:
        ComparisonResult
    """
    baseline_index = extract_finding_index(baseline)
    comparison_index = extract_finding_index(comparison)

    result = ComparisonResult()

    for key, finding in comparison_index.items():
        previous = baseline_index.get(key)
        if previous is None:
            result.new.append(finding)
            continue

        result.common.append(finding)
        old_score = previous.severity_score
        new_score = finding.severity_score
        if old_score != new_score:
            result.severity_changes.append(
                SeverityChange(
                    plugin_id=finding.plugin_id or 0,
                    plugin_name=finding.plugin_name or "",
                    host=finding.display_host,
                    old_severity=severity_label(old_score),
                    new_severity=severity_label(new_score),
                    change_type="increased" if new_score > old_score else "decreased",
                )
            )

    for key, finding in baseline_index.items():
        if key not in comparison_index:
            result.resolved.append(finding)

    return result


def summarize_comparison(
    result: ComparisonResult, baseline: Iterable[Finding], comparison: Iterable[Finding]
) -> ComparisonSummary:
    """
    Headline numbers for a comparison.

    risk_score_change is the comparison scan's risk score minus the baseline's.
    """
    return ComparisonSummary(
        total_new=len(result.new),
        total_resolved=len(result.resolved),
        total_common=len(result.common),
        severity_increased=sum(
            1 for c in result.severity_changes if c.change_type == "increased"
        ),
        severity_decreased=sum(
            1 for c in result.severity_changes if c.change_type == "decreased"
        ),
        risk_score_change=calculate_risk_score(comparison) - calculate_risk_score(baseline),
    )


def _scan_block(scan: ScanData) -> Dict:
    return {
        "id": scan.meta.id,
        "name": scan.meta.name,
        "source_file": scan.meta.source_file or "",
        "imported_date": scan.meta.imported_date or "unknown",
        "total_findings": len(scan.findings),
        "risk_score": round(calculate_risk_score(scan.findings), 2),
    }


def _finding_row(finding: Finding) -> Dict:
    return {
        "plugin_id": finding.plugin_id,
        "plugin_name": finding.plugin_name or "",
        "host": finding.display_host,
        "severity": finding.severity_label,
    }


def generate_diff_report(baseline_scan: ScanData, comparison_scan: ScanData) -> Dict:
    """
    Generate comprehensive diff report between two scans.

    Args:
        baseline_scan: Earlier scan
        comparison_scan: Later scan

    Returns:
        Diff report dict
    """
    result = compare_scans(baseline_scan.findings, comparison_scan.findings)
    summary = summarize_comparison(result, baseline_scan.findings, comparison_scan.findings)

    summary_dict = summary.to_dict()
    summary_dict["risk_score_change"] = round(summary.risk_score_change, 2)
    summary_dict["has_changes"] = bool(
        result.new or result.resolved or result.severity_changes
    )

    return {
        "diff_version": "1.0",
        "generated_at": datetime.now().isoformat(),
        "baseline_scan": _scan_block(baseline_scan),
        "comparison_scan": _scan_block(comparison_scan),
        "changes": {
            "new_findings": [_finding_row(f) for f in result.new],
            "resolved_findings": [_finding_row(f) for f in result.resolved],
            "severity_changes": [c.to_dict() for c in result.severity_changes],
        },
        "summary": summary_dict,
    }


def _scan_title(block: Dict) -> str:
    return block.get("name") or block.get("source_file") or block.get("id") or "-"


def format_diff_text(diff: Dict) -> str:
    """
    Format diff report as human-readable text.

    Args:
        diff: Diff report dict

    Returns:
        Formatted text string
    """
    lines = []
    lines.append("=" * 60)
    lines.append("NessusLens Scan Comparison Report")
    lines.append("=" * 60)
    lines.append("")
    lines.append(f"Generated: {diff['generated_at']}")
    base = diff["baseline_scan"]
    comp = diff["comparison_scan"]
    lines.append(f"Baseline:   {_scan_title(base)} ({base['imported_date']})")
    lines.append(f"Comparison: {_scan_title(comp)} ({comp['imported_date']})")
    lines.append("")

    summary = diff["summary"]
    lines.append("SUMMARY")
    lines.append("-" * 40)
    lines.append(f"  New findings: {summary['total_new']}")
    lines.append(f"  Resolved findings: {summary['total_resolved']}")
    lines.append(f"  Common findings: {summary['total_common']}")
    lines.append(f"  Severity increased: {summary['severity_increased']}")
    lines.append(f"  Severity decreased: {summary['severity_decreased']}")
    lines.append(f"  Risk score change: {summary['risk_score_change']:+.2f}")
    lines.append("")

    changes = diff["changes"]

    if changes["new_findings"]:
        lines.append("NEW FINDINGS")
        lines.append("-" * 40)
        for row in changes["new_findings"]:
            lines.append(
                f"  [+] {row['host']} plugin {row['plugin_id']} "
                f"[{row['severity']}] {row['plugin_name'][:60]}"
            )
        lines.append("")

    if changes["resolved_findings"]:
        lines.append("RESOLVED FINDINGS")
        lines.append("-" * 40)
        for row in changes["resolved_findings"]:
            lines.append(
                f"  [-] {row['host']} plugin {row['plugin_id']} "
                f"[{row['severity']}] {row['plugin_name'][:60]}"
            )
        lines.append("")

    if changes["severity_changes"]:
        lines.append("SEVERITY CHANGES")
        lines.append("-" * 40)
        for change in changes["severity_changes"]:
            marker = "[^]" if change["change_type"] == "increased" else "[v]"
            lines.append(
                f"  {marker} {change['host']} plugin {change['plugin_id']}: "
                f"{change['old_severity']} -> {change['new_severity']}"
            )
        lines.append("")

    if not summary["has_changes"]:
        lines.append("No changes detected between scans.")
        lines.append("")

    lines.append("=" * 60)
    return "\n".join(lines)


def format_diff_markdown(diff: Dict) -> str:
    """
    Format diff report as Markdown.

    Args:
        diff: Diff report dict

    Returns:
        Markdown formatted string
    """
    lines: List[str] = []
    lines.append("# NessusLens Scan Comparison Report")
    lines.append("")
    lines.append(f"**Generated**: {diff['generated_at']}")
    lines.append("")
    lines.append("## Scans Compared")
    lines.append("")
    lines.append("| Scan | Name | Imported | Findings | Risk Score |")
    lines.append("|:---|:---|:---|:---:|:---:|")
    for label, key in (("Baseline", "baseline_scan"), ("Comparison", "comparison_scan")):
        block = diff[key]
        lines.append(
            f"| {label} | {_scan_title(block)} | {block['imported_date']} | "
            f"{block['total_findings']} | {block['risk_score']} |"
        )
    lines.append("")

    summary = diff["summary"]
    lines.append("## Summary")
    lines.append("")
    lines.append("| Metric | Count |")
    lines.append("|:---|:---:|")
    lines.append(f"| New findings | {summary['total_new']} |")
    lines.append(f"| Resolved findings | {summary['total_resolved']} |")
    lines.append(f"| Common findings | {summary['total_common']} |")
    lines.append(f"| Severity increased | {summary['severity_increased']} |")
    lines.append(f"| Severity decreased | {summary['severity_decreased']} |")
    lines.append(f"| Risk score change | {summary['risk_score_change']:+.2f} |")
    lines.append("")

    changes = diff["changes"]

    if changes["new_findings"]:
        lines.append("## New Findings")
        lines.append("")
        for row in changes["new_findings"]:
            lines.append(
                f"- `{row['host']}` plugin {row['plugin_id']} "
                f"**{row['severity']}** {row['plugin_name']}"
            )
        lines.append("")

    if changes["resolved_findings"]:
        lines.append("## Resolved Findings")
        lines.append("")
        for row in changes["resolved_findings"]:
            lines.append(
                f"- `{row['host']}` plugin {row['plugin_id']} "
                f"**{row['severity']}** {row['plugin_name']}"
            )
        lines.append("")

    if changes["severity_changes"]:
        lines.append("## Severity Changes")
        lines.append("")
        lines.append("| Host | Plugin | Old | New | Change |")
        lines.append("|:---|:---|:---|:---|:---|")
        for change in changes["severity_changes"]:
            lines.append(
                f"| {change['host']} | {change['plugin_id']} {change['plugin_name']} | "
                f"{change['old_severity']} | {change['new_severity']} | {change['change_type']} |"
            )
        lines.append("")

    if not summary["has_changes"]:
        lines.append("> No changes detected between the two scans.")
        lines.append("")

    return "\n".join(lines)
