#!/usr/bin/env python3
"""
NessusLens - Console Rendering
Copyright (C) 2026  Dorin Badea
GPLv3 License

Rich tables for summaries, host rollups, finding lists and scan diffs.
"""

import sys
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text

from nessuslens.core.models import AnalysisResult, Finding, Host
from nessuslens.core.risk import calculate_risk_score
from nessuslens.core.severity import cvss_color
from nessuslens.utils.constants import MAX_ROWS_DISPLAY, SEVERITY_STYLES

_STATUS_STYLES = {
    "OK": "bright_green",
    "INFO": "bright_blue",
    "WARN": "bright_yellow",
    "FAIL": "bright_red",
}


def make_console(no_color: bool = False) -> Console:
    """Console on stdout; colors off when requested or when stdout is not a TTY."""
    return Console(file=sys.stdout, no_color=no_color or not sys.stdout.isatty())


def print_status(console: Console, message: str, status: str = "INFO") -> None:
    """Print a timestamped status line, e.g. [12:00:01] [OK] Loaded scan."""
    ts = datetime.now().strftime("%H:%M:%S")
    line = Text()
    line.append(f"[{ts}] [{status}] ", style=_STATUS_STYLES.get(status, "bright_blue"))
    line.append(message)
    console.print(line)


def _severity_text(label: str) -> Text:
    return Text(label, style=SEVERITY_STYLES.get(label, ""))


def render_summary(console: Console, analysis: AnalysisResult) -> None:
    summary = analysis.summary
    meta = analysis.scan_meta

    table = Table(title=f"Scan: {meta.name or meta.id}", show_header=False)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Total findings", str(summary.total_findings))
    for label, count in (
        ("Critical", summary.critical_findings),
        ("High", summary.high_findings),
        ("Medium", summary.medium_findings),
        ("Low", summary.low_findings),
        ("Info", summary.info_findings),
    ):
        table.add_row(_severity_text(label), str(count))
    table.add_row("Hosts (vulnerable / total)", f"{summary.vulnerable_hosts} / {summary.total_hosts}")
    table.add_row("Unique CVEs", str(summary.unique_cves))
    table.add_row("Unique plugins", str(summary.unique_plugins))
    table.add_row("Exploitable findings", str(summary.exploitable_findings))
    table.add_row("Compliance findings", str(summary.compliance_findings))
    table.add_row("Risk score", f"{calculate_risk_score(analysis.findings):.2f}")
    stats = analysis.statistics
    if stats is not None:
        table.add_row("Credentialed findings", f"{stats.credentialed_scan_percentage:.1f}%")
        table.add_row("Findings with open port", str(stats.total_open_ports))
        if stats.scan_duration:
            table.add_row("Scan duration", stats.scan_duration)
    console.print(table)


def render_hosts(console: Console, hosts: Iterable[Host]) -> None:
    table = Table(title="Hosts")
    table.add_column("Host")
    table.add_column("IP")
    table.add_column("Total", justify="right")
    for label in ("Critical", "High", "Medium", "Low", "Info"):
        table.add_column(label, justify="right", style=SEVERITY_STYLES[label])
    for h in hosts:
        table.add_row(
            h.hostname,
            h.ip_address,
            str(h.total_vulnerabilities),
            str(h.critical_count),
            str(h.high_count),
            str(h.medium_count),
            str(h.low_count),
            str(h.info_count),
        )
    console.print(table)


def render_findings(
    console: Console, findings: List[Finding], limit: Optional[int] = MAX_ROWS_DISPLAY
) -> None:
    """Finding table; CVE header rows are shown bold with their group size."""
    table = Table(title=f"Findings ({sum(1 for f in findings if not f.is_cve_header)})")
    table.add_column("Severity")
    table.add_column("CVSS", justify="right")
    table.add_column("Plugin", justify="right")
    table.add_column("Name")
    table.add_column("Host")
    table.add_column("Port", justify="right")
    table.add_column("CVE")

    shown = findings if not limit else findings[:limit]
    for f in shown:
        cvss = "" if f.cvss_base_score is None else f"{f.cvss_base_score:.1f}"
        if f.is_cve_header:
            table.add_row(
                _severity_text(f.severity_label),
                "",
                "",
                Text(f"{f.plugin_name} ({f.cve_group_size})", style="bold"),
                f.host or "",
                "",
                f.cve or "",
            )
            continue
        table.add_row(
            _severity_text(f.severity_label),
            Text(cvss, style=cvss_color(f.cvss_base_score)),
            "" if f.plugin_id is None else str(f.plugin_id),
            f.plugin_name or "",
            f.display_host,
            "" if not f.port else str(f.port),
            f.cve or "",
        )
    console.print(table)
    if limit and len(findings) > limit:
        print_status(console, f"{len(findings) - limit} more row(s) not shown", "INFO")


def render_diff(console: Console, diff: Dict) -> None:
    summary = diff["summary"]
    table = Table(title="Scan comparison", show_header=False)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Baseline", diff["baseline_scan"]["name"] or diff["baseline_scan"]["id"])
    table.add_row("Comparison", diff["comparison_scan"]["name"] or diff["comparison_scan"]["id"])
    table.add_row("New findings", str(summary["total_new"]))
    table.add_row("Resolved findings", str(summary["total_resolved"]))
    table.add_row("Common findings", str(summary["total_common"]))
    table.add_row("Severity increased", str(summary["severity_increased"]))
    table.add_row("Severity decreased", str(summary["severity_decreased"]))
    table.add_row("Risk score change", f"{summary['risk_score_change']:+.2f}")
    console.print(table)

    changes = diff["changes"]["severity_changes"]
    if changes:
        detail = Table(title="Severity changes")
        detail.add_column("Host")
        detail.add_column("Plugin", justify="right")
        detail.add_column("Name")
        detail.add_column("Old")
        detail.add_column("New")
        for change in changes:
            style = "bright_red" if change["change_type"] == "increased" else "bright_green"
            detail.add_row(
                change["host"],
                str(change["plugin_id"]),
                change["plugin_name"],
                _severity_text(change["old_severity"]),
                Text(change["new_severity"], style=style),
            )
        console.print(detail)
