#!/usr/bin/env python3
"""
NessusLens - Export Module
Copyright (C) 2026  Dorin Badea
GPLv3 License

CSV, JSON and JSONL exports of analyzed scans, plus a compact summary.json
for dashboards. Exports can optionally be encrypted (see core/crypto.py).
"""

import csv
import io
import json
import logging
import os
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence

from nessuslens.core.crypto import encrypt_data
from nessuslens.core.models import AnalysisResult, Finding
from nessuslens.core.risk import calculate_risk_score, finding_risk
from nessuslens.utils.constants import (
    CSV_HEADERS,
    EXPORT_FORMATS,
    SCHEMA_VERSION,
    SECURE_FILE_MODE,
    VERSION,
)

logger = logging.getLogger("NessusLens")

# Output file name per format
EXPORT_FILENAMES = {
    "csv": "findings.csv",
    "json": "findings.json",
    "jsonl": "findings.jsonl",
    "summary": "summary.json",
}


def _exportable(findings: Iterable[Finding]) -> List[Finding]:
    # CVE header records are presentation-only and never exported.
    return [f for f in findings if not f.is_cve_header]


def _cell(value: Any) -> Any:
    return "" if value is None else value


def findings_to_csv(findings: Iterable[Finding]) -> str:
    """
    Render findings as CSV, one row per finding, every cell quoted.

    Column order is fixed (see CSV_HEADERS); the Severity column carries the
    normalized severity label.
    """
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for f in _exportable(findings):
        writer.writerow(
            [
                _cell(f.plugin_id),
                _cell(f.plugin_name),
                _cell(f.plugin_family),
                f.severity_label,
                _cell(f.cvss_base_score),
                _cell(f.cve),
                f.display_host,
                _cell(f.port),
                _cell(f.protocol),
                _cell(f.synopsis),
                _cell(f.description),
                _cell(f.solution),
            ]
        )
    return buf.getvalue()


def findings_to_json(findings: Iterable[Finding]) -> str:
    """Render findings as a JSON array preserving every finding field."""
    return json.dumps(
        [f.to_dict() for f in _exportable(findings)], indent=2, ensure_ascii=False, default=str
    )


def findings_to_jsonl(analysis: AnalysisResult) -> str:
    """
    Render findings as JSONL (one finding per line) with provenance fields,
    so each line can be ingested on its own.
    """
    meta = analysis.scan_meta
    generated_at = datetime.now().isoformat()
    lines = []
    for f in _exportable(analysis.findings):
        record = {
            "finding_id": f.id,
            "scan_id": f.scan_id or meta.id,
            "scan_name": meta.name,
            "plugin_id": f.plugin_id,
            "plugin_name": f.plugin_name or "",
            "plugin_family": f.plugin_family or "",
            "host": f.host_key,
            "ip_address": f.ip_address or "",
            "port": f.port or 0,
            "protocol": f.protocol or "",
            "severity": f.severity_label,
            "normalized_severity": f.severity_score,
            "cvss_base_score": f.cvss_base_score,
            "cve_ids": f.cves,
            "exploit_available": f.exploit_available,
            "compliance": f.compliance,
            "risk": round(finding_risk(f), 3),
            # Provenance
            "generated_at": generated_at,
            "schema_version": SCHEMA_VERSION,
            "exporter": "NessusLens",
            "exporter_version": VERSION,
        }
        lines.append(json.dumps(record, ensure_ascii=False))
    return "\n".join(lines) + ("\n" if lines else "")


def build_summary(analysis: AnalysisResult) -> Dict[str, Any]:
    """Compact summary for dashboards."""
    summary = analysis.summary
    return {
        "schema_version": SCHEMA_VERSION,
        "generated_at": datetime.now().isoformat(),
        "scan": analysis.scan_meta.to_dict(),
        "total_hosts": summary.total_hosts,
        "vulnerable_hosts": summary.vulnerable_hosts,
        "total_findings": summary.total_findings,
        "severity_breakdown": {
            "critical": summary.critical_findings,
            "high": summary.high_findings,
            "medium": summary.medium_findings,
            "low": summary.low_findings,
            "info": summary.info_findings,
        },
        "exploitable_findings": summary.exploitable_findings,
        "compliance_findings": summary.compliance_findings,
        "unique_cves": summary.unique_cves,
        "unique_plugins": summary.unique_plugins,
        "risk_score": round(calculate_risk_score(analysis.findings), 2),
        "statistics": analysis.statistics.to_dict() if analysis.statistics else None,
        "nessuslens_version": VERSION,
    }


def _write_secure(path: str, data: str, encryption_key: Optional[bytes] = None) -> str:
    if encryption_key:
        path = f"{path}.enc"
        with open(path, "wb") as f:
            f.write(encrypt_data(data, encryption_key))
    else:
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(data)
    try:
        os.chmod(path, SECURE_FILE_MODE)
    except OSError:
        logger.debug("Failed to chmod export file: %s", path, exc_info=True)
    return path


def export_findings_csv(findings: Iterable[Finding], output_path: str) -> int:
    """
    Export findings as CSV.

    Returns:
        Number of findings exported
    """
    items = _exportable(findings)
    _write_secure(output_path, findings_to_csv(items))
    return len(items)


def export_findings_json(findings: Iterable[Finding], output_path: str) -> int:
    """
    Export findings as a JSON array.

    Returns:
        Number of findings exported
    """
    items = _exportable(findings)
    _write_secure(output_path, findings_to_json(items))
    return len(items)


def export_findings_jsonl(analysis: AnalysisResult, output_path: str) -> int:
    """
    Export findings as JSONL (one finding per line).

    Returns:
        Number of findings exported
    """
    _write_secure(output_path, findings_to_jsonl(analysis))
    return len(_exportable(analysis.findings))


def export_summary_json(analysis: AnalysisResult, output_path: str) -> Dict[str, Any]:
    """
    Export compact summary for dashboards.

    Returns:
        Summary dictionary
    """
    summary = build_summary(analysis)
    _write_secure(output_path, json.dumps(summary, indent=2, ensure_ascii=False))
    return summary


def export_all(
    analysis: AnalysisResult,
    output_dir: str,
    formats: Optional[Sequence[str]] = None,
    encryption_key: Optional[bytes] = None,
    salt: Optional[bytes] = None,
) -> Dict[str, Any]:
    """
    Export the requested views of one analyzed scan into a directory.

    With an encryption key every file is written encrypted with a `.enc`
    suffix, and the key-derivation salt is stored next to them as
    `<scan id>.salt` so nessuslens_decrypt.py can recover the files.

    Args:
        analysis: Analyzed scan
        output_dir: Directory for output files
        formats: Subset of csv, json, jsonl, summary (default: all)
        encryption_key: Optional Fernet key
        salt: Salt used to derive encryption_key

    Returns:
        Dict with the number of exported findings and the written file paths

    Raises:
        ValueError: On unknown export formats
    """
    selected = list(formats) if formats else list(EXPORT_FORMATS)
    unknown = [fmt for fmt in selected if fmt not in EXPORT_FORMATS]
    if unknown:
        raise ValueError(f"Unknown export format(s): {', '.join(unknown)}")

    os.makedirs(output_dir, exist_ok=True)
    items = _exportable(analysis.findings)

    renderers = {
        "csv": lambda: findings_to_csv(items),
        "json": lambda: findings_to_json(items),
        "jsonl": lambda: findings_to_jsonl(analysis),
        "summary": lambda: json.dumps(build_summary(analysis), indent=2, ensure_ascii=False),
    }

    prefix = analysis.scan_meta.id or "scan"
    files = []
    for fmt in selected:
        path = os.path.join(output_dir, f"{prefix}_{EXPORT_FILENAMES[fmt]}")
        files.append(_write_secure(path, renderers[fmt](), encryption_key))

    if encryption_key and salt:
        salt_path = os.path.join(output_dir, f"{prefix}.salt")
        with open(salt_path, "wb") as f:
            f.write(salt)
        try:
            os.chmod(salt_path, SECURE_FILE_MODE)
        except OSError:
            logger.debug("Failed to chmod salt file: %s", salt_path, exc_info=True)
        files.append(salt_path)

    logger.info("Exported %d finding(s) to %s (%s)", len(items), output_dir, ", ".join(selected))
    return {"findings": len(items), "files": files}
