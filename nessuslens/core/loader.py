#!/usr/bin/env python3
"""
NessusLens - Scan Loader Module
Copyright (C) 2026  Dorin Badea
GPLv3 License

Reads the finding documents written by the external Nessus importer and
materializes them as Finding collections. Accepted shapes:

- JSON list of finding records
- JSON object {"scan": {...}, "findings": [...]} ("scan_meta" is also accepted)
- JSONL, one finding record per line
"""

import json
import logging
import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from nessuslens.core.aggregate import (
    build_hosts_from_findings,
    calculate_scan_statistics,
    calculate_scan_summary,
)
from nessuslens.core.models import AnalysisResult, Finding, ScanData, ScanMeta
from nessuslens.utils.constants import DEFAULT_WORKERS, MAX_WORKERS, MIN_WORKERS

logger = logging.getLogger("NessusLens")


class NessusLensError(Exception):
    """Base error for NessusLens."""

    pass


class ScanLoadError(NessusLensError):
    """Raised when a scan document cannot be read or has the wrong shape."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


def _read_jsonl(path: str) -> List[Any]:
    records = []
    with open(path, "r", encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                records.append(json.loads(line))
            except json.JSONDecodeError as exc:
                raise ScanLoadError(path, f"invalid JSON on line {lineno}: {exc.msg}") from exc
    return records


def _split_document(path: str, data: Any) -> Tuple[Dict[str, Any], List[Any]]:
    if isinstance(data, list):
        return {}, data
    if isinstance(data, dict):
        records = data.get("findings")
        if not isinstance(records, list):
            raise ScanLoadError(path, "missing 'findings' list")
        meta = data.get("scan") or data.get("scan_meta") or {}
        return (meta if isinstance(meta, dict) else {}), records
    raise ScanLoadError(path, "expected a list of findings or an object with 'findings'")


def parse_findings(records: Iterable[Any]) -> List[Finding]:
    """
    Build Finding objects from importer records.

    Records that are not JSON objects are skipped.
    """
    findings = []
    skipped = 0
    for record in records:
        if not isinstance(record, dict):
            skipped += 1
            continue
        findings.append(Finding.from_dict(record))
    if skipped:
        logger.debug("Skipped %d non-object finding record(s)", skipped)
    return findings


def load_scan(path: str) -> ScanData:
    """
    Load one scan document.

    Args:
        path: Path to a JSON or JSONL document

    Returns:
        ScanData with metadata and findings

    Raises:
        ScanLoadError: If the file is missing, unreadable, not JSON or has the wrong shape
    """
    if not os.path.isfile(path):
        raise ScanLoadError(path, "file not found")

    try:
        if path.lower().endswith(".jsonl"):
            meta_raw, records = {}, _read_jsonl(path)
        else:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            meta_raw, records = _split_document(path, data)
    except json.JSONDecodeError as exc:
        raise ScanLoadError(path, f"invalid JSON: {exc.msg}") from exc
    except (IOError, OSError, UnicodeDecodeError) as exc:
        raise ScanLoadError(path, str(exc)) from exc

    meta = ScanMeta.from_dict(meta_raw)
    base_name = os.path.basename(path)
    if not meta.id:
        meta.id = os.path.splitext(base_name)[0]
    if not meta.name:
        meta.name = base_name
    if not meta.source_file:
        meta.source_file = path

    findings = parse_findings(records)
    logger.info("Loaded %d finding(s) from %s", len(findings), path)
    return ScanData(meta=meta, findings=findings)


def load_scans(
    paths: Sequence[str], max_workers: Optional[int] = None
) -> Tuple[List[ScanData], Dict[str, ScanLoadError]]:
    """
    Load several scan documents concurrently.

    A failing document does not abort the others; its error is reported in
    the failures dict instead.

    Args:
        paths: Scan document paths
        max_workers: Thread pool size (clamped to MIN_WORKERS..MAX_WORKERS)

    Returns:
        Tuple of (loaded scans in `paths` order, failures keyed by path)
    """
    workers = max_workers if isinstance(max_workers, int) else DEFAULT_WORKERS
    workers = max(MIN_WORKERS, min(MAX_WORKERS, workers, max(1, len(paths))))

    loaded: Dict[str, ScanData] = {}
    failures: Dict[str, ScanLoadError] = {}

    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = {executor.submit(load_scan, p): p for p in paths}
        for fut in as_completed(futures):
            path = futures[fut]
            try:
                loaded[path] = fut.result()
            except ScanLoadError as exc:
                logger.error("Scan load failed for %s: %s", path, exc)
                failures[path] = exc

    return [loaded[p] for p in paths if p in loaded], failures


def analyze_scan(scan: ScanData) -> AnalysisResult:
    """Derive hosts, summary and statistics for one loaded scan."""
    hosts = build_hosts_from_findings(scan.findings)
    return AnalysisResult(
        scan_meta=scan.meta,
        findings=scan.findings,
        hosts=hosts,
        summary=calculate_scan_summary(scan.findings, hosts),
        statistics=calculate_scan_statistics(scan.findings, hosts, scan.meta.scan_info),
    )
