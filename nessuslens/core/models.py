"""
NessusLens - Core Data Models
Copyright (C) 2026 Dorin Badea
GPLv3 License

This module defines the canonical data structures used throughout the application.
Importer records arrive as loosely typed dictionaries; Finding.from_dict() is the
single place where their fields are coerced, so the analysis code never has to
guess whether a plugin id is a string or an int.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, List, Optional, Union

from nessuslens.core.cve import extract_cves
from nessuslens.core.severity import severity_label, severity_score
from nessuslens.utils.constants import CVSS_MAX, CVSS_MIN, UNKNOWN_HOST_KEY

_TRUE_STRINGS = {"true", "yes", "1", "y"}


def _coerce_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        text = str(value).strip()
        return int(float(text)) if text else None
    except (TypeError, ValueError, OverflowError):
        return None


def _coerce_cvss(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        score = float(value)
    except (TypeError, ValueError):
        return None
    if score != score or not (CVSS_MIN <= score <= CVSS_MAX):  # NaN or out of range
        return None
    return score


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return False


def _coerce_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


@dataclass
class Finding:
    """One vulnerability instance on one host from one scan."""

    id: str = ""
    scan_id: str = ""
    host_id: Optional[str] = None
    plugin_id: Optional[int] = None
    plugin_name: Optional[str] = None
    plugin_family: Optional[str] = None
    # Raw severity sources; see severity.severity_score for precedence
    severity: Optional[Union[str, int]] = None
    risk_factor: Optional[str] = None
    cve: Optional[str] = None
    cvss_base_score: Optional[float] = None
    cvss_temporal_score: Optional[float] = None
    cvss_vector: Optional[str] = None
    host: Optional[str] = None
    hostname: Optional[str] = None
    ip_address: Optional[str] = None
    port: Optional[int] = None
    protocol: Optional[str] = None
    service: Optional[str] = None
    synopsis: Optional[str] = None
    description: Optional[str] = None
    solution: Optional[str] = None
    plugin_output: Optional[str] = None
    exploit_available: bool = False
    compliance: bool = False

    # Presentation markers set by the CVE grouper
    is_cve_header: bool = False
    cve_group_size: Optional[int] = None

    # Importer keys we do not model, written back untouched
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def severity_score(self) -> int:
        return severity_score(self.severity, self.risk_factor)

    @property
    def severity_label(self) -> str:
        return severity_label(self.severity_score)

    @property
    def cves(self) -> List[str]:
        return extract_cves(self.cve)

    @property
    def host_key(self) -> str:
        """Aggregation key: host, else hostname, else IP, else 'unknown'."""
        return str(self.host or self.hostname or self.ip_address or UNKNOWN_HOST_KEY)

    @property
    def display_host(self) -> str:
        """Host identity used for comparison keys, sorting and export."""
        return str(self.host or self.ip_address or "")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Finding":
        """Build a Finding from an importer record, tolerating absent or malformed fields."""
        known = {f.name for f in fields(cls)} - {"extra"}
        raw_severity = data.get("severity")
        if isinstance(raw_severity, bool):
            raw_severity = None
        elif isinstance(raw_severity, float) and raw_severity.is_integer():
            raw_severity = int(raw_severity)
        elif raw_severity is not None and not isinstance(raw_severity, (int, str)):
            raw_severity = str(raw_severity)

        extra = dict(data.get("extra") or {}) if isinstance(data.get("extra"), dict) else {}
        extra.update({k: v for k, v in data.items() if k not in known and k != "extra"})

        return cls(
            id=str(data.get("id") or ""),
            scan_id=str(data.get("scan_id") or ""),
            host_id=_coerce_str(data.get("host_id")),
            plugin_id=_coerce_int(data.get("plugin_id")),
            plugin_name=_coerce_str(data.get("plugin_name")),
            plugin_family=_coerce_str(data.get("plugin_family")),
            severity=raw_severity,
            risk_factor=_coerce_str(data.get("risk_factor")),
            cve=_coerce_str(data.get("cve")),
            cvss_base_score=_coerce_cvss(data.get("cvss_base_score")),
            cvss_temporal_score=_coerce_cvss(data.get("cvss_temporal_score")),
            cvss_vector=_coerce_str(data.get("cvss_vector")),
            host=_coerce_str(data.get("host")),
            hostname=_coerce_str(data.get("hostname")),
            ip_address=_coerce_str(data.get("ip_address")),
            port=_coerce_int(data.get("port")),
            protocol=_coerce_str(data.get("protocol")),
            service=_coerce_str(data.get("service")),
            synopsis=_coerce_str(data.get("synopsis")),
            description=_coerce_str(data.get("description")),
            solution=_coerce_str(data.get("solution")),
            plugin_output=_coerce_str(data.get("plugin_output")),
            exploit_available=_coerce_bool(data.get("exploit_available")),
            compliance=_coerce_bool(data.get("compliance")),
            is_cve_header=_coerce_bool(data.get("is_cve_header")),
            cve_group_size=_coerce_int(data.get("cve_group_size")),
            extra=extra,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for JSON export; unknown importer keys are merged back in."""
        data = {f.name: getattr(self, f.name) for f in fields(self) if f.name != "extra"}
        for key, value in self.extra.items():
            data.setdefault(key, value)
        return data


@dataclass
class Host:
    """Per-host rollup derived from a finding collection."""

    id: str
    report_id: str = ""
    hostname: str = ""
    ip_address: str = ""
    total_vulnerabilities: int = 0
    critical_count: int = 0
    high_count: int = 0
    medium_count: int = 0
    low_count: int = 0
    info_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ScanSummary:
    """Scan-level counts. Tier counts always add up to total_findings."""

    total_findings: int = 0
    critical_findings: int = 0
    high_findings: int = 0
    medium_findings: int = 0
    low_findings: int = 0
    info_findings: int = 0
    total_hosts: int = 0
    vulnerable_hosts: int = 0
    compliance_findings: int = 0
    exploitable_findings: int = 0
    unique_cves: int = 0
    unique_plugins: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ScanStatistics:
    plugins_used: int = 0
    credentialed_scan_percentage: float = 0.0
    total_open_ports: int = 0
    scan_duration: Optional[str] = None
    average_scan_time_per_host: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class SeverityChange:
    """Normalized severity moved between two scans for one (plugin_id, host) key."""

    plugin_id: int
    plugin_name: str
    host: str
    old_severity: str
    new_severity: str
    change_type: str  # increased, decreased

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ComparisonResult:
    new: List[Finding] = field(default_factory=list)
    resolved: List[Finding] = field(default_factory=list)
    common: List[Finding] = field(default_factory=list)
    severity_changes: List[SeverityChange] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "new": [f.to_dict() for f in self.new],
            "resolved": [f.to_dict() for f in self.resolved],
            "common": [f.to_dict() for f in self.common],
            "severity_changes": [c.to_dict() for c in self.severity_changes],
        }


@dataclass
class ComparisonSummary:
    total_new: int = 0
    total_resolved: int = 0
    total_common: int = 0
    severity_increased: int = 0
    severity_decreased: int = 0
    risk_score_change: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ScanMeta:
    """Scan metadata as supplied by the importer."""

    id: str = ""
    name: str = ""
    description: Optional[str] = None
    imported_date: str = ""
    source_file: Optional[str] = None
    scan_info: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScanMeta":
        scan_info = data.get("scan_info")
        return cls(
            id=str(data.get("id") or ""),
            name=str(data.get("name") or ""),
            description=_coerce_str(data.get("description")),
            imported_date=str(data.get("imported_date") or ""),
            source_file=_coerce_str(data.get("source_file")),
            scan_info=scan_info if isinstance(scan_info, dict) else {},
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ScanData:
    """One scan's metadata and its materialized finding collection."""

    meta: ScanMeta
    findings: List[Finding] = field(default_factory=list)


@dataclass
class AnalysisResult:
    scan_meta: ScanMeta
    findings: List[Finding]
    hosts: List[Host]
    summary: ScanSummary
    statistics: Optional[ScanStatistics] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scan_meta": self.scan_meta.to_dict(),
            "findings": [f.to_dict() for f in self.findings],
            "hosts": [h.to_dict() for h in self.hosts],
            "summary": self.summary.to_dict(),
            "statistics": self.statistics.to_dict() if self.statistics else None,
        }
