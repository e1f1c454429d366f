#!/usr/bin/env python3
"""
NessusLens - Export Tests
Copyright (C) 2026  Dorin Badea
GPLv3 License
"""

import csv
import io
import json
import os
import stat

import pytest

from nessuslens.core.crypto import decrypt_data, derive_key_from_password
from nessuslens.core.exporter import (
    build_summary,
    export_all,
    export_findings_csv,
    findings_to_csv,
    findings_to_json,
    findings_to_jsonl,
)
from nessuslens.core.grouping import group_findings_by_cve
from nessuslens.core.loader import analyze_scan
from nessuslens.core.models import ScanData, ScanMeta
from nessuslens.utils.constants import CSV_HEADERS


@pytest.fixture
def analysis(make_finding):
    findings = [
        make_finding(
            id="1",
            severity="4",
            cvss_base_score=9.8,
            cve="CVE-2021-44228",
            port=8080,
            protocol="tcp",
            synopsis='Remote "code" execution',
            exploit_available=True,
            see_also="https://example.test/advisory",
        ),
        make_finding(id="2", plugin_id=2, ip_address="10.0.0.7", host=None, risk_factor="Low"),
    ]
    return analyze_scan(ScanData(meta=ScanMeta(id="weekly", name="Weekly"), findings=findings))


def test_csv_columns_and_quoting(analysis):
    text = findings_to_csv(analysis.findings)
    rows = list(csv.reader(io.StringIO(text)))

    assert rows[0] == CSV_HEADERS
    assert rows[1][0] == "10001"
    assert rows[1][3] == "Critical"
    assert rows[1][4] == "9.8"
    assert rows[1][6] == "10.0.0.1"
    assert rows[1][9] == 'Remote "code" execution'
    assert rows[2][3] == "Low"
    assert rows[2][6] == "10.0.0.7"
    assert text.splitlines()[0].startswith('"Plugin ID","Plugin Name"')


def test_csv_skips_cve_headers(analysis):
    grouped = group_findings_by_cve(analysis.findings)
    rows = list(csv.reader(io.StringIO(findings_to_csv(grouped))))
    assert len(rows) == 1 + 2


def test_json_keeps_extra_fields(analysis):
    data = json.loads(findings_to_json(analysis.findings))
    assert data[0]["see_also"] == "https://example.test/advisory"
    assert data[0]["cvss_base_score"] == 9.8
    assert len(data) == 2


def test_jsonl_has_provenance(analysis):
    lines = findings_to_jsonl(analysis).splitlines()
    record = json.loads(lines[0])
    assert len(lines) == 2
    assert record["scan_id"] == "scan-1"
    assert record["normalized_severity"] == 4
    assert record["cve_ids"] == ["CVE-2021-44228"]
    assert record["risk"] == pytest.approx(5.88)
    assert record["exporter"] == "NessusLens"
    assert "schema_version" in record


def test_build_summary(analysis):
    summary = build_summary(analysis)
    assert summary["total_findings"] == 2
    assert summary["severity_breakdown"]["critical"] == 1
    assert summary["scan"]["id"] == "weekly"
    assert summary["risk_score"] == pytest.approx(6.88)


def test_export_findings_csv_permissions(tmp_path, analysis):
    path = tmp_path / "out.csv"
    assert export_findings_csv(analysis.findings, str(path)) == 2
    assert stat.S_IMODE(os.stat(path).st_mode) == 0o600


def test_export_all_plain(tmp_path, analysis):
    result = export_all(analysis, str(tmp_path / "out"), formats=["csv", "summary"])

    assert result["findings"] == 2
    names = sorted(os.path.basename(p) for p in result["files"])
    assert names == ["weekly_findings.csv", "weekly_summary.json"]


def test_export_all_encrypted(tmp_path, analysis):
    key, salt = derive_key_from_password("correct horse battery", b"0" * 16)
    result = export_all(
        analysis, str(tmp_path), formats=["json"], encryption_key=key, salt=salt
    )

    enc_path, salt_path = result["files"]
    assert enc_path.endswith("weekly_findings.json.enc")
    assert salt_path.endswith("weekly.salt")
    with open(salt_path, "rb") as f:
        assert f.read() == salt
    with open(enc_path, "rb") as f:
        data = json.loads(decrypt_data(f.read(), key))
    assert [d["id"] for d in data] == ["1", "2"]


def test_export_all_unknown_format(tmp_path, analysis):
    with pytest.raises(ValueError):
        export_all(analysis, str(tmp_path), formats=["xml"])
