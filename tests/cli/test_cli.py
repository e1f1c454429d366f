#!/usr/bin/env python3
"""
NessusLens - CLI Tests
Copyright (C) 2026  Dorin Badea
GPLv3 License
"""

import json
import os

import pytest

from nessuslens import cli
from nessuslens.utils.config import get_persistent_defaults

BASELINE = [
    {"id": "1", "plugin_id": 1, "plugin_name": "SMB Signing", "host": "10.0.0.1", "severity": "2"},
    {"id": "2", "plugin_id": 2, "plugin_name": "Old TLS", "host": "10.0.0.1", "severity": "1"},
]

LATEST = [
    {"id": "1", "plugin_id": 1, "plugin_name": "SMB Signing", "host": "10.0.0.1", "severity": "4"},
    {
        "id": "3",
        "plugin_id": 3,
        "plugin_name": "Log4Shell",
        "host": "10.0.0.2",
        "risk_factor": "Critical",
        "cve": "CVE-2021-44228,CVE-2021-45046",
    },
]


@pytest.fixture(autouse=True)
def wide_console(monkeypatch):
    monkeypatch.setenv("COLUMNS", "200")


def test_parse_arguments_defaults():
    args = cli.parse_arguments(["scan.json"])
    assert args.scans == ["scan.json"]
    assert args.sort == "severity"
    assert args.order == "desc"
    assert args.filter == "all"
    assert args.formats == ["csv", "json"]
    assert args.workers == 4


def test_parse_arguments_uses_persisted_defaults():
    from nessuslens.utils.config import update_persistent_defaults

    update_persistent_defaults(sort_field="host", filter="nonsense", max_workers=99)
    args = cli.parse_arguments(["scan.json"])
    assert args.sort == "host"
    assert args.filter == "all"
    assert args.workers == 4


@pytest.mark.parametrize(
    "argv",
    [
        [],
        ["scan.json", "--workers", "0"],
        ["scan.json", "--formats", "csv,xml"],
        ["scan.json", "--encrypt-password", "short"],
        ["scan.json", "--filter", "urgent"],
    ],
)
def test_parse_arguments_rejects_invalid(argv):
    with pytest.raises(SystemExit):
        cli.parse_arguments(argv)


def test_main_analysis_prints_tables(write_scan, capsys):
    path = write_scan("latest.json", LATEST)
    assert cli.main([path, "--hosts", "--group-by-cve"]) == 0

    out = capsys.readouterr().out
    assert "Scan: latest.json" in out
    assert "CVE-2021-44228" in out
    assert "10.0.0.2" in out


def test_main_exports_filtered_findings(write_scan, tmp_path, capsys):
    path = write_scan("latest.json", LATEST)
    out_dir = tmp_path / "exports"
    rc = cli.main(
        [path, "--filter", "critical", "--export-dir", str(out_dir), "--formats", "json,summary"]
    )
    assert rc == 0

    with open(out_dir / "latest_findings.json", encoding="utf-8") as f:
        exported = json.load(f)
    assert sorted(e["id"] for e in exported) == ["1", "3"]
    with open(out_dir / "latest_summary.json", encoding="utf-8") as f:
        assert json.load(f)["total_findings"] == 2
    assert "Saved:" in capsys.readouterr().out


def test_main_reports_failed_scans(write_scan, tmp_path, capsys):
    good = write_scan("good.json", BASELINE)
    missing = str(tmp_path / "missing.json")
    assert cli.main([good, missing, "--no-findings"]) == 0

    out = capsys.readouterr().out
    assert "[FAIL]" in out
    assert "1 scan(s) could not be loaded" in out


def test_main_all_scans_fail(tmp_path):
    assert cli.main([str(tmp_path / "missing.json")]) == 1


def test_main_diff_text_and_markdown(write_scan, tmp_path, capsys):
    old = write_scan("old.json", BASELINE)
    new = write_scan("new.json", LATEST)
    md_path = tmp_path / "diff.md"

    assert cli.main(["--diff", old, new, "--diff-markdown", str(md_path)]) == 0

    out = capsys.readouterr().out
    assert "NEW FINDINGS" in out
    assert "RESOLVED FINDINGS" in out
    assert "Medium -> Critical" in out
    assert md_path.read_text(encoding="utf-8").startswith("# NessusLens Scan Comparison Report")


def test_main_diff_missing_scan(write_scan, tmp_path):
    old = write_scan("old.json", BASELINE)
    assert cli.main(["--diff", old, str(tmp_path / "nope.json")]) == 1


def test_main_save_defaults(write_scan):
    path = write_scan("a.json", BASELINE)
    assert cli.main([path, "--sort", "cvss_score", "--order", "asc", "--save-defaults"]) == 0

    defaults = get_persistent_defaults()
    assert defaults["sort_field"] == "cvss_score"
    assert defaults["sort_direction"] == "asc"


def test_main_encrypted_export(write_scan, tmp_path):
    path = write_scan("enc.json", BASELINE)
    out_dir = tmp_path / "enc"
    rc = cli.main(
        [
            path,
            "--no-findings",
            "--export-dir",
            str(out_dir),
            "--formats",
            "csv",
            "--encrypt",
            "--encrypt-password",
            "a sufficiently long pass",
        ]
    )
    assert rc == 0
    assert sorted(os.listdir(out_dir)) == ["enc.salt", "enc_findings.csv.enc"]
