"""
Centralized pytest fixtures for the NessusLens test suite.

Findings are built through Finding.from_dict so tests exercise the same
coercion path as importer records.
"""

import json

import pytest

from nessuslens.core.models import Finding


def build_finding(**overrides):
    record = {
        "id": overrides.pop("id", "f-1"),
        "scan_id": "scan-1",
        "plugin_id": 10001,
        "plugin_name": "Test Plugin",
        "plugin_family": "General",
        "host": "10.0.0.1",
    }
    record.update(overrides)
    return Finding.from_dict(record)


@pytest.fixture
def make_finding():
    """Factory fixture: make_finding(severity="3", cve="CVE-1", ...)."""
    return build_finding


@pytest.fixture
def write_scan(tmp_path):
    """Write a scan document and return its path as a string."""

    def _write(name, findings, scan=None):
        path = tmp_path / name
        if name.endswith(".jsonl"):
            path.write_text("\n".join(json.dumps(f) for f in findings) + "\n", encoding="utf-8")
        elif scan is None:
            path.write_text(json.dumps(findings), encoding="utf-8")
        else:
            path.write_text(json.dumps({"scan": scan, "findings": findings}), encoding="utf-8")
        return str(path)

    return _write


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Keep config and log files out of the real home directory."""
    home = tmp_path / "nessuslens_home"
    monkeypatch.setenv("NESSUSLENS_HOME", str(home))
    return home
