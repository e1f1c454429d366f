#!/usr/bin/env python3
"""
NessusLens - CVE Field Helper Tests
"""

from nessuslens.core.cve import extract_cves, is_cve_placeholder


def test_extract_trims_and_drops_empty_segments():
    assert extract_cves("CVE-2020-1,  CVE-2020-2 ,") == ["CVE-2020-1", "CVE-2020-2"]


def test_extract_empty_and_missing():
    assert extract_cves("") == []
    assert extract_cves(None) == []
    assert extract_cves(" , ,") == []


def test_extract_keeps_first_seen_order_without_duplicates():
    assert extract_cves("CVE-3, CVE-1, CVE-3, CVE-2") == ["CVE-3", "CVE-1", "CVE-2"]


def test_extract_ignores_non_string():
    assert extract_cves(123) == []
    assert extract_cves(["CVE-1"]) == []


def test_placeholder_detection():
    assert is_cve_placeholder("No CVE")
    assert is_cve_placeholder(" no cve ")
    assert not is_cve_placeholder("CVE-2021-44228")
