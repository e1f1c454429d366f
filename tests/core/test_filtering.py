#!/usr/bin/env python3
"""
NessusLens - Filter and Sort Tests
Copyright (C) 2026  Dorin Badea
GPLv3 License
"""

import unittest

import pytest

from nessuslens.core.filtering import filter_findings, matches_search, sort_findings
from nessuslens.core.grouping import group_findings_by_cve
from nessuslens.core.models import Finding


@pytest.fixture
def findings(make_finding):
    return [
        make_finding(id="a", severity="4", cve="CVE-2021-44228", plugin_name="Log4Shell"),
        make_finding(id="b", severity="2", exploit_available=True, plugin_name="OpenSSH"),
        make_finding(id="c", risk_factor="Low", compliance=True, plugin_name="CIS Benchmark"),
        make_finding(id="d", severity="0", cve="No CVE", plugin_name="Nessus Scan Info"),
        make_finding(id="e", severity="3", host="web01.local", plugin_name="Apache httpd"),
    ]


@pytest.mark.parametrize(
    "category,expected",
    [
        ("all", ["a", "b", "c", "d", "e"]),
        ("critical", ["a"]),
        ("high", ["e"]),
        ("medium", ["b"]),
        ("low", ["c"]),
        ("info", ["d"]),
        ("exploitable", ["b"]),
        ("compliance", ["c"]),
        ("has_cve", ["a"]),
        ("CRITICAL", ["a"]),
    ],
)
def test_filter_categories(findings, category, expected):
    assert [f.id for f in filter_findings(findings, category)] == expected


def test_filter_unknown_category_raises(findings):
    with pytest.raises(ValueError):
        filter_findings(findings, "bogus")


def test_search_is_case_insensitive_and_combined(findings):
    assert [f.id for f in filter_findings(findings, search_text="log4")] == ["a"]
    assert [f.id for f in filter_findings(findings, search_text="WEB01")] == ["e"]
    assert [f.id for f in filter_findings(findings, "critical", "openssh")] == []


def test_search_matches_plugin_id_and_empty_term(make_finding):
    f = make_finding(plugin_id=19506)
    assert matches_search(f, "1950")
    assert matches_search(f, "   ")


class TestSortFindings(unittest.TestCase):
    def test_stable_for_equal_severity(self):
        items = [Finding(id=str(i), severity="2") for i in range(6)]
        for direction in ("asc", "desc"):
            result = sort_findings(items, "severity", direction)
            self.assertEqual([f.id for f in result], [str(i) for i in range(6)])

    def test_severity_desc(self):
        items = [
            Finding(id="low", severity="1"),
            Finding(id="crit", severity="4"),
            Finding(id="med", severity="2"),
        ]
        self.assertEqual([f.id for f in sort_findings(items)], ["crit", "med", "low"])
        self.assertEqual(
            [f.id for f in sort_findings(items, "severity", "asc")], ["low", "med", "crit"]
        )

    def test_cvss_absent_sorts_as_zero(self):
        items = [
            Finding(id="none"),
            Finding(id="high", cvss_base_score=9.8),
            Finding(id="low", cvss_base_score=2.0),
        ]
        self.assertEqual(
            [f.id for f in sort_findings(items, "cvss_score", "asc")], ["none", "low", "high"]
        )

    def test_cve_missing_sorts_last_ascending(self):
        items = [Finding(id="x"), Finding(id="y", cve="CVE-2"), Finding(id="z", cve="CVE-1")]
        self.assertEqual([f.id for f in sort_findings(items, "cve", "asc")], ["z", "y", "x"])

    def test_host_uses_host_then_ip(self):
        items = [
            Finding(id="1", ip_address="10.0.0.9"),
            Finding(id="2", host="10.0.0.1"),
        ]
        self.assertEqual([f.id for f in sort_findings(items, "host", "asc")], ["2", "1"])

    def test_unknown_field_orders_by_plugin_name(self):
        items = [Finding(id="1", plugin_name="b"), Finding(id="2", plugin_name="a")]
        self.assertEqual([f.id for f in sort_findings(items, "scan_date", "asc")], ["2", "1"])

    def test_invalid_direction(self):
        with self.assertRaises(ValueError):
            sort_findings([], "severity", "sideways")

    def test_headers_stay_first(self):
        items = [
            Finding(id="1", plugin_id=1, severity="4", cve="CVE-1"),
            Finding(id="2", plugin_id=2, severity="1", cve="CVE-2"),
        ]
        grouped = group_findings_by_cve(items)
        result = sort_findings(grouped, "severity", "asc")
        self.assertEqual(
            [f.is_cve_header for f in result], [True, True, False, False]
        )
        self.assertEqual([f.id for f in result[2:]], ["2", "1"])
