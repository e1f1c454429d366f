#!/usr/bin/env python3
"""
NessusLens - Data Model Tests
Copyright (C) 2026  Dorin Badea
GPLv3 License
"""

import unittest

from nessuslens.core.models import Finding, ScanMeta


class TestFindingFromDict(unittest.TestCase):
    def test_coerces_loose_types(self):
        f = Finding.from_dict(
            {
                "id": 7,
                "plugin_id": "19506",
                "port": "443",
                "cvss_base_score": "7.5",
                "exploit_available": "true",
                "compliance": 0,
                "severity": 3,
            }
        )
        self.assertEqual(f.id, "7")
        self.assertEqual(f.plugin_id, 19506)
        self.assertEqual(f.port, 443)
        self.assertEqual(f.cvss_base_score, 7.5)
        self.assertTrue(f.exploit_available)
        self.assertFalse(f.compliance)
        self.assertEqual(f.severity, 3)

    def test_out_of_range_or_invalid_cvss_is_absent(self):
        self.assertIsNone(Finding.from_dict({"cvss_base_score": "11"}).cvss_base_score)
        self.assertIsNone(Finding.from_dict({"cvss_base_score": "n/a"}).cvss_base_score)
        self.assertIsNone(Finding.from_dict({"cvss_base_score": float("nan")}).cvss_base_score)

    def test_boolean_severity_is_dropped(self):
        self.assertIsNone(Finding.from_dict({"severity": True}).severity)

    def test_non_finite_numbers_are_absent(self):
        f = Finding.from_dict({"plugin_id": "inf", "port": float("inf"), "host": "h"})
        self.assertIsNone(f.plugin_id)
        self.assertIsNone(f.port)
        self.assertIsNone(Finding.from_dict({"port": "-Infinity"}).port)
        self.assertIsNone(Finding.from_dict({"cve_group_size": float("nan")}).cve_group_size)

    def test_whole_number_float_severity(self):
        f = Finding.from_dict({"severity": 3.0})
        self.assertEqual(f.severity, 3)
        self.assertEqual(f.severity_score, 3)
        self.assertEqual(Finding.from_dict({"severity": 2.5}).severity_score, 0)

    def test_unknown_keys_round_trip_through_extra(self):
        f = Finding.from_dict({"id": "a", "see_also": "https://example.test"})
        self.assertEqual(f.extra, {"see_also": "https://example.test"})
        data = f.to_dict()
        self.assertEqual(data["see_also"], "https://example.test")
        self.assertNotIn("extra", data)

    def test_extra_never_overrides_modeled_fields(self):
        f = Finding.from_dict({"id": "a", "extra": {"id": "shadow"}})
        self.assertEqual(f.to_dict()["id"], "a")


class TestFindingProperties(unittest.TestCase):
    def test_host_key_fallbacks(self):
        self.assertEqual(Finding(host="h", hostname="n", ip_address="1.1.1.1").host_key, "h")
        self.assertEqual(Finding(hostname="n", ip_address="1.1.1.1").host_key, "n")
        self.assertEqual(Finding(ip_address="1.1.1.1").host_key, "1.1.1.1")
        self.assertEqual(Finding().host_key, "unknown")

    def test_display_host_skips_hostname(self):
        self.assertEqual(Finding(hostname="n", ip_address="1.1.1.1").display_host, "1.1.1.1")
        self.assertEqual(Finding(hostname="n").display_host, "")

    def test_severity_properties(self):
        f = Finding(severity="2", risk_factor="Critical")
        self.assertEqual(f.severity_score, 4)
        self.assertEqual(f.severity_label, "Critical")

    def test_cves_property(self):
        self.assertEqual(Finding(cve="CVE-1, CVE-2").cves, ["CVE-1", "CVE-2"])


def test_scan_meta_from_dict_defaults():
    meta = ScanMeta.from_dict({"id": 5, "scan_info": "bad"})
    assert meta.id == "5"
    assert meta.name == ""
    assert meta.scan_info == {}
    assert meta.to_dict()["id"] == "5"
