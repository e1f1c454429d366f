#!/usr/bin/env python3
"""
NessusLens - Risk Scoring Module
Copyright (C) 2026  Dorin Badea
GPLv3 License
"""

from typing import Iterable

from nessuslens.core.models import Finding
from nessuslens.utils.constants import EXPLOIT_MULTIPLIER


def finding_risk(finding: Finding) -> float:
    """Weighted risk contribution of a single finding."""
    cvss_multiplier = finding.cvss_base_score / 10 if finding.cvss_base_score else 1.0
    exploit_multiplier = EXPLOIT_MULTIPLIER if finding.exploit_available else 1.0
    return finding.severity_score * cvss_multiplier * exploit_multiplier


def calculate_risk_score(findings: Iterable[Finding]) -> float:
    """
    Aggregate weighted risk score for a finding set.

    Per finding: severity (0..4) x CVSS/10 (1 when absent) x 1.5 when an
    exploit is available. The total is a plain sum, so it is a relative
    ranking signal rather than a bounded percentage, and never decreases
    when findings are added.

    Args:
        findings: Finding collection

    Returns:
        Risk score >= 0 (0.0 for an empty collection)
    """
    return float(sum(finding_risk(f) for f in findings if not f.is_cve_header))
