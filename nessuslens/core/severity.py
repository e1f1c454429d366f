#!/usr/bin/env python3
"""
NessusLens - Severity Normalization Module
Copyright (C) 2026  Dorin Badea
GPLv3 License

Maps the two overlapping severity sources found in scan findings (numeric
severity code and textual risk factor) onto one 0..4 ordinal scale.
"""

from typing import Any, Optional

from nessuslens.utils.constants import (
    CVSS_COLOR_BANDS,
    CVSS_COLOR_LOW,
    CVSS_COLOR_NONE,
    RISK_FACTOR_SCORES,
    SEVERITY_INFO,
    SEVERITY_LABELS,
    UNKNOWN_SEVERITY_LABEL,
)


def _score_from_risk_factor(raw_risk_factor: Any) -> Optional[int]:
    if not isinstance(raw_risk_factor, str):
        return None
    return RISK_FACTOR_SCORES.get(raw_risk_factor.strip().lower())


def _score_from_severity(raw_severity: Any) -> Optional[int]:
    if raw_severity is None or isinstance(raw_severity, bool):
        return None
    if isinstance(raw_severity, int):
        value = raw_severity
    elif isinstance(raw_severity, str):
        text = raw_severity.strip()
        if not text.isdecimal():
            return None
        value = int(text)
    else:
        return None
    return value if value in SEVERITY_LABELS else None


def severity_score(raw_severity: Any = None, raw_risk_factor: Any = None) -> int:
    """
    Normalize a finding's severity to the 0..4 scale.

    Precedence:
    1. Risk factor (critical/high/medium/low/none, any case) -> 4/3/2/1/0
    2. Raw severity code 0..4 (int or numeric text)
    3. Info (0)

    Never raises; unrecognized or out-of-range inputs fall through to the next rule.

    Args:
        raw_severity: Numeric severity code as reported by the scanner
        raw_risk_factor: Textual risk factor label

    Returns:
        Integer score in 0..4
    """
    score = _score_from_risk_factor(raw_risk_factor)
    if score is not None:
        return score
    score = _score_from_severity(raw_severity)
    if score is not None:
        return score
    return SEVERITY_INFO


def severity_label(score: int) -> str:
    """Presentation label for a normalized score (Critical..Info)."""
    return SEVERITY_LABELS.get(score, UNKNOWN_SEVERITY_LABEL)


def cvss_color(score: Optional[float]) -> str:
    """
    Hex color band for a CVSS base score.

    Absent or zero scores are gray; otherwise red/orange/amber/green by band.
    """
    if not score:
        return CVSS_COLOR_NONE
    for lower_bound, color in CVSS_COLOR_BANDS:
        if score >= lower_bound:
            return color
    return CVSS_COLOR_LOW
