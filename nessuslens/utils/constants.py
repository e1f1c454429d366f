#!/usr/bin/env python3
"""
NessusLens - Constants and Configuration
Copyright (C) 2026  Dorin Badea
GPLv3 License
"""

# Version
VERSION = "1.2.0"
SCHEMA_VERSION = "1.1"  # Export schema version (may differ from app version)

# Normalized severity scale (0..4)
SEVERITY_CRITICAL = 4
SEVERITY_HIGH = 3
SEVERITY_MEDIUM = 2
SEVERITY_LOW = 1
SEVERITY_INFO = 0

# Textual risk factors recognized by the normalizer. Keys are lower-case.
RISK_FACTOR_SCORES = {
    "critical": SEVERITY_CRITICAL,
    "high": SEVERITY_HIGH,
    "medium": SEVERITY_MEDIUM,
    "low": SEVERITY_LOW,
    "none": SEVERITY_INFO,
}

SEVERITY_LABELS = {
    SEVERITY_CRITICAL: "Critical",
    SEVERITY_HIGH: "High",
    SEVERITY_MEDIUM: "Medium",
    SEVERITY_LOW: "Low",
    SEVERITY_INFO: "Info",
}
UNKNOWN_SEVERITY_LABEL = "Unknown"

# Rich styles used when rendering severity labels
SEVERITY_STYLES = {
    "Critical": "bold bright_red",
    "High": "bright_red",
    "Medium": "bright_yellow",
    "Low": "bright_blue",
    "Info": "bright_black",
}

# CVSS color bands (lower bound, hex color), checked top-down
CVSS_COLOR_BANDS = (
    (9.0, "#dc2626"),  # red
    (7.0, "#ea580c"),  # orange
    (4.0, "#d97706"),  # amber
)
CVSS_COLOR_LOW = "#65a30d"  # green
CVSS_COLOR_NONE = "#6b7280"  # gray
CVSS_MIN = 0.0
CVSS_MAX = 10.0

# CVE grouping
NO_CVE_KEY = "No CVE"
CVE_HEADER_ID_PREFIX = "cve-header-"
CVE_HEADER_HOSTS_SHOWN = 3

# Host aggregation fallback key
UNKNOWN_HOST_KEY = "unknown"

# Risk scoring
EXPLOIT_MULTIPLIER = 1.5

# Filtering / sorting
FILTER_TYPES = (
    "all",
    "critical",
    "high",
    "medium",
    "low",
    "info",
    "exploitable",
    "compliance",
    "has_cve",
)
SORT_FIELDS = (
    "severity",
    "cvss_score",
    "host",
    "plugin_name",
    "plugin_family",
    "port",
    "risk_factor",
    "cve",
    "scan_date",
)
SORT_DIRECTIONS = ("asc", "desc")
DEFAULT_SORT_FIELD = "severity"
DEFAULT_SORT_DIRECTION = "desc"
CVE_SORT_PLACEHOLDER = "zzzz"  # Findings without CVE sort after any CVE id

# Plugin-name marker used to estimate credentialed coverage
CREDENTIALED_PLUGIN_MARKER = "authenticated"

# CSV export column order
CSV_HEADERS = [
    "Plugin ID",
    "Plugin Name",
    "Plugin Family",
    "Severity",
    "CVSS Score",
    "CVE",
    "Host",
    "Port",
    "Protocol",
    "Synopsis",
    "Description",
    "Solution",
]

EXPORT_FORMATS = ("csv", "json", "jsonl", "summary")
DEFAULT_EXPORT_FORMATS = ["csv", "json"]

# Loader defaults
DEFAULT_WORKERS = 4
MAX_WORKERS = 16
MIN_WORKERS = 1

# Encryption parameters
PBKDF2_ITERATIONS = 480000
SALT_SIZE = 16
MIN_PASSWORD_LENGTH = 12

# Console rendering
MAX_ROWS_DISPLAY = 200

# File permissions
SECURE_FILE_MODE = 0o600
