"""Artifact contract definitions.

This module defines the stable filenames, attribute names and attribute values
shared by the recorder, the build graph and the aggregator.
"""

from __future__ import annotations

import re

# Manifest/report schema version.
ARTIFACT_SCHEMA_VERSION = 1

# Stable filenames.
ARTIFACTS_MANIFEST = "covagg-artifacts.jsonl"
COVERAGE_REPORT_JSON = "coverage_report.json"

# ---------------------------------------------------------------------------
# Attribute names and well-known values
# ---------------------------------------------------------------------------
CATEGORY_ATTRIBUTE = "category"
VERIFICATION_TYPE_ATTRIBUTE = "verification-type"
TEST_SUITE_NAME_ATTRIBUTE = "test-suite-name"

VERIFICATION = "verification"
COVERAGE_RESULTS = "coverage-results"
DEFAULT_TEST_SUITE = "test"

# Suite names and attribute values, also used as directory names.
ATTRIBUTE_VALUE_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")
