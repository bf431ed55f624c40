"""Stable contract surface for covagg.

Filenames, attribute names and schema version shared by producers of
artifact manifests and consumers of the coverage report.
"""

from contract.artifacts import (
    ARTIFACT_SCHEMA_VERSION,
    ARTIFACTS_MANIFEST,
    ATTRIBUTE_VALUE_PATTERN,
    CATEGORY_ATTRIBUTE,
    COVERAGE_REPORT_JSON,
    COVERAGE_RESULTS,
    DEFAULT_TEST_SUITE,
    TEST_SUITE_NAME_ATTRIBUTE,
    VERIFICATION,
    VERIFICATION_TYPE_ATTRIBUTE,
)

__all__ = [
    "ARTIFACTS_MANIFEST",
    "ARTIFACT_SCHEMA_VERSION",
    "ATTRIBUTE_VALUE_PATTERN",
    "CATEGORY_ATTRIBUTE",
    "COVERAGE_REPORT_JSON",
    "COVERAGE_RESULTS",
    "DEFAULT_TEST_SUITE",
    "TEST_SUITE_NAME_ATTRIBUTE",
    "VERIFICATION",
    "VERIFICATION_TYPE_ATTRIBUTE",
]
