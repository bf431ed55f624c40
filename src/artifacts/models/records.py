"""Artifact manifest records.

Each line of a manifest describes one coverage data file produced by a
component, together with the attributes used to select it.
"""

from __future__ import annotations

from pathlib import PurePosixPath

from pydantic import BaseModel, ConfigDict, Field, field_validator

from contract.artifacts import (
    CATEGORY_ATTRIBUTE,
    TEST_SUITE_NAME_ATTRIBUTE,
    VERIFICATION,
    VERIFICATION_TYPE_ATTRIBUTE,
)


def _artifact_schema_version() -> int:
    from contract.artifacts import ARTIFACT_SCHEMA_VERSION

    return ARTIFACT_SCHEMA_VERSION


class ArtifactRecord(BaseModel):
    """A produced artifact as written to a component manifest."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    schema_version: int = Field(default_factory=_artifact_schema_version)
    path: str = Field(description="POSIX path relative to the component directory")
    category: str = Field(default=VERIFICATION)
    verification_type: str
    test_suite_name: str

    @field_validator("path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        if not v:
            msg = "path must be non-empty"
            raise ValueError(msg)
        pure = PurePosixPath(v)
        if pure.is_absolute() or ".." in pure.parts:
            msg = f"path '{v}' must be relative and stay within the component"
            raise ValueError(msg)
        return pure.as_posix()

    def attributes(self) -> dict[str, str]:
        return {
            CATEGORY_ATTRIBUTE: self.category,
            VERIFICATION_TYPE_ATTRIBUTE: self.verification_type,
            TEST_SUITE_NAME_ATTRIBUTE: self.test_suite_name,
        }


__all__ = ["ArtifactRecord"]
