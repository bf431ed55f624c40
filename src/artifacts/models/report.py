"""Aggregate coverage report model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


def _artifact_schema_version() -> int:
    from contract.artifacts import ARTIFACT_SCHEMA_VERSION

    return ARTIFACT_SCHEMA_VERSION


class CoverageReport(BaseModel):
    """Coverage data files per member module.

    File paths are POSIX paths relative to the workspace root, sorted. Every
    member module has an entry, possibly empty.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    schema_version: int = Field(default_factory=_artifact_schema_version)
    suites: tuple[str, ...] = Field(default_factory=tuple)
    modules: dict[str, tuple[str, ...]] = Field(default_factory=dict)
    excluded_components: tuple[str, ...] = Field(default_factory=tuple)

    @classmethod
    def build(
        cls,
        *,
        suites: set[str],
        modules: dict[str, set[str]],
        excluded_components: set[str],
    ) -> CoverageReport:
        """Build a report from unordered collections, normalizing order."""
        return cls(
            suites=tuple(sorted(suites)),
            modules={
                name: tuple(sorted(files)) for name, files in sorted(modules.items())
            },
            excluded_components=tuple(sorted(excluded_components)),
        )

    @property
    def file_count(self) -> int:
        return sum(len(files) for files in self.modules.values())

    def merge(self, other: CoverageReport) -> CoverageReport:
        """Return a new report holding the union of both reports."""
        modules: dict[str, set[str]] = {
            name: set(files) for name, files in self.modules.items()
        }
        for name, files in other.modules.items():
            modules.setdefault(name, set()).update(files)
        return CoverageReport.build(
            suites=set(self.suites) | set(other.suites),
            modules=modules,
            excluded_components=set(self.excluded_components)
            | set(other.excluded_components),
        )


__all__ = ["CoverageReport"]
