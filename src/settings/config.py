from __future__ import annotations

from pathlib import Path, PurePosixPath
from typing import Any

import tomllib
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from contract.artifacts import (
    ATTRIBUTE_VALUE_PATTERN,
    COVERAGE_RESULTS,
    DEFAULT_TEST_SUITE,
    VERIFICATION,
)
from graph.models import MODULE_NAME_PATTERN, Dependency, parse_dependency

CONFIG_FILENAME = "covagg.toml"


class _StrictModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


def _validate_notations(v: Any) -> Any:
    if v is None:
        return []
    if not isinstance(v, list):
        msg = "dependencies must be a list of dependency notations"
        raise ValueError(msg)
    for notation in v:
        if not isinstance(notation, str):
            msg = "dependencies must be a list of str"
            raise ValueError(msg)
        parse_dependency(notation)
    return v


def validate_suite_name(name: str) -> str:
    """Return name if it is a valid test suite name, else raise ValueError."""
    if not ATTRIBUTE_VALUE_PATTERN.match(name):
        msg = f"Invalid test suite name '{name}'"
        raise ValueError(msg)
    return name


class ModuleDecl(_StrictModel):
    """Declaration of a single module of the build."""

    name: str = Field(description="Module name, unique within the build")
    group: str = Field(description="Group identifier (e.g., 'org.hiero')")
    path: str | None = Field(
        default=None,
        description="Module directory relative to the root (default: name)",
    )
    dependencies: list[str] = Field(
        default_factory=list,
        description="Dependency notations (':module' or 'group:name[:version]')",
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not MODULE_NAME_PATTERN.match(v):
            msg = f"Invalid module name '{v}'"
            raise ValueError(msg)
        return v

    @field_validator("group")
    @classmethod
    def validate_group(cls, v: str) -> str:
        if not v.strip():
            msg = "group must be a non-empty identifier"
            raise ValueError(msg)
        return v

    @field_validator("path")
    @classmethod
    def validate_path(cls, v: str | None) -> str | None:
        if v is None:
            return v
        pure = PurePosixPath(v)
        if not v.strip() or pure.is_absolute() or ".." in pure.parts:
            msg = f"Module path '{v}' must be relative and stay within the root"
            raise ValueError(msg)
        return pure.as_posix()

    @field_validator("dependencies", mode="before")
    @classmethod
    def validate_dependencies(cls, v: Any) -> Any:
        return _validate_notations(v)

    @property
    def directory(self) -> str:
        return self.path if self.path is not None else self.name

    def parsed_dependencies(self) -> tuple[Dependency, ...]:
        return tuple(parse_dependency(n) for n in self.dependencies)


class AggregationConfig(_StrictModel):
    """The aggregating unit: what it depends on and which results it collects."""

    dependencies: list[str] = Field(
        default_factory=list,
        description="Dependency notations of the aggregating unit",
    )
    suites: list[str] = Field(
        default_factory=lambda: [DEFAULT_TEST_SUITE],
        description="Test suites whose coverage results are aggregated",
    )
    category: str = Field(default=VERIFICATION)
    verification_type: str = Field(default=COVERAGE_RESULTS)

    @field_validator("dependencies", mode="before")
    @classmethod
    def validate_dependencies(cls, v: Any) -> Any:
        return _validate_notations(v)

    @field_validator("suites")
    @classmethod
    def validate_suites(cls, v: list[str]) -> list[str]:
        return [validate_suite_name(name) for name in v]

    @field_validator("category", "verification_type")
    @classmethod
    def validate_attribute_value(cls, v: str) -> str:
        if not ATTRIBUTE_VALUE_PATTERN.match(v):
            msg = f"Invalid attribute value '{v}'"
            raise ValueError(msg)
        return v

    def parsed_dependencies(self) -> tuple[Dependency, ...]:
        return tuple(parse_dependency(n) for n in self.dependencies)


class RecordConfig(_StrictModel):
    """Data file patterns used when recording a module's results."""

    include: list[str] = Field(
        default_factory=lambda: [".coverage*", "*.coverage"],
        description="fnmatch patterns for data files to record",
    )
    exclude: list[str] = Field(
        default_factory=list,
        description="fnmatch patterns for data files to skip",
    )


class RepositoryConfig(_StrictModel):
    """Local repository holding manifests of external libraries."""

    path: str | None = Field(
        default=None,
        description="Directory laid out as <group>/<name>/covagg-artifacts.jsonl",
    )


class CovaggConfig(_StrictModel):
    """Settings for a covagg workspace."""

    root_project: str | None = Field(default=None, description="Root project name")
    output_dir: str = Field(
        default=".covagg",
        description="Output directory for the aggregate report",
    )
    build_dir: str = Field(
        default="build",
        description="Per-module build directory holding results and manifest",
    )
    included_builds: list[str] = Field(
        default_factory=list,
        description="Independently built sub-repositories (never aggregated)",
    )
    modules: list[ModuleDecl] = Field(default_factory=list)
    aggregation: AggregationConfig = Field(default_factory=AggregationConfig)
    record: RecordConfig = Field(default_factory=RecordConfig)
    repository: RepositoryConfig = Field(default_factory=RepositoryConfig)

    @model_validator(mode="after")
    def validate_unique_modules(self) -> CovaggConfig:
        seen: set[str] = set()
        for module in self.modules:
            if module.name in seen:
                msg = f"Module '{module.name}' is declared more than once"
                raise ValueError(msg)
            seen.add(module.name)
        return self

    def module_names(self) -> list[str]:
        return [module.name for module in self.modules]


class ConfigError(Exception):
    """Raised when settings are invalid or cannot be parsed."""


def resolve_output_dir(root: Path, output_dir: str) -> Path:
    """Resolve a config-provided output_dir safely within the repo root.

    The config output_dir must be a non-empty relative path that remains
    within the repository root after resolution. Absolute paths and paths
    that escape the root are rejected.
    """
    if not output_dir:
        msg = "output_dir must be a non-empty relative path"
        raise ConfigError(msg)

    if output_dir.startswith("~"):
        msg = "output_dir must be a relative path within the repo root"
        raise ConfigError(msg)

    output_path = Path(output_dir)
    if output_path.is_absolute():
        msg = "output_dir must be a relative path within the repo root"
        raise ConfigError(msg)

    try:
        resolved_root = root.resolve()
        resolved_output = (resolved_root / output_path).resolve()
    except OSError as exc:
        msg = f"Failed to resolve output_dir '{output_dir}': {exc}"
        raise ConfigError(msg) from exc

    try:
        resolved_output.relative_to(resolved_root)
    except ValueError as exc:
        msg = f"output_dir '{output_dir}' escapes the repository root"
        raise ConfigError(msg) from exc

    return resolved_output


def load_config(root: Path) -> CovaggConfig:
    """Load configuration from covagg.toml if it exists."""
    config_path = Path(root) / CONFIG_FILENAME

    if not config_path.is_file():
        return CovaggConfig()

    try:
        with config_path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {config_path}: {e}"
        raise ConfigError(msg) from e

    try:
        return CovaggConfig.model_validate(data)
    except Exception as e:
        msg = f"Invalid config in {config_path}: {e}"
        raise ConfigError(msg) from e
