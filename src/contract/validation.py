"""Validation helpers for artifact manifests."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import orjson
from pydantic import ValidationError

from artifacts.models.records import ArtifactRecord
from contract.artifacts import ARTIFACT_SCHEMA_VERSION, ARTIFACTS_MANIFEST
from graph.models import ModuleComponentId, parse_dependency
from settings.config import load_config

if TYPE_CHECKING:
    from pathlib import Path

    from settings.config import CovaggConfig


@dataclass(frozen=True)
class ValidationMessage:
    component: str
    path: Path
    message: str
    line: int | None = None

    def location(self) -> str:
        if self.line is None:
            return str(self.path)
        return f"{self.path}:{self.line}"

    def to_dict(self) -> dict[str, object]:
        return {
            "component": self.component,
            "path": str(self.path),
            "line": self.line,
            "message": self.message,
        }


@dataclass
class ValidationResult:
    errors: list[ValidationMessage] = field(default_factory=list)
    warnings: list[ValidationMessage] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def _external_components(config: CovaggConfig) -> list[ModuleComponentId]:
    notations = [n for decl in config.modules for n in decl.dependencies]
    notations.extend(config.aggregation.dependencies)
    found = {
        dep.component
        for dep in map(parse_dependency, notations)
        if isinstance(dep.component, ModuleComponentId)
    }
    return sorted(found, key=str)


def validate_manifests(
    root: Path,
    *,
    config: CovaggConfig | None = None,
    strict_schema_version: bool = False,
) -> ValidationResult:
    """Validate the artifact manifests of every declared component.

    Modules without a manifest are fine; a declared module without a
    directory is an error.
    """
    if config is None:
        config = load_config(root)

    result = ValidationResult()

    for decl in config.modules:
        module_dir = root / decl.directory
        component = f":{decl.name}"
        if not module_dir.is_dir():
            result.errors.append(
                ValidationMessage(
                    component=component,
                    path=module_dir,
                    message="Module directory does not exist.",
                )
            )
            continue
        _validate_manifest(
            component,
            module_dir / config.build_dir,
            result,
            strict_schema_version=strict_schema_version,
        )

    if config.repository.path is not None:
        repository = root / config.repository.path
        for external in _external_components(config):
            _validate_manifest(
                str(external),
                repository / external.group / external.name,
                result,
                strict_schema_version=strict_schema_version,
            )

    return result


def _validate_manifest(
    component: str,
    component_dir: Path,
    result: ValidationResult,
    *,
    strict_schema_version: bool,
) -> None:
    path = component_dir / ARTIFACTS_MANIFEST
    if not path.exists():
        return

    try:
        handle = path.open("rb")
    except OSError as exc:
        result.errors.append(
            ValidationMessage(
                component=component,
                path=path,
                message=f"Failed to read file: {exc}.",
            )
        )
        return

    missing_schema_emitted = False
    with handle:
        for line_number, raw_line in enumerate(handle, 1):
            line = raw_line.strip()
            if not line:
                continue
            try:
                data = orjson.loads(line)
            except orjson.JSONDecodeError as exc:
                result.errors.append(
                    ValidationMessage(
                        component=component,
                        path=path,
                        line=line_number,
                        message=f"Invalid JSON: {exc}.",
                    )
                )
                continue

            schema_present = isinstance(data, dict) and "schema_version" in data
            try:
                record = ArtifactRecord.model_validate(data)
            except ValidationError as exc:
                result.errors.append(
                    ValidationMessage(
                        component=component,
                        path=path,
                        line=line_number,
                        message=f"Schema validation failed: {exc}.",
                    )
                )
                continue

            if not schema_present and not missing_schema_emitted:
                _check_schema_version(
                    component,
                    path,
                    line_number,
                    schema_present,
                    record.schema_version,
                    result,
                    strict_schema_version=strict_schema_version,
                )
                missing_schema_emitted = True
            elif schema_present:
                _check_schema_version(
                    component,
                    path,
                    line_number,
                    schema_present,
                    record.schema_version,
                    result,
                    strict_schema_version=strict_schema_version,
                )

            if not (component_dir / record.path).is_file():
                result.warnings.append(
                    ValidationMessage(
                        component=component,
                        path=path,
                        line=line_number,
                        message=f"Data file does not exist: {record.path}.",
                    )
                )


def _check_schema_version(
    component: str,
    path: Path,
    line: int | None,
    schema_present: bool,
    schema_version: int,
    result: ValidationResult,
    *,
    strict_schema_version: bool,
) -> None:
    if schema_present and schema_version != ARTIFACT_SCHEMA_VERSION:
        result.errors.append(
            ValidationMessage(
                component=component,
                path=path,
                line=line,
                message=(
                    "Schema version mismatch: "
                    f"expected {ARTIFACT_SCHEMA_VERSION}, got {schema_version}."
                ),
            )
        )
        return

    if not schema_present:
        message = f"Missing schema_version; defaulted to {ARTIFACT_SCHEMA_VERSION}."
        if strict_schema_version:
            result.errors.append(
                ValidationMessage(
                    component=component,
                    path=path,
                    line=line,
                    message=message,
                )
            )
        else:
            result.warnings.append(
                ValidationMessage(
                    component=component,
                    path=path,
                    line=line,
                    message=message,
                )
            )


__all__ = [
    "ValidationMessage",
    "ValidationResult",
    "validate_manifests",
]
