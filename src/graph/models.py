"""Build graph value types.

Component identifiers carry the provenance of every artifact: a
``ProjectComponentId`` for modules declared in the workspace settings, a
``ModuleComponentId`` for external published libraries.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

MODULE_NAME_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")
_COORDINATE_PART = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._+-]*$")


@dataclass(frozen=True, order=True)
class ProjectComponentId:
    """A component built from a module of this workspace."""

    module: str

    def __str__(self) -> str:
        return f":{self.module}"


@dataclass(frozen=True, order=True)
class ModuleComponentId:
    """An external component resolved from a repository."""

    group: str
    name: str
    version: str | None = None

    def __str__(self) -> str:
        if self.version is None:
            return f"{self.group}:{self.name}"
        return f"{self.group}:{self.name}:{self.version}"


ComponentId = Union[ProjectComponentId, ModuleComponentId]


@dataclass(frozen=True)
class ProjectDependency:
    module: str

    @property
    def component(self) -> ProjectComponentId:
        return ProjectComponentId(self.module)

    def __str__(self) -> str:
        return f":{self.module}"


@dataclass(frozen=True)
class ExternalDependency:
    group: str
    name: str
    version: str | None = None

    @property
    def component(self) -> ModuleComponentId:
        return ModuleComponentId(self.group, self.name, self.version)

    def __str__(self) -> str:
        return str(self.component)


Dependency = Union[ProjectDependency, ExternalDependency]


def parse_dependency(notation: str) -> Dependency:
    """Parse a dependency notation.

    Examples:
        >>> parse_dependency(":sdk")
        ProjectDependency(module='sdk')
        >>> parse_dependency("io.grpc:grpc-protobuf")
        ExternalDependency(group='io.grpc', name='grpc-protobuf', version=None)

    Raises:
        ValueError: If the notation is neither ``:module`` nor
            ``group:name[:version]``.
    """
    text = notation.strip()
    if text.startswith(":"):
        module = text[1:]
        if not MODULE_NAME_PATTERN.match(module):
            msg = f"Invalid project dependency '{notation}'"
            raise ValueError(msg)
        return ProjectDependency(module)

    parts = text.split(":")
    if len(parts) not in (2, 3) or not all(_COORDINATE_PART.match(p) for p in parts):
        msg = (
            f"Invalid dependency notation '{notation}' "
            "(expected ':module' or 'group:name[:version]')"
        )
        raise ValueError(msg)
    version = parts[2] if len(parts) == 3 else None
    return ExternalDependency(parts[0], parts[1], version)


@dataclass(frozen=True)
class Module:
    """A registered module of the workspace."""

    name: str
    group: str
    path: str
    dependencies: tuple[Dependency, ...] = ()

    @property
    def component_id(self) -> ProjectComponentId:
        return ProjectComponentId(self.name)

    def project_dependencies(self) -> tuple[str, ...]:
        return tuple(
            dep.module
            for dep in self.dependencies
            if isinstance(dep, ProjectDependency)
        )


@dataclass(frozen=True)
class ResolvedArtifact:
    """An artifact file tagged with its producer and attributes."""

    component: ComponentId
    file: Path
    attributes: Mapping[str, str] = field(default_factory=dict)


__all__ = [
    "MODULE_NAME_PATTERN",
    "ComponentId",
    "Dependency",
    "ExternalDependency",
    "Module",
    "ModuleComponentId",
    "ProjectComponentId",
    "ProjectDependency",
    "ResolvedArtifact",
    "parse_dependency",
]
