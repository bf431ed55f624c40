"""Module registry and build graph construction.

The build graph is assembled once from the workspace settings. Every
definition defect (unknown module, missing module directory, dependency
cycle) fails here, before any artifact is selected.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from artifacts.manifest import load_manifest, manifest_path
from graph.algos import breadth_first, build_module_graph, find_cycles
from graph.models import (
    ExternalDependency,
    Module,
    ModuleComponentId,
    ProjectComponentId,
    ProjectDependency,
    ResolvedArtifact,
)
from settings.config import load_config

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from graph.models import ComponentId, Dependency
    from settings.config import CovaggConfig

logger = logging.getLogger(__name__)


class BuildGraphError(Exception):
    """Raised when the declared build graph is inconsistent."""


class UnknownModuleError(BuildGraphError):
    """Raised when a module name does not refer to a declared module."""

    def __init__(
        self, name: str, *, referenced_by: str | None = None, hint: str = ""
    ) -> None:
        self.name = name
        self.referenced_by = referenced_by
        msg = f"Module '{name}' is not declared in this build"
        if referenced_by is not None:
            msg = f"{msg} (referenced by {referenced_by})"
        if hint:
            msg = f"{msg}; {hint}"
        super().__init__(msg)


class ModuleDirectoryError(BuildGraphError):
    """Raised when a declared module has no directory."""

    def __init__(self, name: str, directory: Path) -> None:
        self.name = name
        self.directory = directory
        super().__init__(f"Module '{name}' directory does not exist: {directory}")


class DependencyCycleError(BuildGraphError):
    """Raised when project modules depend on each other in a cycle."""

    def __init__(self, cycle: Sequence[str]) -> None:
        self.cycle = tuple(cycle)
        super().__init__(f"Dependency cycle between modules: {', '.join(cycle)}")


class BuildGraph:
    """Registered modules, their dependencies and their produced artifacts."""

    def __init__(
        self,
        modules: Iterable[Module],
        *,
        artifacts: Mapping[ComponentId, Sequence[ResolvedArtifact]] | None = None,
        included_builds: Iterable[str] = (),
        aggregation_dependencies: Iterable[Dependency] = (),
    ) -> None:
        self._modules: dict[str, Module] = {}
        for module in modules:
            if module.name in self._modules:
                msg = f"Module '{module.name}' is declared more than once"
                raise BuildGraphError(msg)
            self._modules[module.name] = module
        self.included_builds = tuple(included_builds)
        self.aggregation_dependencies = tuple(aggregation_dependencies)
        self._artifacts: dict[ComponentId, tuple[ResolvedArtifact, ...]] = {
            component: tuple(items) for component, items in (artifacts or {}).items()
        }
        self._check_references()
        self._check_cycles()

    def _unknown(
        self, name: str, referenced_by: str | None = None
    ) -> UnknownModuleError:
        hint = ""
        if name in self.included_builds:
            hint = "included builds are not part of the module set"
        return UnknownModuleError(name, referenced_by=referenced_by, hint=hint)

    def _check_references(self) -> None:
        for module in self._modules.values():
            for name in module.project_dependencies():
                if name not in self._modules:
                    raise self._unknown(name, f"module '{module.name}'")
        for dep in self.aggregation_dependencies:
            if isinstance(dep, ProjectDependency) and dep.module not in self._modules:
                raise self._unknown(dep.module, "aggregation")

    def _check_cycles(self) -> None:
        graph = build_module_graph(
            {
                name: module.project_dependencies()
                for name, module in self._modules.items()
            }
        )
        cycles = find_cycles(graph)
        if cycles:
            raise DependencyCycleError(cycles[0])

    @property
    def modules(self) -> tuple[Module, ...]:
        return tuple(self._modules.values())

    def module(self, name: str) -> Module:
        try:
            return self._modules[name]
        except KeyError:
            raise self._unknown(name) from None

    def dependencies_of(self, component: ComponentId) -> tuple[ComponentId, ...]:
        """Direct dependencies of a component, in declaration order."""
        if isinstance(component, ProjectComponentId):
            module = self.module(component.module)
            return tuple(dep.component for dep in module.dependencies)
        return ()

    def resolve(self, roots: Iterable[ComponentId]) -> list[ComponentId]:
        """Components reachable from roots, each once, roots first."""
        root_list = list(roots)
        neighbors: dict[ComponentId, tuple[ComponentId, ...]] = {}
        pending = list(root_list)
        while pending:
            component = pending.pop()
            if component in neighbors:
                continue
            neighbors[component] = self.dependencies_of(component)
            pending.extend(neighbors[component])
        return breadth_first(root_list, neighbors)  # type: ignore[return-value]

    def project_closure(self, roots: Iterable[ComponentId]) -> list[str]:
        """Names of the project modules reachable from roots."""
        return [
            component.module
            for component in self.resolve(roots)
            if isinstance(component, ProjectComponentId)
        ]

    def artifacts_of(self, component: ComponentId) -> tuple[ResolvedArtifact, ...]:
        return self._artifacts.get(component, ())

    def external_components(self) -> list[ModuleComponentId]:
        found: set[ModuleComponentId] = set()
        for module in self._modules.values():
            for dep in module.dependencies:
                if isinstance(dep, ExternalDependency):
                    found.add(dep.component)
        for dep in self.aggregation_dependencies:
            if isinstance(dep, ExternalDependency):
                found.add(dep.component)
        return sorted(found, key=str)


def modules_from_config(config: CovaggConfig) -> list[Module]:
    return [
        Module(
            name=decl.name,
            group=decl.group,
            path=decl.directory,
            dependencies=decl.parsed_dependencies(),
        )
        for decl in config.modules
    ]


def external_component_dir(repository: Path, component: ModuleComponentId) -> Path:
    return repository / component.group / component.name


def _resolve_artifacts(
    component: ComponentId, component_dir: Path
) -> tuple[ResolvedArtifact, ...]:
    resolved: list[ResolvedArtifact] = []
    for record in load_manifest(manifest_path(component_dir)):
        data_file = component_dir / record.path
        if not data_file.is_file():
            logger.warning(
                "Dropping %s artifact %s: data file does not exist",
                component,
                data_file,
            )
            continue
        resolved.append(
            ResolvedArtifact(
                component=component,
                file=data_file,
                attributes=record.attributes(),
            )
        )
    logger.debug("Loaded %d artifact(s) for %s", len(resolved), component)
    return tuple(resolved)


def load_build_graph(root: Path, config: CovaggConfig | None = None) -> BuildGraph:
    """Build the module graph for a workspace and load produced artifacts.

    Raises:
        ConfigError: If the settings file is invalid.
        BuildGraphError: If a module is unknown, has no directory, or modules
            form a dependency cycle.
        ManifestError: If a manifest is malformed.
    """
    if config is None:
        config = load_config(root)

    modules = modules_from_config(config)
    for module in modules:
        directory = root / module.path
        if not directory.is_dir():
            raise ModuleDirectoryError(module.name, directory)

    declared = BuildGraph(
        modules,
        included_builds=config.included_builds,
        aggregation_dependencies=config.aggregation.parsed_dependencies(),
    )

    artifacts: dict[ComponentId, tuple[ResolvedArtifact, ...]] = {}
    for module in declared.modules:
        component_dir = root / module.path / config.build_dir
        artifacts[module.component_id] = _resolve_artifacts(
            module.component_id, component_dir
        )

    if config.repository.path is not None:
        repository = root / config.repository.path
        for component in declared.external_components():
            artifacts[component] = _resolve_artifacts(
                component, external_component_dir(repository, component)
            )

    graph = BuildGraph(
        declared.modules,
        artifacts=artifacts,
        included_builds=declared.included_builds,
        aggregation_dependencies=declared.aggregation_dependencies,
    )
    logger.info(
        "Build graph: %d module(s), %d external component(s)",
        len(graph.modules),
        len(graph.external_components()),
    )
    return graph


__all__ = [
    "BuildGraph",
    "BuildGraphError",
    "DependencyCycleError",
    "ModuleDirectoryError",
    "UnknownModuleError",
    "external_component_dir",
    "load_build_graph",
    "modules_from_config",
]
