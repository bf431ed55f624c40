"""Coverage aggregation over the module dependency graph."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from artifacts.models.report import CoverageReport
from artifacts.selection import ArtifactSelector, member_filter, select
from artifacts.utils import _relative_posix
from graph.models import ProjectComponentId
from graph.registry import load_build_graph
from settings.config import ConfigError, load_config, validate_suite_name

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from graph.models import ComponentId
    from graph.registry import BuildGraph
    from settings.config import CovaggConfig

logger = logging.getLogger(__name__)


def aggregate(
    graph: BuildGraph,
    modules: Iterable[str],
    selector: ArtifactSelector,
    *,
    roots: Iterable[ComponentId] | None = None,
    relative_to: Path | None = None,
) -> CoverageReport:
    """Collect the data files of member modules matching the selector.

    Walks the dependency graph from ``roots`` (default: the member modules),
    visiting external libraries as well as project modules, and keeps only
    artifacts produced by a member module. Members without a matching artifact
    get an empty entry.

    Args:
        graph: The build graph to query.
        modules: Names of the member modules.
        selector: Requested artifact attributes.
        roots: Components to start the walk from.
        relative_to: Directory report paths are made relative to.

    Returns:
        The aggregate report for a single test suite.

    Raises:
        UnknownModuleError: If a member or root module is not declared.
    """
    members = [graph.module(name).name for name in modules]
    accept = member_filter(members)

    def reject(component: ComponentId) -> bool:
        return not accept(component)

    start = (
        list(roots)
        if roots is not None
        else [ProjectComponentId(name) for name in members]
    )

    files: dict[str, set[str]] = {name: set() for name in members}
    excluded: set[str] = set()

    for component in graph.resolve(start):
        produced = graph.artifacts_of(component)
        for artifact in select(produced, selector, reject):
            logger.debug("Excluding %s from %s", artifact.file, artifact.component)
            excluded.add(str(artifact.component))
        for artifact in select(produced, selector, accept):
            module = artifact.component.module  # type: ignore[union-attr]
            path = (
                _relative_posix(artifact.file, relative_to)
                if relative_to is not None
                else artifact.file.as_posix()
            )
            files[module].add(path)

    return CoverageReport.build(
        suites={selector.test_suite_name} if members else set(),
        modules=files,
        excluded_components=excluded,
    )


def aggregate_workspace(
    root: Path,
    *,
    config: CovaggConfig | None = None,
    suites: Iterable[str] | None = None,
) -> CoverageReport:
    """Aggregate the configured test suites of a workspace into one report.

    The member set is the project-module closure of the aggregation
    dependencies; one selector per suite is applied and the results merged.
    """
    root = root.resolve()
    if config is None:
        config = load_config(root)

    graph = load_build_graph(root, config)
    roots = [dep.component for dep in graph.aggregation_dependencies]
    members = graph.project_closure(roots)
    suite_names = list(suites) if suites is not None else config.aggregation.suites
    try:
        for suite in suite_names:
            validate_suite_name(suite)
    except ValueError as exc:
        raise ConfigError(str(exc)) from exc

    report = CoverageReport.build(
        suites=set(),
        modules={name: set() for name in members},
        excluded_components=set(),
    )
    for suite in suite_names:
        selector = ArtifactSelector(
            category=config.aggregation.category,
            verification_type=config.aggregation.verification_type,
            test_suite_name=suite,
        )
        suite_report = aggregate(
            graph, members, selector, roots=roots, relative_to=root
        )
        logger.info(
            "Suite %s: %d file(s) from %d module(s)",
            suite,
            suite_report.file_count,
            len(members),
        )
        report = report.merge(suite_report)

    return report


__all__ = ["aggregate", "aggregate_workspace"]
