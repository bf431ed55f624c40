"""Recording a module's coverage data files into its artifact manifest."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from artifacts.manifest import load_manifest, manifest_path, write_manifest
from artifacts.models.records import ArtifactRecord
from graph.registry import BuildGraph, ModuleDirectoryError, modules_from_config
from scan.files import find_data_files
from settings.config import ConfigError, load_config, validate_suite_name

if TYPE_CHECKING:
    from pathlib import Path

    from settings.config import CovaggConfig

logger = logging.getLogger(__name__)


def suite_results_dir(build_dir: Path, verification_type: str, suite: str) -> Path:
    return build_dir / verification_type / suite


def record_artifacts(
    root: Path,
    module: str,
    suite: str,
    *,
    config: CovaggConfig | None = None,
) -> list[ArtifactRecord]:
    """Record the data files of one test suite run in the module manifest.

    Scans ``<module>/<build_dir>/<verification_type>/<suite>/`` and replaces
    the manifest entries with the same category, verification type and suite;
    other entries are kept. A suite without data files leaves no entries.

    Raises:
        ConfigError: If the suite name is invalid.
        UnknownModuleError: If the module is not declared.
        ModuleDirectoryError: If the module directory does not exist.
        ManifestError: If the existing manifest is malformed.
    """
    try:
        validate_suite_name(suite)
    except ValueError as exc:
        raise ConfigError(str(exc)) from exc

    if config is None:
        config = load_config(root)

    declared = BuildGraph(
        modules_from_config(config), included_builds=config.included_builds
    ).module(module)
    module_dir = root / declared.path
    if not module_dir.is_dir():
        raise ModuleDirectoryError(declared.name, module_dir)

    build_dir = module_dir / config.build_dir
    verification_type = config.aggregation.verification_type
    results_dir = suite_results_dir(build_dir, verification_type, suite)

    recorded = [
        ArtifactRecord(
            path=data_file.relative_to(build_dir).as_posix(),
            category=config.aggregation.category,
            verification_type=verification_type,
            test_suite_name=suite,
        )
        for data_file in find_data_files(
            results_dir,
            include_patterns=config.record.include,
            exclude_patterns=config.record.exclude,
        )
    ]

    replaced = (config.aggregation.category, verification_type, suite)
    path = manifest_path(build_dir)
    kept = [
        record
        for record in load_manifest(path)
        if (record.category, record.verification_type, record.test_suite_name)
        != replaced
    ]
    write_manifest(path, [*kept, *recorded])

    logger.info(
        "Recorded %d %s file(s) for module %s", len(recorded), suite, declared.name
    )
    return recorded


__all__ = ["record_artifacts", "suite_results_dir"]
