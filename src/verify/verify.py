"""Determinism verification for the aggregate coverage report."""

from __future__ import annotations

import filecmp
import logging
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import ValidationError

from aggregate.write import generate_report
from artifacts.models.report import CoverageReport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeterminismResult:
    ok: bool
    mismatches: tuple[str, ...] = field(default_factory=tuple)
    missing: tuple[str, ...] = field(default_factory=tuple)
    extra: tuple[str, ...] = field(default_factory=tuple)
    stale_modules: tuple[str, ...] = field(default_factory=tuple)


def _list_relative_files(root: Path) -> set[Path]:
    return {path.relative_to(root) for path in root.rglob("*") if path.is_file()}


def _stale_modules(existing: Path, regenerated: Path) -> tuple[str, ...]:
    """Modules whose file lists differ between two reports.

    An existing report that no longer parses marks every regenerated module
    stale.
    """
    fresh = CoverageReport.model_validate_json(regenerated.read_bytes())
    try:
        old = CoverageReport.model_validate_json(existing.read_bytes())
    except ValidationError:
        logger.warning("Existing report %s is not a valid coverage report", existing)
        return tuple(sorted(fresh.modules))
    names = set(old.modules) | set(fresh.modules)
    return tuple(
        sorted(
            name
            for name in names
            if old.modules.get(name) != fresh.modules.get(name)
        )
    )


def verify_determinism(*, root: Path, artifacts_dir: Path) -> DeterminismResult:
    """Verify that the aggregate report is deterministic.

    Regenerates the report into a temporary directory and compares it
    byte-for-byte against the existing artifacts directory, using relative
    paths. When the coverage report itself differs, the modules whose file
    lists changed are reported as stale.

    Args:
        root: Workspace root to aggregate.
        artifacts_dir: Directory containing the existing report to verify.

    Returns:
        DeterminismResult with ok status and lists of missing, extra, and
        mismatched relative paths plus stale module names.

    Raises:
        FileNotFoundError: If artifacts_dir does not exist.
        NotADirectoryError: If artifacts_dir is not a directory.
    """
    if not artifacts_dir.exists():
        msg = f"Artifacts directory does not exist: {artifacts_dir}"
        raise FileNotFoundError(msg)
    if not artifacts_dir.is_dir():
        msg = f"Artifacts path is not a directory: {artifacts_dir}"
        raise NotADirectoryError(msg)

    stale: tuple[str, ...] = ()
    with tempfile.TemporaryDirectory() as temp_dir:
        temp_path = Path(temp_dir)
        summary = generate_report(root=root, out_dir=temp_path)
        report_name = Path(str(summary["report"])).relative_to(temp_path)

        original_files = _list_relative_files(artifacts_dir)
        regenerated_files = _list_relative_files(temp_path)

        missing = sorted(str(path) for path in original_files - regenerated_files)
        extra = sorted(str(path) for path in regenerated_files - original_files)

        mismatches = sorted(
            str(path)
            for path in original_files & regenerated_files
            if not filecmp.cmp(artifacts_dir / path, temp_path / path, shallow=False)
        )
        if str(report_name) in mismatches:
            stale = _stale_modules(artifacts_dir / report_name, temp_path / report_name)

    ok = not missing and not extra and not mismatches
    logger.info(
        "Determinism check of %s: %s", artifacts_dir, "ok" if ok else "changed"
    )
    return DeterminismResult(
        ok=ok,
        mismatches=tuple(mismatches),
        missing=tuple(missing),
        extra=tuple(extra),
        stale_modules=stale,
    )
