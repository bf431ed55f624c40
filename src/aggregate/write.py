from __future__ import annotations

from typing import TYPE_CHECKING

from aggregate.aggregator import aggregate_workspace
from artifacts.utils import _write_json
from contract.artifacts import COVERAGE_REPORT_JSON
from settings.config import load_config, resolve_output_dir

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from artifacts.models.report import CoverageReport
    from settings.config import CovaggConfig


def write_report(path: Path, report: CoverageReport) -> None:
    """Write a report as sorted-key, indented JSON."""
    path.parent.mkdir(parents=True, exist_ok=True)
    _write_json(path, report)


def generate_report(
    *,
    root: Path,
    out_dir: Path | None = None,
    config: CovaggConfig | None = None,
    suites: Iterable[str] | None = None,
) -> dict[str, object]:
    """Aggregate a workspace and write the coverage report.

    Args:
        root: Root directory of the workspace
        out_dir: Optional output directory for the report
        config: Optional settings (default: loaded from covagg.toml)
        suites: Optional test suites overriding the configured ones

    Returns:
        Dictionary with counts and the generated report path.
    """
    if config is None:
        config = load_config(root)

    if out_dir is None:
        out_dir = resolve_output_dir(root, config.output_dir)

    report = aggregate_workspace(root, config=config, suites=suites)

    report_path = out_dir / COVERAGE_REPORT_JSON
    write_report(report_path, report)

    return {
        "module_count": len(report.modules),
        "file_count": report.file_count,
        "excluded_count": len(report.excluded_components),
        "report": str(report_path),
    }
