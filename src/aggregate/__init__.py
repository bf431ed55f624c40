"""Coverage aggregation entry points."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from settings.config import CovaggConfig


def generate_report(
    *,
    root: Path,
    out_dir: Path | None = None,
    config: CovaggConfig | None = None,
    suites: Iterable[str] | None = None,
) -> dict[str, object]:
    """Generate the report via lazy import to avoid package import cycles."""
    from aggregate.write import generate_report as _generate_report

    return _generate_report(root=root, out_dir=out_dir, config=config, suites=suites)


__all__ = ["generate_report"]
