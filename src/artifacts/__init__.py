"""Artifact manifests, selection and recording."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

    from artifacts.models.records import ArtifactRecord
    from settings.config import CovaggConfig


def record_artifacts(
    root: Path,
    module: str,
    suite: str,
    *,
    config: CovaggConfig | None = None,
) -> list[ArtifactRecord]:
    """Record artifacts via lazy import to avoid package import cycles."""
    from artifacts.record import record_artifacts as _record_artifacts

    return _record_artifacts(root, module, suite, config=config)


__all__ = ["record_artifacts"]
