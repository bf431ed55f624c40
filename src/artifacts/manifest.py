"""Reading and writing component artifact manifests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import orjson
from pydantic import ValidationError

from artifacts.models.records import ArtifactRecord
from artifacts.utils import _write_jsonl
from contract.artifacts import ARTIFACTS_MANIFEST

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path


class ManifestError(Exception):
    """Raised when a manifest line cannot be parsed."""

    def __init__(self, path: Path, line: int, message: str) -> None:
        self.path = path
        self.line = line
        super().__init__(f"{path}:{line}: {message}")


def manifest_path(component_dir: Path) -> Path:
    return component_dir / ARTIFACTS_MANIFEST


def load_manifest(path: Path) -> list[ArtifactRecord]:
    """Load artifact records from a manifest.

    A manifest that does not exist holds no records.

    Raises:
        ManifestError: On invalid JSON or a record that fails validation.
    """
    if not path.is_file():
        return []

    records: list[ArtifactRecord] = []
    with path.open("rb") as handle:
        for line_number, raw_line in enumerate(handle, 1):
            line = raw_line.strip()
            if not line:
                continue
            try:
                data = orjson.loads(line)
            except orjson.JSONDecodeError as exc:
                raise ManifestError(path, line_number, f"Invalid JSON: {exc}") from exc
            try:
                records.append(ArtifactRecord.model_validate(data))
            except ValidationError as exc:
                msg = f"Schema validation failed: {exc}"
                raise ManifestError(path, line_number, msg) from exc
    return records


def write_manifest(path: Path, records: Iterable[ArtifactRecord]) -> None:
    """Write records sorted by (test suite, path), one JSON object per line."""
    ordered = sorted(records, key=lambda r: (r.test_suite_name, r.path))
    path.parent.mkdir(parents=True, exist_ok=True)
    _write_jsonl(path, ordered)


__all__ = ["ManifestError", "load_manifest", "manifest_path", "write_manifest"]
