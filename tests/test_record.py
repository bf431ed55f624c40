from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from artifacts.manifest import load_manifest
from artifacts.record import record_artifacts
from graph.registry import ModuleDirectoryError, UnknownModuleError
from settings.config import ConfigError

MANIFEST = Path("build") / "covagg-artifacts.jsonl"


def _copy_mini_workspace(root: Path) -> None:
    fixture = Path(__file__).parent / "fixtures" / "mini_workspace"
    shutil.copytree(fixture, root)


def test_record_replaces_only_the_recorded_suite(tmp_path: Path) -> None:
    root = tmp_path / "ws"
    _copy_mini_workspace(root)
    results = root / "tck" / "build" / "coverage-results" / "testIntegration"
    results.mkdir(parents=True)
    (results / ".coverage.tck-it").write_text("it", encoding="utf-8")
    (results / "nested").mkdir()
    (results / "nested" / "worker-1.coverage").write_text("w1", encoding="utf-8")
    (results / "notes.txt").write_text("not data", encoding="utf-8")

    recorded = record_artifacts(root, "tck", "testIntegration")

    assert [record.path for record in recorded] == [
        "coverage-results/testIntegration/.coverage.tck-it",
        "coverage-results/testIntegration/nested/worker-1.coverage",
    ]
    manifest = load_manifest(root / "tck" / MANIFEST)
    assert [(r.test_suite_name, r.path) for r in manifest] == [
        ("test", "coverage-results/test/.coverage.tck"),
        ("testIntegration", "coverage-results/testIntegration/.coverage.tck-it"),
        (
            "testIntegration",
            "coverage-results/testIntegration/nested/worker-1.coverage",
        ),
    ]
    assert all(r.category == "verification" for r in manifest)
    assert all(r.verification_type == "coverage-results" for r in manifest)


def test_record_without_results_clears_suite(tmp_path: Path) -> None:
    root = tmp_path / "ws"
    _copy_mini_workspace(root)
    shutil.rmtree(root / "tck" / "build" / "coverage-results" / "test")

    recorded = record_artifacts(root, "tck", "test")

    assert recorded == []
    assert load_manifest(root / "tck" / MANIFEST) == []


def test_record_is_stable_across_runs(tmp_path: Path) -> None:
    root = tmp_path / "ws"
    _copy_mini_workspace(root)

    record_artifacts(root, "sdk", "test")
    first = (root / "sdk" / MANIFEST).read_bytes()
    record_artifacts(root, "sdk", "test")

    assert (root / "sdk" / MANIFEST).read_bytes() == first


def test_record_unknown_module(tmp_path: Path) -> None:
    root = tmp_path / "ws"
    _copy_mini_workspace(root)

    with pytest.raises(UnknownModuleError, match="'examples'"):
        record_artifacts(root, "examples", "test")


def test_record_missing_module_directory(tmp_path: Path) -> None:
    root = tmp_path / "ws"
    _copy_mini_workspace(root)
    shutil.rmtree(root / "sdk-full")

    with pytest.raises(ModuleDirectoryError, match="'sdk-full'"):
        record_artifacts(root, "sdk-full", "test")


@pytest.mark.parametrize("suite", ["../other", "a/b", "", ".hidden"])
def test_record_rejects_invalid_suite_name(tmp_path: Path, suite: str) -> None:
    root = tmp_path / "ws"
    _copy_mini_workspace(root)
    before = (root / "sdk" / MANIFEST).read_bytes()

    with pytest.raises(ConfigError, match="Invalid test suite name"):
        record_artifacts(root, "sdk", suite)

    assert (root / "sdk" / MANIFEST).read_bytes() == before
