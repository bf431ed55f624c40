from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from aggregate.write import generate_report
from verify.verify import DeterminismResult, verify_determinism


def _write_minimal_workspace(root: Path) -> None:
    (root / "covagg.toml").write_text(
        '[[modules]]\nname = "sdk"\ngroup = "org.example"\n',
        encoding="utf-8",
    )
    (root / "sdk").mkdir(parents=True, exist_ok=True)


def test_verify_determinism_requires_artifacts_dir(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    repo_root.mkdir()
    _write_minimal_workspace(repo_root)

    missing_dir = tmp_path / "missing"
    with pytest.raises(FileNotFoundError, match="Artifacts directory does not exist"):
        verify_determinism(root=repo_root, artifacts_dir=missing_dir)


def test_verify_determinism_of_generated_report(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    repo_root.mkdir()
    _write_minimal_workspace(repo_root)
    artifacts_dir = tmp_path / "artifacts"

    generate_report(root=repo_root, out_dir=artifacts_dir)
    result = verify_determinism(root=repo_root, artifacts_dir=artifacts_dir)

    assert result == DeterminismResult(ok=True)


def test_verify_determinism_relative_paths_and_sorted_mismatches(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    repo_root = tmp_path / "repo"
    repo_root.mkdir()
    _write_minimal_workspace(repo_root)

    artifacts_dir = tmp_path / "artifacts"
    artifacts_dir.mkdir()

    for rel_path, content in (
        ("b.txt", "b-original"),
        ("a.txt", "a-original"),
    ):
        path = artifacts_dir / rel_path
        path.write_text(content, encoding="utf-8")

    def _fake_generate_report(*, root: Path, out_dir: Path) -> dict[str, object]:
        (out_dir / "a.txt").write_text("a-original", encoding="utf-8")
        (out_dir / "b.txt").write_text("b-regenerated", encoding="utf-8")
        return {"report": str(out_dir / "a.txt")}

    monkeypatch.setattr(
        "verify.verify.generate_report",
        _fake_generate_report,
    )

    result = verify_determinism(root=repo_root, artifacts_dir=artifacts_dir)

    assert result == DeterminismResult(
        ok=False,
        mismatches=("b.txt",),
        missing=(),
        extra=(),
    )


def test_verify_determinism_names_stale_modules(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    shutil.copytree(Path(__file__).parent / "fixtures" / "mini_workspace", repo_root)
    artifacts_dir = tmp_path / "artifacts"
    generate_report(root=repo_root, out_dir=artifacts_dir)

    (repo_root / "sdk" / "build" / "covagg-artifacts.jsonl").unlink()
    result = verify_determinism(root=repo_root, artifacts_dir=artifacts_dir)

    assert not result.ok
    assert result.mismatches == ("coverage_report.json",)
    assert result.stale_modules == ("sdk",)


def test_verify_determinism_unreadable_report_marks_all_modules_stale(
    tmp_path: Path,
) -> None:
    repo_root = tmp_path / "repo"
    shutil.copytree(Path(__file__).parent / "fixtures" / "mini_workspace", repo_root)
    artifacts_dir = tmp_path / "artifacts"
    artifacts_dir.mkdir()
    (artifacts_dir / "coverage_report.json").write_text("{", encoding="utf-8")

    result = verify_determinism(root=repo_root, artifacts_dir=artifacts_dir)

    assert result.mismatches == ("coverage_report.json",)
    assert result.stale_modules == ("sdk", "tck")
