from __future__ import annotations

import json
import shutil
from pathlib import Path

from contract.artifacts import ARTIFACT_SCHEMA_VERSION, ARTIFACTS_MANIFEST
from contract.validation import (
    ValidationMessage,
    ValidationResult,
    validate_manifests,
)


def _copy_mini_workspace(root: Path) -> None:
    fixture = Path(__file__).parent / "fixtures" / "mini_workspace"
    shutil.copytree(fixture, root)


def _record(**overrides: object) -> dict[str, object]:
    record: dict[str, object] = {
        "schema_version": ARTIFACT_SCHEMA_VERSION,
        "path": "coverage-results/test/.coverage.tck",
        "category": "verification",
        "verification_type": "coverage-results",
        "test_suite_name": "test",
    }
    record.update(overrides)
    return record


def _write_tck_manifest(root: Path, *lines: str) -> Path:
    path = root / "tck" / "build" / ARTIFACTS_MANIFEST
    path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")
    return path


def _messages_contain(messages: list[ValidationMessage], needle: str) -> bool:
    """Return True when any validation message contains the given substring."""
    return any(needle in message.message for message in messages)


# Group 1: Data class tests


def test_validation_message_location_with_line() -> None:
    """ValidationMessage.location returns path:line when line is present."""
    msg = ValidationMessage(":sdk", Path("x.jsonl"), "bad", line=7)
    assert msg.location() == "x.jsonl:7"


def test_validation_message_location_without_line() -> None:
    """ValidationMessage.location returns only path when line is missing."""
    msg = ValidationMessage(":sdk", Path("x.jsonl"), "bad")
    assert msg.location() == "x.jsonl"


def test_validation_message_to_dict() -> None:
    """ValidationMessage.to_dict returns the expected payload."""
    msg = ValidationMessage(":sdk", Path("x.jsonl"), "bad", line=3)
    assert msg.to_dict() == {
        "component": ":sdk",
        "path": "x.jsonl",
        "line": 3,
        "message": "bad",
    }


def test_validation_result_ok_when_no_errors() -> None:
    """ValidationResult.ok is true when no errors are present."""
    assert ValidationResult().ok is True


def test_validation_result_not_ok_when_errors() -> None:
    """ValidationResult.ok is false when at least one error exists."""
    result = ValidationResult(errors=[ValidationMessage("x", Path("a"), "boom")])
    assert result.ok is False


# Group 2: Workspace handling


def test_fixture_workspace_is_valid(tmp_path: Path) -> None:
    """The fixture workspace has no errors or warnings."""
    root = tmp_path / "ws"
    _copy_mini_workspace(root)

    result = validate_manifests(root)

    assert result.ok is True
    assert result.errors == []
    assert result.warnings == []


def test_missing_module_directory(tmp_path: Path) -> None:
    """A declared module without a directory is an error."""
    root = tmp_path / "ws"
    _copy_mini_workspace(root)
    shutil.rmtree(root / "sdk-full")

    result = validate_manifests(root)

    assert result.ok is False
    assert result.errors[0].component == ":sdk-full"
    assert _messages_contain(result.errors, "Module directory does not exist")


def test_missing_manifest_is_fine(tmp_path: Path) -> None:
    """A module that produced nothing has no manifest and no error."""
    root = tmp_path / "ws"
    _copy_mini_workspace(root)
    (root / "tck" / "build" / ARTIFACTS_MANIFEST).unlink()

    assert validate_manifests(root).ok is True


# Group 3: Manifest lines


def test_invalid_json(tmp_path: Path) -> None:
    """Invalid JSON produces a line-level JSON error."""
    root = tmp_path / "ws"
    _copy_mini_workspace(root)
    path = _write_tck_manifest(root, json.dumps(_record()), "{not-json}")

    result = validate_manifests(root)

    assert result.ok is False
    assert _messages_contain(result.errors, "Invalid JSON")
    assert result.errors[0].location() == f"{path}:2"


def test_schema_failure(tmp_path: Path) -> None:
    """Records missing required fields produce schema validation errors."""
    root = tmp_path / "ws"
    _copy_mini_workspace(root)
    _write_tck_manifest(root, json.dumps({"schema_version": ARTIFACT_SCHEMA_VERSION}))

    result = validate_manifests(root)

    assert result.ok is False
    assert _messages_contain(result.errors, "Schema validation failed")


def test_path_escaping_component_rejected(tmp_path: Path) -> None:
    """Record paths must stay inside the component directory."""
    root = tmp_path / "ws"
    _copy_mini_workspace(root)
    _write_tck_manifest(root, json.dumps(_record(path="../../sdk/build/x")))

    result = validate_manifests(root)

    assert _messages_contain(result.errors, "Schema validation failed")


def test_missing_schema_version_lenient(tmp_path: Path) -> None:
    """Missing schema_version is a single warning in lenient mode."""
    root = tmp_path / "ws"
    _copy_mini_workspace(root)
    record = _record()
    del record["schema_version"]
    _write_tck_manifest(root, json.dumps(record), json.dumps(record))

    result = validate_manifests(root)

    assert result.ok is True
    assert len(result.warnings) == 1
    assert _messages_contain(result.warnings, "Missing schema_version")


def test_missing_schema_version_strict(tmp_path: Path) -> None:
    """Missing schema_version is an error in strict mode."""
    root = tmp_path / "ws"
    _copy_mini_workspace(root)
    record = _record()
    del record["schema_version"]
    _write_tck_manifest(root, json.dumps(record))

    result = validate_manifests(root, strict_schema_version=True)

    assert result.ok is False
    assert _messages_contain(result.errors, "Missing schema_version")


def test_schema_version_mismatch(tmp_path: Path) -> None:
    """A different schema_version is always an error."""
    root = tmp_path / "ws"
    _copy_mini_workspace(root)
    _write_tck_manifest(root, json.dumps(_record(schema_version=99)))

    result = validate_manifests(root)

    assert _messages_contain(result.errors, "Schema version mismatch")


def test_missing_data_file_warns(tmp_path: Path) -> None:
    """A record whose data file is gone is a warning."""
    root = tmp_path / "ws"
    _copy_mini_workspace(root)
    _write_tck_manifest(root, json.dumps(_record(path="coverage-results/test/gone")))

    result = validate_manifests(root)

    assert result.ok is True
    assert _messages_contain(result.warnings, "Data file does not exist")


def test_external_repository_manifest_checked(tmp_path: Path) -> None:
    """Manifests of external libraries in the repository are validated too."""
    root = tmp_path / "ws"
    _copy_mini_workspace(root)
    manifest = root / "repository" / "io.grpc" / "grpc-protobuf" / ARTIFACTS_MANIFEST
    manifest.write_text("[]\n", encoding="utf-8")

    result = validate_manifests(root)

    assert result.ok is False
    assert result.errors[0].component == "io.grpc:grpc-protobuf"
