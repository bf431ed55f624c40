"""Command-line interface for covagg."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from aggregate.write import generate_report
from artifacts.manifest import ManifestError
from artifacts.record import record_artifacts
from contract.validation import validate_manifests
from graph.registry import BuildGraphError, modules_from_config
from settings.config import ConfigError, load_config
from verify.verify import verify_determinism


def _add_common_paths(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "root",
        nargs="?",
        default=".",
        help="Workspace root (default: .)",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="covagg")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    aggregate_parser = subparsers.add_parser(
        "aggregate", help="Aggregate coverage results into a report"
    )
    _add_common_paths(aggregate_parser)
    aggregate_parser.add_argument(
        "--out-dir",
        default=None,
        help="Output directory for the report (default: config output dir)",
    )
    aggregate_parser.add_argument(
        "--suite",
        action="append",
        default=None,
        dest="suites",
        help="Test suite to aggregate (repeatable, default: config suites)",
    )

    modules_parser = subparsers.add_parser("modules", help="List declared modules")
    _add_common_paths(modules_parser)

    record_parser = subparsers.add_parser(
        "record", help="Record a module's coverage data files in its manifest"
    )
    record_parser.add_argument("module", help="Module name")
    record_parser.add_argument(
        "--root",
        default=".",
        help="Workspace root (default: .)",
    )
    record_parser.add_argument(
        "--suite",
        default="test",
        help="Test suite whose results are recorded (default: test)",
    )

    validate_parser = subparsers.add_parser(
        "validate", help="Validate artifact manifests"
    )
    _add_common_paths(validate_parser)
    validate_parser.add_argument(
        "--strict",
        action="store_true",
        help="Treat a missing schema_version as an error",
    )

    verify_parser = subparsers.add_parser(
        "verify", help="Verify determinism of the report"
    )
    _add_common_paths(verify_parser)
    verify_parser.add_argument(
        "--artifacts-dir",
        default=None,
        help="Report directory (default: config output dir)",
    )

    return parser


def _resolve_output_dir(out_dir: str | None) -> Path | None:
    if out_dir is None:
        return None
    return Path(out_dir).expanduser().resolve()


def _resolve_artifacts_dir(root: Path, artifacts_dir: str | None) -> Path:
    if artifacts_dir is None:
        config = load_config(root)
        return (root / config.output_dir).resolve()
    return Path(artifacts_dir).expanduser().resolve()


def _handle_aggregate(root: Path, out_dir: str | None, suites: list[str] | None) -> int:
    summary = generate_report(
        root=root, out_dir=_resolve_output_dir(out_dir), suites=suites
    )
    sys.stdout.write(f"{summary['report']}\n")
    return 0


def _handle_modules(root: Path) -> int:
    config = load_config(root)
    for module in modules_from_config(config):
        sys.stdout.write(f"{module.name}\t{module.group}\t{module.path}\n")
    return 0


def _handle_record(root: Path, module: str, suite: str) -> int:
    records = record_artifacts(root, module, suite)
    for record in records:
        sys.stdout.write(f"{record.path}\n")
    return 0


def _handle_validate(root: Path, *, strict: bool) -> int:
    result = validate_manifests(root, strict_schema_version=strict)
    for warning in result.warnings:
        sys.stderr.write(f"warning: {warning.location()}: {warning.message}\n")
    if result.errors:
        for error in result.errors:
            sys.stderr.write(f"{error.location()}: {error.message}\n")
        return 1
    return 0


def _handle_verify(root: Path, artifacts_dir: str | None) -> int:
    resolved_artifacts_dir = _resolve_artifacts_dir(root, artifacts_dir)
    try:
        result = verify_determinism(root=root, artifacts_dir=resolved_artifacts_dir)
    except (FileNotFoundError, NotADirectoryError) as exc:
        sys.stderr.write(f"artifacts-dir: {resolved_artifacts_dir}\n")
        sys.stderr.write(f"error: {exc}\n")
        return 2
    if not result.ok:
        for label, paths in (
            ("missing", result.missing),
            ("extra", result.extra),
            ("mismatches", result.mismatches),
        ):
            for path in paths:
                sys.stderr.write(f"{label}: {path}\n")
        for module in result.stale_modules:
            sys.stderr.write(f"stale module: {module}\n")
        return 1
    return 0


def _dispatch(args: argparse.Namespace) -> int:
    root = Path(args.root).expanduser().resolve()

    if args.command == "aggregate":
        return _handle_aggregate(root, args.out_dir, args.suites)

    if args.command == "modules":
        return _handle_modules(root)

    if args.command == "record":
        return _handle_record(root, args.module, args.suite)

    if args.command == "validate":
        return _handle_validate(root, strict=args.strict)

    if args.command == "verify":
        return _handle_verify(root, args.artifacts_dir)

    raise AssertionError


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        return _dispatch(args)
    except (ConfigError, BuildGraphError, ManifestError) as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
