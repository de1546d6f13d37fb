"""CLI entrypoints for buildergen commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .codegen.types import render_type
from .config import BuilderConfig, ConfigError, load_config
from .driver import FileDriver
from .logging import configure_logging
from .models import Field
from .scanner import AnnotationScanner, ParseError


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=argparse.SUPPRESS if suppress_default else False,
        help="Increase log verbosity for troubleshooting.",
    )


def _add_config_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        default=None,
        help="Path to .buildergen.yml (defaults to the one in the input directory, if any).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="buildergen",
        description="Generate functional-option builders for Go types marked with +builder.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only log warnings and errors.",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Also write DEBUG-level logs to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser(
        "generate",
        help="Generate <file>_builder.go for every input file with annotated types.",
    )
    _add_verbose_option(generate_parser, suppress_default=True)
    _add_config_option(generate_parser)
    generate_parser.add_argument(
        "--input-dir",
        required=True,
        help="Directory containing API types.",
    )
    generate_parser.add_argument(
        "--output-dir",
        required=True,
        help="Directory for generated code (created when missing).",
    )
    generate_parser.add_argument(
        "--api-version",
        default=None,
        help="APIVersion written into constructors of top-level types.",
    )
    generate_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report what would be generated without writing files.",
    )
    generate_parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit non-zero when generation produced warnings.",
    )

    inspect_parser = subparsers.add_parser(
        "inspect",
        help="Print the annotated types and fields found in a single file.",
    )
    _add_verbose_option(inspect_parser, suppress_default=True)
    _add_config_option(inspect_parser)
    inspect_parser.add_argument("path", help="Go source file to inspect.")

    return parser


def _load(config_arg: str | None, fallback: Path) -> BuilderConfig:
    return load_config(Path(config_arg) if config_arg else fallback)


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for buildergen commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        verbose=bool(args.verbose),
        quiet=bool(args.quiet),
        log_file=Path(args.log_file) if args.log_file else None,
    )

    if args.command == "generate":
        _run_generate(parser, args)
    elif args.command == "inspect":
        _run_inspect(parser, args)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _run_generate(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    input_dir = Path(args.input_dir)
    try:
        config = _load(args.config, input_dir).with_overrides(api_version=args.api_version)
    except ConfigError as exc:
        parser.exit(1, f"buildergen: invalid configuration: {exc}\n")

    driver = FileDriver(config)
    try:
        report = driver.run(input_dir, Path(args.output_dir), dry_run=bool(args.dry_run))
    except (FileNotFoundError, NotADirectoryError) as exc:
        parser.exit(1, f"{exc}\n")
    except OSError as exc:
        parser.exit(1, f"buildergen generate failed: {exc}\nRun with --verbose for more details.\n")

    suffix = " (dry-run)" if report.dry_run else ""
    print(
        f"Generated {len(report.generated)} builder file(s) from {len(report.outcomes)} source file(s){suffix}"
    )
    if report.failed:
        lines = "\n".join(f"  {outcome.source}: {outcome.error}" for outcome in report.failed)
        parser.exit(1, f"buildergen: {len(report.failed)} file(s) failed:\n{lines}\n")
    if args.strict and report.warnings:
        parser.exit(1, f"buildergen: {len(report.warnings)} warning(s) raised in strict mode\n")


def _run_inspect(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    path = Path(args.path)
    try:
        config = _load(args.config, path.parent)
    except ConfigError as exc:
        parser.exit(1, f"buildergen: invalid configuration: {exc}\n")

    scanner = AnnotationScanner(marker=config.conventions.marker)
    try:
        unit = scanner.scan(path.read_bytes(), path=path)
    except ParseError as exc:
        parser.exit(1, f"{exc}\n")
    except OSError as exc:
        parser.exit(1, f"buildergen inspect failed: {exc}\n")

    print(f"package {unit.package}")
    if unit.is_empty:
        print(f"  (no {config.conventions.marker} types)")
        return
    for annotated in unit.types.values():
        print(f"  {annotated.name}")
        for member in annotated.members:
            if isinstance(member, Field):
                print(f"    {member.name} {render_type(member.type)}")
            else:
                print(f"    (embedded) {render_type(member.type)}")


if __name__ == "__main__":
    main(sys.argv[1:])
