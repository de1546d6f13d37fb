"""CLI behaviour tests."""

from __future__ import annotations

import pytest

from buildergen.cli import _build_parser, main
from tests._fixtures.go_tree import GoTreeBuilder

JOB_TYPES = """
    package batch

    // +builder
    type JobSpec struct {
        Parallelism *int32
        Handler     func()
    }
"""


def test_cli_accepts_verbose_before_and_after_command() -> None:
    parser = _build_parser()

    before = parser.parse_args(["--verbose", "generate", "--input-dir", "in", "--output-dir", "out"])
    after = parser.parse_args(["generate", "--input-dir", "in", "--output-dir", "out", "--verbose"])

    assert before.verbose is True
    assert after.verbose is True
    assert after.command == "generate"


def test_cli_generate_flags() -> None:
    args = _build_parser().parse_args(
        ["generate", "--input-dir", "api", "--output-dir", "gen", "--dry-run", "--strict", "--api-version", "x/v1"]
    )

    assert args.input_dir == "api"
    assert args.output_dir == "gen"
    assert args.dry_run is True
    assert args.strict is True
    assert args.api_version == "x/v1"
    assert args.config is None


def test_cli_generate_requires_directories() -> None:
    with pytest.raises(SystemExit) as excinfo:
        _build_parser().parse_args(["generate", "--input-dir", "api"])
    assert excinfo.value.code == 2


def test_main_generate_writes_files(go_tree: GoTreeBuilder, capsys) -> None:
    go_tree.write({"job_types.go": JOB_TYPES})

    main(["-q", "generate", "--input-dir", str(go_tree.root), "--output-dir", str(go_tree.output)])

    out = capsys.readouterr().out
    assert "Generated 1 builder file(s) from 1 source file(s)" in out
    assert "func WithParallelism(parallelism *int32) func(*JobSpec) {" in go_tree.output_text("job_types_builder.go")


def test_main_generate_strict_fails_on_warnings(go_tree: GoTreeBuilder, capsys) -> None:
    go_tree.write({"job_types.go": JOB_TYPES})

    with pytest.raises(SystemExit) as excinfo:
        main(["-q", "generate", "--input-dir", str(go_tree.root), "--output-dir", str(go_tree.output), "--strict"])

    assert excinfo.value.code == 1
    assert "warning(s) raised in strict mode" in capsys.readouterr().err


def test_main_generate_reports_failed_files(go_tree: GoTreeBuilder, capsys) -> None:
    go_tree.write({"broken.go": "package batch\n\n// +builder\ntype Broken struct {\n"})

    with pytest.raises(SystemExit) as excinfo:
        main(["-q", "generate", "--input-dir", str(go_tree.root), "--output-dir", str(go_tree.output)])

    assert excinfo.value.code == 1
    assert "broken.go" in capsys.readouterr().err


def test_main_generate_missing_input_dir(go_tree: GoTreeBuilder, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["-q", "generate", "--input-dir", str(go_tree.root / "nope"), "--output-dir", str(go_tree.output)])

    assert excinfo.value.code == 1
    assert "Input directory not found" in capsys.readouterr().err


def test_main_generate_api_version_override(go_tree: GoTreeBuilder) -> None:
    go_tree.write({"job_types.go": JOB_TYPES.replace("JobSpec", "Job")})

    main(
        [
            "-q",
            "generate",
            "--input-dir",
            str(go_tree.root),
            "--output-dir",
            str(go_tree.output),
            "--api-version",
            "batch.example.com/v1",
        ]
    )

    assert 'APIVersion: "batch.example.com/v1",' in go_tree.output_text("job_types_builder.go")


def test_main_inspect_lists_types(go_tree: GoTreeBuilder, capsys) -> None:
    go_tree.write({"job_types.go": JOB_TYPES})

    main(["-q", "inspect", str(go_tree.root / "job_types.go")])

    out = capsys.readouterr().out.splitlines()
    assert out == [
        "package batch",
        "  JobSpec",
        "    Parallelism *int32",
        "    Handler unsupported-function_type",
    ]


def test_main_log_file_records_debug_while_console_stays_at_info(go_tree: GoTreeBuilder, capsys) -> None:
    go_tree.write({"job_types.go": JOB_TYPES, "plain.go": "package batch\n\ntype Plain struct {\n    Name string\n}\n"})
    log_file = go_tree.root.parent / "logs" / "buildergen.log"

    main(
        [
            "--log-file",
            str(log_file),
            "generate",
            "--input-dir",
            str(go_tree.root),
            "--output-dir",
            str(go_tree.output),
        ]
    )

    console = capsys.readouterr().err
    assert "[buildergen] INFO Generated builder code for" in console
    assert "No annotated types" not in console

    recorded = log_file.read_text(encoding="utf-8")
    assert "DEBUG buildergen.driver: No annotated types in" in recorded
    assert "INFO buildergen.driver: Generated builder code for" in recorded
