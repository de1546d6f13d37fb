"""File driver: scan, synthesize and write builder files for a source tree."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

from .codegen.synthesizer import BuilderSynthesizer, GenerationError
from .config import BuilderConfig
from .discovery import iter_source_files
from .logging import get_logger
from .models import GeneratedUnit, GenerationWarning
from .scanner import AnnotationScanner, ParseError

STATUS_GENERATED = "generated"
STATUS_SKIPPED = "skipped"
STATUS_FAILED = "failed"


@dataclass
class FileOutcome:
    """Result of processing a single input file."""

    source: Path
    status: str
    output: Optional[Path] = None
    warnings: List[GenerationWarning] = field(default_factory=list)
    error: Optional[str] = None


@dataclass
class RunReport:
    """Aggregated outcome of a generation run over a directory."""

    outcomes: List[FileOutcome] = field(default_factory=list)
    dry_run: bool = False

    @property
    def generated(self) -> List[FileOutcome]:
        return [outcome for outcome in self.outcomes if outcome.status == STATUS_GENERATED]

    @property
    def failed(self) -> List[FileOutcome]:
        return [outcome for outcome in self.outcomes if outcome.status == STATUS_FAILED]

    @property
    def warnings(self) -> List[GenerationWarning]:
        return [warning for outcome in self.outcomes for warning in outcome.warnings]

    @property
    def ok(self) -> bool:
        return not self.failed


def output_name(input_path: Path, *, source_suffix: str, output_suffix: str) -> str:
    """``pod_types.go`` -> ``pod_types_builder.go``."""
    base = input_path.name
    if base.endswith(source_suffix):
        base = base[: -len(source_suffix)]
    return base + output_suffix


class FileDriver:
    """Runs the scan/synthesize pipeline over files and persists the results."""

    def __init__(
        self,
        config: BuilderConfig | None = None,
        scanner: AnnotationScanner | None = None,
        synthesizer: BuilderSynthesizer | None = None,
    ) -> None:
        self.config = config or BuilderConfig(root=Path.cwd())
        conventions = self.config.conventions
        self.scanner = scanner or AnnotationScanner(marker=conventions.marker)
        self.synthesizer = synthesizer or BuilderSynthesizer(conventions)
        self.logger = get_logger("driver")

    def generate_source(
        self, source: Union[str, bytes], *, path: Union[str, Path, None] = None
    ) -> Optional[GeneratedUnit]:
        """Return the generated unit for ``source``, or None when nothing is annotated."""
        unit = self.scanner.scan(source, path=path)
        if unit.is_empty:
            return None
        return self.synthesizer.synthesize(unit)

    def process_file(self, input_path: Path, output_dir: Path, *, dry_run: bool = False) -> FileOutcome:
        """Generate the builder file for one input file.

        Parse, generation and I/O failures are reported in the outcome rather
        than raised so a batch can continue with the remaining files.
        """
        input_path = Path(input_path)
        try:
            content = input_path.read_bytes()
            generated = self.generate_source(content, path=input_path)
        except (ParseError, GenerationError) as exc:
            self.logger.error("Failed to generate builders for %s: %s", input_path, exc)
            return FileOutcome(source=input_path, status=STATUS_FAILED, error=str(exc))
        except OSError as exc:
            self.logger.error("Failed to read %s: %s", input_path, exc)
            return FileOutcome(source=input_path, status=STATUS_FAILED, error=f"reading input file: {exc}")

        if generated is None:
            self.logger.debug("No annotated types in %s; skipping", input_path)
            return FileOutcome(source=input_path, status=STATUS_SKIPPED)

        for warning in generated.warnings:
            self.logger.warning("%s: %s", input_path, warning)

        output_path = Path(output_dir) / output_name(
            input_path,
            source_suffix=self.config.source_suffix,
            output_suffix=self.config.output_suffix,
        )
        if dry_run:
            self.logger.info("Would generate builder code for %s in %s", input_path, output_path)
        else:
            try:
                output_path.parent.mkdir(parents=True, exist_ok=True)
                output_path.write_bytes(generated.to_bytes())
            except OSError as exc:
                self.logger.error("Failed to write %s: %s", output_path, exc)
                return FileOutcome(
                    source=input_path,
                    status=STATUS_FAILED,
                    warnings=list(generated.warnings),
                    error=f"writing output file: {exc}",
                )
            self.logger.info("Generated builder code for %s in %s", input_path, output_path)

        return FileOutcome(
            source=input_path,
            status=STATUS_GENERATED,
            output=output_path,
            warnings=list(generated.warnings),
        )

    def run(self, input_dir: Path, output_dir: Path, *, dry_run: bool = False) -> RunReport:
        """Process every source file below ``input_dir``."""
        input_dir = Path(input_dir).expanduser().resolve()
        output_dir = Path(output_dir).expanduser().resolve()
        self.logger.info("Scanning %s for %s types", input_dir, self.config.conventions.marker)

        sources = list(
            iter_source_files(
                input_dir,
                suffix=self.config.source_suffix,
                exclude_paths=self.config.exclude_paths,
            )
        )
        if not dry_run:
            output_dir.mkdir(parents=True, exist_ok=True)

        report = RunReport(dry_run=dry_run)
        written: Dict[Path, Path] = {}
        for path in sources:
            outcome = self.process_file(path, output_dir, dry_run=dry_run)
            report.outcomes.append(outcome)
            if outcome.output is None:
                continue
            previous = written.get(outcome.output)
            if previous is not None:
                self.logger.warning(
                    "%s overwrote the builders generated from %s (same base name)",
                    outcome.output,
                    previous,
                )
            written[outcome.output] = path

        self.logger.info(
            "Processed %d files: %d generated, %d failed",
            len(report.outcomes),
            len(report.generated),
            len(report.failed),
        )
        return report


__all__ = [
    "FileDriver",
    "FileOutcome",
    "RunReport",
    "STATUS_FAILED",
    "STATUS_GENERATED",
    "STATUS_SKIPPED",
    "output_name",
]
