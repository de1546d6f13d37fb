"""Helper for writing throwaway Go source trees in tests."""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Mapping


class GoTreeBuilder:
    """Writes Go files under a temporary input directory."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "api"
        self.root.mkdir()
        self.output = tmp_path / "generated"

    def write(self, files: Mapping[str, str]) -> None:
        """Write `path -> contents` entries below the input directory."""
        for relative, content in files.items():
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(dedent_go(content), encoding="utf-8")

    def output_text(self, name: str) -> str:
        return (self.output / name).read_text(encoding="utf-8")


def dedent_go(content: str) -> str:
    """Dedent a triple-quoted Go snippet; Go indentation inside uses tabs."""
    return textwrap.dedent(content).lstrip("\n")


__all__ = ["GoTreeBuilder", "dedent_go"]
