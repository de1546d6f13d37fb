"""Input file discovery for generation runs."""

from __future__ import annotations

import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterator, List, Sequence

from .codegen.constants import DEFAULT_SOURCE_SUFFIX

# Directories the Go toolchain itself never builds.
_EXCLUDED_DIRS = {"testdata", "vendor"}
_EXCLUDED_DIR_PREFIXES = (".", "_")


@dataclass
class ExcludeRule:
    """A gitignore-flavoured exclusion pattern from .buildergen.yml."""

    pattern: str
    directory_only: bool
    anchored: bool

    @classmethod
    def parse(cls, raw: str) -> "ExcludeRule | None":
        pattern = raw.strip()
        if not pattern:
            return None
        directory_only = pattern.endswith("/")
        anchored = pattern.startswith("/") or "/" in pattern.rstrip("/")
        return cls(pattern=pattern.strip("/"), directory_only=directory_only, anchored=anchored)

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if self.directory_only and not is_dir:
            return False
        if self.anchored:
            return fnmatchcase(rel_path, self.pattern)
        return any(fnmatchcase(part, self.pattern) for part in rel_path.split("/"))


def _is_excluded_dir(name: str) -> bool:
    return name in _EXCLUDED_DIRS or name.startswith(_EXCLUDED_DIR_PREFIXES)


def iter_source_files(
    root: Path,
    *,
    suffix: str = DEFAULT_SOURCE_SUFFIX,
    exclude_paths: Sequence[str] = (),
) -> Iterator[Path]:
    """Yield every source file under ``root`` in a stable, sorted order."""
    root = Path(root)
    if not root.exists():
        raise FileNotFoundError(f"Input directory not found: {root}")
    if not root.is_dir():
        raise NotADirectoryError(f"Input path is not a directory: {root}")

    rules: List[ExcludeRule] = [
        rule for rule in (ExcludeRule.parse(pattern) for pattern in exclude_paths) if rule is not None
    ]

    for dirpath, dirnames, filenames in os.walk(root):
        current = Path(dirpath)
        rel_dir = current.relative_to(root).as_posix() if current != root else ""

        kept_dirs = []
        for name in sorted(dirnames):
            if _is_excluded_dir(name):
                continue
            rel_path = f"{rel_dir}/{name}" if rel_dir else name
            if any(rule.matches(rel_path, True) for rule in rules):
                continue
            kept_dirs.append(name)
        dirnames[:] = kept_dirs

        for filename in sorted(filenames):
            if not filename.endswith(suffix):
                continue
            rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
            if any(rule.matches(rel_path, False) for rule in rules):
                continue
            yield current / filename


__all__ = ["ExcludeRule", "iter_source_files"]
