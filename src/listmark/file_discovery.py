"""
Finding the Markdown files to process.

Command-line paths can be files, directories or glob patterns. Directories are
walked recursively, keeping files that match the include patterns and skipping:
- default excludes (VCS metadata, virtualenvs, build output, `node_modules`, ...)
- anything matched by `exclude` / `extend_exclude`
- anything ignored by a `.gitignore` on the way down (when `respect_gitignore`)
- anything matched by the nearest `.listmarkignore`

All patterns use gitignore syntax and are compiled with `pathspec`.
"""

from __future__ import annotations

import os
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from pathlib import Path

import pathspec

DEFAULT_INCLUDES: list[str] = ["*.md", "*.markdown"]

DEFAULT_EXCLUDES: list[str] = [
    ".git/",
    ".hg/",
    ".svn/",
    ".venv/",
    "venv/",
    "__pycache__/",
    ".tox/",
    ".nox/",
    ".mypy_cache/",
    ".pytest_cache/",
    ".ruff_cache/",
    "*.egg-info/",
    "build/",
    "dist/",
    "node_modules/",
    ".cache/",
    ".idea/",
    ".vscode/",
    "vendor/",
    "third_party/",
]

IGNORE_FILENAME = ".listmarkignore"

_GLOB_CHARS = frozenset("*?[")


@dataclass
class DiscoveryConfig:
    """
    File discovery settings. `exclude=None` means `DEFAULT_EXCLUDES`; a list
    replaces the defaults entirely, while `extend_exclude` adds to them.
    """

    extend_include: list[str] = field(default_factory=list)
    exclude: list[str] | None = None
    extend_exclude: list[str] = field(default_factory=list)
    respect_gitignore: bool = True

    @property
    def include_patterns(self) -> list[str]:
        return DEFAULT_INCLUDES + self.extend_include

    @property
    def exclude_patterns(self) -> list[str]:
        base = self.exclude if self.exclude is not None else DEFAULT_EXCLUDES
        return list(base) + self.extend_exclude


def _read_spec(path: Path) -> pathspec.PathSpec | None:
    """Compile a gitignore-style file, or `None` if it is missing or has no patterns."""
    if not path.is_file():
        return None
    lines = [
        line
        for line in path.read_text().splitlines()
        if line.strip() and not line.lstrip().startswith("#")
    ]
    if not lines:
        return None
    return pathspec.PathSpec.from_lines("gitignore", lines)


def find_ignore_file(start_dir: Path) -> Path | None:
    """Walk up from `start_dir` to the nearest `.listmarkignore`."""
    current = start_dir.resolve()
    while True:
        candidate = current / IGNORE_FILENAME
        if candidate.is_file():
            return candidate
        if current.parent == current:
            return None
        current = current.parent


class FileDiscovery:
    """Resolves command-line paths into a sorted, deduplicated list of files."""

    def __init__(self, config: DiscoveryConfig | None = None) -> None:
        self.config = config or DiscoveryConfig()
        self._include = pathspec.PathSpec.from_lines("gitignore", self.config.include_patterns)
        self._exclude = pathspec.PathSpec.from_lines("gitignore", self.config.exclude_patterns)

    def resolve(self, paths: Sequence[str | Path]) -> list[Path]:
        """
        Resolve files, directories and glob patterns.

        Files named explicitly are always included. A path that does not exist
        and is not a glob pattern raises `FileNotFoundError`.
        """
        found: set[Path] = set()
        for raw in paths:
            path = Path(raw)
            if path.is_file():
                found.add(path.resolve())
            elif path.is_dir():
                found.update(p.resolve() for p in self.walk(path))
            elif any(c in str(raw) for c in _GLOB_CHARS):
                found.update(p.resolve() for p in self._glob(str(raw)))
            else:
                raise FileNotFoundError(f"Path not found: {raw}")
        return sorted(found)

    def walk(self, root: Path) -> Iterator[Path]:
        """Yield matching files under `root`, pruning excluded directories."""
        ignore_file = find_ignore_file(root)
        ignore = _read_spec(ignore_file) if ignore_file else None
        ignore_base = ignore_file.parent if ignore_file else root.resolve()

        # Compiled .gitignore of each directory walked so far, keyed by directory.
        gitignores: dict[Path, pathspec.PathSpec] = {}

        for dirpath, dirnames, filenames in os.walk(root):
            current = Path(dirpath).resolve()
            if self.config.respect_gitignore:
                spec = _read_spec(current / ".gitignore")
                if spec is not None:
                    gitignores[current] = spec

            dirnames[:] = sorted(
                d
                for d in dirnames
                if not self._ignored(current / d, True, gitignores, ignore, ignore_base)
            )
            for filename in sorted(filenames):
                if not self._include.match_file(filename):
                    continue
                if self._ignored(current / filename, False, gitignores, ignore, ignore_base):
                    continue
                yield current / filename

    def _ignored(
        self,
        path: Path,
        is_dir: bool,
        gitignores: dict[Path, pathspec.PathSpec],
        ignore: pathspec.PathSpec | None,
        ignore_base: Path,
    ) -> bool:
        suffix = "/" if is_dir else ""
        if self._exclude.match_file(path.name + suffix):
            return True
        for base, spec in gitignores.items():
            if base in path.parents and spec.match_file(path.relative_to(base).as_posix() + suffix):
                return True
        if ignore is not None and ignore_base in path.parents:
            if ignore.match_file(path.relative_to(ignore_base).as_posix() + suffix):
                return True
        return False

    def _glob(self, pattern: str) -> Iterator[Path]:
        parts = Path(pattern).parts
        for i, part in enumerate(parts):
            if any(c in part for c in _GLOB_CHARS):
                root = Path(*parts[:i]) if i > 0 else Path(".")
                glob_part = Path(*parts[i:]).as_posix()
                break
        else:
            return
        for path in sorted(root.glob(glob_part)):
            if path.is_file() and self._include.match_file(path.name):
                yield path
