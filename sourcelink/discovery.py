"""Find the Java compilation units under a source tree."""

from __future__ import annotations

import os
import subprocess
from collections.abc import Iterator
from pathlib import Path

import pathspec

from sourcelink.languages import language_for_extension

# Version control metadata, IDE state and the usual build output folders.
SKIP_DIRS: frozenset[str] = frozenset(
    {
        ".git",
        ".hg",
        ".svn",
        ".gradle",
        ".idea",
        ".mvn",
        "node_modules",
        "build",
        "out",
        "target",
        "bin",
    }
)

_LS_FILES = ("git", "ls-files", "--cached", "--others", "--exclude-standard")


def _git_ls_files(root: Path) -> frozenset[str] | None:
    """Ask git which files under root are tracked or untracked-but-kept.

    Returns:
        Posix paths relative to root, or None when root is not a git
        checkout or git cannot be run.
    """
    if not (root / ".git").exists():
        return None
    try:
        proc = subprocess.run(
            _LS_FILES,
            cwd=root,
            capture_output=True,
            text=True,
            timeout=10,
            check=False,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired):
        return None
    if proc.returncode != 0:
        return None
    return frozenset(proc.stdout.splitlines())


def _gitignore_spec(root: Path) -> pathspec.PathSpec:
    gitignore = root / ".gitignore"
    lines: list[str] = []
    if gitignore.is_file():
        lines = gitignore.read_text(encoding="utf-8").splitlines()
    return pathspec.PathSpec.from_lines("gitignore", lines)


def _candidates(root: Path) -> Iterator[Path]:
    """Yield every visible, non-symlinked regular file path relative to root."""
    for dirpath, dirnames, filenames in os.walk(root, followlinks=False):
        dirnames[:] = [
            d for d in dirnames if d not in SKIP_DIRS and not d.startswith(".")
        ]
        here = Path(dirpath)
        for fname in filenames:
            if fname.startswith(".") or (here / fname).is_symlink():
                continue
            yield (here / fname).relative_to(root)


def discover_files(
    root: Path,
    *,
    extra_ignores: list[str] | None = None,
    language_filter: str | None = None,
) -> list[tuple[Path, str]]:
    """List the source units under root with the language of each.

    When root is a git checkout, only files git would keep are returned;
    otherwise the root ``.gitignore`` is honoured. ``extra_ignores`` applies
    in both cases.

    Args:
        root: Source tree root directory.
        extra_ignores: Additional gitignore-style patterns to exclude.
        language_filter: Only return units of this language.

    Returns:
        (relative_path, language_name) pairs sorted by path.
    """
    tracked = _git_ls_files(root)
    excludes: list[pathspec.PathSpec] = []
    if tracked is None:
        excludes.append(_gitignore_spec(root))
    if extra_ignores:
        excludes.append(pathspec.PathSpec.from_lines("gitignore", extra_ignores))

    units: list[tuple[Path, str]] = []
    for rel in _candidates(root):
        lang = language_for_extension(rel.suffix)
        if lang is None:
            continue
        if language_filter is not None and lang.name != language_filter:
            continue
        posix = rel.as_posix()
        if tracked is not None and posix not in tracked:
            continue
        if any(spec.match_file(posix) for spec in excludes):
            continue
        units.append((rel, lang.name))
    return sorted(units)
