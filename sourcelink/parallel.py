"""Render independent source units in worker processes (``--fast``)."""

from __future__ import annotations

import os
from concurrent.futures import ProcessPoolExecutor
from itertools import repeat
from pathlib import Path

import typer

from sourcelink.encoder import EncoderConfig
from sourcelink.errors import SourceLinkError
from sourcelink.languages import LANGUAGES
from sourcelink.models import RenderedUnit
from sourcelink.render import render_file

_DEFAULT_MAX_FILE_SIZE = 1_000_000  # 1 MB

WorkerResult = tuple[Path, str, str | None, str | None]


def _render_file_worker(
    root: Path,
    rel_path: Path,
    lang_name: str,
    max_size_bytes: int,
    config: EncoderConfig,
) -> WorkerResult:
    """Render one unit in a worker process.

    Lives at module level so it can be pickled. Each call builds its own
    interner, markers and encoder; only the frozen config is shared.

    Returns:
        (rel_path, lang_name, artifact, warning); exactly one of the last
        two is None.
    """
    source = root / rel_path
    try:
        if source.stat().st_size > max_size_bytes:
            return rel_path, lang_name, None, f"skipped (>{max_size_bytes} bytes)"
        artifact = render_file(source, LANGUAGES[lang_name], config)
    except (OSError, UnicodeDecodeError, SourceLinkError) as exc:
        return rel_path, lang_name, None, str(exc)
    return rel_path, lang_name, artifact, None


def render_files_parallel(
    root: Path,
    files: list[tuple[Path, str]],
    config: EncoderConfig,
    *,
    max_size_bytes: int | None = None,
    max_workers: int | None = None,
) -> list[RenderedUnit]:
    """Render units across a process pool.

    Units that fail are reported on stderr and left out without affecting
    the rest.

    Args:
        root: Source tree root directory.
        files: (rel_path, lang_name) pairs from discovery.
        config: Encoder settings shared by every worker.
        max_size_bytes: Skip files larger than this (default 1MB).
        max_workers: Upper bound on worker processes.

    Returns:
        Rendered units sorted by path.
    """
    if max_size_bytes is None:
        max_size_bytes = _DEFAULT_MAX_FILE_SIZE
    workers = max_workers or min(os.cpu_count() or 1, len(files))
    paths = [rel_path for rel_path, _ in files]
    langs = [lang_name for _, lang_name in files]

    rendered: list[RenderedUnit] = []
    with ProcessPoolExecutor(max_workers=max(workers, 1)) as pool:
        results = pool.map(
            _render_file_worker,
            repeat(root),
            paths,
            langs,
            repeat(max_size_bytes),
            repeat(config),
        )
        for rel_path, lang_name, artifact, warning in results:
            if artifact is None:
                typer.echo(f"Warning: {rel_path}: {warning}", err=True)
                continue
            rendered.append(RenderedUnit(rel_path, lang_name, artifact))

    return sorted(rendered, key=lambda unit: unit.path)
