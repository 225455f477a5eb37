"""CLI entry point for sourcelink."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer

from sourcelink.discovery import discover_files
from sourcelink.encoder import EncoderConfig
from sourcelink.errors import SourceLinkError
from sourcelink.languages import LANGUAGES, language_for_extension
from sourcelink.models import RenderedUnit
from sourcelink.parallel import _DEFAULT_MAX_FILE_SIZE
from sourcelink.render import render_file

PRETTY_ENVVAR = "SOURCELINK_PRETTY"
ARTIFACT_SUFFIX = ".js"


def _filter_by_size(
    root: Path, files: list[tuple[Path, str]], max_size_bytes: int
) -> list[tuple[Path, str]]:
    """Drop units larger than max_size_bytes, warning once for each."""
    kept: list[tuple[Path, str]] = []
    for rel_path, lang_name in files:
        try:
            too_big = (root / rel_path).stat().st_size > max_size_bytes
        except OSError:
            # Unreadable units are reported by the renderer.
            too_big = False
        if too_big:
            typer.echo(
                f"Warning: {rel_path}: skipped (>{max_size_bytes} bytes)", err=True
            )
        else:
            kept.append((rel_path, lang_name))
    return kept


def _render_files_sequential(
    root: Path, files: list[tuple[Path, str]], config: EncoderConfig
) -> list[RenderedUnit]:
    """Render units one by one, skipping units that fail to render."""
    rendered: list[RenderedUnit] = []
    for rel_path, lang_name in files:
        try:
            artifact = render_file(root / rel_path, LANGUAGES[lang_name], config)
        except (OSError, UnicodeDecodeError, SourceLinkError) as exc:
            typer.echo(f"Warning: failed to render {rel_path}: {exc}", err=True)
            continue
        rendered.append(
            RenderedUnit(path=rel_path, language=lang_name, artifact=artifact)
        )
    return rendered


def _resolve_inputs(
    root: Path, language: str | None
) -> tuple[Path, list[tuple[Path, str]]]:
    """Return the base directory and the units to render under it."""
    if root.is_dir():
        return root, discover_files(root, language_filter=language)
    lang = language_for_extension(root.suffix)
    if lang is None or (language and lang.name != language):
        return root.parent, []
    return root.parent, [(Path(root.name), lang.name)]


def _write_artifacts(units: list[RenderedUnit], output: Path | None) -> None:
    if output is None:
        for unit in units:
            typer.echo(f"// {unit.path.as_posix()}")
            typer.echo(unit.artifact)
        return
    for unit in units:
        target = output / unit.path.with_name(unit.path.name + ARTIFACT_SUFFIX)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(unit.artifact, "utf-8")
    typer.echo(f"Wrote {len(units)} artifact(s) to {output}", err=True)


app = typer.Typer(
    name="sourcelink",
    help="Render Java sources as hyperlinked marker streams.",
    no_args_is_help=False,
)


@app.command()
def main(
    root: Annotated[
        Path,
        typer.Argument(
            help="Source file or source tree root.",
            exists=True,
            resolve_path=True,
        ),
    ] = Path("."),
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            file_okay=False,
            help="Directory for per-unit artifacts (default: stdout).",
        ),
    ] = None,
    language: Annotated[
        str | None,
        typer.Option(
            "--language",
            "-l",
            help="Restrict to a specific language (e.g., java).",
        ),
    ] = None,
    max_file_size: Annotated[
        int,
        typer.Option(
            "--max-file-size",
            min=1,
            help="Skip files larger than this many bytes (default: 1MB).",
        ),
    ] = _DEFAULT_MAX_FILE_SIZE,
    pretty: Annotated[
        bool,
        typer.Option(
            "--pretty",
            envvar=PRETTY_ENVVAR,
            help="Indent the output for debugging.",
        ),
    ] = False,
    fast: Annotated[
        bool,
        typer.Option(
            "--fast",
            help="Render units in parallel worker processes.",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log debug details to stderr."),
    ] = False,
) -> None:
    """Render every source unit under ROOT into a marker artifact."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    if language and language not in LANGUAGES:
        typer.echo(
            f"Error: unsupported language '{language}'. "
            f"Supported: {', '.join(LANGUAGES)}",
            err=True,
        )
        raise typer.Exit(1)

    config = EncoderConfig(pretty=pretty)

    base, files = _resolve_inputs(root, language)
    if not files:
        typer.echo("No source files found.", err=True)
        raise typer.Exit(1)

    files = _filter_by_size(base, files, max_file_size)
    if not files:
        typer.echo("No source files found (all exceeded size limit).", err=True)
        raise typer.Exit(1)

    if fast:
        from sourcelink.parallel import render_files_parallel

        units = render_files_parallel(
            base, files, config, max_size_bytes=max_file_size
        )
    else:
        units = _render_files_sequential(base, files, config)

    if not units:
        typer.echo("No files could be rendered.", err=True)
        raise typer.Exit(1)

    _write_artifacts(units, output)
