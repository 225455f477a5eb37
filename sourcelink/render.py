"""Render pipeline: compilation unit in, encoded marker artifact out."""

from __future__ import annotations

from pathlib import Path

from sourcelink.encoder import EncoderConfig, encode_unit
from sourcelink.languages import TreeSitterLanguage
from sourcelink.markers import MarkerBuilder
from sourcelink.models import CompilationUnit
from sourcelink.parsing import parse_unit


def render_unit(unit: CompilationUnit, config: EncoderConfig | None = None) -> str:
    """Build the markers of one unit and encode them with its tables.

    Raises:
        SourceLinkError: If the unit cannot be rendered consistently.
    """
    builder = MarkerBuilder(unit.positions, unit.links)
    context = builder.build(unit.tree)
    return encode_unit(context, config)


def render_file(
    file_path: Path,
    language: TreeSitterLanguage,
    config: EncoderConfig | None = None,
) -> str:
    """Parse and render a single source file."""
    return render_unit(parse_unit(file_path, language), config)
