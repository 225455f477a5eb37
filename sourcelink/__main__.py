"""Allow ``python -m sourcelink``."""

from sourcelink.cli import app

app()
