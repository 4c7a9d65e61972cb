"""Allow ``python -m bundle_insight``."""

from .cli import app

app()
