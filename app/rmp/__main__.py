"""Allow ``python -m rmp``."""

from rmp.cli.main import app

app()
