"""Allow ``python -m sgversion``."""

from .cli import run

run()
