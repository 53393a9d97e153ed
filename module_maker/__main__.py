"""Allow ``python -m module_maker``."""

from module_maker.cli import run

run()
