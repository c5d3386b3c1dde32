"""Allow `python -m mistake_tracker`."""

from mistake_tracker.cli.main import run

run()
