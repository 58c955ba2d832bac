"""
CLI entry point using Typer.

Commands:
- init: Create or replace the user profile
- plan: Generate today's session plan
- explain: Show how one exercise's weight was derived
- start: Run a live session
- records: Show personal records
- status: Show XP, level, achievements and sync state
- sync: Retry saving pending session results
"""

from pathlib import Path
from typing import Annotated, Optional

import typer

from ..logging import setup_logger
from .app import app

# Register commands on the shared app
from .commands import planning, profile, sessions  # noqa: F401


@app.callback()
def main_callback(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging"),
    ] = False,
    log_file: Annotated[
        Optional[Path],
        typer.Option("--log-file", help="Also write logs to this file"),
    ] = None,
) -> None:
    """
    Adaptive resistance-training coach.
    """
    setup_logger(level="DEBUG" if verbose else "WARNING", log_file=log_file)


if __name__ == "__main__":
    app()
