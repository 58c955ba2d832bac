"""Shared Typer app object, shared option types, and store utilities."""

from pathlib import Path
from typing import Annotated, Optional

import typer

from ..core.errors import PersistenceError
from ..core.exercises.registry import get_catalog
from ..core.models import UserProfile
from ..io.record_store import RecordStore, get_default_store
from ..io.serializers import ValidationError
from . import views

# Shared --data-dir option type used across all commands
DataDirOption = Annotated[
    Optional[Path],
    typer.Option("--data-dir", "-d", help="Data directory (default: $REP_COACH_HOME or ~/.rep-coach)"),
]

app = typer.Typer(
    name="rep-coach",
    help="Adaptive resistance-training coach: readiness-aware session plans and live sessions.",
    no_args_is_help=True,
)


def get_store(data_dir: Path | None) -> RecordStore:
    """Get record store from path or default location."""
    if data_dir is None:
        return get_default_store()
    return RecordStore(data_dir)


def load_profile_or_exit(store: RecordStore) -> UserProfile:
    """Load the saved profile, or print an error and exit 1."""
    try:
        profile = store.load_profile()
    except (PersistenceError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)
    if profile is None:
        views.print_error(f"Profile not found in {store.data_dir}")
        views.print_info("Run 'rep-coach init' first to create a profile.")
        raise typer.Exit(1)
    return profile


def exercise_names() -> dict[str, str]:
    """exercise_id -> display name for every catalog and recovery exercise."""
    catalog = get_catalog()
    names = {ex.exercise_id: ex.display_name for ex in catalog.recovery_flow}
    names.update({ex.exercise_id: ex.display_name for ex in catalog})
    return names
