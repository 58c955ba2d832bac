"""Profile commands: init, records, status."""

from typing import Annotated, Optional

import typer

from ...core.engine.config_loader import load_settings
from ...core.errors import PersistenceError
from ...core.models import EXPERIENCE_LEVELS, GOALS, SLEEP_QUALITIES, UserProfile
from ...io.record_store import DEFAULT_USER_ID
from ...io.serializers import ValidationError, parse_equipment
from ...io.sync import ResultSync
from .. import views
from ..app import DataDirOption, app, exercise_names, get_store, load_profile_or_exit


@app.command()
def init(
    weight_kg: Annotated[
        float,
        typer.Option("--weight-kg", "-w", help="Bodyweight in kg"),
    ] = 80.0,
    height_cm: Annotated[
        Optional[float],
        typer.Option("--height-cm", help="Height in cm (used for BMI; optional)"),
    ] = None,
    age: Annotated[
        int,
        typer.Option("--age", "-a", help="Age in years"),
    ] = 30,
    level: Annotated[
        str,
        typer.Option("--level", "-l", help=f"Experience: {', '.join(EXPERIENCE_LEVELS)}"),
    ] = "beginner",
    goal: Annotated[
        str,
        typer.Option("--goal", "-g", help=f"Goal: {', '.join(GOALS)}"),
    ] = "muscle",
    sex: Annotated[
        str,
        typer.Option("--sex", "-s", help="Sex (male/female)"),
    ] = "male",
    sleep: Annotated[
        Optional[str],
        typer.Option("--sleep", help=f"Usual sleep quality: {', '.join(SLEEP_QUALITIES)}"),
    ] = None,
    equipment: Annotated[
        str,
        typer.Option(
            "--equipment", "-e",
            help="Comma-separated equipment you own: barbell, dumbbell, machine",
        ),
    ] = "",
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite an existing profile without prompting"),
    ] = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Create or replace your profile.

    XP, level and personal records from earlier sessions are kept.
    """
    store = get_store(data_dir)

    try:
        profile = UserProfile(
            weight_kg=weight_kg,
            height_cm=height_cm,
            age=age,
            experience=level,
            goal=goal,
            sex=sex,
            sleep_quality=sleep,
            equipment=parse_equipment(equipment),
        )
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if store.exists() and not force:
        if not views.confirm_action(f"Profile already exists in {store.data_dir}. Overwrite?"):
            views.print_info("Cancelled.")
            raise typer.Exit(0)

    try:
        store.save_profile(profile)
    except PersistenceError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    owned = ", ".join(sorted(profile.equipment)) or "bodyweight only"
    views.print_success(f"Profile saved to {store.profile_path}")
    views.console.print(
        f"  {profile.weight_kg:g} kg, age {profile.age}, {profile.experience}, "
        f"goal {profile.goal}, equipment: {owned}"
    )


@app.command()
def records(data_dir: DataDirOption = None) -> None:
    """
    Show your personal records (the weights the next session starts from).
    """
    store = get_store(data_dir)
    load_profile_or_exit(store)

    try:
        current = store.get_personal_records(DEFAULT_USER_ID)
    except PersistenceError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    views.print_records(current, exercise_names())


@app.command()
def status(data_dir: DataDirOption = None) -> None:
    """
    Show XP, level, achievements and pending sync state.
    """
    store = get_store(data_dir)
    load_profile_or_exit(store)

    try:
        xp, level = store.load_progress()
        achievements = store.get_achievements(DEFAULT_USER_ID)
        sessions_logged = len(store.load_workout_log(DEFAULT_USER_ID))
    except PersistenceError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    pending = len(ResultSync(store).pending)
    views.console.print(
        views.format_status_display(
            xp=xp,
            level=level,
            achievements=achievements,
            sessions_logged=sessions_logged,
            pending=pending,
            xp_per_level=load_settings().xp_per_level,
        )
    )
