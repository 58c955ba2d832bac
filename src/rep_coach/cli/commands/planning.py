"""Planning commands: plan, explain."""

import json
import random
from typing import Annotated, Optional

import typer

from ...core.engine.config_loader import load_settings
from ...core.errors import EmptyPlanError
from ...core.planner import explain_prescription, generate_plan
from ...io.serializers import ValidationError, session_plan_to_dict
from .. import views
from ..app import DataDirOption, app, get_store, load_profile_or_exit

FatigueOption = Annotated[
    int,
    typer.Option("--fatigue", "-f", help="How tired you feel today: 1 (fresh) to 10 (exhausted)"),
]
SeedOption = Annotated[
    Optional[int],
    typer.Option("--seed", help="Seed for the fat-loss exercise shuffle"),
]


def _rng(seed: int | None) -> random.Random | None:
    return random.Random(seed) if seed is not None else None


@app.command()
def plan(
    fatigue: FatigueOption,
    seed: SeedOption = None,
    json_out: Annotated[
        bool,
        typer.Option("--json", "-j", help="Output as JSON for machine processing"),
    ] = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Generate today's session plan without starting a session.

    A fatigue rating of 9 or 10 switches to the fixed active-recovery flow.
    """
    store = get_store(data_dir)
    profile = load_profile_or_exit(store)

    try:
        session_plan = generate_plan(profile, fatigue, rng=_rng(seed))
    except (ValidationError, EmptyPlanError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    settings = load_settings()
    if json_out:
        data = session_plan_to_dict(session_plan)
        data["sets_per_exercise"] = settings.sets_for_mode(session_plan.mode)
        print(json.dumps(data, indent=2))
        return

    views.print_plan(session_plan, settings.sets_for_mode(session_plan.mode))


@app.command()
def explain(
    fatigue: FatigueOption,
    exercise_id: Annotated[
        str,
        typer.Option("--exercise", "-e", help="Exercise ID from the plan, e.g. squat"),
    ],
    seed: SeedOption = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Explain step by step how one exercise of today's plan was prescribed.
    """
    store = get_store(data_dir)
    profile = load_profile_or_exit(store)

    try:
        text = explain_prescription(profile, fatigue, exercise_id, rng=_rng(seed))
    except (ValidationError, EmptyPlanError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)
    except KeyError as e:
        views.print_error(e.args[0])
        raise typer.Exit(1)

    views.print_explanation(text)
