"""Session commands: start, sync."""

import random
import time
from typing import Annotated, Optional

import typer
from loguru import logger

from ...core.engine.config_loader import load_settings
from ...core.errors import EmptyPlanError, PersistenceError, SessionStateError
from ...core.session import SessionController
from ...io.record_store import DEFAULT_USER_ID
from ...io.serializers import ValidationError
from ...io.sync import ResultSync
from .. import views
from ..app import DataDirOption, app, exercise_names, get_store, load_profile_or_exit

# Single-key commands read during a live session
SESSION_KEYS = {
    "v": "validate_set",
    "s": "skip_rest",
    "h": "signal_too_hard",
    "p": "pause",
    "r": "resume",
    "q": "abandon",
}


def _ask_readiness(controller: SessionController) -> None:
    """Prompt until the controller accepts a rating."""
    while True:
        raw = views.console.input("How tired are you today? (1 = fresh, 10 = exhausted): ").strip()
        try:
            controller.submit_readiness(int(raw))
            return
        except ValueError as e:
            # ValidationError is a ValueError, as is a non-numeric answer
            views.print_warning(str(e) if isinstance(e, ValidationError) else "Enter a whole number 1-10")


def _run_loop(controller: SessionController) -> None:
    """Read commands until the session completes or is abandoned."""
    views.print_session_help()
    last_tick = time.monotonic()

    while controller.phase not in ("complete", "abandoned"):
        try:
            key = views.console.input("> ").strip().lower()
        except (EOFError, KeyboardInterrupt):
            controller.abandon()
            break

        # Deliver the whole seconds that passed while waiting for input
        now = time.monotonic()
        elapsed = int(now - last_tick)
        if elapsed:
            controller.tick(elapsed)
            last_tick += elapsed

        if key == "t":
            views.console.print(f"  [italic]{controller.coaching_tip()}[/italic]")
            continue
        command = SESSION_KEYS.get(key)
        if command is None:
            views.print_session_help()
            continue
        try:
            controller.apply(command)
        except SessionStateError as e:
            views.print_warning(str(e))


@app.command()
def start(
    fatigue: Annotated[
        Optional[int],
        typer.Option("--fatigue", "-f", help="Fatigue rating 1-10 (asked interactively if omitted)"),
    ] = None,
    seed: Annotated[
        Optional[int],
        typer.Option("--seed", help="Seed for the fat-loss exercise shuffle"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Run a live training session.

    Rate your fatigue, then work through the plan set by set.  Rest periods
    count down in real time between your inputs.  The result is saved when
    the last set is validated; quitting early saves nothing.
    """
    store = get_store(data_dir)
    profile = load_profile_or_exit(store)

    try:
        prior_xp, prior_level = store.load_progress()
    except PersistenceError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    settings = load_settings()
    controller = SessionController(
        profile,
        settings=settings,
        rng=random.Random(seed) if seed is not None else None,
        prior_total_xp=prior_xp,
        prior_level=prior_level,
    )
    controller.subscribe(views.SessionRenderer(controller))
    controller.subscribe(views.VoiceCoach(controller))

    try:
        if fatigue is None:
            _ask_readiness(controller)
        else:
            controller.submit_readiness(fatigue)
    except (ValidationError, EmptyPlanError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)
    except EOFError:
        views.print_info("Cancelled.")
        raise typer.Exit(0)

    _run_loop(controller)

    result = controller.result
    if controller.phase != "complete" or result is None:
        raise typer.Exit(0)

    views.print_session_summary(result, exercise_names())

    result_sync = ResultSync(store, xp_per_level=settings.xp_per_level)
    status = result_sync.save(DEFAULT_USER_ID, result)
    if status == "failed":
        views.print_warning("Could not save this session; it is pending sync. Run 'rep-coach sync' to retry.")
    elif status == "pending":
        views.print_warning(f"{len(result_sync.pending)} earlier session result(s) still pending sync.")
    else:
        logger.info("Session result saved")
        views.print_success("Session saved.")


@app.command()
def sync(data_dir: DataDirOption = None) -> None:
    """
    Retry saving session results that previously failed to save.
    """
    store = get_store(data_dir)
    result_sync = ResultSync(store, xp_per_level=load_settings().xp_per_level)

    waiting = len(result_sync.pending)
    if waiting == 0:
        views.print_success("Nothing to sync.")
        return

    status = result_sync.retry()
    if status == "synced":
        views.print_success(f"Synced {waiting} session result(s).")
    else:
        views.print_error(
            f"{len(result_sync.pending)} of {waiting} session result(s) still failed to save."
        )
        raise typer.Exit(1)
