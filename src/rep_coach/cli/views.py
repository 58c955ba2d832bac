"""
CLI view formatters using Rich for pretty console output.

Handles plan/record tables, session summaries, and the live-session
subscribers that turn controller events into console output.
"""

from rich.console import Console
from rich.table import Table

from ..core.config import MODE_LABELS
from ..core.models import SessionPlan, SessionResult
from ..core.session import (
    ExerciseStarted,
    ModeSelected,
    Paused,
    RestFinished,
    RestStarted,
    Resumed,
    SessionAbandoned,
    SessionCompleted,
    SessionController,
    SessionEvent,
    SetValidated,
    WeightReduced,
)

console = Console()


def _fmt_weight(weight_kg: float) -> str:
    return f"{weight_kg:g} kg" if weight_kg > 0 else "-"


def format_plan_table(plan: SessionPlan) -> Table:
    """
    Create a Rich table displaying a session plan.

    Args:
        plan: Generated plan

    Returns:
        Rich Table object
    """
    title = MODE_LABELS.get(plan.mode, plan.mode)
    if plan.goal:
        title += f" ({plan.goal.replace('_', ' ')})"
    table = Table(title=title)

    table.add_column("#", justify="right", style="dim", width=3)
    table.add_column("Exercise", style="cyan")
    table.add_column("ID", style="dim")
    table.add_column("Target", style="magenta")
    table.add_column("Equipment", style="green")
    table.add_column("Weight", justify="right", style="bold")
    table.add_column("Reps", justify="right")
    table.add_column("Rest(s)", justify="right")

    for i, prescribed in enumerate(plan.sets, 1):
        ex = prescribed.exercise
        table.add_row(
            str(i),
            ex.display_name,
            ex.exercise_id,
            ex.target,
            ex.equipment,
            _fmt_weight(prescribed.weight_kg),
            prescribed.rep_range,
            str(prescribed.rest_seconds),
        )

    return table


def print_plan(plan: SessionPlan, sets_per_exercise: int) -> None:
    """Print a plan table with the set count below it."""
    console.print(format_plan_table(plan))
    console.print(
        f"[dim]{len(plan)} exercises x {sets_per_exercise} "
        f"set{'s' if sets_per_exercise != 1 else ''} each[/dim]"
    )


def format_records_table(records: dict[str, float], names: dict[str, str]) -> Table:
    """
    Create a Rich table of personal records.

    Args:
        records: exercise_id -> weight_kg
        names: exercise_id -> display name (ids without a name are shown as-is)
    """
    table = Table(title="Personal Records")
    table.add_column("Exercise", style="cyan")
    table.add_column("ID", style="dim")
    table.add_column("Weight", justify="right", style="bold")

    for exercise_id in sorted(records):
        table.add_row(
            names.get(exercise_id, exercise_id),
            exercise_id,
            f"{records[exercise_id]:g} kg",
        )
    return table


def print_records(records: dict[str, float], names: dict[str, str]) -> None:
    if not records:
        console.print("[yellow]No personal records yet.[/yellow]")
        return
    console.print(format_records_table(records, names))


def format_status_display(
    xp: int,
    level: int,
    achievements: list[str],
    sessions_logged: int,
    pending: int,
    xp_per_level: int,
) -> str:
    """
    Format progress status as text block.

    Returns:
        Formatted string
    """
    into_level = xp % xp_per_level
    lines = [
        "Current status",
        f"- Level: {level}",
        f"- XP: {xp}  ({into_level}/{xp_per_level} towards level {level + 1})",
        f"- Sessions logged: {sessions_logged}",
        f"- Achievements: {', '.join(achievements) if achievements else 'none yet'}",
    ]
    if pending:
        lines.append(f"- Pending sync: {pending} session result(s); run 'rep-coach sync'")
    return "\n".join(lines)


def print_session_summary(result: SessionResult, names: dict[str, str]) -> None:
    """Print XP, level and record changes after a completed session."""
    console.print()
    console.print(f"[bold green]Session complete![/bold green] {MODE_LABELS.get(result.mode, result.mode)}")
    console.print(f"  Duration: {result.duration_minutes} min")
    console.print(f"  XP earned: [bold]+{result.xp_earned}[/bold]  (total {result.total_xp})")
    if result.leveled_up:
        console.print(f"  [bold magenta]Level up! You are now level {result.level}.[/bold magenta]")
    else:
        console.print(f"  Level: {result.level}")
    for exercise_id, weight in sorted(result.improved_records.items()):
        console.print(f"  [cyan]New target for {names.get(exercise_id, exercise_id)}: {weight:g} kg[/cyan]")


def print_explanation(text: str) -> None:
    console.print(text)


def print_session_help() -> None:
    console.print(
        "[dim]Commands: \\[v] validate set  \\[s] skip rest  \\[h] too hard  "
        "\\[p] pause  \\[r] resume  \\[t] tip  \\[q] quit[/dim]"
    )


# ---------------------------------------------------------------------------
# Live-session subscribers
# ---------------------------------------------------------------------------


class SessionRenderer:
    """Prints controller events as they happen."""

    def __init__(self, controller: SessionController, out: Console | None = None):
        self.controller = controller
        self.out = out or console

    def __call__(self, event: SessionEvent) -> None:
        c = self.controller
        if isinstance(event, ModeSelected):
            self.out.print(
                f"[bold]{MODE_LABELS[event.mode]}[/bold] "
                f"(fatigue {event.fatigue_rating}/10, {c.sets_required} set(s) per exercise)"
            )
        elif isinstance(event, ExerciseStarted):
            ex = event.prescribed.exercise
            total = len(c.plan) if c.plan is not None else 0
            self.out.print()
            self.out.print(
                f"[bold cyan]{event.index + 1}/{total} {ex.display_name}[/bold cyan] "
                f"[dim]({ex.target})[/dim]  {_fmt_weight(event.weight_kg)} x {event.prescribed.rep_range}"
            )
        elif isinstance(event, SetValidated):
            self.out.print(
                f"  Set {event.set_index + 1}/{c.sets_required} done  [green]{event.xp_so_far} XP[/green]"
            )
        elif isinstance(event, RestStarted):
            self.out.print(f"  Rest {event.seconds}s")
        elif isinstance(event, RestFinished):
            self.out.print(f"  [bold]Ready[/bold] for set {event.next_set_index + 1}")
        elif isinstance(event, WeightReduced):
            self.out.print(f"  [yellow]Weight reduced: {event.old_kg:g} -> {event.new_kg:g} kg[/yellow]")
        elif isinstance(event, Paused):
            self.out.print("  [yellow]Paused[/yellow]")
        elif isinstance(event, Resumed):
            self.out.print("  Resumed")
        elif isinstance(event, SessionAbandoned):
            self.out.print(f"[yellow]Session abandoned after {event.elapsed_seconds}s; nothing saved.[/yellow]")


class VoiceCoach:
    """
    Spoken-style cues for the same events, as text.

    Kept separate from SessionRenderer so a real speech backend could replace
    it without touching the display.
    """

    def __init__(self, controller: SessionController, out: Console | None = None):
        self.controller = controller
        self.out = out or console

    def say(self, text: str) -> None:
        self.out.print(f"[italic magenta]Coach: {text}[/italic magenta]")

    def __call__(self, event: SessionEvent) -> None:
        if isinstance(event, ExerciseStarted):
            ex = event.prescribed.exercise
            if event.weight_kg > 0:
                self.say(f"Next up, {ex.display_name} at {event.weight_kg:g} kilos.")
            else:
                self.say(f"Next up, {ex.display_name}.")
        elif isinstance(event, RestFinished) and not event.skipped:
            self.say("Rest is over. Let's go!")
        elif isinstance(event, WeightReduced):
            self.say("No problem, we'll lighten it up.")
        elif isinstance(event, SessionCompleted):
            self.say("Great work today!")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {message}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {message}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{message}[/blue]")


def confirm_action(message: str) -> bool:
    """
    Prompt user for confirmation.

    Args:
        message: Confirmation message

    Returns:
        True if confirmed, False otherwise
    """
    response = console.input(f"{message} \\[y/N]: ")
    return response.lower() in ("y", "yes")
