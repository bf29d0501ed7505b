"""Command line interface for HabitIntel."""

from __future__ import annotations

import json
from datetime import date
from functools import wraps
from pathlib import Path
from typing import Any, Callable, Optional

import click

from .config import BaseConfig
from .constants import COLORS, DEFAULT_COLOR
from .context import AppContext, create_app_context
from .errors import HabitIntelError, RecordShapeError
from .logging_config import setup_logging
from .services.dates import format_date, format_month, parse_date, parse_month
from .services.streaks import longest_streak


class _DateType(click.ParamType):
    name = "YYYY-MM-DD"

    def convert(self, value: Any, param, ctx) -> date:
        try:
            return parse_date(value)
        except ValueError as exc:
            self.fail(str(exc), param, ctx)


class _MonthType(click.ParamType):
    name = "YYYY-MM"

    def convert(self, value: Any, param, ctx) -> date:
        try:
            return parse_month(value)
        except ValueError as exc:
            self.fail(str(exc), param, ctx)


DATE = _DateType()
MONTH = _MonthType()


def _reports_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """Turn domain failures into a clean CLI error message."""

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except (HabitIntelError, RecordShapeError, json.JSONDecodeError) as exc:
            raise click.ClickException(str(exc)) from exc

    return wrapper


def _require_device(app: AppContext) -> str:
    if app.tracker.get_device(app.device_id) is None:
        raise click.ClickException("No profile yet. Run `habitintel register NAME` first.")
    return app.device_id


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Track daily habits in time-of-day slots."""

    if ctx.obj is None:
        config = BaseConfig()
        setup_logging(config)
        ctx.obj = create_app_context(config)


@cli.command("register")
@click.argument("username")
@click.pass_obj
@_reports_errors
def register(app: AppContext, username: str) -> None:
    """Create the profile for this installation."""

    device = app.tracker.register_device(app.device_id, username)
    click.echo(f"Profile ready for {device.username} ({device.device_id})")


@cli.command("slot-add")
@click.argument("time")
@click.option("--order", type=int, default=None, help="Display rank (defaults to last)")
@click.pass_obj
@_reports_errors
def slot_add(app: AppContext, time: str, order: Optional[int]) -> None:
    """Add a time-of-day slot such as 07:30."""

    slot = app.tracker.create_slot(_require_device(app), time, order)
    click.echo(f"Slot {slot.id} at {slot.time}")


@cli.command("slots")
@click.option("--month", type=MONTH, default=None, help="Month to show (defaults to current)")
@click.pass_obj
@_reports_errors
def slots(app: AppContext, month: Optional[date]) -> None:
    """List slots with the habit each shows for a month."""

    device_id = _require_device(app)
    snapshot = app.tracker.load_month(device_id, month or app.tracker.clock())
    rows = app.tracker.month_rows(snapshot)
    if not rows:
        click.echo("No slots yet.")
        return
    click.echo(f"Slots for {format_month(snapshot.month)}")
    for row in rows:
        if row.segment is None:
            click.echo(f"  {row.slot.time}  {row.slot.id}  (no habit)")
            continue
        best = longest_streak(app.repository.load_segment_entries(row.segment.id, completed_only=True))
        click.echo(
            f"  {row.slot.time}  {row.slot.id}  {row.segment.name} [{row.segment.id}]"
            f"  streak {row.live_streak} (next {row.next_milestone}, best {best})"
        )


@cli.command("slot-delete")
@click.argument("slot_id")
@click.pass_obj
@_reports_errors
def slot_delete(app: AppContext, slot_id: str) -> None:
    """Delete a slot with all of its habits and their history."""

    app.tracker.delete_slot(slot_id)
    click.echo(f"Deleted slot {slot_id}")


@cli.command("reorder")
@click.argument("slot_ids", nargs=-1, required=True)
@click.pass_obj
@_reports_errors
def reorder(app: AppContext, slot_ids: tuple[str, ...]) -> None:
    """Set the display order of slots to the order given."""

    app.tracker.reorder_slots(_require_device(app), list(slot_ids))
    click.echo("Slots reordered")


@cli.command("habit-add")
@click.argument("slot_id")
@click.argument("name")
@click.option("--color", default=DEFAULT_COLOR, show_default=True, help=f"One of {', '.join(COLORS)} or any colour")
@click.option("--start", "start_date", type=DATE, default=None, help="First day (defaults to today)")
@click.option("--month", type=MONTH, default=None, help="Month being viewed, used for the default start")
@click.pass_obj
@_reports_errors
def habit_add(
    app: AppContext,
    slot_id: str,
    name: str,
    color: str,
    start_date: Optional[date],
    month: Optional[date],
) -> None:
    """Start a habit on a slot, replacing the slot's current habit."""

    segment = app.tracker.create_segment(slot_id, name, color, start_date, viewed_month=month)
    click.echo(f"Habit {segment.name} [{segment.id}] from {format_date(segment.start_date)}")


@cli.command("habit-edit")
@click.argument("segment_id")
@click.option("--name", required=True)
@click.option("--color", default=None)
@click.pass_obj
@_reports_errors
def habit_edit(app: AppContext, segment_id: str, name: str, color: Optional[str]) -> None:
    """Rename or recolour a habit without touching its history."""

    segment = app.tracker.rename_segment(segment_id, name, color)
    click.echo(f"Habit {segment.id} is now {segment.name} ({segment.color})")


@cli.command("habit-delete")
@click.argument("segment_id")
@click.pass_obj
@_reports_errors
def habit_delete(app: AppContext, segment_id: str) -> None:
    """Delete a habit and its completion history."""

    app.tracker.delete_segment(segment_id)
    click.echo(f"Deleted habit {segment_id}")


@cli.command("toggle")
@click.argument("segment_id")
@click.option("--date", "day", type=DATE, default=None, help="Day to mark (defaults to today)")
@click.option("--undo", is_flag=True, default=False, help="Mark the day as not completed")
@click.pass_obj
@_reports_errors
def toggle(app: AppContext, segment_id: str, day: Optional[date], undo: bool) -> None:
    """Mark a habit done (or not done) for a day."""

    day = day or app.tracker.clock()
    result = app.tracker.toggle_entry(segment_id, day, not undo)
    last = format_date(result.last_completed_date) if result.last_completed_date else "never"
    state = "done" if result.entry.completed else "not done"
    click.echo(f"{format_date(day)} {state}; streak {result.streak}, last completed {last}")


@cli.command("report")
@click.option("--month", type=MONTH, default=None, help="Month to analyse (defaults to current)")
@click.option("--json", "as_json", is_flag=True, default=False, help="Emit JSON instead of text")
@click.pass_obj
@_reports_errors
def report(app: AppContext, month: Optional[date], as_json: bool) -> None:
    """Show monthly completion analytics."""

    snapshot = app.tracker.analytics(_require_device(app), month or app.tracker.clock())
    if as_json:
        click.echo(json.dumps(snapshot.to_dict(), indent=2))
        return
    click.echo(f"{format_month(snapshot.month)}: overall efficiency {snapshot.overall_efficiency:.0f}%")
    for week in snapshot.weekly_progress:
        click.echo(f"  week {week.week}: {week.value:.0f}%")
    if not snapshot.top_habits:
        click.echo("  No data yet.")
    for habit in snapshot.top_habits:
        click.echo(f"  {habit.name}: {habit.rate:.0f}%")


@cli.command("export")
@click.argument("output", type=click.Path(dir_okay=False, path_type=Path))
@click.pass_obj
@_reports_errors
def export(app: AppContext, output: Path) -> None:
    """Write every record of this installation to a JSON file."""

    from .services.export_json import export_device_json

    path = export_device_json(app.repository, _require_device(app), output)
    click.echo(f"Export written: {path}")


@cli.command("import")
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_obj
@_reports_errors
def import_(app: AppContext, source: Path) -> None:
    """Load records from a JSON export."""

    from .services.export_json import import_device_json

    bundle = import_device_json(app.repository, source)
    click.echo(
        f"Imported {len(bundle.slots)} slots, {len(bundle.segments)} habits, "
        f"{len(bundle.entries)} entries for {bundle.device.username}"
    )


def main() -> None:
    cli()


if __name__ == "__main__":  # pragma: no cover
    main()
