"""Nebula CLI - tasks and calendar planner."""

import asyncio
import json
import logging
import sys
from datetime import date, datetime

import click

from .app import build_coordinator
from .config import load_config
from .coordinator import Coordinator
from .core.calendar import CalendarEvent
from .core.display import CATEGORY_COLORS, DENSITY_MARKERS, PRIORITY_COLORS, PRIORITY_MARKERS
from .core.tasks import Category, Priority, Task
from .core.views import density_level
from .errors import NebulaError
from .ports.calendar_provider import AuthorizationStatus

DATE_FORMATS = ["%Y-%m-%d", "%Y-%m-%dT%H:%M", "%Y-%m-%d %H:%M"]

PRIORITY_CHOICE = click.Choice([p.value for p in Priority], case_sensitive=False)
CATEGORY_CHOICE = click.Choice([c.value for c in Category], case_sensitive=False)


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _get_coordinator() -> Coordinator:
    try:
        return build_coordinator(load_config())
    except NebulaError as e:
        _fail(str(e))


def _resolve_id(coordinator: Coordinator, prefix: str) -> str:
    """Resolve a full task id from a unique prefix."""
    matches = [t.id for t in coordinator.tasks if t.id.startswith(prefix)]
    if len(matches) == 1:
        return matches[0]
    if not matches:
        _fail(f"Task not found: {prefix}")
    _fail(f"Ambiguous task id {prefix!r} matches {len(matches)} tasks")


def _check(coordinator: Coordinator, result):
    if result is None or result is False:
        _fail(coordinator.error_message or "Operation failed")
    return result


def _load_events(coordinator: Coordinator) -> None:
    """Refresh calendar events when access has been granted."""
    if coordinator.bridge.status != AuthorizationStatus.GRANTED:
        return
    asyncio.run(coordinator.refresh_calendar())
    if coordinator.bridge.error_message:
        click.echo(f"Warning: {coordinator.bridge.error_message}", err=True)


def _serialize_event(e: CalendarEvent) -> dict:
    return {
        "title": e.title,
        "start": e.start.isoformat(),
        "end": e.end.isoformat(),
        "location": e.location,
        "notes": e.notes,
        "calendar": e.calendar,
        "all_day": e.all_day,
        "color": e.color,
    }


def _task_line(task: Task) -> str:
    check = "x" if task.is_completed else " "
    marker = click.style(f"{PRIORITY_MARKERS[task.priority]:3}", fg=PRIORITY_COLORS[task.priority])
    category = click.style(task.category.value, fg=CATEGORY_COLORS[task.category])
    due = task.due_date.strftime("%Y-%m-%d %H:%M")
    return f"[{check}] {task.id[:8]} {marker} {task.title} ({category}, due {due})"


def _event_line(event: CalendarEvent) -> str:
    loc = f" @ {event.location}" if event.location else ""
    return f"  {event.format_time():11} {event.title}{loc}"


@click.group()
@click.version_option()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool):
    """Nebula - tasks and calendar planner."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )


@main.command()
@click.argument("title")
@click.option("--description", "-d", default="", help="Free-text description")
@click.option("--due", type=click.DateTime(formats=DATE_FORMATS), default=None,
              help="Due date (YYYY-MM-DD[THH:MM]), defaults to now")
@click.option("--priority", "-p", type=PRIORITY_CHOICE, default=Priority.LOW.value)
@click.option("--category", "-c", type=CATEGORY_CHOICE, default=Category.OTHER.value)
def add(title: str, description: str, due: datetime | None, priority: str, category: str):
    """Create a task."""
    coordinator = _get_coordinator()
    task = _check(
        coordinator,
        coordinator.add_task(
            title,
            description,
            due,
            Priority.parse(priority),
            Category.parse(category),
        ),
    )
    click.echo(f"Created {task.id[:8]}: {task.title}")


@main.command("list")
@click.option("--open", "only_open", is_flag=True, help="Hide completed tasks")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def list_tasks(only_open: bool, as_json: bool):
    """List all tasks, most urgent first."""
    coordinator = _get_coordinator()
    tasks = coordinator.sorted_tasks()
    if only_open:
        tasks = [t for t in tasks if not t.is_completed]

    if as_json:
        click.echo(json.dumps([t.to_dict() for t in tasks], indent=2))
        return

    if not tasks:
        click.echo("No tasks.")
        return
    for task in tasks:
        click.echo(_task_line(task))


@main.command()
@click.argument("task_id")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def show(task_id: str, as_json: bool):
    """Show one task."""
    coordinator = _get_coordinator()
    task = _check(coordinator, coordinator.select_task(_resolve_id(coordinator, task_id)))

    if as_json:
        click.echo(json.dumps(task.to_dict(), indent=2))
        return

    click.echo(_task_line(task))
    if task.description:
        click.echo(f"\n{task.description}")
    click.echo(f"\nPriority: {task.priority.value}")
    click.echo(f"Created:  {task.creation_date.strftime('%Y-%m-%d %H:%M')}")


@main.command()
@click.argument("task_id")
@click.option("--title", "-t", default=None)
@click.option("--description", "-d", default=None)
@click.option("--due", type=click.DateTime(formats=DATE_FORMATS), default=None)
@click.option("--priority", "-p", type=PRIORITY_CHOICE, default=None)
@click.option("--category", "-c", type=CATEGORY_CHOICE, default=None)
def edit(task_id: str, title, description, due, priority, category):
    """Change fields of a task."""
    coordinator = _get_coordinator()
    task = _check(
        coordinator,
        coordinator.update_task(
            _resolve_id(coordinator, task_id),
            title=title,
            description=description,
            due_date=due,
            priority=Priority.parse(priority) if priority else None,
            category=Category.parse(category) if category else None,
        ),
    )
    click.echo(f"Updated {task.id[:8]}: {task.title}")


@main.command()
@click.argument("task_id")
def done(task_id: str):
    """Toggle a task's completion."""
    coordinator = _get_coordinator()
    task = _check(coordinator, coordinator.toggle_completion(_resolve_id(coordinator, task_id)))
    state = "completed" if task.is_completed else "reopened"
    click.echo(f"{task.title} {state}.")


@main.command()
@click.argument("task_id")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
def delete(task_id: str, yes: bool):
    """Delete a task."""
    coordinator = _get_coordinator()
    full_id = _resolve_id(coordinator, task_id)
    if not yes and not click.confirm(f"Delete task {full_id[:8]}?"):
        return
    _check(coordinator, coordinator.delete_task(full_id))
    click.echo(f"Deleted {full_id[:8]}.")


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def today(as_json: bool):
    """Today's tasks and calendar events."""
    coordinator = _get_coordinator()
    _load_events(coordinator)
    tasks = coordinator.today_tasks()
    events = coordinator.events_for_date(date.today())

    if as_json:
        click.echo(
            json.dumps(
                {
                    "tasks": [t.to_dict() for t in tasks],
                    "events": [_serialize_event(e) for e in events],
                },
                indent=2,
            )
        )
        return

    click.echo(f"Today, {date.today().strftime('%A, %B %d')}\n")
    click.echo("Tasks:")
    if tasks:
        for task in tasks:
            click.echo(f"  {_task_line(task)}")
    else:
        click.echo("  No tasks due today.")
    click.echo("\nCalendar:")
    if events:
        for event in events:
            click.echo(_event_line(event))
    else:
        click.echo("  No events.")


@main.command()
@click.option("--date", "-d", "target", type=click.DateTime(formats=["%Y-%m-%d"]), default=None,
              help="Any day of the week to show (YYYY-MM-DD), defaults to today")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def week(target: datetime | None, as_json: bool):
    """Tasks and events for each day of a week."""
    coordinator = _get_coordinator()
    _load_events(coordinator)
    day = target.date() if target else date.today()
    tasks_by_day = coordinator.tasks_for_week(day)
    events_by_day = dict(coordinator.events_for_week(day))

    if as_json:
        click.echo(
            json.dumps(
                [
                    {
                        "date": d.isoformat(),
                        "tasks": [t.to_dict() for t in tasks],
                        "events": [_serialize_event(e) for e in events_by_day.get(d, [])],
                    }
                    for d, tasks in tasks_by_day
                ],
                indent=2,
            )
        )
        return

    for i, (d, tasks) in enumerate(tasks_by_day):
        if i:
            click.echo()
        click.echo(f"### {d.strftime('%A, %B %d')}")
        for event in events_by_day.get(d, []):
            click.echo(_event_line(event))
        for task in tasks:
            click.echo(f"  {_task_line(task)}")
        if not tasks and not events_by_day.get(d):
            click.echo("  -")


@main.command()
@click.option("--month", "-m", "target", type=click.DateTime(formats=["%Y-%m"]), default=None,
              help="Month to show (YYYY-MM), defaults to this month")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def month(target: datetime | None, as_json: bool):
    """Month grid with per-day task density."""
    coordinator = _get_coordinator()
    anchor = target.date() if target else date.today()
    grid = coordinator.month_density(anchor.year, anchor.month)

    if as_json:
        click.echo(
            json.dumps(
                [
                    {
                        "date": d.isoformat(),
                        "in_month": d.month == anchor.month,
                        "density": value,
                        "level": density_level(value).value,
                    }
                    for d, value in grid
                ],
                indent=2,
            )
        )
        return

    click.echo(anchor.strftime("%B %Y").center(35))
    click.echo(" ".join(f"{d.strftime('%a'):>4}" for d, _ in grid[:7]))
    for row in range(0, len(grid), 7):
        cells = []
        for d, value in grid[row:row + 7]:
            marker = DENSITY_MARKERS[density_level(value)]
            label = f"{d.day:>2}{marker}" if d.month == anchor.month else f"{'':>2} "
            cells.append(f"{label:>4}")
        click.echo(" ".join(cells))


@main.group()
def calendar():
    """Calendar access and events."""
    pass


@calendar.command("auth")
def calendar_auth():
    """Request read access to the configured calendars."""
    coordinator = _get_coordinator()
    bridge = coordinator.bridge
    if not bridge.provider.providers:
        _fail("No calendar sources configured in nebula.conf")

    status = asyncio.run(coordinator.request_calendar_access())
    if status == AuthorizationStatus.GRANTED:
        click.echo(f"Calendar access granted ({len(bridge.events)} upcoming events).")
        if bridge.error_message:
            click.echo(f"Warning: {bridge.error_message}", err=True)
    elif bridge.error_message:
        _fail(bridge.error_message)
    else:
        click.echo(f"Calendar access {status.value}.", err=True)
        sys.exit(1)


@calendar.command("events")
@click.option("--date", "-d", "target", type=click.DateTime(formats=["%Y-%m-%d"]), default=None,
              help="Only show this date (YYYY-MM-DD)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def calendar_events(target: datetime | None, as_json: bool):
    """Show cached calendar events for the coming window."""
    coordinator = _get_coordinator()
    bridge = coordinator.bridge
    if bridge.status != AuthorizationStatus.GRANTED:
        _fail("Calendar access not granted - run 'nebula calendar auth'")
    _load_events(coordinator)
    events = bridge.events_for_date(target) if target else bridge.events

    if as_json:
        click.echo(json.dumps([_serialize_event(e) for e in events], indent=2))
        return

    if not events:
        click.echo("No events.")
        return

    current_date = None
    for event in events:
        event_date = event.start.date()
        if event_date != current_date:
            if current_date is not None:
                click.echo()
            click.echo(f"### {event_date.strftime('%A, %B %d')}")
            current_date = event_date
        click.echo(_event_line(event))


if __name__ == "__main__":
    main()
