"""taskday CLI - inspect bucket filtering against a local task database."""

import json
import logging
import sys
import uuid
from datetime import datetime, timezone
from pathlib import Path
from zoneinfo import ZoneInfo

import click

from .config import load_config
from .core.classify import Bucket
from .core.dates import compute_boundaries, to_utc
from .core.query import FilterQuery
from .core.tasks import Priority, Task, TaskStatus
from .errors import InvalidDateFormat, InvalidTimezone, StoreQueryFailed
from .filters import utc_now
from .services import Services, build_services

BUCKET_CHOICES = [b.value for b in Bucket]
PRIORITY_CHOICES = [p.value for p in Priority]


def _parse_now(ctx, param, value: str | None) -> datetime | None:
    """Parse an ISO instant; naive values are taken as UTC."""
    if value is None:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        raise click.BadParameter(f"{value!r} is not an ISO-8601 datetime")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


tenant_option = click.option("--tenant", envvar="TASKDAY_TENANT", default="default", show_default=True)
user_option = click.option("--user", envvar="TASKDAY_USER", default="me", show_default=True)
now_option = click.option("--now", callback=_parse_now, default=None,
                          help="Evaluate as of this ISO instant instead of the current time")
json_option = click.option("--json", "as_json", is_flag=True, help="Output as JSON")


@click.group()
@click.version_option(package_name="taskday")
@click.option("--config", "config_path", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Path to taskday.conf")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx, config_path: Path | None, debug: bool):
    """taskday - timezone-aware task buckets."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


def _services(ctx) -> Services:
    obj = ctx.ensure_object(dict)
    if "services" not in obj:
        obj["services"] = build_services(load_config(obj.get("config_path")))
    return obj["services"]


def _task_line(task: Task, timezone_id: str) -> str:
    marker = {"urgent": "!!!", "high": "!! ", "medium": "!  ", "low": "   "}[task.priority.value]
    done = "x" if task.status is TaskStatus.COMPLETED else " "
    due = ""
    if task.due_at:
        due = f" (due {task.due_at.astimezone(ZoneInfo(timezone_id)):%Y-%m-%d %H:%M})"
    return f"[{done}] [{marker}] {task.title}{due}  <{task.id}>"


@main.command()
@click.argument("title")
@tenant_option
@user_option
@click.option("--due", default=None, help="Due date (YYYY-MM-DD) in the user's timezone")
@click.option("--priority", type=click.Choice(PRIORITY_CHOICES), default="medium", show_default=True)
@click.pass_context
def add(ctx, title: str, tenant: str, user: str, due: str | None, priority: str):
    """Add a task."""
    services = _services(ctx)
    timezone_id = services.resolver.resolve(user)
    try:
        due_at = to_utc(due, timezone_id) if due else None
    except InvalidDateFormat as e:
        raise click.BadParameter(str(e), param_hint="--due")

    task = Task(
        id=uuid.uuid4().hex[:12],
        tenant_id=tenant,
        user_id=user,
        title=title,
        status=TaskStatus.ACTIVE,
        priority=Priority(priority),
        due_at=due_at,
        created_at=utc_now(),
    )
    services.store.add(task)
    services.counts.invalidate(tenant, user)
    click.echo(f"Added {task.id}")


@main.command()
@click.argument("task_id")
@tenant_option
@user_option
@click.pass_context
def complete(ctx, task_id: str, tenant: str, user: str):
    """Mark a task completed."""
    services = _services(ctx)
    task = services.store.get(task_id)
    if task is None or task.tenant_id != tenant or task.user_id != user:
        click.echo(f"Error: no task {task_id}", err=True)
        sys.exit(1)
    services.store.add(task.complete(utc_now()))
    services.counts.invalidate(tenant, user)
    click.echo(f"Completed {task_id}")


@main.command("list")
@tenant_option
@user_option
@click.option("--filter", "bucket", type=click.Choice(BUCKET_CHOICES), default="all", show_default=True)
@click.option("--include-completed", type=click.IntRange(min=0), default=None,
              help="Also show tasks completed within N days")
@click.option("--priority", type=click.Choice(PRIORITY_CHOICES), default=None)
@click.option("--search", default=None, help="Case-insensitive title filter")
@click.option("--limit", type=click.IntRange(min=1), default=None)
@click.option("--offset", type=click.IntRange(min=0), default=0)
@now_option
@json_option
@click.pass_context
def list_tasks(ctx, tenant, user, bucket, include_completed, priority, search, limit, offset, now, as_json):
    """List tasks in a bucket."""
    services = _services(ctx)
    query = FilterQuery(
        bucket=bucket,
        include_completed_days=include_completed,
        priority=priority,
        search=search,
        limit=limit,
        offset=offset,
    )
    try:
        result = services.engine.get_filtered_tasks(tenant, user, query, now=now)
    except StoreQueryFailed as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    if not result.tasks:
        click.echo(f"No tasks in {bucket}.")
        return
    for task in result.tasks:
        click.echo(_task_line(task, result.boundaries.timezone))
    if result.has_more:
        click.echo(f"... {result.count - offset - len(result.tasks)} more")


@main.command()
@tenant_option
@user_option
@now_option
@json_option
@click.pass_context
def counts(ctx, tenant, user, now, as_json):
    """Show task counts for every bucket."""
    services = _services(ctx)
    result = services.counts.get_filter_counts(tenant, user, now=now)
    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return
    for name, value in result.to_dict().items():
        click.echo(f"{name:>10}: {value}")


@main.command()
@click.option("--tz", "timezone_id", default=None, help="IANA zone (defaults to the user's)")
@user_option
@click.option("--window", type=click.IntRange(min=0), default=None, help="Completed-task window in days")
@now_option
@click.pass_context
def boundaries(ctx, timezone_id, user, window, now):
    """Print the day boundaries used for classification."""
    if timezone_id is None or window is None:
        services = _services(ctx)
        timezone_id = timezone_id or services.resolver.resolve(user)
        window = services.resolver.completed_window(user) if window is None else window
    result = compute_boundaries(timezone_id, window, now or utc_now())
    click.echo(json.dumps(result.to_dict(), indent=2))


@main.command("to-utc")
@click.argument("date_string")
@click.option("--tz", "timezone_id", default="UTC", show_default=True)
def to_utc_cmd(date_string: str, timezone_id: str):
    """Convert a YYYY-MM-DD date to the UTC instant of local midnight."""
    try:
        click.echo(to_utc(date_string, timezone_id).isoformat())
    except InvalidDateFormat as e:
        raise click.BadParameter(str(e), param_hint="DATE_STRING")


@main.command("set-timezone")
@click.argument("timezone_id")
@user_option
@click.pass_context
def set_timezone(ctx, timezone_id: str, user: str):
    """Set a user's timezone preference."""
    services = _services(ctx)
    try:
        stored = services.resolver.update_timezone(user, timezone_id)
    except InvalidTimezone as e:
        raise click.BadParameter(str(e), param_hint="TIMEZONE_ID")
    click.echo(f"Timezone for {user} set to {stored}")


if __name__ == "__main__":
    main()
