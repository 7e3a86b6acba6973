"""
statlog command line interface.

Every command reads the logs and state files fresh, performs one action and
exits. Commands that accept an optional project id fall back to the project
currently open (see ``statlog open``).

Usage:
    statlog --help
    statlog create website-redesign
    statlog checkin
    statlog comment add "wired up the footer"
    statlog checkout
    statlog list --filter finished
"""

from __future__ import annotations

import functools
import json
from pathlib import Path
from typing import Any, Callable, Optional

import click

from . import __version__, services
from .config import settings
from .errors import StatlogError
from .logging import setup_logging
from .models import EPOCH, StatusFilter
from .schemas import (
    ErrorResponse,
    ProjectDetailResponse,
    ProjectIndexResponse,
    StatusResponse,
    comment_responses,
)
from .storage import Storage, open_storage
from .utils import format_timestamp

JSON_FLAG = "statlog.json"


def _reporting_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """Render core failures as one error line and exit with status 1."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except StatlogError as exc:
            ctx = click.get_current_context()
            if _as_json():
                click.echo(ErrorResponse(**exc.to_dict()).model_dump_json(), err=True)
            else:
                click.echo(f"Error: {exc.message}", err=True)
            ctx.exit(1)

    return wrapper


def _store() -> Storage:
    return click.get_current_context().find_object(Storage)


def _as_json() -> bool:
    return bool(click.get_current_context().meta.get(JSON_FLAG))


def _resolve(store: Storage, project_id: Optional[str]) -> str:
    if project_id:
        return project_id.strip()
    active = services.active_project(store)
    if active is None:
        raise click.UsageError("No project given and none is open. Use 'statlog open ID' first.")
    return active


def _echo_detail(view: services.ProjectView) -> None:
    if _as_json():
        click.echo(ProjectDetailResponse.from_view(view).model_dump_json(indent=2))
        return
    marker = "  (checked in)" if view.checked_in else ""
    click.echo(f"Project: {view.project_id}")
    click.echo(f"Status:  {view.status.value}{marker}")
    click.echo(f"Total:   {view.duration} ({view.total_minutes} min)")
    if not view.comments:
        click.echo("No comments.")
        return
    current = view.comments[view.cursor]
    click.echo(f"Comment {view.cursor + 1}/{len(view.comments)} [{current.stamp}]: {current.payload}")


def _echo_done(message: str, **payload: Any) -> None:
    if _as_json():
        click.echo(json.dumps({"ok": True, **payload}))
    else:
        click.echo(message)


@click.group()
@click.version_option(version=__version__, prog_name="statlog")
@click.option(
    "--base-dir",
    "-d",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory holding data/, archived/ and state/ (default: STATLOG_BASE_DIR or ~/.statlog).",
)
@click.option("--json", "as_json", is_flag=True, help="Emit machine-readable JSON.")
@click.option("--log-level", default=None, help="Level for diagnostics written to stderr.")
@click.pass_context
def cli(ctx: click.Context, base_dir: Optional[Path], as_json: bool, log_level: Optional[str]) -> None:
    """Track work time per project in append-only event logs.

    At most one project can be checked in at a time.
    """
    setup_logging(log_level or settings.log_level, json=settings.log_json)
    ctx.meta[JSON_FLAG] = as_json
    try:
        ctx.obj = open_storage(base_dir)
    except StatlogError as exc:
        raise click.ClickException(exc.message) from exc


@cli.command("list")
@click.option(
    "--filter",
    "-f",
    "status_filter",
    type=click.Choice([choice.value for choice in StatusFilter]),
    default=StatusFilter.ALL.value,
    show_default=True,
    help="Only show projects with this status.",
)
@_reporting_errors
def list_cmd(status_filter: str) -> None:
    """List active projects, most recently changed first."""
    index = services.list_projects(_store(), StatusFilter(status_filter))
    if _as_json():
        click.echo(ProjectIndexResponse.from_index(index).model_dump_json(indent=2))
        return
    click.echo(f"Filter: {index.status_filter.value}  ({len(index.visible)} of {len(index.entries)})")
    if not index.visible:
        click.echo("(no projects)")
        return
    for entry in index.visible:
        stamp = format_timestamp(entry.last_timestamp) if entry.last_timestamp != EPOCH else "-"
        click.echo(f"{entry.status.value:<9} {entry.project_id:<24} {stamp:<21} {entry.last_comment}")


@cli.command()
@_reporting_errors
def archived() -> None:
    """List archived project ids."""
    ids = services.list_archived_projects(_store())
    if _as_json():
        click.echo(json.dumps({"archived": ids}))
        return
    for project_id in ids:
        click.echo(project_id)


@cli.command()
@click.argument("project_id")
@_reporting_errors
def create(project_id: str) -> None:
    """Create a project and open it."""
    store = _store()
    project_id = project_id.strip()
    services.create_project(store, project_id)
    _echo_done(f"Created '{project_id}'.", project_id=project_id)


@cli.command("open")
@click.argument("project_id")
@_reporting_errors
def open_cmd(project_id: str) -> None:
    """Open a project and show it."""
    _echo_detail(services.open_project(_store(), project_id.strip()))


@cli.command()
@_reporting_errors
def close() -> None:
    """Forget the open project."""
    services.close_project(_store())
    _echo_done("Closed.")


@cli.command()
@click.argument("project_id", required=False)
@_reporting_errors
def show(project_id: Optional[str]) -> None:
    """Show status, total time and the latest comment of a project."""
    store = _store()
    _echo_detail(services.project_view(store, _resolve(store, project_id)))


def _lifecycle_command(action: str, help_text: str) -> None:
    @cli.command(action, help=help_text)
    @click.argument("project_id", required=False)
    @_reporting_errors
    def command(project_id: Optional[str]) -> None:
        store = _store()
        resolved = _resolve(store, project_id)
        event = services.LIFECYCLE_ACTIONS[action](store, resolved)
        _echo_done(f"{action} '{resolved}' at {event.stamp}.", project_id=resolved, kind=action, timestamp=event.stamp)


_lifecycle_command("checkin", "Check in to a project (only one may be checked in).")
_lifecycle_command("checkout", "Check out of the checked-in project.")
_lifecycle_command("finish", "Mark the checked-in project finished and check out.")
_lifecycle_command("cancel", "Mark the checked-in project canceled and check out.")


@cli.group()
def comment() -> None:
    """Add, list and delete comments."""


@comment.command("add")
@click.argument("text")
@click.option("--project", "-p", "project_id", default=None, help="Project id (default: the open project).")
@_reporting_errors
def comment_add(text: str, project_id: Optional[str]) -> None:
    """Add a comment to the checked-in project."""
    store = _store()
    resolved = _resolve(store, project_id)
    event = services.add_comment(store, resolved, text)
    if event is None:
        _echo_done("Nothing to add.", added=False)
        return
    _echo_done(f"Comment added at {event.stamp}.", added=True, timestamp=event.stamp)


@comment.command("list")
@click.argument("project_id", required=False)
@_reporting_errors
def comment_list(project_id: Optional[str]) -> None:
    """List comments, newest last."""
    store = _store()
    comments = comment_responses(services.list_comments(store, _resolve(store, project_id)))
    if _as_json():
        click.echo(json.dumps([item.model_dump(mode="json") for item in comments], indent=2))
        return
    for item in comments:
        click.echo(f"[{item.index}] {item.stamp}  {item.payload}")


@comment.command("delete")
@click.argument("position", type=int)
@click.option("--project", "-p", "project_id", default=None, help="Project id (default: the open project).")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation.")
@_reporting_errors
def comment_delete(position: int, project_id: Optional[str], yes: bool) -> None:
    """Delete the comment at POSITION (as shown by 'comment list')."""
    store = _store()
    resolved = _resolve(store, project_id)
    comments = services.list_comments(store, resolved)
    if not 0 <= position < len(comments):
        raise click.BadParameter(f"no comment at position {position}", param_hint="POSITION")
    chosen = comments[position]
    if not yes:
        click.confirm(f"Delete comment [{chosen.stamp}] {chosen.payload!r}?", abort=True)
    removed = services.delete_comment(store, resolved, chosen)
    _echo_done("Comment deleted." if removed else "No matching comment found.", deleted=removed)


@cli.command()
@click.argument("project_id")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation.")
@_reporting_errors
def archive(project_id: str, yes: bool) -> None:
    """Move a project's log to the archive."""
    project_id = project_id.strip()
    if not yes:
        click.confirm(f"Archive project '{project_id}'?", abort=True)
    services.archive_project(_store(), project_id)
    _echo_done(f"Archived '{project_id}'.", project_id=project_id)


@cli.command()
@click.argument("project_id")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation.")
@_reporting_errors
def delete(project_id: str, yes: bool) -> None:
    """Delete a project's log permanently."""
    project_id = project_id.strip()
    if not yes:
        click.confirm(f"Delete project '{project_id}' permanently?", abort=True)
    services.delete_project(_store(), project_id)
    _echo_done(f"Deleted '{project_id}'.", project_id=project_id)


@cli.command()
@click.argument("project_id")
@_reporting_errors
def restore(project_id: str) -> None:
    """Move an archived project back to the active projects."""
    project_id = project_id.strip()
    services.restore_project(_store(), project_id)
    _echo_done(f"Restored '{project_id}'.", project_id=project_id)


@cli.command()
@_reporting_errors
def status() -> None:
    """Show the checked-in project and the open project."""
    view = StatusResponse.model_validate(services.current_status(_store()))
    if _as_json():
        click.echo(view.model_dump_json())
        return
    click.echo(f"Checked in: {view.lock_holder or '(none)'}")
    click.echo(f"Open:       {view.active_project or '(none)'}")


def main() -> None:
    cli(prog_name="statlog")


__all__ = ["cli", "main"]
