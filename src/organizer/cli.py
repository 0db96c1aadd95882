"""Organizer CLI - personal productivity backend."""

import json
import logging
import sys
from datetime import date, timedelta

import click

from .adapters.oauth import AuthenticationError, authorize_account
from .config import load_config
from .core import calendar as cal
from .core.accounts import account_status_color, account_status_message
from .core.coaching import open_goals
from .core.mail import DEFAULT_FOLDERS
from .core.records import parse_datetime
from .core.tasks import PRIORITIES
from .errors import OrganizerError
from .workflows import open_workspace, process_feedback


def _fail(e: Exception) -> None:
    click.echo(f"Error: {e}", err=True)
    sys.exit(1)


def _workspace():
    return open_workspace(load_config())


def _echo_json(items) -> None:
    click.echo(json.dumps([i.to_dict() for i in items], indent=2, default=str))


@click.group()
@click.version_option()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool):
    """Organizer - calendar, mail, tasks, projects and people in one place."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )


# ============== Accounts ==============


@main.group()
def accounts():
    """Manage integration accounts."""


@accounts.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def accounts_list(as_json: bool):
    """List integration accounts."""
    items = _workspace().accounts.list()
    if as_json:
        click.echo(
            json.dumps(
                [
                    {
                        "id": a.id,
                        "type": a.type,
                        "email": a.email,
                        "connected": a.connected,
                        "last_sync": a.last_sync.isoformat() if a.last_sync else None,
                    }
                    for a in items
                ],
                indent=2,
            )
        )
        return

    if not items:
        click.echo("No accounts. Add one with 'organizer accounts add'.")
        return
    for account in items:
        mark = "✓" if account.connected else "✗"
        click.echo(f"{mark} {account.id[:8]}  {account.type:10} {account.email}")


@accounts.command("add")
@click.argument("type", type=click.Choice(["google", "office365", "exchange"]))
@click.argument("email")
@click.option("--name", default=None, help="Display name")
@click.option("--server", default="", help="Exchange server")
def accounts_add(type: str, email: str, name: str | None, server: str):
    """Add an integration account (run 'accounts connect' next)."""
    account = _workspace().accounts.add(type, email, name=name, server=server)
    click.echo(f"Added {account.type} account {account.email} ({account.id})")


@accounts.command("remove")
@click.argument("account_id")
def accounts_remove(account_id: str):
    """Remove an integration account."""
    try:
        _workspace().accounts.delete(account_id)
    except OrganizerError as e:
        _fail(e)
    click.echo(f"Removed account {account_id}")


@accounts.command("connect")
@click.argument("account_id")
def accounts_connect(account_id: str):
    """Authorize an account with its provider."""
    config = load_config()
    store = open_workspace(config).accounts
    try:
        account = store.get(account_id)
        authorize_account(account, config)
    except (OrganizerError, AuthenticationError) as e:
        _fail(e)
    store.save(account)
    click.echo(f"✓ Connected {account.email}")


@accounts.command("status")
def accounts_status():
    """Show connection status for every account."""
    items = _workspace().accounts.list()
    if not items:
        click.echo("No accounts.")
        return
    for account in items:
        color = {"success": "green", "warning": "yellow", "error": "red"}[account_status_color(account)]
        status = click.style(account_status_message(account), fg=color)
        click.echo(f"{account.email:32} {status}")


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def refresh(as_json: bool):
    """Refresh mail, calendar and contacts from every connected account."""
    result = _workspace().refresher().refresh_all()
    if result is None:
        click.echo("A refresh is already running.")
        return
    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return
    click.echo(
        f"Refreshed: {result.succeeded} succeeded, {result.failed} failed, {result.skipped} skipped"
    )
    if result.error:
        click.echo(f"Error: {result.error}", err=True)
        sys.exit(1)


# ============== Tasks ==============


@main.group(invoke_without_command=True)
@click.pass_context
def tasks(ctx):
    """Manage tasks."""
    if ctx.invoked_subcommand is None:
        ctx.invoke(tasks_list)


@tasks.command("list")
@click.option("--all", "show_all", is_flag=True, help="Include completed and cancelled tasks")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def tasks_list(show_all: bool = False, as_json: bool = False):
    """List open tasks."""
    items = _workspace().tasks.list()
    if not show_all:
        items = [t for t in items if t.is_open]
    if as_json:
        _echo_json(items)
        return

    if not items:
        click.echo("No tasks.")
        return
    for task in items:
        due = f" (due {task.due_date.date()})" if task.due_date else ""
        click.echo(f"{task.id[:8]}  [{task.status:10}] {task.title}{due}")


@tasks.command("add")
@click.argument("title")
@click.option("--priority", type=click.Choice(PRIORITIES), default="medium")
@click.option("--due", default=None, help="Due date (YYYY-MM-DD)")
@click.option("--project", "project_id", default="", help="Project id")
def tasks_add(title: str, priority: str, due: str | None, project_id: str):
    """Add a task."""
    try:
        due_date = parse_datetime(due)
    except ValueError as e:
        _fail(e)
    task = _workspace().tasks.add(title, priority=priority, due_date=due_date, project_id=project_id)
    click.echo(f"Added task {task.id}")


@tasks.command("done")
@click.argument("task_id")
def tasks_done(task_id: str):
    """Mark a task completed."""
    try:
        task = _workspace().tasks.mark_complete(task_id)
    except OrganizerError as e:
        _fail(e)
    click.echo(f"✓ {task.title}")


@tasks.command("delegate")
@click.argument("task_id")
@click.argument("assignee")
def tasks_delegate(task_id: str, assignee: str):
    """Delegate a task to someone."""
    try:
        task = _workspace().tasks.mark_delegated(task_id, assignee)
    except OrganizerError as e:
        _fail(e)
    click.echo(f"Delegated '{task.title}' to {assignee}")


@tasks.command("comment")
@click.argument("task_id")
@click.argument("text")
def tasks_comment(task_id: str, text: str):
    """Comment on a task."""
    try:
        _workspace().tasks.add_comment(task_id, text)
    except OrganizerError as e:
        _fail(e)
    click.echo("Comment added.")


# ============== Projects ==============


@main.group()
def projects():
    """Manage projects."""


@projects.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def projects_list(as_json: bool):
    """List projects by priority."""
    items = _workspace().projects.list()
    if as_json:
        _echo_json(items)
        return

    if not items:
        click.echo("No projects.")
        return
    for project in items:
        click.echo(f"{project.id[:8]}  [{project.priority:6}] {project.title} ({project.progress}%)")


@projects.command("add")
@click.argument("title")
@click.option("--priority", type=click.Choice(PRIORITIES), default="medium")
@click.option("--description", default="")
def projects_add(title: str, priority: str, description: str):
    """Add a project."""
    try:
        project = _workspace().projects.add(title, priority=priority, description=description)
    except ValueError as e:
        _fail(e)
    click.echo(f"Added project {project.id}")


@projects.command("progress")
@click.argument("project_id")
@click.argument("progress", type=int)
def projects_progress(project_id: str, progress: int):
    """Set project progress (0-100)."""
    try:
        project = _workspace().projects.update_progress(project_id, progress)
    except (OrganizerError, ValueError) as e:
        _fail(e)
    click.echo(f"{project.title}: {project.progress}%")


@projects.command("page-add")
@click.argument("project_id")
@click.argument("title")
@click.option("--content", default="")
def projects_page_add(project_id: str, title: str, content: str):
    """Add a page to a project."""
    try:
        page = _workspace().projects.create_page(project_id, title, content)
    except OrganizerError as e:
        _fail(e)
    click.echo(f"Added page {page.id}")


# ============== Meetings ==============


@main.group()
def meetings():
    """Manage meetings."""


@meetings.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def meetings_list(as_json: bool):
    """List meetings by start time."""
    items = _workspace().meetings.list()
    if as_json:
        _echo_json(items)
        return

    if not items:
        click.echo("No meetings.")
        return
    for meeting in items:
        click.echo(f"{meeting.id[:8]}  {meeting.start_time:%Y-%m-%d %H:%M}  {meeting.title}")


@meetings.command("add")
@click.argument("title")
@click.option("--start", required=True, help="Start (ISO datetime)")
@click.option("--minutes", default=30, help="Duration in minutes")
@click.option("--location", default="")
def meetings_add(title: str, start: str, minutes: int, location: str):
    """Add a meeting."""
    try:
        start_time = parse_datetime(start)
    except ValueError as e:
        _fail(e)
    meeting = _workspace().meetings.add(
        title, start_time, start_time + timedelta(minutes=minutes), location=location
    )
    click.echo(f"Added meeting {meeting.id}")


@meetings.command("summary")
@click.argument("meeting_id")
@click.argument("summary")
def meetings_summary(meeting_id: str, summary: str):
    """Record a meeting summary."""
    try:
        _workspace().meetings.create_summary(meeting_id, summary)
    except OrganizerError as e:
        _fail(e)
    click.echo("Summary saved.")


# ============== People ==============


@main.group()
def people():
    """Manage people."""


@people.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def people_list(as_json: bool):
    """List people."""
    items = _workspace().people.list()
    if as_json:
        _echo_json(items)
        return

    if not items:
        click.echo("No people.")
        return
    for person in items:
        email = f" <{person.email}>" if person.email else ""
        click.echo(f"{person.id[:8]}  {person.full_name}{email}")


@people.command("add")
@click.argument("first_name")
@click.argument("last_name", default="")
@click.option("--email", default="")
@click.option("--organization", default="")
def people_add(first_name: str, last_name: str, email: str, organization: str):
    """Add a person."""
    person = _workspace().people.add(
        first_name, last_name=last_name, email=email, organization=organization
    )
    click.echo(f"Added {person.full_name} ({person.id})")


@people.command("contacted")
@click.argument("person_id")
def people_contacted(person_id: str):
    """Record that you were in touch with someone today."""
    try:
        person = _workspace().people.update_last_contact_date(person_id)
    except OrganizerError as e:
        _fail(e)
    click.echo(f"Last contact with {person.full_name} updated.")


# ============== Behaviors ==============


@main.group()
def behaviors():
    """Manage behaviors and action plans."""


@behaviors.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def behaviors_list(as_json: bool):
    """List behaviors."""
    items = _workspace().behaviors.list()
    if as_json:
        _echo_json(items)
        return

    if not items:
        click.echo("No behaviors.")
        return
    for behavior in items:
        click.echo(f"{behavior.id[:8]}  [{behavior.type}] {behavior.title}")
        for plan in behavior.action_plans:
            click.echo(f"    - {plan.description}")


@behaviors.command("add")
@click.argument("title")
@click.option(
    "--type",
    "behavior_type",
    type=click.Choice(["doWell", "wantToDoBetter", "needToImprove"]),
    default="wantToDoBetter",
)
@click.option("--description", default="")
def behaviors_add(title: str, behavior_type: str, description: str):
    """Add a behavior."""
    behavior = _workspace().behaviors.add(title, behavior_type, description=description)
    click.echo(f"Added behavior {behavior.id}")


@behaviors.command("plan")
@click.argument("behavior_id")
@click.argument("description")
def behaviors_plan(behavior_id: str, description: str):
    """Add an action plan to a behavior."""
    try:
        plan = _workspace().behaviors.add_action_plan(behavior_id, description)
    except OrganizerError as e:
        _fail(e)
    click.echo(f"Added action plan {plan.id}")


# ============== Coaching ==============


@main.group()
def coaching():
    """Manage coaching records."""


@coaching.command("list")
@click.option("--person", "person_id", default=None, help="Only records for this person id")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def coaching_list(person_id: str | None, as_json: bool):
    """List coaching records, most recently updated first."""
    store = _workspace().coaching
    items = store.for_person(person_id) if person_id else store.list()
    if as_json:
        _echo_json(items)
        return

    if not items:
        click.echo("No coaching records.")
        return
    for record in items:
        click.echo(f"{record.id[:8]}  {record.title}")
        for goal in open_goals(record):
            click.echo(f"    - {goal.title} ({goal.progression}%)")


@coaching.command("add")
@click.argument("person_id")
@click.argument("title")
@click.option("--notes", default="")
def coaching_add(person_id: str, title: str, notes: str):
    """Start a coaching record for a person."""
    record = _workspace().coaching.add(person_id, title, notes=notes)
    click.echo(f"Added coaching record {record.id}")


@coaching.command("goal")
@click.argument("record_id")
@click.argument("title")
@click.option("--target", default=None, help="Target date (YYYY-MM-DD)")
def coaching_goal(record_id: str, title: str, target: str | None):
    """Add a goal to a coaching record."""
    try:
        goal = _workspace().coaching.add_goal(record_id, title, target_date=parse_datetime(target))
    except (OrganizerError, ValueError) as e:
        _fail(e)
    click.echo(f"Added goal {goal.id}")


@coaching.command("progress")
@click.argument("record_id")
@click.argument("goal_id")
@click.argument("progression", type=int)
@click.option("--notes", default="")
def coaching_progress(record_id: str, goal_id: str, progression: int, notes: str):
    """Record progress on a goal."""
    try:
        goal = _workspace().coaching.update_goal(
            record_id, goal_id, status="inProgress", progression=progression, notes=notes
        )
    except OrganizerError as e:
        _fail(e)
    click.echo(f"{goal.title}: {goal.progression}%")


# ============== Feedback ==============


@main.group()
def feedback():
    """Review in-app feedback."""


@feedback.command("list")
@click.option("--archived", is_flag=True, help="Show archived feedback")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def feedback_list(archived: bool, as_json: bool):
    """List feedback, newest first."""
    items = [f for f in _workspace().feedback.list() if f.archived == archived]
    if as_json:
        _echo_json(items)
        return

    if not items:
        click.echo("No feedback.")
        return
    for item in items:
        flags = "".join(
            [
                " " if item.seen else "*",
                {"yes": "+", "no": "-"}.get(item.user_action, " "),
                "i" if item.improved else " ",
            ]
        )
        click.echo(f"{item.id[:8]} {flags} {item.timestamp:%Y-%m-%d}  {item.message[:60]}")


@feedback.command("add")
@click.argument("message")
@click.option("--page", default="")
def feedback_add(message: str, page: str):
    """Submit feedback."""
    item = _workspace().feedback.add(message, page=page)
    click.echo(f"Feedback recorded ({item.id})")


def _feedback_action(action: str, feedback_id: str) -> None:
    store = _workspace().feedback
    try:
        match action:
            case "seen":
                store.mark_seen(feedback_id)
            case "approve":
                store.set_user_action(feedback_id, "yes")
            case "reject":
                store.set_user_action(feedback_id, "no")
            case "improved":
                store.mark_improved(feedback_id)
            case "archive":
                store.archive(feedback_id)
    except OrganizerError as e:
        _fail(e)
    click.echo(f"Feedback {feedback_id}: {action}")


@feedback.command("seen")
@click.argument("feedback_id")
def feedback_seen(feedback_id: str):
    """Mark feedback as seen."""
    _feedback_action("seen", feedback_id)


@feedback.command("approve")
@click.argument("feedback_id")
def feedback_approve(feedback_id: str):
    """Approve feedback for processing."""
    _feedback_action("approve", feedback_id)


@feedback.command("reject")
@click.argument("feedback_id")
def feedback_reject(feedback_id: str):
    """Reject feedback."""
    _feedback_action("reject", feedback_id)


@feedback.command("improved")
@click.argument("feedback_id")
def feedback_improved(feedback_id: str):
    """Mark feedback as acted on."""
    _feedback_action("improved", feedback_id)


@feedback.command("archive")
@click.argument("feedback_id")
def feedback_archive(feedback_id: str):
    """Archive feedback."""
    _feedback_action("archive", feedback_id)


@feedback.command("process")
def feedback_process():
    """Review approved feedback with Claude and store suggestions."""
    try:
        processed = process_feedback(_workspace().feedback)
    except RuntimeError as e:
        _fail(e)
    if not processed:
        click.echo("No approved feedback waiting.")
        return
    for item in processed:
        click.echo(f"### {item.message[:60]}\n{item.suggestion}\n")


# ============== Calendar ==============


@main.group(invoke_without_command=True)
@click.pass_context
def calendar(ctx):
    """Show calendar events."""
    if ctx.invoked_subcommand is None:
        ctx.invoke(calendar_day)


def _show_events(events: list, as_json: bool, empty_msg: str = "No events.") -> None:
    """Shared event display logic."""
    if as_json:
        _echo_json(events)
        return

    if not events:
        click.echo(empty_msg)
        return

    current_date = None
    for event in events:
        event_date = event.start.date()
        if event_date != current_date:
            if current_date is not None:
                click.echo()
            click.echo(f"### {event_date.strftime('%A, %B %d')}")
            current_date = event_date

        loc = f" @ {event.location}" if event.location else ""
        click.echo(f"  {event.format_time():11} {event.title}{loc}")


@calendar.command("day")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def calendar_day(as_json: bool = False):
    """Show today's events."""
    store = _workspace().calendar
    today = date.today()
    store.fetch_events(today, today)
    _show_events(store.events_for_day(today), as_json, "No events today.")


@calendar.command("week")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def calendar_week(as_json: bool = False):
    """Show this week's events."""
    workspace = _workspace()
    start = cal.week_start(date.today(), workspace.config.week_starts_on)
    end = start + timedelta(days=6)
    workspace.calendar.fetch_events(start, end)
    _show_events(workspace.calendar.events_for_range(start, end), as_json, "No events this week.")


# ============== Mail ==============


@main.group()
def mail():
    """Read mail from connected accounts."""


@mail.command("list")
@click.option("--folder", default="inbox", type=click.Choice([f.id for f in DEFAULT_FOLDERS]))
@click.option("--limit", default=50, help="Messages per account")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def mail_list(folder: str, limit: int, as_json: bool):
    """List messages in a folder, newest first."""
    emails = _workspace().mail.fetch_emails(folder, limit)
    if as_json:
        _echo_json(emails)
        return

    if not emails:
        click.echo(f"No messages in {folder}.")
        return
    for email in emails:
        mark = " " if email.read else "•"
        when = email.date.strftime("%b %d %H:%M") if email.date else ""
        click.echo(f"{mark} {when:12} {email.sender.format()[:30]:30} {email.subject}")


@mail.command("counts")
def mail_counts():
    """Unread messages per folder."""
    store = _workspace().mail
    for folder in DEFAULT_FOLDERS:
        store.fetch_emails(folder.id)
    for folder_id, count in store.folder_counts().items():
        click.echo(f"{folder_id:8} {count}")


# ============== Server ==============


@main.command()
@click.option("--host", default=None, help="Bind address")
@click.option("--port", default=None, type=int, help="Port")
def serve(host: str | None, port: int | None):
    """Run the HTTP API server."""
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.INFO,
    )
    from .server import run

    config = load_config()
    config.server_host = host or config.server_host
    config.server_port = port or config.server_port
    click.echo(f"Starting Organizer API on {config.server_host}:{config.server_port}")
    try:
        run(config)
    except ValueError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo("\nServer stopped.")


if __name__ == "__main__":
    main()
