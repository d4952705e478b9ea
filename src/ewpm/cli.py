"""EWPM CLI - operator commands for the dashboard logic core."""

import json
import logging
import sys
from dataclasses import asdict
from datetime import datetime

import click

from .config import load_config
from .core.analytics import AnalyticsSummary, DateRange
from .core.assignments import AssignmentStatus, available_transitions
from .core.projects import STAGE_VALUES, stage_progress
from .core.ratings import MAX_SCORE, MIN_SCORE
from .errors import EwpmError
from .workflows import (
    Backend,
    add_rating,
    apply_payment,
    change_assignment_status,
    change_project_stage,
    compute_analytics,
    get_archive_store,
    handle_reminder_request,
    meeting_agenda,
    set_archived,
    today_in,
    visible_assignments,
)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _fail(error) -> None:
    click.echo(f"Error: {error}", err=True)
    sys.exit(1)


@click.group()
@click.version_option()
@click.option("--debug", is_flag=True, help="Log to stderr")
def main(debug: bool):
    """EWPM - work, payment follow-up and analytics."""
    if debug:
        logging.basicConfig(format=LOG_FORMAT, level=logging.DEBUG)


@main.command()
@click.option("--force", is_flag=True, help="Manual run: re-send reminders already sent")
@click.option("--lead-days", type=int, default=None, help="Days ahead for the early reminder")
@click.option("--payment-id", "payment_ids", multiple=True, help="Only these payments")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def remind(force: bool, lead_days: int | None, payment_ids: tuple[str, ...], as_json: bool):
    """Send payment reminder emails."""
    config = load_config()
    body = {"automatic": not force, "paymentIds": list(payment_ids)}
    if lead_days is not None:
        body["reminderDays"] = lead_days

    lead = lead_days if lead_days is not None else config.reminder_days

    status_code, result = handle_reminder_request(body, config)
    if as_json:
        click.echo(json.dumps(result, indent=2))
    else:
        click.echo(
            f"Sent {result['sent']}, skipped {result['skipped']} "
            f"(overdue {result['overdue']}, due in 24h {result['upcoming_24h']}, "
            f"due in {lead} days {result['upcoming_72h']})"
        )
    if status_code != 200:
        _fail(result.get("error", "Reminder run failed"))


def _print_summary(summary: AnalyticsSummary) -> None:
    tasks = summary.tasks
    click.echo(f"{summary.period_label} ({summary.comparison_label})")
    click.echo("")
    click.echo(
        f"Tasks: {tasks.total} total, {tasks.completed} completed, {tasks.in_progress} in progress, "
        f"{tasks.pending} not started, {tasks.on_hold} on hold"
    )
    click.echo(f"  Overdue: {tasks.overdue}  Emergency: {tasks.emergency}")
    trend = summary.tasks_trend
    click.echo(
        f"  Completion: {tasks.completion_percentage}% ({trend.direction} {trend.change_percentage}%)"
    )

    if summary.employees:
        click.echo("")
        click.echo("Employees:")
        for emp in summary.employees:
            click.echo(
                f"  {emp.productivity_score:4}  {emp.employee_name} - "
                f"{emp.tasks_completed} done, {emp.overdue_tasks} overdue"
            )

    payments = summary.payments
    click.echo("")
    click.echo(
        f"Payments: {payments.total_invoices} invoices, {payments.total_invoice_amount:,.2f} invoiced, "
        f"{payments.pending_amount:,.2f} pending"
    )
    click.echo(f"  Overdue: {payments.overdue_count} ({payments.overdue_amount:,.2f})")
    trend = summary.payments_trend
    click.echo(
        f"  Collection: {payments.collection_rate}% ({trend.direction} {trend.change_percentage}%)"
    )
    for user in payments.responsible_users_with_pending:
        click.echo(f"  • {user.user_name}: {user.pending_count} pending, {user.pending_amount:,.2f}")

    if summary.ratings:
        click.echo("")
        click.echo("Ratings:")
        for rating in summary.ratings:
            click.echo(
                f"  {rating.average_score:4}  {rating.user_name} - "
                f"{rating.total_ratings} ratings, latest {rating.latest_score} ({rating.trend})"
            )


@main.command()
@click.option("--from", "start", type=click.DateTime(formats=["%Y-%m-%d"]), help="First day")
@click.option("--to", "end", type=click.DateTime(formats=["%Y-%m-%d"]), help="Last day")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def analytics(start: datetime | None, end: datetime | None, as_json: bool):
    """Task and payment analytics for a date range (default: this month)."""
    config = load_config()
    end_date = end.date() if end else today_in(config)
    start_date = start.date() if start else end_date.replace(day=1)
    if start_date > end_date:
        _fail(EwpmError("--from must not be after --to"))

    try:
        summary = compute_analytics(Backend.connect(config), DateRange(start_date, end_date), config)
    except EwpmError as e:
        _fail(e)

    if as_json:
        click.echo(json.dumps(asdict(summary), indent=2, default=str))
    else:
        _print_summary(summary)


@main.command()
@click.option("--show-archived", is_flag=True, help="List archived assignments instead")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def tasks(show_archived: bool, as_json: bool):
    """List assignments."""
    config = load_config()
    try:
        backend = Backend.connect(config)
        assignments = visible_assignments(
            backend.assignments.fetch_all(), config, get_archive_store(config), show_archived
        )
    except EwpmError as e:
        _fail(e)

    if as_json:
        click.echo(json.dumps([asdict(a) for a in assignments], indent=2, default=str))
        return

    if not assignments:
        click.echo("No archived assignments." if show_archived else "No assignments.")
        return

    for a in assignments:
        due = f" (due {a.due_date.date()})" if a.due_date else ""
        click.echo(f"[{a.status.value:11}] {a.title}{due}  {a.id}")


@main.command()
@click.argument("assignment_id")
@click.argument("status", type=click.Choice([s.value for s in AssignmentStatus]))
@click.option("--remark", default=None, help="Note stored with the change")
def transition(assignment_id: str, status: str, remark: str | None):
    """Move an assignment to a new status."""
    config = load_config()
    try:
        backend = Backend.connect(config)
        assignment = backend.assignments.get(assignment_id)
        if assignment is None:
            raise EwpmError(f"No assignment with id {assignment_id}")
        updated = change_assignment_status(backend.assignments, assignment, status, remark)
    except EwpmError as e:
        _fail(e)

    click.echo(f"{updated.title}: {assignment.status.value} -> {updated.status.value}")
    allowed = ", ".join(s.value for s in available_transitions(updated.status))
    click.echo(f"Next: {allowed}")


@main.command()
@click.argument("assignment_id")
def archive(assignment_id: str):
    """Hide an assignment from the default list."""
    set_archived(get_archive_store(load_config()), assignment_id, True)
    click.echo(f"Archived {assignment_id}")


@main.command()
@click.argument("assignment_id")
def unarchive(assignment_id: str):
    """Bring an archived assignment back, even if auto-archive applies."""
    set_archived(get_archive_store(load_config()), assignment_id, False)
    click.echo(f"Unarchived {assignment_id}")


@main.command()
@click.argument("payment_id")
@click.argument("amount", type=float)
def pay(payment_id: str, amount: float):
    """Record an amount received against a payment."""
    config = load_config()
    try:
        backend = Backend.connect(config)
        found = backend.payments.fetch_by_ids([payment_id])
        if not found:
            raise EwpmError(f"No payment with id {payment_id}")
        updated = apply_payment(backend.payments, found[0], amount)
    except EwpmError as e:
        _fail(e)

    click.echo(
        f"{updated.client_name}: paid {updated.amount_paid:,.2f} of "
        f"{updated.invoice_amount:,.2f} ({updated.status.value})"
    )


@main.command()
@click.argument("user_id")
@click.argument("score", type=click.IntRange(MIN_SCORE, MAX_SCORE))
@click.option("--period", "period_value", required=True, help="YYYY-MM for monthly, YYYY for yearly")
@click.option("--yearly", is_flag=True, help="Rate a whole year instead of a month")
@click.option("--by", "rated_by", required=True, help="Id of the director giving the rating")
@click.option("--remarks", default=None, help="Comment stored with the rating")
def rate(user_id: str, score: int, period_value: str, yearly: bool, rated_by: str, remarks: str | None):
    """Rate an employee for a month or a year."""
    config = load_config()
    period_type = "yearly" if yearly else "monthly"
    try:
        rating = add_rating(
            Backend.connect(config).ratings, user_id, period_type, period_value, score, rated_by, remarks
        )
    except EwpmError as e:
        _fail(e)

    click.echo(f"Rated {rating.user_id} {rating.score}/{MAX_SCORE} for {rating.period_value}")


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def projects(as_json: bool):
    """List projects and where they are in the pipeline."""
    config = load_config()
    try:
        rows = Backend.connect(config).projects.fetch_all()
    except EwpmError as e:
        _fail(e)

    if as_json:
        click.echo(json.dumps([asdict(p) for p in rows], indent=2, default=str))
        return

    if not rows:
        click.echo("No projects.")
        return

    for p in rows:
        click.echo(f"[{p.stage_label:17}] {stage_progress(p):3}%  {p.name} ({p.client_name})  {p.id}")


@main.command()
@click.argument("project_id")
@click.argument("stage", required=False, type=click.Choice(STAGE_VALUES))
def stage(project_id: str, stage: str | None):
    """Move a project to STAGE, or to the next stage when omitted."""
    config = load_config()
    try:
        backend = Backend.connect(config)
        project = backend.projects.get(project_id)
        if project is None:
            raise EwpmError(f"No project with id {project_id}")
        updated = change_project_stage(backend.projects, project, stage)
    except EwpmError as e:
        _fail(e)

    click.echo(f"{updated.name}: {project.stage_label} -> {updated.stage_label}")


@main.command()
@click.argument("user_id")
def meetings(user_id: str):
    """Upcoming meetings for a user, flagging ones starting soon."""
    config = load_config()
    try:
        agenda = meeting_agenda(Backend.connect(config).meetings, user_id, config)
    except EwpmError as e:
        _fail(e)

    if not agenda:
        click.echo("No upcoming meetings.")
        return

    for item in agenda:
        soon = "  (starting soon)" if item.reminder_key else ""
        click.echo(f"{item.starts_at:%Y-%m-%d %H:%M}  {item.meeting.title}{soon}")


@main.command()
@click.option("--host", default="127.0.0.1", help="Bind address")
@click.option("--port", default=8000, type=int, help="Bind port")
def serve(host: str, port: int):
    """Run the reminder HTTP endpoint."""
    import uvicorn

    from .server import create_app

    logging.basicConfig(format=LOG_FORMAT, level=logging.INFO)
    uvicorn.run(create_app(load_config()), host=host, port=port)


@main.command()
def scheduler():
    """Run the daily reminder job in the foreground."""
    from .scheduler import run_scheduler

    try:
        run_scheduler(load_config())
    except (KeyboardInterrupt, SystemExit):
        click.echo("Scheduler stopped.")


if __name__ == "__main__":
    main()
