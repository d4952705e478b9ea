"""Pure dashboard analytics - no I/O dependencies."""

import math
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from .assignments import Assignment, AssignmentStatus, Priority
from .dates import utcnow
from .payments import Payment
from .profiles import Profile
from .ratings import Rating, RatingSummary, summarize_ratings

TREND_DEAD_BAND = 2


def round_half_up(value: float) -> int:
    """Standard rounding: halves go up (12.5 -> 13), unlike round()."""
    return math.floor(value + 0.5)


def percentage(part: float, whole: float) -> int:
    if whole <= 0:
        return 0
    return round_half_up(part / whole * 100)


@dataclass
class DateRange:
    start: date
    end: date

    @property
    def days(self) -> int:
        return (self.end - self.start).days

    def previous(self) -> "DateRange":
        """Same-length period ending the day before this one starts."""
        prev_end = self.start - timedelta(days=1)
        return DateRange(prev_end - timedelta(days=self.days), prev_end)

    def contains(self, d: date | None) -> bool:
        return d is not None and self.start <= d <= self.end

    def label(self) -> str:
        return f"{_short(self.start)} - {_short(self.end)}, {self.end.year}"


def _short(d: date) -> str:
    return f"{d.strftime('%b')} {d.day}"


@dataclass
class TaskSummary:
    total: int = 0
    completed: int = 0
    pending: int = 0
    in_progress: int = 0
    on_hold: int = 0
    overdue: int = 0
    emergency: int = 0
    completion_percentage: int = 0


@dataclass
class EmployeePerformance:
    employee_id: str
    employee_name: str
    tasks_completed: int
    overdue_tasks: int
    avg_completion_time_minutes: int
    productivity_score: int


@dataclass
class ResponsiblePending:
    user_id: str
    user_name: str
    pending_count: int
    pending_amount: float


@dataclass
class PaymentSummary:
    total_invoices: int = 0
    total_invoice_amount: float = 0
    pending_amount: float = 0
    overdue_amount: float = 0
    overdue_count: int = 0
    responsible_users_with_pending: list[ResponsiblePending] = field(default_factory=list)

    @property
    def collection_rate(self) -> int:
        return percentage(self.total_invoice_amount - self.pending_amount, self.total_invoice_amount)


@dataclass
class TrendIndicator:
    current: int
    previous: int
    change_percentage: int
    direction: str  # "up" | "down" | "stable"


@dataclass
class AnalyticsSummary:
    tasks: TaskSummary
    tasks_trend: TrendIndicator
    employees: list[EmployeePerformance]
    top_performer: EmployeePerformance | None
    payments: PaymentSummary
    payments_trend: TrendIndicator
    period_label: str
    comparison_label: str
    ratings: list[RatingSummary] = field(default_factory=list)


def calculate_trend(current: int, previous: int) -> TrendIndicator:
    """
    Compare two period values.

    Changes within +/-2% are reported as stable.
    """
    if previous == 0:
        return TrendIndicator(
            current=current,
            previous=previous,
            change_percentage=100 if current > 0 else 0,
            direction="up" if current > 0 else "stable",
        )

    change = (current - previous) / previous * 100
    if change > TREND_DEAD_BAND:
        direction = "up"
    elif change < -TREND_DEAD_BAND:
        direction = "down"
    else:
        direction = "stable"
    return TrendIndicator(
        current=current,
        previous=previous,
        change_percentage=abs(round_half_up(change)),
        direction=direction,
    )


def summarize_tasks(assignments: list[Assignment], now: datetime | None = None) -> TaskSummary:
    now = now or utcnow()
    completed = sum(1 for a in assignments if a.status == AssignmentStatus.COMPLETED)
    return TaskSummary(
        total=len(assignments),
        completed=completed,
        pending=sum(1 for a in assignments if a.status == AssignmentStatus.NOT_STARTED),
        in_progress=sum(1 for a in assignments if a.status == AssignmentStatus.IN_PROGRESS),
        on_hold=sum(1 for a in assignments if a.status == AssignmentStatus.ON_HOLD),
        overdue=sum(1 for a in assignments if a.is_overdue(now)),
        emergency=sum(1 for a in assignments if a.priority == Priority.EMERGENCY),
        completion_percentage=percentage(completed, len(assignments)),
    )


def productivity_score(completed: int, overdue: int) -> int:
    return max(0, completed * 10 - overdue * 5)


def employee_performance(
    assignments: list[Assignment],
    profiles: list[Profile],
    now: datetime | None = None,
) -> list[EmployeePerformance]:
    """
    Per-employee completed/overdue counts, best score first.

    Employees with nothing completed and nothing overdue are left out.
    """
    now = now or utcnow()
    results = []
    for profile in profiles:
        mine = [a for a in assignments if a.assignee_id == profile.id]
        completed = [a for a in mine if a.is_completed]
        overdue = sum(1 for a in mine if a.is_overdue(now))
        if not completed and not overdue:
            continue

        tracked = [a.total_duration_minutes for a in completed if a.total_duration_minutes]
        avg_minutes = round_half_up(sum(tracked) / len(tracked)) if tracked else 0

        results.append(
            EmployeePerformance(
                employee_id=profile.id,
                employee_name=profile.name,
                tasks_completed=len(completed),
                overdue_tasks=overdue,
                avg_completion_time_minutes=avg_minutes,
                productivity_score=productivity_score(len(completed), overdue),
            )
        )

    # Stable sort keeps profile order among equal scores
    return sorted(results, key=lambda e: -e.productivity_score)


def summarize_payments(
    payments: list[Payment],
    profiles: list[Profile],
    today: date,
) -> PaymentSummary:
    names = {p.id: p.name for p in profiles}
    summary = PaymentSummary(total_invoices=len(payments))
    pending_by_user: dict[str, ResponsiblePending] = {}

    for payment in payments:
        summary.total_invoice_amount += payment.invoice_amount
        remaining = payment.invoice_amount - payment.amount_paid
        if remaining <= 0:
            continue

        summary.pending_amount += remaining
        rollup = pending_by_user.setdefault(
            payment.responsible_user_id,
            ResponsiblePending(
                user_id=payment.responsible_user_id,
                user_name=names.get(payment.responsible_user_id, "Unknown"),
                pending_count=0,
                pending_amount=0,
            ),
        )
        rollup.pending_count += 1
        rollup.pending_amount += remaining

        if payment.due_date < today:
            summary.overdue_amount += remaining
            summary.overdue_count += 1

    summary.responsible_users_with_pending = sorted(
        pending_by_user.values(), key=lambda r: -r.pending_amount
    )
    return summary


def collection_rate(payments: list[Payment]) -> int:
    invoiced = sum(p.invoice_amount for p in payments)
    paid = sum(p.amount_paid for p in payments)
    return percentage(paid, invoiced)


def build_summary(
    period: DateRange,
    assignments: list[Assignment],
    prev_assignments: list[Assignment],
    payments: list[Payment],
    prev_payments: list[Payment],
    profiles: list[Profile],
    now: datetime | None = None,
    today: date | None = None,
    ratings: list[Rating] | None = None,
) -> AnalyticsSummary:
    """
    Reduce the current and comparison period records into dashboard metrics.

    Pure function - no I/O. The caller fetches assignments by created date
    and payments by invoice date for both periods. `today` is the calendar
    day in the business timezone; payments due before it count as overdue.
    """
    now = now or utcnow()
    today = today or now.date()

    tasks = summarize_tasks(assignments, now)
    prev_completed = sum(1 for a in prev_assignments if a.is_completed)
    tasks_trend = calculate_trend(
        tasks.completion_percentage, percentage(prev_completed, len(prev_assignments))
    )

    employees = employee_performance(assignments, profiles, now)
    payments_summary = summarize_payments(payments, profiles, today)
    payments_trend = calculate_trend(
        payments_summary.collection_rate, collection_rate(prev_payments)
    )

    prev = period.previous()
    return AnalyticsSummary(
        tasks=tasks,
        tasks_trend=tasks_trend,
        employees=employees,
        top_performer=employees[0] if employees else None,
        payments=payments_summary,
        payments_trend=payments_trend,
        period_label=period.label(),
        comparison_label=f"vs {_short(prev.start)} - {_short(prev.end)}",
        ratings=summarize_ratings(ratings or [], profiles),
    )
