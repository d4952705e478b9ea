"""Pure employee rating logic - no I/O dependencies."""

import math
import re
from dataclasses import dataclass
from datetime import datetime, timezone

from ewpm.errors import ValidationError

from .dates import parse_datetime
from .profiles import Profile

MIN_SCORE = 1
MAX_SCORE = 5

EPOCH = datetime.min.replace(tzinfo=timezone.utc)

PERIOD_PATTERNS = {
    "monthly": re.compile(r"^\d{4}-(0[1-9]|1[0-2])$"),
    "yearly": re.compile(r"^\d{4}$"),
}


@dataclass
class Rating:
    id: str
    user_id: str
    period_type: str
    period_value: str
    score: int
    rated_by: str = ""
    remarks: str | None = None
    created_at: datetime | None = None

    @classmethod
    def from_api(cls, data: dict) -> "Rating":
        return cls(
            id=data["id"],
            user_id=data["user_id"],
            period_type=data["period_type"],
            period_value=data["period_value"],
            score=int(data["score"]),
            rated_by=data.get("created_by") or data.get("rated_by") or "",
            remarks=data.get("remarks"),
            created_at=parse_datetime(data.get("created_at")),
        )


@dataclass
class RatingSummary:
    user_id: str
    user_name: str
    average_score: float
    total_ratings: int
    latest_score: int
    trend: str
    monthly_average: float
    yearly_average: float


def validate_rating(period_type: str, period_value: str, score: int) -> None:
    """Raise ValidationError for a score or period the dashboard cannot store."""
    pattern = PERIOD_PATTERNS.get(period_type)
    if pattern is None:
        raise ValidationError(f"Invalid period type: {period_type}")
    if not pattern.match(period_value):
        expected = "YYYY-MM" if period_type == "monthly" else "YYYY"
        raise ValidationError(f"Period value {period_value!r} must look like {expected}")
    if not MIN_SCORE <= score <= MAX_SCORE:
        raise ValidationError(f"Score must be between {MIN_SCORE} and {MAX_SCORE}")


def average_score(ratings: list[Rating]) -> float:
    """Mean score to one decimal place, 0 when there are none."""
    if not ratings:
        return 0
    mean = sum(r.score for r in ratings) / len(ratings)
    return math.floor(mean * 10 + 0.5) / 10


def _newest_first(ratings: list[Rating]) -> list[Rating]:
    return sorted(
        ratings,
        key=lambda r: r.created_at or EPOCH,
        reverse=True,
    )


def rating_trend(ratings: list[Rating]) -> str:
    """Direction between the two most recent ratings."""
    if len(ratings) < 2:
        return "stable"
    latest, previous = _newest_first(ratings)[:2]
    if latest.score > previous.score:
        return "up"
    if latest.score < previous.score:
        return "down"
    return "stable"


def summarize_ratings(ratings: list[Rating], profiles: list[Profile]) -> list[RatingSummary]:
    """One summary per rated employee, best average first."""
    names = {p.id: p.name for p in profiles}
    by_user: dict[str, list[Rating]] = {}
    for rating in ratings:
        by_user.setdefault(rating.user_id, []).append(rating)

    summaries = []
    for user_id, user_ratings in by_user.items():
        newest = _newest_first(user_ratings)
        summaries.append(
            RatingSummary(
                user_id=user_id,
                user_name=names.get(user_id, "Unknown"),
                average_score=average_score(user_ratings),
                total_ratings=len(user_ratings),
                latest_score=newest[0].score,
                trend=rating_trend(user_ratings),
                monthly_average=average_score(
                    [r for r in user_ratings if r.period_type == "monthly"]
                ),
                yearly_average=average_score(
                    [r for r in user_ratings if r.period_type == "yearly"]
                ),
            )
        )
    return sorted(summaries, key=lambda s: -s.average_score)
