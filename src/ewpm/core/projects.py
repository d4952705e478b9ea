"""Pure project stage pipeline - no I/O dependencies."""

from dataclasses import dataclass, replace
from datetime import date

from ewpm.errors import ValidationError

from .dates import parse_date

PROJECT_STATUSES = ["active", "completed", "on_hold", "cancelled"]

# Ordered pipeline; a director may jump to any stage
PROJECT_STAGES = [
    ("order_received", "Order Received"),
    ("shipment_plan", "Shipment Plan"),
    ("order_to_supplier", "Order to Supplier"),
    ("inspection", "Inspection"),
    ("dispatch", "Dispatch"),
    ("delivery", "Delivery"),
]
STAGE_VALUES = [value for value, _ in PROJECT_STAGES]
STAGE_LABELS = dict(PROJECT_STAGES)

# Rows written before the stage list was settled
STAGE_NORMALIZATION = {"inspect": "inspection"}


@dataclass
class Project:
    id: str
    name: str
    client_name: str
    start_date: date
    status: str = "active"
    stage: str = "order_received"
    end_date: date | None = None
    description: str | None = None

    @property
    def stage_label(self) -> str:
        return STAGE_LABELS.get(self.stage, self.stage)

    @classmethod
    def from_api(cls, data: dict) -> "Project":
        return cls(
            id=data["id"],
            name=data["name"],
            client_name=data.get("client_name") or "",
            start_date=parse_date(data["start_date"]),
            status=data.get("status") or "active",
            stage=normalize_stage(data.get("stage")),
            end_date=parse_date(data.get("end_date")),
            description=data.get("description"),
        )


def normalize_stage(stage: str | None) -> str:
    """Map legacy spellings onto the pipeline; unknown values start over."""
    if not stage:
        return STAGE_VALUES[0]
    stage = STAGE_NORMALIZATION.get(stage.lower(), stage)
    return stage if stage in STAGE_VALUES else STAGE_VALUES[0]


def stage_index(stage: str) -> int:
    return STAGE_VALUES.index(normalize_stage(stage))


def set_stage(project: Project, stage: str) -> Project:
    """Move to any known stage."""
    if STAGE_NORMALIZATION.get(stage.lower(), stage) not in STAGE_VALUES:
        raise ValidationError(f"Unknown project stage: {stage}")
    return replace(project, stage=normalize_stage(stage))


def next_stage(project: Project) -> Project:
    """Advance one step; the last stage stays put."""
    index = min(stage_index(project.stage) + 1, len(STAGE_VALUES) - 1)
    return replace(project, stage=STAGE_VALUES[index])


def stage_progress(project: Project) -> int:
    """Percent of the pipeline reached, 100 at delivery."""
    return round((stage_index(project.stage) + 1) / len(STAGE_VALUES) * 100)
