"""Work item (pump) data model and the production stage sequence."""

import logging
from datetime import date as Date, datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)


class Stage(str, Enum):
    """Production stage a work item can occupy."""
    QUEUE = "QUEUE"
    FABRICATION = "FABRICATION"
    STAGED_FOR_POWDER = "STAGED_FOR_POWDER"
    POWDER_COAT = "POWDER_COAT"
    ASSEMBLY = "ASSEMBLY"
    SHIP = "SHIP"
    CLOSED = "CLOSED"


# Canonical order in which a work item flows through production
STAGE_SEQUENCE: tuple[Stage, ...] = (
    Stage.FABRICATION,
    Stage.STAGED_FOR_POWDER,
    Stage.POWDER_COAT,
    Stage.ASSEMBLY,
    Stage.SHIP,
)

# Stages whose daily progress comes from a shared man-hours pool
LABOR_STAGES: tuple[Stage, ...] = (Stage.FABRICATION, Stage.ASSEMBLY, Stage.SHIP)


class Priority(str, Enum):
    """Work item priority, lowest to highest."""
    LOW = "Low"
    NORMAL = "Normal"
    HIGH = "High"
    RUSH = "Rush"
    URGENT = "Urgent"

    @property
    def rank(self) -> int:
        """Ordinal rank (Low=1 ... Urgent=5)."""
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {
    Priority.LOW: 1,
    Priority.NORMAL: 2,
    Priority.HIGH: 3,
    Priority.RUSH: 4,
    Priority.URGENT: 5,
}


def _coerce_date(value: Any, field_name: str) -> Optional[Date]:
    """Parse a date-like value, returning None for anything unusable."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, Date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return Date.fromisoformat(text[:10])
        except ValueError:
            pass
    logger.warning(f"Ignoring malformed {field_name}: {value!r}")
    return None


class WorkItem(BaseModel):
    """
    A single pump work order as seen by the capacity forecast.

    Attributes:
        id: Unique work item identifier
        model: Model code used for catalog lookups
        stage: Current production stage
        priority: Scheduling priority
        start_date: Recorded start date of the current stage (if any)
        date_received: Date the order was received (fallback sort key)
        vendor_id: Explicit powder coat vendor assignment
        forecast_start: Forecast start currently persisted on the record
        forecast_end: Forecast end currently persisted on the record
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Work item identifier")
    model: str = Field(..., description="Model code")
    stage: Stage = Field(default=Stage.QUEUE, description="Current stage")
    priority: Priority = Field(default=Priority.NORMAL, description="Priority")
    start_date: Optional[Date] = Field(None, description="Recorded start date")
    date_received: Optional[Date] = Field(None, description="Date received")
    vendor_id: Optional[str] = Field(None, description="Powder coat vendor ID")
    forecast_start: Optional[Date] = Field(None, description="Persisted forecast start")
    forecast_end: Optional[Date] = Field(None, description="Persisted forecast end")

    @field_validator(
        "start_date", "date_received", "forecast_start", "forecast_end", mode="before"
    )
    @classmethod
    def lenient_date(cls, v: Any, info) -> Optional[Date]:
        """Malformed dates become None instead of failing validation."""
        return _coerce_date(v, info.field_name)

    @field_validator("stage", mode="before")
    @classmethod
    def normalize_stage(cls, v: Any) -> Any:
        """Accept 'Powder Coat' / 'powder-coat' style stage names."""
        if isinstance(v, str):
            return v.strip().upper().replace(" ", "_").replace("-", "_")
        return v

    @field_validator("priority", mode="before")
    @classmethod
    def normalize_priority(cls, v: Any) -> Any:
        """Accept priority names in any case ('rush', 'RUSH')."""
        if isinstance(v, str):
            for priority in Priority:
                if priority.value.lower() == v.strip().lower():
                    return priority
        return v

    @property
    def sort_key(self) -> Date:
        """Tie-break date: recorded start, else date received, else last."""
        return self.start_date or self.date_received or Date.max

    def __str__(self) -> str:
        return f"WorkItem {self.id} ({self.model}) - {self.stage.value} [{self.priority.value}]"
