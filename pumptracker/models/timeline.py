"""Stage timeline blocks produced by the capacity forecast."""

from datetime import date as Date, timedelta

from pydantic import BaseModel, ConfigDict, Field

from .work_item import Stage


class StageTimelineBlock(BaseModel):
    """
    One stage occupancy of a work item in the projected timeline.

    Attributes:
        stage: Stage occupied
        start: Date the item entered the stage
        end: First working day after the stage's work was exhausted
        paused_days: Working days spent waiting for a free WIP slot
        working_days: Working-day length of the block (hour precision)
    """
    model_config = ConfigDict(frozen=True)

    stage: Stage = Field(..., description="Stage")
    start: Date = Field(..., description="Block start date")
    end: Date = Field(..., description="Block end date")
    paused_days: int = Field(default=0, description="Paused working days", ge=0)
    working_days: float = Field(default=0.0, description="Working days of effort", ge=0)

    @property
    def duration(self) -> timedelta:
        """Calendar span of the block."""
        return self.end - self.start

    @property
    def working_hours(self) -> float:
        """Working days expressed in hours of a 24h day."""
        return round(self.working_days * 24, 6)

    def shifted(self, delta: timedelta) -> "StageTimelineBlock":
        """Return a copy moved later by delta, keeping its duration."""
        return self.model_copy(update={"start": self.start + delta, "end": self.end + delta})

    def __str__(self) -> str:
        paused = f", paused {self.paused_days}d" if self.paused_days else ""
        return f"{self.stage.value}: {self.start} -> {self.end}{paused}"


Timeline = list[StageTimelineBlock]


class ForecastUpdate(BaseModel):
    """
    Forecast dates that changed for a work item and should be persisted.

    Attributes:
        work_item_id: Work item identifier
        forecast_start: New projected start
        forecast_end: New projected end
    """
    model_config = ConfigDict(frozen=True)

    work_item_id: str
    forecast_start: Date
    forecast_end: Date
