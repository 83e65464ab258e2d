"""Conversion of a work item's model data into ordered stage requirements."""

from dataclasses import dataclass
from enum import Enum
from typing import List

from pumptracker.models.catalog import ModelLeadTimes, ModelWorkHours
from pumptracker.models.work_item import Stage, STAGE_SEQUENCE

# Remainders below this are float residue from splitting man-hours, not work
QUOTA_TOLERANCE = 1e-9


class UnitKind(str, Enum):
    """How a stage requirement's quota is consumed."""
    HOURS = "hours"
    DAYS = "days"


@dataclass
class StageRequirement:
    """
    Remaining work for one stage of a work item.

    Attributes:
        stage: Stage the work belongs to
        unit: HOURS (shared labor pool) or DAYS (whole calendar working days)
        remaining: Remaining quota in the given unit
    """
    stage: Stage
    unit: UnitKind
    remaining: float

    def consume(self, amount: float) -> None:
        """Reduce the quota, never below zero; near-zero residue snaps to zero."""
        remaining = self.remaining - amount
        self.remaining = remaining if remaining > QUOTA_TOLERANCE else 0.0

    @property
    def is_done(self) -> bool:
        return self.remaining <= QUOTA_TOLERANCE

    def __str__(self) -> str:
        return f"{self.stage.value}: {self.remaining:g} {self.unit.value}"


def remaining_stages(current_stage: Stage) -> List[Stage]:
    """
    Stages still ahead of a work item, including its current one.

    QUEUE precedes the whole sequence; CLOSED has nothing left.
    """
    if current_stage == Stage.QUEUE:
        return list(STAGE_SEQUENCE)
    if current_stage not in STAGE_SEQUENCE:
        return []
    return list(STAGE_SEQUENCE[STAGE_SEQUENCE.index(current_stage):])


def build_stage_requirements(
    current_stage: Stage,
    lead_times: ModelLeadTimes,
    work_hours: ModelWorkHours,
    buffer_days: int,
) -> List[StageRequirement]:
    """
    Build the ordered stage requirements for a work item.

    Business Rules:
    - Fabrication, assembly and ship consume the model's labor hours
    - Staged-for-powder waits the configured buffer days
    - Powder coat takes the model's powder coat lead time, rounded up to whole days
    - Requirements with a quota <= 0 are omitted

    Args:
        current_stage: Work item's current stage
        lead_times: Model lead times (days)
        work_hours: Model labor content (hours)
        buffer_days: Staging buffer before powder coat

    Returns:
        Requirements in canonical stage order (empty if nothing is left)
    """
    quotas = {
        Stage.FABRICATION: (UnitKind.HOURS, work_hours.fabrication),
        Stage.STAGED_FOR_POWDER: (UnitKind.DAYS, buffer_days),
        Stage.POWDER_COAT: (UnitKind.DAYS, lead_times.powder_coat_days),
        Stage.ASSEMBLY: (UnitKind.HOURS, work_hours.assembly),
        Stage.SHIP: (UnitKind.HOURS, work_hours.ship),
    }

    requirements = []
    for stage in remaining_stages(current_stage):
        unit, quota = quotas[stage]
        if quota <= 0:
            continue
        requirements.append(StageRequirement(stage=stage, unit=unit, remaining=quota))
    return requirements
