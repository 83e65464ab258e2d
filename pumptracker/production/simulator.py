"""
Day-stepped capacity forecast simulation.

This module steps a shared date cursor across working days, allocating
each labor stage's daily man-hours across the work items contending for
it, and emits a timeline block each time an item finishes a stage.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, List, Optional, Sequence, Tuple

from pumptracker.models.capacity import CapacityConfig
from pumptracker.models.timeline import StageTimelineBlock
from pumptracker.models.work_item import Stage, STAGE_SEQUENCE, WorkItem
from .requirements import StageRequirement, UnitKind
from .work_calendar import WorkCalendar

logger = logging.getLogger(__name__)

# Simulated span after which unfinished items are reported as incomplete
HORIZON_YEARS = 5
HORIZON_DAYS = HORIZON_YEARS * 365


def round_to_hour(days: float) -> float:
    """Round a fractional day count to whole hours."""
    return round(days * 24) / 24


@dataclass
class WorkItemState:
    """
    Simulation-private progress record for one work item.

    Attributes:
        item: Work item snapshot
        order: Position of the item in the input (final tie-break)
        queue: Stage requirements in canonical order
        stage_start: Date the item entered (or may enter) its current stage
        index: Position of the current requirement in queue
        paused_days: Days paused in the current stage
        effort_days: Working days of progress made in the current stage
        blocks: Timeline blocks closed so far
    """
    item: WorkItem
    order: int
    queue: List[StageRequirement]
    stage_start: date
    index: int = 0
    paused_days: int = 0
    effort_days: float = 0.0
    blocks: List[StageTimelineBlock] = field(default_factory=list)

    @property
    def current(self) -> Optional[StageRequirement]:
        """Head-of-queue requirement, None once the queue is exhausted."""
        if self.index < len(self.queue):
            return self.queue[self.index]
        return None

    @property
    def is_finished(self) -> bool:
        return self.current is None

    def priority_key(self) -> Tuple[int, date, int]:
        """Sort key: priority descending, then earliest date, then input order."""
        return (-self.item.priority.rank, self.item.sort_key, self.order)


@dataclass
class SimulationResult:
    """
    Output of a simulation run.

    Attributes:
        timelines: Work item ID -> timeline blocks, in input order
        incomplete: IDs of items that did not finish within the horizon
    """
    timelines: Dict[str, List[StageTimelineBlock]]
    incomplete: List[str]

    def is_complete(self) -> bool:
        return len(self.incomplete) == 0


class CapacityForecastSimulator:
    """
    Discrete, calendar-aware simulation of work items flowing through stages.

    On each working day, stages are processed in canonical order:
    1. Select items whose current requirement is this stage and that have
       reached their stage start date
    2. Sort by priority, then by start date or date received
    3. The first max_wip items are active, the rest are paused
    4. Active items share the stage's daily man-hours evenly (hours stages)
       or each progress one whole day (days stages)
    5. Items exhausting a requirement close a block and move to the next stage

    Non-working days are skipped entirely.
    """

    def __init__(
        self,
        capacity_config: CapacityConfig,
        calendar: Optional[WorkCalendar] = None,
        horizon_days: int = HORIZON_DAYS,
    ):
        """
        Initialize simulator.

        Args:
            capacity_config: Staffing and WIP limits per stage
            calendar: Working-day calendar (federal holidays if not provided)
            horizon_days: Calendar days to simulate before giving up
        """
        self.capacity_config = capacity_config
        self.calendar = calendar or WorkCalendar()
        self.horizon_days = horizon_days

    def simulate(
        self,
        entries: Sequence[Tuple[WorkItem, List[StageRequirement]]],
        start_date: date,
    ) -> SimulationResult:
        """
        Run the simulation.

        Args:
            entries: Work items with their stage requirements
            start_date: First day of the simulation

        Returns:
            SimulationResult with a timeline per work item
        """
        states = self._create_states(entries, start_date)
        pending = [s for s in states if not s.is_finished]

        horizon_end = start_date + timedelta(days=self.horizon_days)
        cursor = start_date

        while pending and cursor < horizon_end:
            if self.calendar.is_working_day(cursor):
                for stage in STAGE_SEQUENCE:
                    self._process_stage(stage, cursor, pending)
                pending = [s for s in pending if not s.is_finished]
            cursor += timedelta(days=1)

        incomplete = [s.item.id for s in pending]
        if incomplete:
            logger.warning(
                f"{len(incomplete)} work items did not complete within "
                f"{self.horizon_days} days of {start_date}: {incomplete[:10]}"
            )

        return SimulationResult(
            timelines={s.item.id: list(s.blocks) for s in states},
            incomplete=incomplete,
        )

    def _create_states(
        self,
        entries: Sequence[Tuple[WorkItem, List[StageRequirement]]],
        start_date: date,
    ) -> List[WorkItemState]:
        """Build a fresh state arena; requirements are copied, never shared."""
        states = []
        for order, (item, requirements) in enumerate(entries):
            queue = [
                StageRequirement(stage=r.stage, unit=r.unit, remaining=r.remaining)
                for r in requirements
            ]
            state = WorkItemState(
                item=item,
                order=order,
                queue=queue,
                stage_start=item.start_date or start_date,
            )
            self._skip_finished_requirements(state)
            states.append(state)
        return states

    def _wip_limit(self, stage: Stage) -> Optional[int]:
        """WIP cap for a stage; None means unbounded."""
        staffing = self.capacity_config.staffing_for(stage)
        return staffing.max_wip if staffing else None

    def _process_stage(self, stage: Stage, cursor: date, pending: List[WorkItemState]) -> None:
        """Allocate one day of a stage's capacity across its contenders."""
        contenders = [
            s for s in pending
            if s.current is not None
            and s.current.stage == stage
            and s.stage_start <= cursor
        ]
        if not contenders:
            return

        contenders.sort(key=WorkItemState.priority_key)
        limit = self._wip_limit(stage)
        active = contenders[:limit]
        paused = contenders[limit:] if limit is not None else []

        for state in paused:
            state.paused_days += 1

        if not active:
            return

        staffing = self.capacity_config.staffing_for(stage)
        hours_share = staffing.daily_man_hours / len(active) if staffing else 0.0

        for state in active:
            requirement = state.current
            amount = hours_share if requirement.unit == UnitKind.HOURS else 1.0

            # The final day of a stage counts only the fraction actually needed
            if amount > 0 and requirement.remaining < amount:
                state.effort_days += requirement.remaining / amount
            else:
                state.effort_days += 1.0

            requirement.consume(amount)
            if requirement.is_done:
                self._close_block(state, cursor)

    def _close_block(self, state: WorkItemState, cursor: date) -> None:
        """Emit the block for the current stage and advance to the next one."""
        end = self.calendar.next_working_day(cursor)
        state.blocks.append(
            StageTimelineBlock(
                stage=state.current.stage,
                start=state.stage_start,
                end=end,
                paused_days=state.paused_days,
                working_days=round_to_hour(state.effort_days),
            )
        )
        state.index += 1
        self._skip_finished_requirements(state)
        state.paused_days = 0
        state.effort_days = 0.0
        state.stage_start = end

    @staticmethod
    def _skip_finished_requirements(state: WorkItemState) -> None:
        while state.current is not None and state.current.is_done:
            state.index += 1
