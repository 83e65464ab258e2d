"""
Capacity forecast entry point.

Wires stage requirement building, the capacity simulation, and vendor
leveling into a single pure computation:

    work items + capacity config + catalog lookups -> per-item timelines

The forecast holds no state between runs. Callers re-run it whenever
work items, capacity settings, or catalog data change, and persist only
the dates reported by CapacityForecast.changed_dates().
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Optional

from pumptracker.models.capacity import CapacityConfig
from pumptracker.models.catalog import LeadTimeLookup, WorkHoursLookup
from pumptracker.models.timeline import ForecastUpdate, Timeline
from pumptracker.models.work_item import WorkItem
from .requirements import build_stage_requirements
from .simulator import CapacityForecastSimulator, HORIZON_DAYS
from .vendor_leveling import VendorCapacityLeveler
from .work_calendar import DateLike, WorkCalendar, to_day

logger = logging.getLogger(__name__)


@dataclass
class CapacityForecast:
    """
    Projected stage timelines for a set of work items.

    Attributes:
        start_date: Simulation start date
        timelines: Work item ID -> ordered stage blocks
        incomplete: IDs that did not finish within the horizon (partial timelines)
        skipped: IDs omitted because their model has no catalog entry
    """
    start_date: date
    timelines: Dict[str, Timeline]
    incomplete: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)

    def is_complete(self) -> bool:
        """Check if every simulated item finished within the horizon."""
        return len(self.incomplete) == 0

    def get_timeline(self, work_item_id: str) -> Timeline:
        return self.timelines.get(work_item_id, [])

    def forecast_start(self, work_item_id: str) -> Optional[date]:
        blocks = self.get_timeline(work_item_id)
        return blocks[0].start if blocks else None

    def forecast_end(self, work_item_id: str) -> Optional[date]:
        blocks = self.get_timeline(work_item_id)
        return blocks[-1].end if blocks else None

    def changed_dates(self, work_items: Iterable[WorkItem]) -> List[ForecastUpdate]:
        """
        List forecast dates that differ from those recorded on the work items.

        Items without a timeline, or still incomplete, are left untouched.

        Args:
            work_items: Work items as currently persisted

        Returns:
            Updates for items whose projected start or end changed
        """
        updates = []
        for item in work_items:
            if item.id in self.incomplete:
                continue
            start = self.forecast_start(item.id)
            end = self.forecast_end(item.id)
            if start is None or end is None:
                continue
            if item.forecast_start == start and item.forecast_end == end:
                continue
            updates.append(
                ForecastUpdate(work_item_id=item.id, forecast_start=start, forecast_end=end)
            )
        return updates

    def __str__(self) -> str:
        status = "COMPLETE" if self.is_complete() else f"INCOMPLETE ({len(self.incomplete)} items)"
        return (
            f"CapacityForecast from {self.start_date}: "
            f"{len(self.timelines)} timelines, {len(self.skipped)} skipped - {status}"
        )


class CapacityForecaster:
    """
    Builds capacity forecasts from work items and catalog data.

    This forecaster:
    1. Looks up each item's model lead times and work hours
    2. Builds the item's remaining stage requirements
    3. Simulates all items against shared stage capacity
    4. Levels powder coat intake against vendor weekly quotas
    """

    def __init__(
        self,
        capacity_config: CapacityConfig,
        lead_time_lookup: LeadTimeLookup,
        work_hours_lookup: WorkHoursLookup,
        calendar: Optional[WorkCalendar] = None,
        horizon_days: int = HORIZON_DAYS,
    ):
        """
        Initialize forecaster.

        Args:
            capacity_config: Capacity settings
            lead_time_lookup: Model code -> lead times (None if unknown)
            work_hours_lookup: Model code -> work hours (None if unknown)
            calendar: Working-day calendar (federal holidays if not provided)
            horizon_days: Calendar days to simulate before giving up
        """
        self.capacity_config = capacity_config
        self.lead_time_lookup = lead_time_lookup
        self.work_hours_lookup = work_hours_lookup
        self.calendar = calendar or WorkCalendar()
        self.simulator = CapacityForecastSimulator(capacity_config, self.calendar, horizon_days)
        self.leveler = VendorCapacityLeveler(capacity_config, self.calendar)

    def forecast(self, work_items: Iterable[WorkItem], start_date: DateLike) -> CapacityForecast:
        """
        Project stage timelines for work items.

        Args:
            work_items: Work items in input order
            start_date: Simulation start date

        Returns:
            CapacityForecast with one timeline per simulated work item
        """
        start_date = to_day(start_date)
        entries = []
        skipped = []

        for item in work_items:
            lead_times = self.lead_time_lookup(item.model)
            work_hours = self.work_hours_lookup(item.model)
            if lead_times is None or work_hours is None:
                logger.debug(f"Skipping {item.id}: no catalog data for model {item.model!r}")
                skipped.append(item.id)
                continue

            requirements = build_stage_requirements(
                item.stage,
                lead_times,
                work_hours,
                self.capacity_config.staged_for_powder_buffer_days,
            )
            if not requirements:
                logger.debug(f"Skipping {item.id}: no remaining stage requirements")
                continue
            entries.append((item, requirements))

        simulation = self.simulator.simulate(entries, start_date)
        timelines = self.leveler.level(
            simulation.timelines,
            {item.id: item for item, _ in entries},
        )

        logger.info(
            f"Capacity forecast from {start_date}: {len(timelines)} items simulated, "
            f"{len(skipped)} skipped, {len(simulation.incomplete)} incomplete"
        )

        return CapacityForecast(
            start_date=start_date,
            timelines=timelines,
            incomplete=simulation.incomplete,
            skipped=skipped,
        )


def build_capacity_forecast(
    work_items: Iterable[WorkItem],
    capacity_config: CapacityConfig,
    start_date: DateLike,
    lead_time_lookup: LeadTimeLookup,
    work_hours_lookup: WorkHoursLookup,
) -> CapacityForecast:
    """
    Build a capacity forecast in one call.

    Args:
        work_items: Work items in input order
        capacity_config: Capacity settings
        start_date: Simulation start date
        lead_time_lookup: Model code -> lead times (None if unknown)
        work_hours_lookup: Model code -> work hours (None if unknown)

    Returns:
        CapacityForecast
    """
    forecaster = CapacityForecaster(capacity_config, lead_time_lookup, work_hours_lookup)
    return forecaster.forecast(work_items, start_date)
