"""
Powder coat vendor leveling.

Post-processes simulated timelines so no powder coat vendor receives
more pumps in a week than its weekly quota. Deferred items wait longer
in staging, and every block from powder coat onward moves later by the
same amount.
"""

import logging
from collections import defaultdict
from datetime import date, timedelta
from typing import Dict, List, Mapping, Optional, Tuple

from pumptracker.models.capacity import CapacityConfig
from pumptracker.models.timeline import StageTimelineBlock, Timeline
from pumptracker.models.work_item import Stage, WorkItem
from .work_calendar import WorkCalendar, week_start

logger = logging.getLogger(__name__)

# Key of the shared pool used by items without a valid vendor assignment
SHARED_POOL_ID = "__shared_pool__"

ONE_WEEK = timedelta(days=7)


class VendorWeekLedger:
    """Per-vendor count of pumps committed to each Monday-aligned week."""

    def __init__(self):
        self._weeks: Dict[str, Dict[date, int]] = defaultdict(dict)

    def committed(self, vendor_key: str, week: date) -> int:
        return self._weeks[vendor_key].get(week, 0)

    def commit(self, vendor_key: str, week: date) -> None:
        weeks = self._weeks[vendor_key]
        weeks[week] = weeks.get(week, 0) + 1

    def first_open_week(self, vendor_key: str, week: date, capacity: int) -> date:
        """
        First week at or after week with a free slot.

        A capacity of 0 means the vendor is unconstrained.
        """
        if capacity <= 0:
            return week
        while self.committed(vendor_key, week) >= capacity:
            week += ONE_WEEK
        return week

    def weeks_for(self, vendor_key: str) -> Dict[date, int]:
        """Committed counts for a vendor, ordered by week start."""
        return dict(sorted(self._weeks[vendor_key].items()))


class VendorCapacityLeveler:
    """
    Defers powder coat intake into later weeks when a vendor is full.

    Items are processed in order of their simulated powder coat start.
    Items already in powder coat are committed to their current week but
    never moved.
    """

    def __init__(self, capacity_config: CapacityConfig, calendar: Optional[WorkCalendar] = None):
        self.capacity_config = capacity_config
        self.calendar = calendar or WorkCalendar()
        self.ledger = VendorWeekLedger()

    def resolve_vendor(self, item: WorkItem) -> Tuple[str, int]:
        """
        Resolve the vendor key and weekly capacity for a work item.

        Returns:
            (vendor key, weekly capacity); items without a valid vendor
            share a pool sized to the sum of all vendor quotas
        """
        vendor = self.capacity_config.powder_coat.get_vendor(item.vendor_id)
        if vendor is not None:
            return vendor.id, vendor.max_pumps_per_week
        return SHARED_POOL_ID, self.capacity_config.total_vendor_capacity

    def level(
        self,
        timelines: Mapping[str, Timeline],
        work_items: Mapping[str, WorkItem],
    ) -> Dict[str, Timeline]:
        """
        Level powder coat intake across weeks.

        Args:
            timelines: Simulated timelines by work item ID
            work_items: Work items by ID

        Returns:
            New timelines mapping (input order preserved)
        """
        result = {item_id: list(blocks) for item_id, blocks in timelines.items()}

        candidates = []
        for order, (item_id, blocks) in enumerate(timelines.items()):
            index = _powder_coat_index(blocks)
            if index is None or item_id not in work_items:
                continue
            candidates.append((blocks[index].start, order, item_id, index))
        candidates.sort()

        ledger = VendorWeekLedger()
        deferred = 0

        for powder_start, _, item_id, index in candidates:
            item = work_items[item_id]
            vendor_key, capacity = self.resolve_vendor(item)
            original_week = week_start(powder_start)

            if item.stage == Stage.POWDER_COAT:
                week = original_week
            else:
                week = ledger.first_open_week(vendor_key, original_week, capacity)
            ledger.commit(vendor_key, week)

            if week != original_week:
                result[item_id] = self._defer(result[item_id], index, week)
                deferred += 1

        if deferred:
            logger.info(f"Vendor leveling deferred {deferred} of {len(candidates)} powder coat starts")
        self.ledger = ledger
        return result

    def _defer(
        self,
        blocks: List[StageTimelineBlock],
        index: int,
        new_start: date,
    ) -> List[StageTimelineBlock]:
        """
        Move powder coat to new_start and shift all later blocks by the same delta.

        The staging block is stretched to bridge the gap; if the item had no
        staging block one is inserted so the timeline stays contiguous.

        Later blocks move by the plain calendar delta and are not re-checked
        against the calendar, so a shifted assembly or ship block may start
        on a weekend or holiday.
        """
        powder = blocks[index]
        delta = new_start - powder.start
        shifted = [block.shifted(delta) for block in blocks[index:]]

        previous = blocks[:index]
        if previous and previous[-1].stage == Stage.STAGED_FOR_POWDER:
            staged = previous[-1]
            previous[-1] = staged.model_copy(update={
                "end": new_start,
                "working_days": float(self.calendar.count_working_days(staged.start, new_start)),
            })
        else:
            previous.append(
                StageTimelineBlock(
                    stage=Stage.STAGED_FOR_POWDER,
                    start=powder.start,
                    end=new_start,
                    working_days=float(self.calendar.count_working_days(powder.start, new_start)),
                )
            )
        return previous + shifted


def _powder_coat_index(blocks: List[StageTimelineBlock]) -> Optional[int]:
    for i, block in enumerate(blocks):
        if block.stage == Stage.POWDER_COAT:
            return i
    return None
