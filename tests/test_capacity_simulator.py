"""
Tests for the day-stepped capacity simulation.

Dates are anchored on Monday January 5th 2026; MLK Day (Monday January
19th) is the first holiday the simulations run into.
"""

import pytest
from datetime import date

from pumptracker.models import (
    ModelLeadTimes,
    ModelWorkHours,
    Stage,
    StageStaffing,
    STAGE_SEQUENCE,
)
from pumptracker.production.requirements import build_stage_requirements
from pumptracker.production.simulator import CapacityForecastSimulator, round_to_hour

from tests.conftest import make_item


def entries_for(items, config, lead_times=None, work_hours=None):
    """Pair each item with requirements built from a single model."""
    lead_times = lead_times or ModelLeadTimes()
    work_hours = work_hours or ModelWorkHours(fabrication=8)
    return [
        (item, build_stage_requirements(
            item.stage, lead_times, work_hours, config.staged_for_powder_buffer_days
        ))
        for item in items
    ]


class WipCountingSimulator(CapacityForecastSimulator):
    """Simulator recording how many items progress in each stage per day."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.progressed = []

    def _process_stage(self, stage, cursor, pending):
        before = {
            id(s): (s.index, s.current.remaining)
            for s in pending
            if s.current is not None and s.current.stage == stage
        }
        super()._process_stage(stage, cursor, pending)
        moved = 0
        for s in pending:
            if id(s) not in before:
                continue
            remaining = s.current.remaining if s.current is not None else None
            if (s.index, remaining) != before[id(s)]:
                moved += 1
        self.progressed.append((stage, cursor, moved))


class TestPriorityAndWip:
    """Tests for contention between items in a WIP-limited stage."""

    def test_higher_priority_runs_first(self, capacity_config, sim_start):
        """With WIP 1, the Low item pauses while the High item is fabricated."""
        items = [
            make_item("p2", priority="Low"),
            make_item("p1", priority="High"),
        ]
        simulator = CapacityForecastSimulator(capacity_config)
        result = simulator.simulate(entries_for(items, capacity_config), sim_start)

        p1 = result.timelines["p1"]
        assert p1[0].stage == Stage.FABRICATION
        assert p1[0].start == date(2026, 1, 5)
        assert p1[0].end == date(2026, 1, 6)
        assert p1[0].paused_days == 0
        assert p1[0].working_days == 0.5
        assert p1[1].stage == Stage.STAGED_FOR_POWDER
        assert (p1[1].start, p1[1].end) == (date(2026, 1, 6), date(2026, 1, 7))

        p2 = result.timelines["p2"]
        assert (p2[0].start, p2[0].end) == (date(2026, 1, 5), date(2026, 1, 7))
        assert p2[0].paused_days == 1
        assert (p2[1].start, p2[1].end) == (date(2026, 1, 7), date(2026, 1, 8))

    def test_man_hours_split_across_active_items(self, capacity_config, sim_start):
        """Two items share 8 assembly hours per day; the third waits."""
        items = [make_item(f"a{i}", stage="ASSEMBLY") for i in range(3)]
        work_hours = ModelWorkHours(assembly=8)
        simulator = CapacityForecastSimulator(capacity_config)

        result = simulator.simulate(
            entries_for(items, capacity_config, work_hours=work_hours), sim_start
        )

        for item_id in ("a0", "a1"):
            block = result.timelines[item_id][0]
            assert block.stage == Stage.ASSEMBLY
            assert block.end == date(2026, 1, 7)
            assert block.paused_days == 0
            assert block.working_days == 2.0

        third = result.timelines["a2"][0]
        assert third.start == date(2026, 1, 5)
        assert third.end == date(2026, 1, 8)
        assert third.paused_days == 2
        assert third.working_days == 1.0

    def test_uneven_split_finishes_on_time(self, capacity_config, sim_start):
        """
        Three items share 16 hours a day, so each gets 16/3 hours.

        After three days each 16-hour quota is used up even though the
        repeated float subtraction leaves residue; the stage must close
        on Thursday and hand the WIP slot to the waiting fourth item.
        """
        config = capacity_config.with_staffing(Stage.FABRICATION, max_wip=3)
        items = [make_item(f"p{i}") for i in range(4)]
        simulator = CapacityForecastSimulator(config)

        result = simulator.simulate(
            entries_for(items, config, work_hours=ModelWorkHours(fabrication=16)),
            sim_start,
        )

        for item_id in ("p0", "p1", "p2"):
            block = result.timelines[item_id][0]
            assert block.end == date(2026, 1, 8)
            assert block.working_days == 3.0
            assert block.paused_days == 0

        fourth = result.timelines["p3"][0]
        assert fourth.paused_days == 3
        assert fourth.end == date(2026, 1, 9)
        assert fourth.working_days == 1.0

    def test_tie_break_by_start_then_received_date(self, capacity_config, sim_start):
        """Equal priority: earliest start date or date received goes first."""
        items = [
            make_item("C"),
            make_item("A", start_date="2026-01-03"),
            make_item("B", date_received="2025-12-15"),
        ]
        simulator = CapacityForecastSimulator(capacity_config)
        result = simulator.simulate(entries_for(items, capacity_config), sim_start)

        assert result.timelines["B"][0].end == date(2026, 1, 6)
        assert result.timelines["A"][0].end == date(2026, 1, 7)
        assert result.timelines["C"][0].end == date(2026, 1, 8)
        # A's recorded start date anchors its first block
        assert result.timelines["A"][0].start == date(2026, 1, 3)

    @pytest.mark.parametrize("earlier,later", [
        ("2026-01-02", "2026-01-05"),
        ("2026-01-05", "2026-01-07"),
        ("2025-12-01", "2026-01-06"),
        ("2026-01-16", "2026-01-20"),
    ])
    def test_earlier_start_finishes_no_later(self, capacity_config, sim_start, earlier, later):
        """Identical items differing only in start date; the later one is listed first."""
        items = [
            make_item("late", stage="QUEUE", start_date=later),
            make_item("early", stage="QUEUE", start_date=earlier),
        ]
        simulator = CapacityForecastSimulator(capacity_config)

        result = simulator.simulate(
            entries_for(
                items,
                capacity_config,
                ModelLeadTimes(powder_coat=3),
                ModelWorkHours(fabrication=12, assembly=8, ship=4),
            ),
            sim_start,
        )

        assert result.is_complete()
        assert result.timelines["early"][-1].end <= result.timelines["late"][-1].end

    def test_equal_keys_keep_input_order(self, capacity_config, sim_start):
        items = [make_item("first"), make_item("second")]
        simulator = CapacityForecastSimulator(capacity_config)
        result = simulator.simulate(entries_for(items, capacity_config), sim_start)

        assert result.timelines["first"][0].end < result.timelines["second"][0].end

    def test_active_items_never_exceed_wip(self, capacity_config, sim_start):
        items = [make_item(f"p{i}", stage="QUEUE") for i in range(6)]
        work_hours = ModelWorkHours(fabrication=20, assembly=10, ship=6)
        lead_times = ModelLeadTimes(powder_coat=3)
        simulator = WipCountingSimulator(capacity_config)

        result = simulator.simulate(
            entries_for(items, capacity_config, lead_times, work_hours), sim_start
        )

        assert result.is_complete()
        for stage, cursor, moved in simulator.progressed:
            staffing = capacity_config.staffing_for(stage)
            if staffing is not None:
                assert moved <= staffing.max_wip, f"{stage} on {cursor}"

    def test_zero_wip_stage_never_progresses(self, capacity_config, sim_start):
        config = capacity_config.with_staffing(Stage.FABRICATION, max_wip=0)
        simulator = CapacityForecastSimulator(config, horizon_days=30)

        result = simulator.simulate(entries_for([make_item("p1")], config), sim_start)

        assert result.incomplete == ["p1"]
        assert result.timelines["p1"] == []


class TestCalendarAwareness:
    """Tests for weekend and holiday handling."""

    def test_holiday_and_weekend_skipped(self, capacity_config):
        """Fri Jan 16 + Tue Jan 20 cover 32 hours; the block ends Wed Jan 21."""
        config = capacity_config.with_buffer_days(0)
        items = [make_item("p1")]
        simulator = CapacityForecastSimulator(config)

        result = simulator.simulate(
            entries_for(items, config, work_hours=ModelWorkHours(fabrication=32)),
            date(2026, 1, 16),
        )

        blocks = result.timelines["p1"]
        assert len(blocks) == 1
        assert blocks[0].start == date(2026, 1, 16)
        assert blocks[0].end == date(2026, 1, 21)
        assert blocks[0].working_days == 2.0

    def test_weekend_start_waits_for_monday(self, capacity_config):
        simulator = CapacityForecastSimulator(capacity_config)
        result = simulator.simulate(
            entries_for([make_item("p1")], capacity_config), date(2026, 1, 10)
        )

        assert result.timelines["p1"][0].end == date(2026, 1, 13)

    def test_partial_day_rounded_to_hours(self, capacity_config, sim_start):
        """12 hours against 32 man-hours/day is 0.375 days, i.e. 9 hours."""
        config = capacity_config.with_staffing(Stage.FABRICATION, employee_count=4)
        simulator = CapacityForecastSimulator(config)

        result = simulator.simulate(
            entries_for([make_item("p1")], config, work_hours=ModelWorkHours(fabrication=12)),
            sim_start,
        )

        block = result.timelines["p1"][0]
        assert block.working_days == 0.375
        assert block.working_hours == 9.0
        assert block.end == date(2026, 1, 6)


class TestTimelineShape:
    """Tests for the shape of simulated timelines."""

    def test_blocks_are_contiguous_and_ordered(self, capacity_config, sim_start):
        items = [make_item(f"p{i}", stage="QUEUE", priority=p)
                 for i, p in enumerate(["Low", "Urgent", "Normal", "Rush"])]
        simulator = CapacityForecastSimulator(capacity_config)
        result = simulator.simulate(
            entries_for(
                items,
                capacity_config,
                ModelLeadTimes(powder_coat=2),
                ModelWorkHours(fabrication=10, assembly=6, ship=2),
            ),
            sim_start,
        )

        for item_id, blocks in result.timelines.items():
            stages = [STAGE_SEQUENCE.index(b.stage) for b in blocks]
            assert stages == sorted(set(stages)), item_id
            for previous, current in zip(blocks, blocks[1:]):
                assert previous.end == current.start, item_id
            for block in blocks:
                assert block.end > block.start

    def test_requirements_are_not_mutated(self, capacity_config, sim_start):
        entries = entries_for([make_item("p1")], capacity_config)
        simulator = CapacityForecastSimulator(capacity_config)

        simulator.simulate(entries, sim_start)

        assert entries[0][1][0].remaining == 8

    def test_item_without_requirements_has_empty_timeline(self, capacity_config, sim_start):
        simulator = CapacityForecastSimulator(capacity_config)
        result = simulator.simulate([(make_item("done"), [])], sim_start)

        assert result.timelines == {"done": []}
        assert result.is_complete()

    def test_empty_input(self, capacity_config, sim_start):
        result = CapacityForecastSimulator(capacity_config).simulate([], sim_start)
        assert result.timelines == {}
        assert result.is_complete()


def test_round_to_hour():
    assert round_to_hour(0.375) == 0.375
    assert round_to_hour(1 / 3) == pytest.approx(8 / 24)
    assert round_to_hour(0.01) == 0.0


def test_staffing_recompute_feeds_simulation(capacity_config, sim_start):
    """Setting man-hours directly changes daily throughput."""
    config = capacity_config.model_copy(update={
        "fabrication": StageStaffing(employee_count=1, daily_man_hours=4, max_wip=1),
    })
    simulator = CapacityForecastSimulator(config)
    result = simulator.simulate(entries_for([make_item("p1")], config), sim_start)

    assert result.timelines["p1"][0].end == date(2026, 1, 7)
    assert result.timelines["p1"][0].working_days == 2.0
