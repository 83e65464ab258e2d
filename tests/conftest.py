"""Pytest configuration and shared fixtures."""

import pytest
from datetime import date

from pumptracker.models import (
    CapacityConfig,
    ModelCatalog,
    ModelLeadTimes,
    ModelSpec,
    ModelWorkHours,
    PowderCoatConfig,
    PowderCoatVendor,
    StageStaffing,
    WorkItem,
)

# Monday, January 5th 2026 (MLK Day is Monday the 19th)
SIM_START = date(2026, 1, 5)


@pytest.fixture
def sim_start():
    """Fixture for the simulation start date (a Monday)."""
    return SIM_START


@pytest.fixture
def capacity_config():
    """
    Fixture for a small shop.

    Fabrication 16h/day (WIP 1), assembly 8h/day (WIP 2),
    ship 4h/day (WIP 2), 1 staging buffer day, no vendors.
    """
    return CapacityConfig(
        fabrication=StageStaffing(employee_count=2, efficiency=1.0, max_wip=1),
        assembly=StageStaffing(employee_count=1, efficiency=1.0, max_wip=2),
        ship=StageStaffing(employee_count=0.5, efficiency=1.0, max_wip=2),
        staged_for_powder_buffer_days=1,
        powder_coat=PowderCoatConfig(vendors=[]),
    )


@pytest.fixture
def single_vendor_config(capacity_config):
    """Fixture for the small shop with one vendor taking 1 pump per week."""
    return capacity_config.model_copy(update={
        "powder_coat": PowderCoatConfig(
            vendors=[PowderCoatVendor(id="pc-1", name="PC-1", max_pumps_per_week=1)]
        ),
    })


@pytest.fixture
def catalog():
    """Fixture for a model catalog."""
    return ModelCatalog(
        name="Test Catalog",
        models=[
            # Fabrication only
            ModelSpec(
                model="FAB-ONLY",
                lead_times=ModelLeadTimes(),
                work_hours=ModelWorkHours(fabrication=8),
            ),
            # Every stage
            ModelSpec(
                model="FULL",
                lead_times=ModelLeadTimes(fabrication=1, powder_coat=5, assembly=1, ship=1),
                work_hours=ModelWorkHours(fabrication=8, assembly=8, ship=4),
            ),
        ],
    )


def make_item(item_id: str, model: str = "FAB-ONLY", **kwargs) -> WorkItem:
    """Create a work item with sensible defaults for tests."""
    data = {"id": item_id, "model": model, "stage": "FABRICATION"}
    data.update(kwargs)
    return WorkItem(**data)
