"""Capacity configuration: staffing per labor stage and powder coat vendors."""

import math
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from .work_item import LABOR_STAGES, Stage

# Paid hours per employee per working day
HOURS_PER_EMPLOYEE_DAY = 8.0


class StageStaffing(BaseModel):
    """
    Staffing for a labor-bound stage (fabrication, assembly, ship).

    Business Rules:
    - daily_man_hours = employee_count × 8 × efficiency
    - If daily_man_hours is omitted it is derived from the rule above

    Attributes:
        employee_count: Number of employees assigned (may be fractional)
        efficiency: Efficiency factor (1.0 = 100%)
        daily_man_hours: Labor hours available to the stage per working day
        max_wip: Maximum items the stage actively works on at once
    """
    employee_count: float = Field(..., description="Employees assigned", ge=0)
    efficiency: float = Field(default=1.0, description="Efficiency factor", ge=0)
    daily_man_hours: Optional[float] = Field(
        None,
        description="Daily man-hours (derived if omitted)",
        ge=0
    )
    max_wip: int = Field(..., description="Max concurrent work items", ge=0)

    @model_validator(mode="after")
    def derive_daily_man_hours(self) -> "StageStaffing":
        if self.daily_man_hours is None:
            self.daily_man_hours = self.employee_count * HOURS_PER_EMPLOYEE_DAY * self.efficiency
        return self

    def with_updates(
        self,
        employee_count: Optional[float] = None,
        efficiency: Optional[float] = None,
        daily_man_hours: Optional[float] = None,
        max_wip: Optional[int] = None,
    ) -> "StageStaffing":
        """
        Return a copy with updated staffing, keeping the derived fields consistent.

        Changing employee count or efficiency recomputes daily man-hours.
        Changing daily man-hours alone recomputes efficiency, holding the
        employee count constant.

        Args:
            employee_count: New employee count
            efficiency: New efficiency factor
            daily_man_hours: New daily man-hours
            max_wip: New WIP cap

        Returns:
            Updated StageStaffing
        """
        data = self.model_dump()
        if max_wip is not None:
            data["max_wip"] = max_wip

        if employee_count is not None and employee_count != self.employee_count:
            data["employee_count"] = employee_count
            if efficiency is not None:
                data["efficiency"] = efficiency
            data["daily_man_hours"] = None
        elif efficiency is not None and efficiency != self.efficiency:
            data["efficiency"] = efficiency
            data["daily_man_hours"] = None
        elif daily_man_hours is not None and daily_man_hours != self.daily_man_hours:
            data["daily_man_hours"] = daily_man_hours
            denom = self.employee_count * HOURS_PER_EMPLOYEE_DAY
            if denom > 0:
                data["efficiency"] = daily_man_hours / denom

        return StageStaffing(**data)


class PowderCoatVendor(BaseModel):
    """
    Outsourced powder coat vendor with a weekly intake quota.

    Attributes:
        id: Vendor identifier
        name: Vendor display name
        max_pumps_per_week: Pumps the vendor accepts per week (0 = unconstrained)
    """
    id: str = Field(..., min_length=1, description="Vendor identifier")
    name: str = Field(default="", description="Vendor name")
    max_pumps_per_week: int = Field(default=0, description="Weekly pump quota", ge=0)


class PowderCoatConfig(BaseModel):
    """Powder coat vendor list."""
    vendors: list[PowderCoatVendor] = Field(default_factory=list)

    def get_vendor(self, vendor_id: Optional[str]) -> Optional[PowderCoatVendor]:
        if vendor_id is None:
            return None
        for vendor in self.vendors:
            if vendor.id == vendor_id:
                return vendor
        return None


class CapacityConfig(BaseModel):
    """
    Shop capacity settings consumed by the capacity forecast.

    Attributes:
        fabrication: Fabrication staffing
        assembly: Assembly staffing
        ship: Ship (test and crate) staffing
        staged_for_powder_buffer_days: Working days an item waits staged before powder coat
        powder_coat: Powder coat vendors
    """
    fabrication: StageStaffing
    assembly: StageStaffing
    ship: StageStaffing
    staged_for_powder_buffer_days: int = Field(
        default=1,
        description="Staging buffer before powder coat (working days)",
        ge=0
    )
    powder_coat: PowderCoatConfig = Field(default_factory=PowderCoatConfig)

    def staffing_for(self, stage: Stage) -> Optional[StageStaffing]:
        """
        Get staffing for a labor stage.

        Returns:
            StageStaffing for FABRICATION/ASSEMBLY/SHIP, None for any other stage
        """
        if stage not in LABOR_STAGES:
            return None
        return getattr(self, stage.value.lower())

    @property
    def total_vendor_capacity(self) -> int:
        """Weekly capacity of the shared vendor pool."""
        return sum(v.max_pumps_per_week for v in self.powder_coat.vendors)

    def with_staffing(self, stage: Stage, **updates) -> "CapacityConfig":
        """Return a copy with one labor stage's staffing updated."""
        staffing = self.staffing_for(stage)
        if staffing is None:
            raise ValueError(f"{stage.value} is not a labor stage")
        field_name = stage.value.lower()
        return self.model_copy(update={field_name: staffing.with_updates(**updates)})

    def with_vendor(
        self,
        vendor_id: str,
        name: Optional[str] = None,
        max_pumps_per_week: Optional[int] = None,
    ) -> "CapacityConfig":
        """Return a copy with one vendor's settings updated (unknown IDs are ignored)."""
        vendors = []
        for vendor in self.powder_coat.vendors:
            if vendor.id == vendor_id:
                patch = {}
                if name is not None:
                    patch["name"] = name
                if max_pumps_per_week is not None:
                    patch["max_pumps_per_week"] = max(0, int(max_pumps_per_week))
                vendor = vendor.model_copy(update=patch)
            vendors.append(vendor)
        return self.model_copy(update={"powder_coat": PowderCoatConfig(vendors=vendors)})

    def with_buffer_days(self, days: float) -> "CapacityConfig":
        """Return a copy with the staging buffer set to max(0, floor(days))."""
        normalized = max(0, math.floor(days))
        return self.model_copy(update={"staged_for_powder_buffer_days": normalized})


DEFAULT_CAPACITY_CONFIG = CapacityConfig(
    fabrication=StageStaffing(employee_count=4, efficiency=0.85, max_wip=6),
    assembly=StageStaffing(employee_count=3, efficiency=0.9, max_wip=4),
    ship=StageStaffing(employee_count=1, efficiency=1.0, max_wip=4),
    staged_for_powder_buffer_days=1,
    powder_coat=PowderCoatConfig(
        vendors=[
            PowderCoatVendor(id="pc-1", name="Powder Coat Vendor 1", max_pumps_per_week=10),
            PowderCoatVendor(id="pc-2", name="Powder Coat Vendor 2", max_pumps_per_week=6),
        ]
    ),
)
