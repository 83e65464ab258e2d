"""Data models for the pump capacity forecast."""

from .work_item import WorkItem, Stage, Priority, STAGE_SEQUENCE, LABOR_STAGES
from .capacity import (
    CapacityConfig,
    StageStaffing,
    PowderCoatConfig,
    PowderCoatVendor,
    DEFAULT_CAPACITY_CONFIG,
    HOURS_PER_EMPLOYEE_DAY,
)
from .catalog import ModelCatalog, ModelSpec, ModelLeadTimes, ModelWorkHours
from .timeline import StageTimelineBlock, Timeline, ForecastUpdate

__all__ = [
    # Work items and stages
    "WorkItem",
    "Stage",
    "Priority",
    "STAGE_SEQUENCE",
    "LABOR_STAGES",
    # Capacity
    "CapacityConfig",
    "StageStaffing",
    "PowderCoatConfig",
    "PowderCoatVendor",
    "DEFAULT_CAPACITY_CONFIG",
    "HOURS_PER_EMPLOYEE_DAY",
    # Catalog
    "ModelCatalog",
    "ModelSpec",
    "ModelLeadTimes",
    "ModelWorkHours",
    # Output
    "StageTimelineBlock",
    "Timeline",
    "ForecastUpdate",
]
