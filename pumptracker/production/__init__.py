"""Capacity forecasting engine.

This module projects, for every active work item, which stage it
occupies on which working day:
- Working-day calendar with rule-based federal holidays
- Stage requirements from model lead times and labor content
- Day-stepped simulation of shared stage capacity and WIP limits
- Powder coat vendor weekly leveling
"""

from .work_calendar import (
    WorkCalendar,
    HolidaySet,
    build_federal_holidays,
    is_working_day,
    count_working_days,
    week_start,
)
from .requirements import StageRequirement, UnitKind, build_stage_requirements
from .simulator import CapacityForecastSimulator, SimulationResult, WorkItemState, HORIZON_DAYS
from .vendor_leveling import VendorCapacityLeveler, VendorWeekLedger
from .forecast import CapacityForecast, CapacityForecaster, build_capacity_forecast

__all__ = [
    'WorkCalendar',
    'HolidaySet',
    'build_federal_holidays',
    'is_working_day',
    'count_working_days',
    'week_start',
    'StageRequirement',
    'UnitKind',
    'build_stage_requirements',
    'CapacityForecastSimulator',
    'SimulationResult',
    'WorkItemState',
    'HORIZON_DAYS',
    'VendorCapacityLeveler',
    'VendorWeekLedger',
    'CapacityForecast',
    'CapacityForecaster',
    'build_capacity_forecast',
]
