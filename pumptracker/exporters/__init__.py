"""
Exporters for capacity forecast results.

This module provides tabular and Excel exports of stage timelines
for scheduling views and planners.
"""

from .timeline_export import (
    timelines_to_dataframe,
    summarize_forecast,
    export_forecast_to_excel,
)

__all__ = [
    'timelines_to_dataframe',
    'summarize_forecast',
    'export_forecast_to_excel',
]
