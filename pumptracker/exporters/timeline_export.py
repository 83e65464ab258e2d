"""
Excel export of capacity forecast timelines.

Flattens per-item stage timelines into tabular form for Gantt and
Kanban consumers, and writes them to a formatted workbook.
"""

from datetime import datetime
from typing import Any, Dict, Optional

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from pumptracker.production.forecast import CapacityForecast

HEADER_COLOR = "1E88E5"
PAUSED_COLOR = "FFF9C4"  # Yellow
INCOMPLETE_COLOR = "FFCDD2"  # Red

TIMELINE_COLUMNS = [
    "work_item_id", "stage", "start", "end", "working_days", "paused_days",
]


def create_header_style() -> Dict[str, Any]:
    """Create header row style (blue background, white text, bold)."""
    thin = Side(style='thin')
    return {
        'font': Font(name='Calibri', size=11, bold=True, color='FFFFFF'),
        'fill': PatternFill(start_color=HEADER_COLOR, end_color=HEADER_COLOR, fill_type='solid'),
        'alignment': Alignment(horizontal='center', vertical='center', wrap_text=True),
        'border': Border(left=thin, right=thin, top=thin, bottom=thin),
    }


def timelines_to_dataframe(forecast: CapacityForecast) -> pd.DataFrame:
    """
    Flatten forecast timelines into one row per stage block.

    Args:
        forecast: Capacity forecast

    Returns:
        DataFrame with columns work_item_id, stage, start, end, working_days, paused_days
    """
    rows = []
    for work_item_id, blocks in forecast.timelines.items():
        for block in blocks:
            rows.append({
                "work_item_id": work_item_id,
                "stage": block.stage.value,
                "start": block.start,
                "end": block.end,
                "working_days": block.working_days,
                "paused_days": block.paused_days,
            })
    return pd.DataFrame(rows, columns=TIMELINE_COLUMNS)


def summarize_forecast(forecast: CapacityForecast) -> pd.DataFrame:
    """One row per work item: projected start, end, paused days and status."""
    rows = []
    for work_item_id, blocks in forecast.timelines.items():
        rows.append({
            "work_item_id": work_item_id,
            "forecast_start": forecast.forecast_start(work_item_id),
            "forecast_end": forecast.forecast_end(work_item_id),
            "paused_days": sum(b.paused_days for b in blocks),
            "status": "incomplete" if work_item_id in forecast.incomplete else "complete",
        })
    return pd.DataFrame(
        rows,
        columns=["work_item_id", "forecast_start", "forecast_end", "paused_days", "status"],
    )


def _write_sheet(ws, df: pd.DataFrame, highlight: Optional[Dict[int, str]] = None) -> None:
    """Write a DataFrame with styled headers; highlight maps row index -> fill color."""
    style = create_header_style()
    for col_idx, header in enumerate(df.columns, 1):
        cell = ws.cell(row=1, column=col_idx)
        cell.value = header
        cell.font = style['font']
        cell.fill = style['fill']
        cell.alignment = style['alignment']
        cell.border = style['border']
        ws.column_dimensions[get_column_letter(col_idx)].width = max(14, len(header) + 2)

    highlight = highlight or {}
    for row_idx, row_data in enumerate(df.itertuples(index=False), 2):
        fill_color = highlight.get(row_idx - 2)
        for col_idx, value in enumerate(row_data, 1):
            cell = ws.cell(row=row_idx, column=col_idx)
            cell.value = value
            if hasattr(value, "isoformat") and not isinstance(value, str):
                cell.number_format = 'yyyy-mm-dd'
            if fill_color:
                cell.fill = PatternFill(start_color=fill_color, end_color=fill_color, fill_type='solid')

    ws.freeze_panes = 'A2'


def export_forecast_to_excel(forecast: CapacityForecast, output_path: str) -> str:
    """
    Export a capacity forecast to a formatted Excel file.

    Creates 3 sheets:
    1. Timeline - One row per stage block (paused blocks highlighted)
    2. Summary - One row per work item (incomplete items highlighted)
    3. Metadata - Forecast information

    Args:
        forecast: Capacity forecast
        output_path: Path to save Excel file

    Returns:
        Path to created file
    """
    wb = Workbook()
    wb.remove(wb.active)

    timeline_df = timelines_to_dataframe(forecast)
    paused_rows = {
        i: PAUSED_COLOR for i, paused in enumerate(timeline_df["paused_days"]) if paused > 0
    }
    _write_sheet(wb.create_sheet("Timeline"), timeline_df, paused_rows)

    summary_df = summarize_forecast(forecast)
    incomplete_rows = {
        i: INCOMPLETE_COLOR for i, status in enumerate(summary_df["status"]) if status == "incomplete"
    }
    _write_sheet(wb.create_sheet("Summary"), summary_df, incomplete_rows)

    metadata_df = pd.DataFrame([
        {"field": "Forecast start", "value": forecast.start_date.isoformat()},
        {"field": "Work items", "value": len(forecast.timelines)},
        {"field": "Incomplete", "value": len(forecast.incomplete)},
        {"field": "Skipped (no catalog data)", "value": len(forecast.skipped)},
        {"field": "Exported at", "value": datetime.now().strftime('%Y-%m-%d %H:%M')},
    ])
    _write_sheet(wb.create_sheet("Metadata"), metadata_df)

    wb.save(output_path)
    return output_path
