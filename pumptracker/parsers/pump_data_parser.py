"""Parser for model catalog, capacity settings, and work item files."""

from pathlib import Path
from typing import Any, Optional
import warnings

import pandas as pd
from pydantic import ValidationError

from ..models import (
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

EXCEL_SUFFIXES = [".xlsx", ".xlsm"]
CSV_SUFFIXES = [".csv"]


def _optional(row: pd.Series, column: str) -> Optional[Any]:
    """Value of an optional column, or None if absent or blank."""
    if column in row and pd.notna(row[column]):
        return row[column]
    return None


def _require_columns(df: pd.DataFrame, required_cols: set[str]) -> None:
    if not required_cols.issubset(df.columns):
        missing = required_cols - set(df.columns)
        raise ValueError(f"Missing required columns: {missing}")


class PumpDataParser:
    """
    Parser for pump tracker input files.

    Expected file format (Excel workbook):
    - Sheet 'Models': columns [model, fabrication_days?, powder_coat_days?, assembly_days?, ship_days?,
      fabrication_hours?, assembly_hours?, ship_hours?]
    - Sheet 'Staffing': columns [stage, employee_count, max_wip, efficiency?, daily_man_hours?]
    - Sheet 'Vendors' (optional): columns [id, name?, max_pumps_per_week]
    - Sheet 'Settings' (optional): columns [setting, value] (staged_for_powder_buffer_days)
    - Sheet 'WorkItems': columns [id, model, stage?, priority?, start_date?, date_received?, vendor_id?,
      forecast_start?, forecast_end?]

    A .csv file holds a single table and can be used for the model catalog
    or the work item list.
    """

    def __init__(self, file_path: Path | str):
        """
        Initialize parser with file path.

        Args:
            file_path: Path to an Excel workbook (.xlsx/.xlsm) or CSV file

        Raises:
            FileNotFoundError: If file does not exist
            ValueError: If file type is unsupported
        """
        self.file_path = Path(file_path)
        if not self.file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")
        if self.file_path.suffix.lower() not in EXCEL_SUFFIXES + CSV_SUFFIXES:
            raise ValueError(f"File must be .xlsx, .xlsm or .csv: {file_path}")

    @property
    def is_csv(self) -> bool:
        return self.file_path.suffix.lower() in CSV_SUFFIXES

    def _read(self, sheet_name: str) -> pd.DataFrame:
        if self.is_csv:
            return pd.read_csv(self.file_path)
        return pd.read_excel(self.file_path, sheet_name=sheet_name, engine="openpyxl")

    def _has_sheet(self, sheet_name: str) -> bool:
        with pd.ExcelFile(self.file_path, engine="openpyxl") as workbook:
            return sheet_name in workbook.sheet_names

    def parse_catalog(self, sheet_name: str = "Models") -> ModelCatalog:
        """
        Parse the model catalog.

        Missing lead time or hour columns default to 0.

        Args:
            sheet_name: Sheet containing model data (ignored for CSV)

        Returns:
            ModelCatalog with one entry per model

        Raises:
            ValueError: If the model column is missing
        """
        df = self._read(sheet_name)
        _require_columns(df, {"model"})

        def number(row: pd.Series, column: str) -> float:
            value = _optional(row, column)
            return float(value) if value is not None else 0.0

        models = []
        for _, row in df.iterrows():
            model = _optional(row, "model")
            if model is None:
                continue
            models.append(
                ModelSpec(
                    model=str(model).strip(),
                    lead_times=ModelLeadTimes(
                        fabrication=number(row, "fabrication_days"),
                        powder_coat=number(row, "powder_coat_days"),
                        assembly=number(row, "assembly_days"),
                        ship=number(row, "ship_days"),
                    ),
                    work_hours=ModelWorkHours(
                        fabrication=number(row, "fabrication_hours"),
                        assembly=number(row, "assembly_hours"),
                        ship=number(row, "ship_hours"),
                    ),
                )
            )

        return ModelCatalog(name=f"Model Catalog from {self.file_path.name}", models=models)

    def parse_capacity_config(
        self,
        staffing_sheet: str = "Staffing",
        vendors_sheet: str = "Vendors",
        settings_sheet: str = "Settings",
    ) -> CapacityConfig:
        """
        Parse capacity settings from an Excel workbook.

        Args:
            staffing_sheet: Sheet with one row per labor stage
            vendors_sheet: Optional sheet with powder coat vendors
            settings_sheet: Optional sheet with scalar settings

        Returns:
            CapacityConfig

        Raises:
            ValueError: If the file is a CSV, or staffing rows are missing or malformed
        """
        if self.is_csv:
            raise ValueError("Capacity settings require an Excel workbook")

        df = self._read(staffing_sheet)
        _require_columns(df, {"stage", "employee_count", "max_wip"})

        staffing = {}
        for _, row in df.iterrows():
            stage = str(row["stage"]).strip().lower()
            efficiency = _optional(row, "efficiency")
            daily_man_hours = _optional(row, "daily_man_hours")
            staffing[stage] = StageStaffing(
                employee_count=float(row["employee_count"]),
                efficiency=float(efficiency) if efficiency is not None else 1.0,
                daily_man_hours=float(daily_man_hours) if daily_man_hours is not None else None,
                max_wip=int(row["max_wip"]),
            )

        missing = {"fabrication", "assembly", "ship"} - set(staffing)
        if missing:
            raise ValueError(f"Missing staffing rows for stages: {missing}")

        vendors = []
        if self._has_sheet(vendors_sheet):
            vendors_df = self._read(vendors_sheet)
            _require_columns(vendors_df, {"id", "max_pumps_per_week"})
            for _, row in vendors_df.iterrows():
                name = _optional(row, "name")
                vendors.append(
                    PowderCoatVendor(
                        id=str(row["id"]),
                        name=str(name) if name is not None else "",
                        max_pumps_per_week=int(row["max_pumps_per_week"]),
                    )
                )

        config = CapacityConfig(
            fabrication=staffing["fabrication"],
            assembly=staffing["assembly"],
            ship=staffing["ship"],
            powder_coat=PowderCoatConfig(vendors=vendors),
        )

        if self._has_sheet(settings_sheet):
            settings_df = self._read(settings_sheet)
            _require_columns(settings_df, {"setting", "value"})
            settings = dict(zip(settings_df["setting"].astype(str), settings_df["value"]))
            if "staged_for_powder_buffer_days" in settings:
                config = config.with_buffer_days(float(settings["staged_for_powder_buffer_days"]))

        return config

    def parse_work_items(self, sheet_name: str = "WorkItems") -> list[WorkItem]:
        """
        Parse work items.

        Rows that fail validation are skipped with a warning.

        Args:
            sheet_name: Sheet containing work items (ignored for CSV)

        Returns:
            List of WorkItem objects in file order

        Raises:
            ValueError: If required columns are missing
        """
        df = self._read(sheet_name)
        _require_columns(df, {"id", "model"})

        optional_cols = [
            "stage", "priority", "start_date", "date_received",
            "vendor_id", "forecast_start", "forecast_end",
        ]

        items = []
        skipped_rows = []
        for index, row in df.iterrows():
            data = {"id": str(row["id"]), "model": str(row["model"])}
            for column in optional_cols:
                value = _optional(row, column)
                if value is not None:
                    data[column] = str(value) if column == "vendor_id" else value
            try:
                items.append(WorkItem(**data))
            except ValidationError:
                skipped_rows.append(index + 2)  # header row + 1-based

        if skipped_rows:
            warnings.warn(
                f"Skipped {len(skipped_rows)} invalid work item rows in {self.file_path.name}: "
                f"{skipped_rows[:10]}",
                UserWarning
            )

        return items
