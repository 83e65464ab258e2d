"""Model catalog: per-model lead times and labor content."""

import math
from typing import Callable, Optional

from pydantic import BaseModel, Field


class ModelLeadTimes(BaseModel):
    """Stage lead times for a pump model, in days."""
    fabrication: float = Field(default=0.0, ge=0)
    powder_coat: float = Field(default=0.0, ge=0)
    assembly: float = Field(default=0.0, ge=0)
    ship: float = Field(default=0.0, ge=0)

    @property
    def powder_coat_days(self) -> int:
        """Powder coat lead time rounded up to whole days."""
        return math.ceil(self.powder_coat)


class ModelWorkHours(BaseModel):
    """Labor-hour content for a pump model, per labor stage."""
    fabrication: float = Field(default=0.0, ge=0)
    assembly: float = Field(default=0.0, ge=0)
    ship: float = Field(default=0.0, ge=0)

    @property
    def total_hours(self) -> float:
        return self.fabrication + self.assembly + self.ship


class ModelSpec(BaseModel):
    """
    Catalog entry for one pump model.

    Attributes:
        model: Model code
        lead_times: Stage lead times (days)
        work_hours: Labor content per labor stage (hours)
    """
    model: str = Field(..., min_length=1, description="Model code")
    lead_times: ModelLeadTimes = Field(default_factory=ModelLeadTimes)
    work_hours: ModelWorkHours = Field(default_factory=ModelWorkHours)


LeadTimeLookup = Callable[[str], Optional[ModelLeadTimes]]
WorkHoursLookup = Callable[[str], Optional[ModelWorkHours]]


class ModelCatalog(BaseModel):
    """
    Container for model catalog entries.

    Attributes:
        name: Catalog name
        models: Catalog entries
    """
    name: str = Field(default="Model Catalog", description="Catalog name")
    models: list[ModelSpec] = Field(default_factory=list, description="Catalog entries")

    def get_model(self, model: str) -> Optional[ModelSpec]:
        for spec in self.models:
            if spec.model == model:
                return spec
        return None

    def lead_time_lookup(self, model: str) -> Optional[ModelLeadTimes]:
        """Lead times for a model code, or None if the model is unknown."""
        spec = self.get_model(model)
        return spec.lead_times if spec else None

    def work_hours_lookup(self, model: str) -> Optional[ModelWorkHours]:
        """Work hours for a model code, or None if the model is unknown."""
        spec = self.get_model(model)
        return spec.work_hours if spec else None

    def __str__(self) -> str:
        return f"ModelCatalog '{self.name}' with {len(self.models)} models"
