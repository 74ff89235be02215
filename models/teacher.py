"""Datenmodell für eine Lehrkraft (Pydantic v2)."""

from typing import Optional

from pydantic import Field, model_validator

from config.schema import TimeWindow
from models.base import SnapshotModel


class Teacher(SnapshotModel):
    """Repräsentiert eine einzelne Lehrkraft."""

    id: str                                       # "t1"
    name: str = ""                                # "Müller, Hans"
    subject_ids: list[str] = Field(min_length=1)  # Unterrichtbare Fächer
    working_hours: TimeWindow = Field(
        default_factory=lambda: TimeWindow(start="08:15", end="16:00"))
    current_load: float = Field(0.0, ge=0)        # Bereits vergebene Wochenstunden
    max_load: Optional[float] = Field(None, gt=0) # None → Default aus der Konfiguration

    @model_validator(mode='after')
    def _check_load_bounds(self):
        if self.max_load is not None and self.current_load > self.max_load:
            raise ValueError(
                f"current_load ({self.current_load}) > max_load ({self.max_load})"
            )
        return self

    def effective_max_load(self, default: float = 25.0) -> float:
        """Obergrenze der Wochenstunden (max_load oder Default)."""
        return self.max_load if self.max_load is not None else default

    def is_qualified(self, subject_id: str) -> bool:
        return subject_id in self.subject_ids

    def fits_working_hours(self, start_minutes: int, end_minutes: int) -> bool:
        """True wenn [start, end) vollständig in der Arbeitszeit liegt."""
        return self.working_hours.contains(start_minutes, end_minutes)
