"""Datenmodell für einen Kurs (Fach + Gruppen + Wochenstunden)."""

import math
from typing import Optional

from pydantic import Field, field_validator

from config.schema import check_hhmm
from models.base import SnapshotModel


class PreferredTimeSlot(SnapshotModel):
    """Gewünschter Stundenbeginn eines Kurses."""

    day_of_week: int = Field(ge=1, le=5)
    start_time: str

    @field_validator("start_time")
    @classmethod
    def _validate_time(cls, v: str) -> str:
        return check_hhmm(v)


class Course(SnapshotModel):
    """Ein Kurs: ein Fach, das für eine oder mehrere Gruppen unterrichtet wird."""

    id: str
    subject_id: str
    teacher_id: Optional[str] = None              # Vorab zugewiesene Lehrkraft
    group_ids: list[str] = Field(min_length=1)
    weekly_hours: float = Field(gt=0)
    number_of_lessons: Optional[int] = Field(None, gt=0)
    preferred_time_slots: list[PreferredTimeSlot] = []

    @property
    def is_pre_assigned(self) -> bool:
        return self.teacher_id is not None

    def lessons_needed_for_hours(self, lesson_duration: int) -> int:
        """Stunden aus den Wochenstunden: ceil(weekly_hours / (Dauer in h))."""
        return math.ceil(self.weekly_hours / (lesson_duration / 60))

    def lessons_needed(self, lesson_duration: int) -> int:
        """Anzahl zu verplanender Stunden (explizite Vorgabe hat Vorrang)."""
        if self.number_of_lessons is not None:
            return self.number_of_lessons
        return self.lessons_needed_for_hours(lesson_duration)
