"""Datenmodell für eine verplante Unterrichtsstunde (Ergebnis des Generators)."""

from typing import Optional

from pydantic import ConfigDict, field_validator

from config.schema import check_hhmm
from models.base import SnapshotModel
from models.timeslot import TimeSlot, format_time, parse_time


class Lesson(SnapshotModel):
    """Eine einzelne Stunde im Wochenplan.

    Unveränderlich, sobald sie ausgegeben wurde. Tag und Dauer werden beim
    Laden nicht eingeschränkt; ungültige Werte meldet der RuleValidator.
    """
    model_config = ConfigDict(frozen=True)

    id: str                            # "lesson_c1_1_0815"
    course_id: str
    teacher_id: Optional[str] = None
    subject_id: Optional[str] = None
    group_ids: list[str] = []
    day_of_week: int                   # 1=Mo .. 5=Fr
    start_time: str                    # "HH:MM"
    duration: int                      # Minuten
    version: int = 0                   # Bearbeitungszähler der Kollaborationsschicht

    @field_validator("start_time")
    @classmethod
    def _validate_time(cls, v: str) -> str:
        return check_hhmm(v)

    @property
    def start_minutes(self) -> int:
        return parse_time(self.start_time)

    @property
    def end_minutes(self) -> int:
        return self.start_minutes + self.duration

    @property
    def end_time(self) -> str:
        return format_time(self.end_minutes)

    @property
    def slot(self) -> TimeSlot:
        return TimeSlot(day=self.day_of_week, start_time=self.start_time)

    @property
    def slot_key(self) -> str:
        """'<Tag>:<HH:MM>' – Schlüssel der Belegungstabellen."""
        return self.slot.key

    def overlaps(self, other: "Lesson") -> bool:
        """True wenn beide Stunden am selben Tag zeitlich überlappen."""
        return (
            self.day_of_week == other.day_of_week
            and self.start_minutes < other.end_minutes
            and other.start_minutes < self.end_minutes
        )

    def __str__(self) -> str:
        return f"{self.id} ({self.slot.day_name} {self.start_time}-{self.end_time})"


def make_lesson_id(course_id: str, day: int, start_time: str) -> str:
    """Stabile Stunden-ID aus Kurs, Tag und Startzeit ("lesson_c1_1_0815")."""
    return f"lesson_{course_id}_{day}_{start_time.replace(':', '')}"
