"""PinManager – fixiert einzelne Unterrichtsstunden vor dem Generierungslauf.

Eine gepinnte Stunde wird ohne Feasibility-Prüfung in die Belegung
eingetragen, bevor die Greedy-Platzierung beginnt. Kollisionen zwischen
Pins (oder mit platzierten Stunden) beseitigt anschließend der
ConflictResolver.
"""

import json
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator

from config.defaults import MIN_LESSON_DURATION
from config.schema import check_hhmm
from models.base import SnapshotModel
from models.course import Course
from models.lesson import Lesson, make_lesson_id


class PinnedLesson(SnapshotModel):
    """Eine fixierte Unterrichtsstunde."""

    course_id: str
    day_of_week: int = Field(ge=1, le=5)
    start_time: str                       # "HH:MM"
    teacher_id: Optional[str] = None      # None → Lehrkraft des Kurses
    duration: Optional[int] = Field(None, ge=MIN_LESSON_DURATION)   # None → Stundenlänge der Konfiguration

    @field_validator("start_time")
    @classmethod
    def _validate_time(cls, v: str) -> str:
        return check_hhmm(v)

    def to_lesson(self, course: Course, default_duration: int) -> Lesson:
        """Erzeugt die Stunde; Fach und Gruppen stammen aus dem Kurs."""
        return Lesson(
            id=make_lesson_id(self.course_id, self.day_of_week, self.start_time),
            course_id=course.id,
            teacher_id=self.teacher_id or course.teacher_id,
            subject_id=course.subject_id,
            group_ids=list(course.group_ids),
            day_of_week=self.day_of_week,
            start_time=self.start_time,
            duration=self.duration or default_duration,
        )


class PinManager:
    """Verwaltet gepinnte Stunden und übergibt sie an den Generator."""

    def __init__(self) -> None:
        self._pins: list[PinnedLesson] = []

    def add_pin(self, pin: PinnedLesson) -> None:
        """Fügt einen Pin hinzu. Ersetzt bestehenden Pin desselben Kurses am selben Tag/Zeit."""
        self._pins = [
            p for p in self._pins
            if not (p.course_id == pin.course_id and p.day_of_week == pin.day_of_week
                    and p.start_time == pin.start_time)
        ]
        self._pins.append(pin)

    def remove_pin(self, course_id: str, day_of_week: int, start_time: str) -> bool:
        """Entfernt einen Pin. Gibt True zurück wenn ein Pin entfernt wurde."""
        before = len(self._pins)
        self._pins = [
            p for p in self._pins
            if not (p.course_id == course_id and p.day_of_week == day_of_week
                    and p.start_time == start_time)
        ]
        return len(self._pins) < before

    def get_pins(self) -> list[PinnedLesson]:
        """Pins in Einfügereihenfolge (Reihenfolge der Registrierung im Lauf)."""
        return list(self._pins)

    def save_json(self, path: Path) -> None:
        """Schreibt die Pins als JSON-Liste (camelCase-Schlüssel)."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        data = [p.model_dump(by_alias=True) for p in self._pins]
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    def load_json(self, path: Path) -> None:
        """Lädt Pins aus einer JSON-Datei (überschreibt aktuelle Pins)."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Pin-Datei nicht gefunden: {path}")
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        self._pins = [PinnedLesson.model_validate(item) for item in data]

    def __len__(self) -> int:
        return len(self._pins)

    def __repr__(self) -> str:
        return f"PinManager({len(self._pins)} pins)"
