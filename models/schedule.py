"""Wochenplan: geordnete Stundenliste + Kennung + Status (Pydantic v2)."""

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import ConfigDict

from models.base import SnapshotModel
from models.lesson import Lesson


class ScheduleStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    ARCHIVED = "archived"


class Schedule(SnapshotModel):
    """Ein Wochenplan. Wird vom Generator erzeugt und danach nicht mehr verändert."""
    model_config = ConfigDict(frozen=True)

    id: str = ""
    name: str = ""
    week_number: Optional[int] = None
    year: Optional[int] = None
    status: ScheduleStatus = ScheduleStatus.DRAFT
    lessons: list[Lesson] = []

    # ─── Abfragen ───

    def lessons_for_teacher(self, teacher_id: str) -> list[Lesson]:
        return [l for l in self.lessons if l.teacher_id == teacher_id]

    def lessons_for_group(self, group_id: str) -> list[Lesson]:
        return [l for l in self.lessons if group_id in l.group_ids]

    def lessons_for_course(self, course_id: str) -> list[Lesson]:
        return [l for l in self.lessons if l.course_id == course_id]

    def lessons_by_day(self) -> dict[int, list[Lesson]]:
        """Tag → Stunden, jeweils nach Startzeit sortiert."""
        by_day: dict[int, list[Lesson]] = {}
        for lesson in self.lessons:
            by_day.setdefault(lesson.day_of_week, []).append(lesson)
        for day_lessons in by_day.values():
            day_lessons.sort(key=lambda l: (l.start_minutes, l.id))
        return dict(sorted(by_day.items()))

    def with_lessons(self, lessons: list[Lesson]) -> "Schedule":
        """Kopie mit ersetzter Stundenliste (z.B. nach externer Bearbeitung)."""
        return self.model_copy(update={"lessons": list(lessons)})

    # ─── Persistenz ───

    def save_json(self, path: Path) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.model_dump_json(indent=2, by_alias=True))

    @classmethod
    def load_json(cls, path: Path) -> "Schedule":
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Wochenplan-Datei nicht gefunden: {path}")
        with open(path, "r", encoding="utf-8") as f:
            return cls.model_validate_json(f.read())
