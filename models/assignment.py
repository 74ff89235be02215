"""Zwischenergebnis: Zuordnung Kurs → Lehrkraft."""

from typing import Optional

from models.base import SnapshotModel


class Assignment(SnapshotModel):
    """Bindung eines Kurses an eine Lehrkraft.

    was_pre_assigned markiert Kurse, deren Lehrkraft bereits in den
    Eingabedaten stand. reason ist gesetzt, wenn keine Lehrkraft gefunden
    wurde (teacher_id ist dann None).
    """

    course_id: str
    teacher_id: Optional[str] = None
    was_pre_assigned: bool = False
    reason: Optional[str] = None
    score: Optional[float] = None

    @property
    def is_assigned(self) -> bool:
        return self.teacher_id is not None
