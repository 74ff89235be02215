"""Datenmodell für ein Unterrichtsfach (Pydantic v2)."""

from pydantic import Field

from models.base import SnapshotModel


class Subject(SnapshotModel):
    """Repräsentiert ein Unterrichtsfach."""

    id: str                     # "math"
    name: str = ""              # "Mathematik"
    break_duration: int = Field(10, ge=0)   # Mindestpause nach einer Stunde (Minuten)
