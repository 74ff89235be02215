"""Datenmodell für eine Schulklasse (Pydantic v2)."""

from pydantic import Field

from models.base import SnapshotModel


class SchoolClass(SnapshotModel):
    """Repräsentiert eine Klasse (z.B. 7b). Gruppen verweisen über class_ids auf sie."""

    id: str                      # "7b"
    name: str = ""
    lunch_duration: int = Field(30, ge=0)   # Mindestlänge der Mittagspause (Minuten)
