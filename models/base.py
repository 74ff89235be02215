"""Gemeinsame Basisklasse der Eingabe- und Ergebnismodelle (Pydantic v2)."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class SnapshotModel(BaseModel):
    """Basis für Datensätze, die aus der Datenhaltung stammen.

    Felder heißen in Python snake_case, werden aber auch unter dem
    camelCase-Namen der Datenhaltung akzeptiert ("groupIds", "weeklyHours").
    Zusätzliche Felder der Datenhaltung (z.B. Zeitstempel) werden ignoriert.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )
