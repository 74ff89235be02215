"""Datenmodell für eine Lerngruppe (Pydantic v2)."""

from pydantic import model_validator

from models.base import SnapshotModel


class Group(SnapshotModel):
    """Eine Lerngruppe (ganze Klasse oder Teilgruppe).

    dependent_group_ids sind Gruppen mit gemeinsamen Schülern: sie dürfen
    nie gleichzeitig Unterricht haben.
    """

    id: str                              # "7b" oder "7b-Frz"
    name: str = ""
    class_ids: list[str] = []            # Klassen, aus denen die Gruppe besteht
    dependent_group_ids: list[str] = []  # Gruppen mit gemeinsamen Schülern

    @model_validator(mode='after')
    def _check_not_self_dependent(self):
        if self.id in self.dependent_group_ids:
            raise ValueError(f"Gruppe {self.id} darf nicht von sich selbst abhängen.")
        return self


def build_exclusion_map(groups: list[Group], include_self: bool = True) -> dict[str, set[str]]:
    """Gruppe → alle Gruppen, die nicht gleichzeitig Unterricht haben dürfen.

    Die Abhängigkeit gilt in beide Richtungen: listet A die Gruppe B als
    abhängig, ist auch B für A gesperrt. Mit include_self=True enthält jede
    Menge auch die Gruppe selbst.
    """
    exclusions: dict[str, set[str]] = {}
    for group in groups:
        entry = exclusions.setdefault(group.id, set())
        if include_self:
            entry.add(group.id)
        for dep_id in group.dependent_group_ids:
            entry.add(dep_id)
            exclusions.setdefault(dep_id, {dep_id} if include_self else set()).add(group.id)
    return exclusions
