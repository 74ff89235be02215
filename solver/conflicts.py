"""ConflictResolver – entfernt nach der Platzierung verbliebene Kollisionen.

Kollision: zwei Stunden am selben Tag mit überlappender Zeit, die dieselbe
Lehrkraft haben oder deren Gruppen gleich bzw. voneinander abhängig sind.
Solche Stunden entstehen nur über Wege, die die Belegungsprüfung umgehen
(z.B. manuell gepinnte Stunden).
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from config.schema import GeneratorConstraints
from models.group import Group, build_exclusion_map
from models.lesson import Lesson

logger = logging.getLogger(__name__)


@dataclass
class ConflictResolution:
    lessons: list[Lesson]
    conflicts_resolved: int = 0
    dropped: list[Lesson] = field(default_factory=list)


class ConflictResolver:
    """Behält pro Kollision die Stunde mit der höheren Priorität."""

    def __init__(self, constraints: Optional[GeneratorConstraints] = None) -> None:
        self.constraints = constraints or GeneratorConstraints()

    def priority(self, lesson: Lesson) -> int:
        """(12 − Startstunde) × 10, plus Bonus für Kernfächer. Frühe Stunden gewinnen."""
        score = (12 - lesson.start_minutes // 60) * 10
        if lesson.subject_id in self.constraints.core_subjects:
            score += self.constraints.core_subject_bonus
        return score

    @staticmethod
    def collides(a: Lesson, b: Lesson, exclusions: dict[str, set[str]]) -> bool:
        if not a.overlaps(b):
            return False
        if a.teacher_id is not None and a.teacher_id == b.teacher_id:
            return True
        return any(
            gb in exclusions.get(ga, {ga})
            for ga in a.group_ids
            for gb in b.group_ids
        )

    def resolve(self, lessons: list[Lesson], groups: list[Group]) -> ConflictResolution:
        """Durchläuft die Stunden in Eingabereihenfolge.

        Eine spätere Stunde verdrängt bereits behaltene nur, wenn ihre
        Priorität echt höher ist als die aller Stunden, mit denen sie
        kollidiert. Bei Gleichstand bleibt die zuerst gesehene Stunde.
        """
        exclusions = build_exclusion_map(groups)
        kept: dict[int, Lesson] = {}
        dropped: list[Lesson] = []

        for index, lesson in enumerate(lessons):
            colliding = [i for i, k in kept.items() if self.collides(lesson, k, exclusions)]
            if not colliding:
                kept[index] = lesson
                continue

            own = self.priority(lesson)
            if all(own > self.priority(kept[i]) for i in colliding):
                for i in colliding:
                    loser = kept.pop(i)
                    dropped.append(loser)
                    logger.warning(f"Konflikt: {loser.id} verworfen zugunsten von {lesson.id}")
                kept[index] = lesson
            else:
                dropped.append(lesson)
                logger.warning(
                    f"Konflikt: {lesson.id} verworfen "
                    f"(kollidiert mit {', '.join(kept[i].id for i in colliding)})"
                )

        return ConflictResolution(
            lessons=[kept[i] for i in sorted(kept)],
            conflicts_resolved=len(dropped),
            dropped=dropped,
        )
