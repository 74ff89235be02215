"""TeacherAssignmentResolver – wählt für Kurse ohne feste Lehrkraft die beste Lehrkraft.

Bewertung je qualifizierter Lehrkraft:
  Basis                       100
  Auslastung                  − (Last / Max-Last) × 50
  Mehrere Fächer              + 10
  Wunschzeiten (falls gesetzt) + 20 wenn mind. eine Wunschzeit in die
                              Arbeitszeit passt, sonst − 30
Bei Gleichstand gewinnt die zuerst übergebene Lehrkraft.
"""

import logging
from typing import Optional

from config.schema import GeneratorConstraints
from models.assignment import Assignment
from models.course import Course
from models.teacher import Teacher
from models.timeslot import parse_time

logger = logging.getLogger(__name__)

BASE_SCORE = 100.0
LOAD_PENALTY = 50.0
VERSATILITY_BONUS = 10.0
PREFERRED_TIME_BONUS = 20.0
PREFERRED_TIME_PENALTY = 30.0


class TeacherAssignmentResolver:
    """Lastbasierte Auswahl einer Lehrkraft pro Kurs."""

    def __init__(self, constraints: Optional[GeneratorConstraints] = None) -> None:
        self.constraints = constraints or GeneratorConstraints()

    # ─── Hilfen ───

    def course_load(self, course: Course) -> float:
        """Wochenstunden, die ein Kurs auf die Lehrkraft bucht."""
        return course.weekly_hours or self.constraints.default_course_load

    def max_load(self, teacher: Teacher) -> float:
        return teacher.effective_max_load(self.constraints.default_max_load)

    def is_time_compatible(self, teacher: Teacher, start_time: str) -> bool:
        """True wenn eine Stunde ab start_time in die Arbeitszeit der Lehrkraft passt."""
        start = parse_time(start_time)
        return teacher.fits_working_hours(start, start + self.constraints.lesson_duration)

    def score(self, teacher: Teacher, course: Course, current_load: float) -> float:
        score = BASE_SCORE
        score -= (current_load / self.max_load(teacher)) * LOAD_PENALTY

        if len(teacher.subject_ids) > 1:
            score += VERSATILITY_BONUS

        if course.preferred_time_slots:
            compatible = any(
                self.is_time_compatible(teacher, slot.start_time)
                for slot in course.preferred_time_slots
            )
            score += PREFERRED_TIME_BONUS if compatible else -PREFERRED_TIME_PENALTY
        return score

    # ─── Zuordnung ───

    def assign(
        self,
        course: Course,
        teachers: list[Teacher],
        current_loads: Optional[dict[str, float]] = None,
    ) -> Assignment:
        """Wählt die Lehrkraft mit dem höchsten Score.

        current_loads (Lehrkraft-ID → Wochenstunden) ist die Lasttabelle des
        laufenden Generierungslaufs; fehlt ein Eintrag, gilt current_load der
        Lehrkraft. Die Tabelle wird hier nicht verändert: nach Erfolg bucht der
        Aufrufer course_load() auf die gewählte Lehrkraft.
        """
        if not teachers:
            raise ValueError(f"Kurs {course.id}: Keine Lehrkräfte übergeben.")
        loads = current_loads if current_loads is not None else {}

        qualified = [t for t in teachers if t.is_qualified(course.subject_id)]
        if not qualified:
            return Assignment(
                course_id=course.id,
                reason=f"no qualified teacher for subject '{course.subject_id}'",
            )

        best: Optional[Teacher] = None
        best_score = 0.0
        for teacher in qualified:
            s = self.score(teacher, course, loads.get(teacher.id, teacher.current_load))
            # Strikt größer: bei Gleichstand bleibt die frühere Lehrkraft
            if best is None or s > best_score:
                best, best_score = teacher, s

        load = loads.get(best.id, best.current_load)
        course_load = self.course_load(course)
        max_load = self.max_load(best)
        if load + course_load > max_load:
            logger.info(
                f"Kurs {course.id}: Lehrkraft {best.id} würde Max-Last überschreiten "
                f"({load:g}+{course_load:g} > {max_load:g})"
            )
            return Assignment(
                course_id=course.id,
                score=best_score,
                reason=(
                    f"best qualified teacher {best.id} would exceed max load "
                    f"({load:g} + {course_load:g} > {max_load:g})"
                ),
            )

        return Assignment(course_id=course.id, teacher_id=best.id, score=best_score)

    def assign_all(self, courses: list[Course], teachers: list[Teacher]) -> list[Assignment]:
        """Ordnet alle Kurse der Reihe nach zu, mit eigener Lasttabelle.

        Kurse mit fester Lehrkraft werden unverändert übernommen
        (was_pre_assigned=True) und belasten ebenfalls die Lasttabelle.
        """
        loads: dict[str, float] = {t.id: t.current_load for t in teachers}
        assignments: list[Assignment] = []

        for course in courses:
            if course.teacher_id is not None:
                assignments.append(Assignment(
                    course_id=course.id,
                    teacher_id=course.teacher_id,
                    was_pre_assigned=True,
                ))
                loads[course.teacher_id] = loads.get(course.teacher_id, 0.0) + self.course_load(course)
                continue

            assignment = self.assign(course, teachers, loads)
            assignments.append(assignment)
            if assignment.teacher_id is not None:
                loads[assignment.teacher_id] += self.course_load(course)

        return assignments

    def validate_assignment(self, course: Course, teacher: Teacher) -> tuple[bool, list[str]]:
        """Prüft eine (z.B. manuelle) Zuordnung. Gibt (gültig, Begründungen) zurück."""
        reasons: list[str] = []
        is_valid = True

        if teacher.is_qualified(course.subject_id):
            reasons.append("Qualified for subject")
        else:
            is_valid = False
            reasons.append("Teacher not qualified for subject")

        if teacher.current_load + self.course_load(course) <= self.max_load(teacher):
            reasons.append("Within load capacity")
        else:
            is_valid = False
            reasons.append("Would exceed load capacity")

        if course.preferred_time_slots:
            if any(self.is_time_compatible(teacher, s.start_time)
                   for s in course.preferred_time_slots):
                reasons.append("Compatible with preferred time slots")
            else:
                is_valid = False
                reasons.append("Not available at preferred time slots")

        return is_valid, reasons
