"""Regelprüfung beliebiger Wochenpläne.

Prüft einen fertigen (generierten oder extern bearbeiteten) Wochenplan
gegen die harten Regeln, unabhängig vom Generator. Wirft bei fehlerhaften
Daten keine Ausnahme, sondern meldet sie als Verletzung.
"""

from collections import defaultdict
from typing import Iterable

from pydantic import computed_field

from config.defaults import LUNCH_CHECK_TIME, MIN_LESSON_DURATION, WEEKDAYS
from models.base import SnapshotModel
from models.group import Group, build_exclusion_map
from models.lesson import Lesson
from models.schedule import Schedule
from models.school_class import SchoolClass
from models.subject import Subject
from models.teacher import Teacher
from models.timeslot import parse_time


class ValidationViolation(SnapshotModel):
    """Eine einzelne Regelverletzung."""

    constraint: str            # z.B. "teacher_double_booking"
    description: str
    lesson_ids: list[str] = []
    entity: str = ""           # teacher_id / group_id / class_id


class ValidationReport(SnapshotModel):
    """Ergebnis der Regelprüfung."""

    violations: list[ValidationViolation] = []

    @computed_field
    @property
    def is_valid(self) -> bool:
        return not self.violations

    @property
    def messages(self) -> list[str]:
        return [v.description for v in self.violations]

    def by_constraint(self, constraint: str) -> list[ValidationViolation]:
        return [v for v in self.violations if v.constraint == constraint]

    def print_rich(self) -> None:
        """Gibt den Report formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel
        from rich.table import Table
        from rich import box

        console = Console()
        status = (
            "[bold green]✓ VALIDE[/bold green]"
            if self.is_valid
            else "[bold red]✗ VERLETZUNGEN GEFUNDEN[/bold red]"
        )
        lines = [status, f"Verletzungen: {len(self.violations)}"]
        console.print(Panel("\n".join(lines), title="Regelprüfung", border_style="cyan"))

        if not self.violations:
            console.print("[dim]Keine Verletzungen gefunden.[/dim]")
            return

        table = Table(box=box.ROUNDED, show_lines=True)
        table.add_column("Regel", width=26)
        table.add_column("Entität", width=12)
        table.add_column("Stunden", width=28)
        table.add_column("Beschreibung")

        for v in self.violations:
            table.add_row(
                f"[red]{v.constraint}[/red]",
                v.entity,
                "\n".join(v.lesson_ids),
                v.description,
            )
        console.print(table)


class ValidationContext(SnapshotModel):
    """Referenzdaten der Prüfung."""

    teachers: list[Teacher] = []
    groups: list[Group] = []
    subjects: list[Subject] = []
    classes: list[SchoolClass] = []


class RuleValidator:
    """Prüft einen Schedule gegen alle harten Regeln. Zustandslos."""

    def validate(self, schedule: Schedule, context: ValidationContext) -> ValidationReport:
        """Führt alle Prüfungen durch; jede Verletzung wird einzeln gemeldet."""
        violations: list[ValidationViolation] = []
        teacher_map = {t.id: t for t in context.teachers}

        for lesson in schedule.lessons:
            violations.extend(self._check_lesson(lesson, teacher_map))

        by_day: dict[int, list[Lesson]] = defaultdict(list)
        for lesson in schedule.lessons:
            by_day[lesson.day_of_week].append(lesson)

        violations.extend(self._check_teacher_overlaps(by_day))
        violations.extend(self._check_dependent_groups(by_day, context.groups))
        violations.extend(self._check_lunch_breaks(by_day, context))

        return ValidationReport(violations=violations)

    # ─── Einzelne Stunde ───

    def _check_lesson(self, lesson: Lesson, teacher_map: dict[str, Teacher]) -> list[ValidationViolation]:
        found: list[ValidationViolation] = []

        if lesson.duration < MIN_LESSON_DURATION:
            found.append(ValidationViolation(
                constraint="lesson_duration",
                description=f"Lesson {lesson.id} has invalid duration: {lesson.duration} minutes",
                lesson_ids=[lesson.id],
                entity=lesson.course_id,
            ))

        if lesson.day_of_week not in WEEKDAYS:
            found.append(ValidationViolation(
                constraint="day_of_week",
                description=f"Lesson {lesson.id} has invalid day of week: {lesson.day_of_week}",
                lesson_ids=[lesson.id],
                entity=lesson.course_id,
            ))

        if lesson.teacher_id is not None:
            teacher = teacher_map.get(lesson.teacher_id)
            if teacher is None:
                found.append(ValidationViolation(
                    constraint="unknown_teacher",
                    description=f"Lesson {lesson.id} references unknown teacher {lesson.teacher_id}",
                    lesson_ids=[lesson.id],
                    entity=lesson.teacher_id,
                ))
            elif not teacher.fits_working_hours(lesson.start_minutes, lesson.end_minutes):
                found.append(ValidationViolation(
                    constraint="teacher_working_hours",
                    description=(
                        f"Lesson {lesson.id} is outside teacher working hours "
                        f"({teacher.id}: {teacher.working_hours})"
                    ),
                    lesson_ids=[lesson.id],
                    entity=teacher.id,
                ))
        return found

    # ─── Paarweise Prüfungen ───

    @staticmethod
    def _pairs(lessons: list[Lesson]) -> Iterable[tuple[Lesson, Lesson]]:
        for i, first in enumerate(lessons):
            for second in lessons[i + 1:]:
                yield first, second

    def _check_teacher_overlaps(self, by_day: dict[int, list[Lesson]]) -> list[ValidationViolation]:
        found: list[ValidationViolation] = []
        for day in sorted(by_day):
            for a, b in self._pairs(by_day[day]):
                if a.teacher_id is None or a.teacher_id != b.teacher_id:
                    continue
                if a.overlaps(b):
                    found.append(ValidationViolation(
                        constraint="teacher_double_booking",
                        description=(
                            f"Teacher {a.teacher_id} has overlapping lessons: {a.id} and {b.id}"
                        ),
                        lesson_ids=[a.id, b.id],
                        entity=a.teacher_id,
                    ))
        return found

    def _check_dependent_groups(
        self, by_day: dict[int, list[Lesson]], groups: list[Group]
    ) -> list[ValidationViolation]:
        # Nur echte Abhängigkeiten, gleiche Gruppe allein ist hier keine Verletzung
        dependents = build_exclusion_map(groups, include_self=False)
        found: list[ValidationViolation] = []
        for day in sorted(by_day):
            for a, b in self._pairs(by_day[day]):
                if not a.overlaps(b):
                    continue
                clash = sorted({
                    ga for ga in a.group_ids for gb in b.group_ids
                    if gb in dependents.get(ga, ())
                })
                if clash:
                    found.append(ValidationViolation(
                        constraint="dependent_group_conflict",
                        description=(
                            f"Dependent groups conflict between lessons {a.id} and {b.id}"
                        ),
                        lesson_ids=[a.id, b.id],
                        entity=clash[0],
                    ))
        return found

    def _check_lunch_breaks(
        self, by_day: dict[int, list[Lesson]], context: ValidationContext
    ) -> list[ValidationViolation]:
        """Pro Klasse und Tag: um die erste Stunde, die nach 12:30 endet, muss die Mittagspause liegen.

        Die Pause darf vor oder nach dieser Stunde liegen. Beginnt der Tag
        erst ab 12:30, gilt die Zeit davor als Pause.
        """
        check_at = parse_time(LUNCH_CHECK_TIME)
        classes_of_group: dict[str, list[str]] = {g.id: g.class_ids for g in context.groups}
        found: list[ValidationViolation] = []

        for school_class in context.classes:
            needed = school_class.lunch_duration
            for day in sorted(by_day):
                lessons = sorted(
                    (l for l in by_day[day]
                     if any(school_class.id in classes_of_group.get(g, ()) for g in l.group_ids)),
                    key=lambda l: (l.start_minutes, l.id),
                )
                idx = next((i for i, l in enumerate(lessons) if l.end_minutes > check_at), None)
                if idx is None or idx + 1 >= len(lessons):
                    continue
                current, following = lessons[idx], lessons[idx + 1]

                if idx > 0:
                    before = current.start_minutes - max(l.end_minutes for l in lessons[:idx])
                    if before >= needed:
                        continue
                elif current.start_minutes >= check_at:
                    continue

                gap = following.start_minutes - current.end_minutes
                if gap < needed:
                    found.append(ValidationViolation(
                        constraint="lunch_break",
                        description=(
                            f"Class {school_class.id} has no lunch break after lesson "
                            f"{current.id}: {gap} minutes before {following.id}, "
                            f"{needed} required"
                        ),
                        lesson_ids=[current.id, following.id],
                        entity=school_class.id,
                    ))
        return found

    # ─── Einzelprüfungen für Bearbeitungen ───

    @staticmethod
    def validate_break_duration(subject: Subject, first: Lesson, second: Lesson) -> bool:
        """True wenn zwischen first und second mindestens die Pause des Fachs liegt."""
        return second.start_minutes - first.end_minutes >= subject.break_duration

    @staticmethod
    def validate_max_lessons_per_day(
        course_id: str, day_of_week: int, existing: list[Lesson], limit: int = 2
    ) -> bool:
        """True wenn der Kurs an diesem Tag noch eine weitere Stunde bekommen darf."""
        same_day = [
            l for l in existing
            if l.course_id == course_id and l.day_of_week == day_of_week
        ]
        return len(same_day) < limit
