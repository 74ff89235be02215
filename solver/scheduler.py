"""ScheduleGenerator – Greedy-Wochenplan-Generator.

Ablauf eines Laufs:
  Start → Kurse sortieren → (je Kurs: Lehrkraft zuordnen → Stunden platzieren)
        → Konflikte auflösen → Fertig

Fehler einzelner Kurse (keine Lehrkraft, zu wenig Slots, fehlerhafte
Referenzen) werden als Meldung gesammelt und brechen den Lauf nicht ab.
Nur unzulässige Aufrufe (Kurse ohne jede Lehrkraft) lösen eine Ausnahme aus.
"""

import logging
import time
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional

from pydantic import Field

from analysis.rule_validator import RuleValidator, ValidationReport
from config.schema import GeneratorConstraints
from models.assignment import Assignment
from models.base import SnapshotModel
from models.course import Course
from models.group import build_exclusion_map
from models.schedule import Schedule, ScheduleStatus
from models.school_data import SchoolData
from models.teacher import Teacher
from solver.assignment import TeacherAssignmentResolver
from solver.cache import FeasibilityCache
from solver.conflicts import ConflictResolver
from solver.pinning import PinnedLesson
from solver.ranking import course_list_fingerprint, rank_courses, rank_key
from solver.slot_search import GenerationRun, SlotSearchEngine

logger = logging.getLogger(__name__)


class GenerationInputError(ValueError):
    """Unzulässiger Aufruf des Generators (z.B. Kurse, aber keine Lehrkräfte)."""


# ─── Ergebnis-Modelle ─────────────────────────────────────────────────────────

class GenerationStatus(str, Enum):
    SUCCESS = "success"
    PARTIAL = "partial"
    FAILED = "failed"


class GenerationMetrics(SnapshotModel):
    """Kennzahlen eines Laufs."""

    algorithm_time_ms: float = 0.0
    iterations: int = 0            # Anzahl geprüfter Slots
    lessons_placed: int = 0
    conflicts_resolved: int = 0
    cache_hits: int = 0
    cache_misses: int = 0


class GenerationResult(SnapshotModel):
    """Vollständiges Ergebnis eines Generierungslaufs."""

    schedule: Schedule
    status: GenerationStatus
    messages: list[str] = []
    assignments: list[Assignment] = []
    metrics: GenerationMetrics = Field(default_factory=GenerationMetrics)
    validation: Optional[ValidationReport] = None

    def to_output(self) -> dict:
        """Antwortformat der Schnittstelle: {schedule: {lessons}, status, messages}."""
        return {
            "schedule": {
                "lessons": [l.model_dump(mode="json", by_alias=True)
                            for l in self.schedule.lessons],
            },
            "status": self.status.value,
            "messages": list(self.messages),
        }

    def print_rich(self) -> None:
        """Gibt eine Zusammenfassung über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel

        console = Console()
        color = {
            GenerationStatus.SUCCESS: "green",
            GenerationStatus.PARTIAL: "yellow",
            GenerationStatus.FAILED: "red",
        }[self.status]
        m = self.metrics
        lines = [
            f"[bold {color}]{self.status.value.upper()}[/bold {color}]",
            f"Stunden: {m.lessons_placed} | Konflikte aufgelöst: {m.conflicts_resolved}",
            f"Slot-Prüfungen: {m.iterations} | Laufzeit: {m.algorithm_time_ms:.1f} ms",
            f"Cache: {m.cache_hits} Treffer / {m.cache_misses} Fehlgriffe",
        ]
        if self.messages:
            lines.append("\n[yellow bold]Meldungen:[/yellow bold]")
            for msg in self.messages:
                lines.append(f"  [yellow]• {msg}[/yellow]")
        console.print(Panel("\n".join(lines), title="Generierung", border_style="cyan"))

    def save_json(self, path: Path) -> None:
        """Speichert das Ergebnis als JSON-Datei."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.model_dump_json(indent=2, by_alias=True))

    @classmethod
    def load_json(cls, path: Path) -> "GenerationResult":
        """Lädt ein gespeichertes Ergebnis aus JSON."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Ergebnis nicht gefunden: {path}")
        with open(path, "r", encoding="utf-8") as f:
            return cls.model_validate_json(f.read())


# ─── Generator ────────────────────────────────────────────────────────────────

class ScheduleGenerator:
    """Greedy-Generator für Wochenpläne.

    Verwendung:
        with FeasibilityCache() as cache:
            generator = ScheduleGenerator(constraints, cache=cache)
            result = generator.generate(school_data)
    """

    def __init__(
        self,
        constraints: Optional[GeneratorConstraints] = None,
        cache: Optional[FeasibilityCache] = None,
        name: str = "Wochenplan",
    ) -> None:
        self.constraints = constraints or GeneratorConstraints()
        self.cache = cache
        self.name = name
        self.resolver = TeacherAssignmentResolver(self.constraints)
        self.engine = SlotSearchEngine(self.constraints, cache)
        self.conflict_resolver = ConflictResolver(self.constraints)
        self.validator = RuleValidator()

    # ─── Öffentliche API ──────────────────────────────────────────────────────

    def generate(
        self,
        data: SchoolData,
        pins: Iterable[PinnedLesson] = (),
        validate: bool = False,
    ) -> GenerationResult:
        """Erzeugt einen Wochenplan für den Snapshot."""
        if data.courses and not data.teachers:
            raise GenerationInputError(
                f"{len(data.courses)} Kurse, aber keine Lehrkräfte übergeben."
            )

        t0 = time.perf_counter()
        stats_before = self.cache.stats if self.cache is not None else None

        teacher_map = data.teacher_map
        group_map = data.group_map
        run = GenerationRun(
            exclusions=build_exclusion_map(data.groups),
            teacher_loads={t.id: t.current_load for t in data.teachers},
        )
        messages: list[str] = []
        assignments: list[Assignment] = []

        pinned_counts = self._register_pins(data, pins, run, messages)

        for course in self._ranked(data.courses):
            assignment = self._assign(course, data.teachers, teacher_map, group_map, run)
            assignments.append(assignment)
            if assignment.teacher_id is None:
                messages.append(f"Course {course.id}: {assignment.reason}")
                continue

            needed = course.lessons_needed(self.constraints.lesson_duration)
            remaining = max(0, needed - pinned_counts.get(course.id, 0))
            placement = self.engine.place_course(
                course, teacher_map[assignment.teacher_id], run, needed=remaining,
            )
            if not placement.is_complete:
                messages.append(placement.message)

        resolution = self.conflict_resolver.resolve(run.lessons, data.groups)
        for lesson in resolution.dropped:
            messages.append(
                f"Course {lesson.course_id}: lesson {lesson.id} dropped during conflict resolution"
            )

        status = self._status(data.courses, resolution.lessons)
        if not data.courses:
            messages.append("No courses to schedule")

        schedule = Schedule(
            id=run.run_id,
            name=self.name,
            week_number=data.week_number,
            year=data.year,
            status=ScheduleStatus.ACTIVE if status == GenerationStatus.SUCCESS else ScheduleStatus.DRAFT,
            lessons=resolution.lessons,
        )

        elapsed_ms = (time.perf_counter() - t0) * 1000
        metrics = GenerationMetrics(
            algorithm_time_ms=elapsed_ms,
            iterations=run.iterations,
            lessons_placed=len(schedule.lessons),
            conflicts_resolved=resolution.conflicts_resolved,
        )
        if self.cache is not None:
            stats_after = self.cache.stats
            metrics.cache_hits = stats_after.hits - stats_before.hits
            metrics.cache_misses = stats_after.misses - stats_before.misses

        logger.info(
            f"Generierung beendet: {status.value} | "
            f"Stunden: {metrics.lessons_placed} | "
            f"Konflikte: {metrics.conflicts_resolved} | "
            f"Zeit: {elapsed_ms:.1f}ms"
        )

        validation = None
        if validate:
            validation = self.validator.validate(schedule, data.validation_context())
            if not validation.is_valid:
                logger.warning(
                    f"Regelprüfung: {len(validation.violations)} Verletzungen im Ergebnis"
                )

        return GenerationResult(
            schedule=schedule,
            status=status,
            messages=messages,
            assignments=assignments,
            metrics=metrics,
            validation=validation,
        )

    # ─── Schritte ─────────────────────────────────────────────────────────────

    def _ranked(self, courses: list[Course]) -> list[Course]:
        """Sortierte Kursliste; die Reihenfolge wird 10 Minuten im Cache gehalten."""
        if self.cache is None:
            return rank_courses(courses)
        key = f"ranked_courses:{course_list_fingerprint(courses)}"
        order = self.cache.get(key)
        if order is None:
            order = sorted(range(len(courses)), key=lambda i: rank_key(courses[i]))
            self.cache.set(key, order, self.cache.course_list_ttl)
        return [courses[i] for i in order]

    def _register_pins(
        self,
        data: SchoolData,
        pins: Iterable[PinnedLesson],
        run: GenerationRun,
        messages: list[str],
    ) -> dict[str, int]:
        """Trägt gepinnte Stunden ohne Prüfung ein. Gibt Pins pro Kurs zurück."""
        course_map = {c.id: c for c in data.courses}
        counts: dict[str, int] = {}
        for pin in pins:
            course = course_map.get(pin.course_id)
            if course is None:
                messages.append(f"Pinned lesson for unknown course {pin.course_id} ignored")
                continue
            lesson = pin.to_lesson(course, self.constraints.lesson_duration)
            if lesson.teacher_id is None:
                messages.append(
                    f"Pinned lesson {lesson.id} ignored: course {course.id} has no teacher"
                )
                continue
            run.register(lesson)
            counts[course.id] = counts.get(course.id, 0) + 1
        if counts:
            logger.info(f"{sum(counts.values())} gepinnte Stunden eingetragen")
        return counts

    def _assign(
        self,
        course: Course,
        teachers: list[Teacher],
        teacher_map: dict[str, Teacher],
        group_map: dict,
        run: GenerationRun,
    ) -> Assignment:
        """Lehrkraft des Kurses bestimmen; fehlerhafte Referenzen werden vorab abgefangen."""
        unknown_groups = [g for g in course.group_ids if g not in group_map]
        if unknown_groups:
            return Assignment(
                course_id=course.id,
                was_pre_assigned=course.is_pre_assigned,
                reason=f"unknown group(s) {', '.join(unknown_groups)}",
            )

        if course.teacher_id is not None:
            if course.teacher_id not in teacher_map:
                return Assignment(
                    course_id=course.id,
                    was_pre_assigned=True,
                    reason=f"pre-assigned teacher {course.teacher_id} does not exist",
                )
            self._book_load(run, course.teacher_id, course)
            return Assignment(course_id=course.id, teacher_id=course.teacher_id,
                              was_pre_assigned=True)

        assignment = self.resolver.assign(course, teachers, run.teacher_loads)
        if assignment.teacher_id is not None:
            self._book_load(run, assignment.teacher_id, course)
        return assignment

    def _book_load(self, run: GenerationRun, teacher_id: str, course: Course) -> None:
        run.teacher_loads[teacher_id] = (
            run.teacher_loads.get(teacher_id, 0.0) + self.resolver.course_load(course)
        )

    def _status(self, courses: list[Course], lessons: list) -> GenerationStatus:
        if not lessons:
            return GenerationStatus.FAILED
        per_course: dict[str, int] = {}
        for lesson in lessons:
            per_course[lesson.course_id] = per_course.get(lesson.course_id, 0) + 1
        duration = self.constraints.lesson_duration
        if any(per_course.get(c.id, 0) < c.lessons_needed(duration) for c in courses):
            return GenerationStatus.PARTIAL
        return GenerationStatus.SUCCESS
