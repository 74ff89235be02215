"""SlotSearchEngine – greedy Platzierung von Stunden in den frühesten freien Slot.

Slots werden Tag für Tag, innerhalb des Tages nach Uhrzeit durchlaufen. Der
erste Slot, der alle Prüfungen besteht, wird belegt. Das Ergebnis ist
deterministisch, aber nicht global optimal.

Prüfungen je Slot (Abbruch bei der ersten Verletzung):
  1. Lehrkraft frei (gleicher Slot-Key oder überlappende Stunde inkl. Pause)
  2. Alle Gruppen des Kurses und ihre abhängigen Gruppen frei
  3. Stunde liegt nicht in der Mittagspause
  4. Tageslimits: Stunden der Lehrkraft, Stunden desselben Fachs je Gruppe
"""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Optional, Union

from config.defaults import WEEKDAYS
from config.schema import GeneratorConstraints
from models.course import Course
from models.lesson import Lesson, make_lesson_id
from models.teacher import Teacher
from models.timeslot import TimeSlot, format_time
from solver.cache import FeasibilityCache

logger = logging.getLogger(__name__)

# Ergebnis-Codes von SlotSearchEngine.check_slot
OK = "ok"
TEACHER_BUSY = "teacher_busy"
GROUP_BUSY = "group_busy"
LUNCH = "lunch"
TEACHER_DAILY_LIMIT = "teacher_daily_limit"
SUBJECT_DAILY_LIMIT = "subject_daily_limit"


def generate_time_slots(constraints: GeneratorConstraints) -> list[TimeSlot]:
    """Alle Stundenanfänge der Woche (Mo-Fr), sortiert nach Tag und Uhrzeit.

    Volle Stunden zwischen Beginn- und End-Stunde des Unterrichtsrahmens,
    bei Stunden unter 60 Minuten zusätzlich die Viertelstunden. Behalten
    wird ein Anfang nur, wenn die Stunde vollständig im Rahmen liegt.
    """
    wh = constraints.working_hours
    duration = constraints.lesson_duration
    offsets = (0, 15, 30, 45) if duration < 60 else (0,)

    starts: list[int] = []
    for hour in range(wh.start_minutes // 60, wh.end_minutes // 60 + 1):
        for offset in offsets:
            start = hour * 60 + offset
            if wh.contains(start, start + duration):
                starts.append(start)

    return [TimeSlot(day=day, start_time=format_time(s)) for day in WEEKDAYS for s in starts]


# ─── BELEGUNG ───

class Occupancy:
    """Belegungstabelle eines Laufs für Lehrkräfte und Gruppen.

    Je Besitzer werden belegte Slot-Keys und die Intervalle der Stunden
    gespeichert, damit auch versetzt beginnende Stunden erkannt werden.
    """

    def __init__(self) -> None:
        self._keys: dict[str, set[str]] = {}
        self._intervals: dict[tuple[str, int], list[tuple[int, int, str]]] = {}

    @staticmethod
    def teacher(teacher_id: str) -> str:
        return f"teacher:{teacher_id}"

    @staticmethod
    def group(group_id: str) -> str:
        return f"group:{group_id}"

    def occupy(self, owner: str, lesson: Lesson) -> None:
        self._keys.setdefault(owner, set()).add(lesson.slot_key)
        self._intervals.setdefault((owner, lesson.day_of_week), []).append(
            (lesson.start_minutes, lesson.end_minutes, lesson.id)
        )

    def is_free(self, owner: str, day: int, start: int, end: int,
                padding: int = 0, slot_key: Optional[str] = None) -> bool:
        """True wenn owner im Intervall [start, end) frei ist.

        padding verlängert beide Intervalle um die Pause nach einer Stunde.
        """
        if slot_key is not None and slot_key in self._keys.get(owner, ()):
            return False
        for other_start, other_end, _ in self._intervals.get((owner, day), ()):
            if start < other_end + padding and other_start < end + padding:
                return False
        return True

    def lessons_of(self, owner: str, day: int) -> list[str]:
        return [lesson_id for _, _, lesson_id in self._intervals.get((owner, day), ())]


# ─── LAUF-KONTEXT ───

@dataclass
class GenerationRun:
    """Veränderlicher Zustand genau eines Generierungslaufs.

    Wird in ScheduleGenerator.generate() angelegt und danach verworfen.
    """

    exclusions: dict[str, set[str]] = field(default_factory=dict)
    run_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    teacher_loads: dict[str, float] = field(default_factory=dict)
    occupancy: Occupancy = field(default_factory=Occupancy)
    teacher_day_counts: dict[tuple[str, int], int] = field(default_factory=dict)
    subject_day_counts: dict[tuple[str, int, str], int] = field(default_factory=dict)
    lessons: list[Lesson] = field(default_factory=list)
    iterations: int = 0

    def blocked_groups(self, group_id: str) -> set[str]:
        """Gruppe selbst + alle Gruppen, die nicht parallel Unterricht haben dürfen."""
        return self.exclusions.get(group_id, {group_id})

    def register(self, lesson: Lesson) -> None:
        """Trägt eine Stunde in Belegung und Tageszähler ein."""
        day = lesson.day_of_week
        if lesson.teacher_id is not None:
            self.occupancy.occupy(Occupancy.teacher(lesson.teacher_id), lesson)
            key = (lesson.teacher_id, day)
            self.teacher_day_counts[key] = self.teacher_day_counts.get(key, 0) + 1
        for group_id in lesson.group_ids:
            self.occupancy.occupy(Occupancy.group(group_id), lesson)
            if lesson.subject_id is not None:
                key = (group_id, day, lesson.subject_id)
                self.subject_day_counts[key] = self.subject_day_counts.get(key, 0) + 1
        self.lessons.append(lesson)


# ─── ERGEBNISTYPEN ───

@dataclass(frozen=True)
class Placed:
    lesson: Lesson


@dataclass(frozen=True)
class Unplaced:
    reason: str


PlacementResult = Union[Placed, Unplaced]


@dataclass
class CoursePlacement:
    """Ergebnis der Platzierung aller Stunden eines Kurses."""

    course_id: str
    teacher_id: str
    needed: int
    lessons: list[Lesson] = field(default_factory=list)
    reason: Optional[str] = None

    @property
    def placed(self) -> int:
        return len(self.lessons)

    @property
    def shortfall(self) -> int:
        return max(0, self.needed - self.placed)

    @property
    def is_complete(self) -> bool:
        return self.shortfall == 0

    @property
    def message(self) -> Optional[str]:
        if self.is_complete:
            return None
        text = (
            f"Course {self.course_id}: placed {self.placed} of {self.needed} lessons "
            f"(shortfall {self.shortfall})"
        )
        return f"{text}: {self.reason}" if self.reason else text


# ─── ENGINE ───

class SlotSearchEngine:
    """Greedy-Platzierung mit Feasibility-Cache."""

    def __init__(
        self,
        constraints: Optional[GeneratorConstraints] = None,
        cache: Optional[FeasibilityCache] = None,
    ) -> None:
        self.constraints = constraints or GeneratorConstraints()
        self.cache = cache
        self._slots = generate_time_slots(self.constraints)

    @property
    def time_slots(self) -> list[TimeSlot]:
        return list(self._slots)

    def candidate_slots(self, teacher: Teacher) -> list[TimeSlot]:
        """Slots, in die Stunde plus anschließende Pause in die Arbeitszeit der Lehrkraft passen."""
        wh = teacher.working_hours
        span = self.constraints.lesson_duration + self.constraints.break_duration
        return [
            slot for slot in self._slots
            if slot.start_minutes >= wh.start_minutes
            and slot.start_minutes + span <= wh.end_minutes
        ]

    # ─── Prüfungen ───

    def falls_in_lunch(self, slot: TimeSlot) -> bool:
        lp = self.constraints.lunch_period
        duration = self.constraints.lesson_duration
        key = f"lunch:{lp}:{slot.start_time}:{duration}"
        if self.cache is not None:
            cached = self.cache.get(key)
            if cached is not None:
                return cached
        result = lp.overlaps(slot.start_minutes, slot.start_minutes + duration)
        if self.cache is not None:
            self.cache.set(key, result, self.cache.static_ttl)
        return result

    def check_slot(self, course: Course, teacher: Teacher, slot: TimeSlot,
                   run: GenerationRun) -> str:
        """Prüft einen Slot. Gibt OK oder den Code der ersten verletzten Regel zurück.

        Innerhalb eines Laufs wächst die Belegung nur, eine Ablehnung bleibt
        also gültig und wird pro Lauf gecacht. OK wird jedes Mal neu geprüft.
        """
        run.iterations += 1
        key = (
            f"can_schedule:{run.run_id}:{course.id}:"
            f"{teacher.id}:{slot.key}:{self.constraints.lesson_duration}"
        )
        if self.cache is not None:
            cached = self.cache.get(key)
            if cached is not None:
                return cached

        result = self._evaluate(course, teacher, slot, run)

        if self.cache is not None and result != OK:
            self.cache.set(key, result, self.cache.conflict_ttl)
        return result

    def _evaluate(self, course: Course, teacher: Teacher, slot: TimeSlot,
                  run: GenerationRun) -> str:
        c = self.constraints
        day = slot.day
        start = slot.start_minutes
        end = start + c.lesson_duration
        occ = run.occupancy

        # 1. Lehrkraft
        if not occ.is_free(Occupancy.teacher(teacher.id), day, start, end,
                           c.break_duration, slot.key):
            return TEACHER_BUSY

        # 2. Gruppen inkl. abhängiger Gruppen
        for group_id in course.group_ids:
            for blocked in sorted(run.blocked_groups(group_id)):
                if not occ.is_free(Occupancy.group(blocked), day, start, end,
                                   c.break_duration, slot.key):
                    return GROUP_BUSY

        # 3. Mittagspause
        if self.falls_in_lunch(slot):
            return LUNCH

        # 4. Tageslimits
        if run.teacher_day_counts.get((teacher.id, day), 0) + 1 > c.max_lessons_per_day:
            return TEACHER_DAILY_LIMIT
        for group_id in course.group_ids:
            count = run.subject_day_counts.get((group_id, day, course.subject_id), 0)
            if count + 1 > c.max_same_subject_per_day:
                return SUBJECT_DAILY_LIMIT

        return OK

    def is_feasible(self, course: Course, teacher: Teacher, slot: TimeSlot,
                    run: GenerationRun) -> bool:
        return self.check_slot(course, teacher, slot, run) == OK

    # ─── Platzierung ───

    def place(self, course: Course, teacher: Teacher, run: GenerationRun) -> PlacementResult:
        """Belegt den frühesten zulässigen Slot für eine Stunde des Kurses."""
        candidates = self.candidate_slots(teacher)
        if not candidates:
            return Unplaced(
                f"working hours {teacher.working_hours} of teacher {teacher.id} "
                f"leave no slot for a {self.constraints.lesson_duration}-minute lesson"
            )

        rejected: dict[str, int] = {}
        for slot in candidates:
            code = self.check_slot(course, teacher, slot, run)
            if code != OK:
                rejected[code] = rejected.get(code, 0) + 1
                continue
            lesson = Lesson(
                id=make_lesson_id(course.id, slot.day, slot.start_time),
                course_id=course.id,
                teacher_id=teacher.id,
                subject_id=course.subject_id,
                group_ids=list(course.group_ids),
                day_of_week=slot.day,
                start_time=slot.start_time,
                duration=self.constraints.lesson_duration,
            )
            run.register(lesson)
            return Placed(lesson)

        details = ", ".join(f"{code}={n}" for code, n in sorted(rejected.items()))
        return Unplaced(f"no feasible slot left ({details})")

    def place_course(self, course: Course, teacher: Teacher, run: GenerationRun,
                     needed: Optional[int] = None) -> CoursePlacement:
        """Platziert Stunden bis die Vorgabe erreicht ist oder kein Slot mehr passt.

        needed überschreibt die Vorgabe des Kurses (z.B. abzüglich gepinnter Stunden).
        """
        if needed is None:
            needed = course.lessons_needed(self.constraints.lesson_duration)
        placement = CoursePlacement(course_id=course.id, teacher_id=teacher.id, needed=needed)

        while placement.placed < needed:
            result = self.place(course, teacher, run)
            if isinstance(result, Unplaced):
                placement.reason = result.reason
                break
            placement.lessons.append(result.lesson)

        if not placement.is_complete:
            logger.warning(
                f"Kurs {course.id}: nur {placement.placed}/{needed} Stunden verplant "
                f"({placement.reason})"
            )
        return placement
