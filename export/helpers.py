"""Gemeinsame Hilfsfunktionen für den Excel-Export."""

from collections import defaultdict
from datetime import date

from config.schema import GeneratorConstraints
from models.lesson import Lesson
from models.timeslot import parse_time

# ─── Farbpalette (RRGGBB, ohne #) ─────────────────────────────────────────────

COLORS: dict[str, str] = {
    "core":     "B3D4FF",
    "regular":  "B3FFB3",
    "free":     "F5F5F5",
    "gap":      "FF9999",
    "conflict": "FFCCCC",
    "header":   "4472C4",
}


def today_str() -> str:
    """Gibt das heutige Datum als DD.MM.YYYY zurück."""
    return date.today().strftime("%d.%m.%Y")


def get_subject_color(subject_id: str | None, core_subjects: list[str]) -> str:
    """Kernfächer blau, alle anderen grün."""
    return COLORS["core"] if subject_id in core_subjects else COLORS["regular"]


# ─── Zeitraster ───────────────────────────────────────────────────────────────

def start_times(lessons: list[Lesson]) -> list[str]:
    """Alle vorkommenden Startzeiten, aufsteigend."""
    return sorted({l.start_time for l in lessons}, key=parse_time)


def build_grid(lessons: list[Lesson]) -> dict[tuple[int, str], list[Lesson]]:
    """Baut {(day, start_time): [lessons]} für die übergebenen Stunden auf."""
    grid: dict[tuple[int, str], list[Lesson]] = defaultdict(list)
    for lesson in lessons:
        grid[(lesson.day_of_week, lesson.start_time)].append(lesson)
    return grid


# ─── Lehrer-Stunden ───────────────────────────────────────────────────────────

def count_teacher_minutes(lessons: list[Lesson], teacher_id: str) -> int:
    """Summe der Unterrichtsminuten einer Lehrkraft."""
    return sum(l.duration for l in lessons if l.teacher_id == teacher_id)


def count_gaps(lessons: list[Lesson], constraints: GeneratorConstraints) -> int:
    """Zählt Freistunden: Lücken von mindestens einer Stundenlänge zwischen zwei Stunden.

    Lücken, die die Mittagspause schneiden, zählen nicht.
    """
    by_day: dict[int, list[Lesson]] = defaultdict(list)
    for lesson in lessons:
        by_day[lesson.day_of_week].append(lesson)
    lunch = constraints.lunch_period
    total = 0
    for day_lessons in by_day.values():
        ordered = sorted(day_lessons, key=lambda l: l.start_minutes)
        for current, following in zip(ordered, ordered[1:]):
            gap_start, gap_end = current.end_minutes, following.start_minutes
            if gap_end - gap_start < constraints.lesson_duration:
                continue
            if lunch.overlaps(gap_start, gap_end):
                continue
            total += 1
    return total


# ─── Zelleninhalt-Formatierung ────────────────────────────────────────────────

def format_lesson(lesson: Lesson, mode: str = "group") -> str:
    """Formatiert eine Stunde als Zelleninhalt.

    mode='group':   "Fach\nLehrer-ID"
    mode='teacher': "Fach\nGruppen"
    """
    subject = lesson.subject_id or lesson.course_id
    if mode == "group":
        return f"{subject}\n{lesson.teacher_id or '?'}"
    if mode == "teacher":
        return f"{subject}\n{', '.join(lesson.group_ids)}"
    return subject


def format_lessons(lessons: list[Lesson], mode: str = "group") -> str:
    """Mehrere Stunden in einer Zelle (getrennt durch ──), z.B. parallele Teilgruppen."""
    if not lessons:
        return ""
    return "\n──\n".join(format_lesson(l, mode) for l in lessons)
