"""CourseConstraintRanker – Reihenfolge der Kurse, am stärksten eingeschränkte zuerst."""

import hashlib

from models.course import Course


def rank_key(course: Course) -> tuple:
    # Wochenstunden absteigend, Gruppenanzahl aufsteigend, ID aufsteigend
    return (-course.weekly_hours, len(course.group_ids), course.id)


def rank_courses(courses: list[Course]) -> list[Course]:
    """Sortiert Kurse deterministisch: viele Wochenstunden und wenige Gruppen zuerst.

    Reine Funktion, die Eingabeliste bleibt unverändert.
    """
    return sorted(courses, key=rank_key)


def course_list_fingerprint(courses: list[Course]) -> str:
    """Inhalts-Hash einer Kursliste (Cache-Schlüssel der sortierten Reihenfolge)."""
    digest = hashlib.sha1()
    for course in courses:
        digest.update(course.model_dump_json().encode("utf-8"))
        digest.update(b"\n")
    return digest.hexdigest()
