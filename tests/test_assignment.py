"""Tests für Kurs-Reihenfolge und Lehrkraft-Zuordnung."""

import pytest

from config.schema import GeneratorConstraints, TimeWindow
from models.course import Course, PreferredTimeSlot
from models.teacher import Teacher
from solver.assignment import TeacherAssignmentResolver
from solver.ranking import course_list_fingerprint, rank_courses


def make_course(cid="c1", subject="math", hours=3.0, groups=("g1",), teacher=None,
                preferred=()) -> Course:
    return Course(
        id=cid, subject_id=subject, group_ids=list(groups), weekly_hours=hours,
        teacher_id=teacher,
        preferred_time_slots=[
            PreferredTimeSlot(day_of_week=d, start_time=s) for d, s in preferred
        ],
    )


def make_teacher(tid="t1", subjects=("math",), load=0.0, max_load=25.0,
                 start="08:15", end="16:00") -> Teacher:
    return Teacher(
        id=tid, subject_ids=list(subjects), current_load=load, max_load=max_load,
        working_hours=TimeWindow(start=start, end=end),
    )


# ─── REIHENFOLGE ──────────────────────────────────────────────────────────────

class TestRanking:
    def test_hours_desc_groups_asc_id_asc(self):
        courses = [
            make_course("b", hours=2),
            make_course("a", hours=2),
            make_course("x", hours=4, groups=("g1", "g2")),
            make_course("y", hours=4),
        ]
        assert [c.id for c in rank_courses(courses)] == ["y", "x", "a", "b"]

    def test_deterministic_and_pure(self):
        courses = [make_course("b", hours=1), make_course("a", hours=5)]
        first = rank_courses(courses)
        assert rank_courses(list(reversed(courses))) == first
        assert [c.id for c in courses] == ["b", "a"]

    def test_fingerprint_depends_on_content(self):
        a = [make_course("a", hours=2)]
        b = [make_course("a", hours=3)]
        assert course_list_fingerprint(a) == course_list_fingerprint(list(a))
        assert course_list_fingerprint(a) != course_list_fingerprint(b)


# ─── ZUORDNUNG ────────────────────────────────────────────────────────────────

class TestAssign:
    def test_lower_load_wins(self):
        """92 % ausgelastete Lehrkraft verliert gegen 10 % ausgelastete."""
        resolver = TeacherAssignmentResolver()
        busy = make_teacher("busy", load=23.0)
        free = make_teacher("free", load=2.5)
        assignment = resolver.assign(make_course(hours=1), [busy, free])
        assert assignment.teacher_id == "free"
        assert assignment.score == pytest.approx(95.0)

    def test_tie_keeps_first(self):
        resolver = TeacherAssignmentResolver()
        a = make_teacher("a")
        b = make_teacher("b")
        assert resolver.assign(make_course(), [a, b]).teacher_id == "a"
        assert resolver.assign(make_course(), [b, a]).teacher_id == "b"

    def test_versatility_bonus(self):
        resolver = TeacherAssignmentResolver()
        single = make_teacher("single")
        multi = make_teacher("multi", subjects=("math", "science"))
        assert resolver.assign(make_course(), [single, multi]).teacher_id == "multi"

    def test_preferred_time_slots(self):
        """Wunschzeit außerhalb der Arbeitszeit kostet Punkte."""
        resolver = TeacherAssignmentResolver()
        morning = make_teacher("morning", start="08:15", end="12:00")
        afternoon = make_teacher("afternoon", start="12:00", end="16:00")
        course = make_course(preferred=[(1, "09:00")])
        assignment = resolver.assign(course, [afternoon, morning])
        assert assignment.teacher_id == "morning"
        assert resolver.score(afternoon, course, 0.0) == pytest.approx(70.0)
        assert resolver.score(morning, course, 0.0) == pytest.approx(120.0)

    def test_no_qualified_teacher(self):
        resolver = TeacherAssignmentResolver()
        assignment = resolver.assign(make_course(subject="art"), [make_teacher()])
        assert not assignment.is_assigned
        assert "no qualified teacher" in assignment.reason
        assert "art" in assignment.reason

    def test_would_exceed_max_load(self):
        resolver = TeacherAssignmentResolver()
        teacher = make_teacher(load=24.0)
        assignment = resolver.assign(make_course(hours=3), [teacher])
        assert assignment.teacher_id is None
        assert "would exceed max load" in assignment.reason

    def test_empty_teacher_list(self):
        with pytest.raises(ValueError):
            TeacherAssignmentResolver().assign(make_course(), [])

    def test_run_loads_override_current_load(self):
        resolver = TeacherAssignmentResolver()
        a = make_teacher("a")
        b = make_teacher("b")
        assignment = resolver.assign(make_course(), [a, b], {"a": 20.0})
        assert assignment.teacher_id == "b"

    def test_default_max_load(self):
        constraints = GeneratorConstraints(default_max_load=4.0)
        resolver = TeacherAssignmentResolver(constraints)
        teacher = Teacher(id="t1", subject_ids=["math"], current_load=2.0)
        assert resolver.max_load(teacher) == 4.0
        assert resolver.assign(make_course(hours=3), [teacher]).teacher_id is None


class TestAssignAll:
    def test_loads_accumulate(self):
        """Die zweite Zuordnung sieht die Last der ersten."""
        resolver = TeacherAssignmentResolver()
        a = make_teacher("a")
        b = make_teacher("b")
        courses = [make_course("c1", hours=5), make_course("c2", hours=5)]
        assignments = resolver.assign_all(courses, [a, b])
        assert [x.teacher_id for x in assignments] == ["a", "b"]

    def test_pre_assigned_passthrough(self):
        resolver = TeacherAssignmentResolver()
        a = make_teacher("a")
        b = make_teacher("b")
        courses = [make_course("c1", hours=5, teacher="a"), make_course("c2", hours=5)]
        assignments = resolver.assign_all(courses, [a, b])
        assert assignments[0].was_pre_assigned
        assert assignments[0].teacher_id == "a"
        assert assignments[1].teacher_id == "b"


class TestValidateAssignment:
    def test_valid(self):
        ok, reasons = TeacherAssignmentResolver().validate_assignment(
            make_course(preferred=[(1, "09:00")]), make_teacher())
        assert ok
        assert reasons == [
            "Qualified for subject",
            "Within load capacity",
            "Compatible with preferred time slots",
        ]

    def test_all_failures_reported(self):
        teacher = make_teacher(subjects=("art",), load=24.0, start="13:00", end="16:00")
        ok, reasons = TeacherAssignmentResolver().validate_assignment(
            make_course(preferred=[(1, "09:00")]), teacher)
        assert not ok
        assert reasons == [
            "Teacher not qualified for subject",
            "Would exceed load capacity",
            "Not available at preferred time slots",
        ]
