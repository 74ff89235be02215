"""Tests für die Datenmodelle (Kurs, Lehrkraft, Gruppe, Stunde, Plan, SchoolData)."""

import pytest
from pydantic import ValidationError

from config.schema import TimeWindow
from models.course import Course
from models.group import Group, build_exclusion_map
from models.lesson import Lesson, make_lesson_id
from models.schedule import Schedule, ScheduleStatus
from models.school_class import SchoolClass
from models.school_data import SchoolData
from models.subject import Subject
from models.teacher import Teacher
from models.timeslot import TimeSlot, format_time, intervals_overlap, parse_time


def make_lesson(lid="l1", day=1, start="08:15", duration=45, teacher="t1",
                groups=("g1",), course="c1", subject="math") -> Lesson:
    return Lesson(
        id=lid, course_id=course, teacher_id=teacher, subject_id=subject,
        group_ids=list(groups), day_of_week=day, start_time=start, duration=duration,
    )


def make_school_data(**overrides) -> SchoolData:
    """Minimaler gültiger Datensatz: 1 Lehrkraft, 1 Gruppe, 1 Kurs."""
    data = dict(
        teachers=[Teacher(id="t1", subject_ids=["math"])],
        groups=[Group(id="g1", class_ids=["5a"])],
        subjects=[Subject(id="math", name="Mathematik")],
        classes=[SchoolClass(id="5a")],
        courses=[Course(id="c1", subject_id="math", group_ids=["g1"], weekly_hours=3)],
    )
    data.update(overrides)
    return SchoolData(**data)


# ─── ZEIT-HILFSFUNKTIONEN ─────────────────────────────────────────────────────

class TestTimeHelpers:
    def test_parse_and_format(self):
        assert parse_time("08:15") == 495
        assert format_time(495) == "08:15"
        assert format_time(parse_time("13:05")) == "13:05"

    def test_intervals_overlap_half_open(self):
        """Aneinanderstoßende Intervalle überlappen nicht."""
        assert intervals_overlap(0, 45, 30, 60)
        assert not intervals_overlap(0, 45, 45, 90)

    def test_timeslot_key(self):
        slot = TimeSlot(day=1, start_time="08:15")
        assert slot.key == "1:08:15"
        assert str(slot) == "Mo 08:15"
        assert slot.start_minutes == 495

    def test_timeslot_hashable(self):
        assert len({TimeSlot(2, "09:00"), TimeSlot(2, "09:00")}) == 1


# ─── KURS ─────────────────────────────────────────────────────────────────────

class TestCourse:
    def test_lessons_needed_from_hours(self):
        """ceil(3 / 0.75) = 4 Stunden à 45 Minuten."""
        course = Course(id="c1", subject_id="math", group_ids=["g1"], weekly_hours=3)
        assert course.lessons_needed(45) == 4
        assert course.lessons_needed(60) == 3

    def test_number_of_lessons_has_priority(self):
        course = Course(id="c1", subject_id="math", group_ids=["g1"],
                        weekly_hours=3, number_of_lessons=2)
        assert course.lessons_needed(45) == 2
        assert course.lessons_needed_for_hours(45) == 4

    def test_camel_case_snapshot(self):
        course = Course.model_validate({
            "id": "c1", "subjectId": "math", "groupIds": ["g1"],
            "weeklyHours": 2, "teacherId": "t1",
            "preferredTimeSlots": [{"dayOfWeek": 2, "startTime": "9:00"}],
            "createdAt": "2024-01-01",
        })
        assert course.is_pre_assigned
        assert course.preferred_time_slots[0].start_time == "09:00"

    def test_requires_group(self):
        with pytest.raises(ValidationError):
            Course(id="c1", subject_id="math", group_ids=[], weekly_hours=2)

    def test_weekly_hours_positive(self):
        with pytest.raises(ValidationError):
            Course(id="c1", subject_id="math", group_ids=["g1"], weekly_hours=0)


# ─── LEHRKRAFT ────────────────────────────────────────────────────────────────

class TestTeacher:
    def test_defaults(self):
        t = Teacher(id="t1", subject_ids=["math"])
        assert str(t.working_hours) == "08:15-16:00"
        assert t.effective_max_load() == 25.0
        assert t.effective_max_load(20.0) == 20.0

    def test_load_above_max_rejected(self):
        with pytest.raises(ValidationError):
            Teacher(id="t1", subject_ids=["math"], current_load=10, max_load=8)

    def test_needs_subject(self):
        with pytest.raises(ValidationError):
            Teacher(id="t1", subject_ids=[])

    def test_fits_working_hours(self):
        t = Teacher(id="t1", subject_ids=["math"],
                    working_hours=TimeWindow(start="09:00", end="12:00"))
        assert t.fits_working_hours(9 * 60, 9 * 60 + 45)
        assert not t.fits_working_hours(8 * 60 + 30, 9 * 60 + 15)
        assert t.is_qualified("math")
        assert not t.is_qualified("art")


# ─── GRUPPEN ──────────────────────────────────────────────────────────────────

class TestGroups:
    def test_self_dependency_rejected(self):
        with pytest.raises(ValidationError):
            Group(id="g1", dependent_group_ids=["g1"])

    def test_exclusion_map_symmetric(self):
        """A → B impliziert B → A, auch wenn B nichts listet."""
        groups = [Group(id="a", dependent_group_ids=["b"]), Group(id="b")]
        ex = build_exclusion_map(groups)
        assert ex["a"] == {"a", "b"}
        assert ex["b"] == {"a", "b"}

    def test_exclusion_map_without_self(self):
        groups = [Group(id="a", dependent_group_ids=["b"]), Group(id="b"), Group(id="c")]
        ex = build_exclusion_map(groups, include_self=False)
        assert ex["a"] == {"b"}
        assert ex["b"] == {"a"}
        assert ex["c"] == set()


# ─── STUNDE ───────────────────────────────────────────────────────────────────

class TestLesson:
    def test_end_time(self):
        lesson = make_lesson(start="08:15", duration=45)
        assert lesson.end_time == "09:00"
        assert lesson.slot_key == "1:08:15"

    def test_overlap_same_day_only(self):
        a = make_lesson("a", day=1, start="09:00")
        b = make_lesson("b", day=1, start="09:30")
        c = make_lesson("c", day=2, start="09:00")
        d = make_lesson("d", day=1, start="09:45")
        assert a.overlaps(b)
        assert not a.overlaps(c)
        assert not a.overlaps(d)

    def test_frozen(self):
        lesson = make_lesson()
        with pytest.raises(ValidationError):
            lesson.start_time = "10:00"

    def test_lesson_id(self):
        assert make_lesson_id("c1", 1, "08:15") == "lesson_c1_1_0815"

    def test_invalid_time_rejected(self):
        with pytest.raises(ValidationError):
            make_lesson(start="25:00")


# ─── WOCHENPLAN ───────────────────────────────────────────────────────────────

class TestSchedule:
    def test_queries(self):
        lessons = [
            make_lesson("a", day=2, start="10:00", teacher="t1", groups=("g1",)),
            make_lesson("b", day=1, start="09:00", teacher="t2", groups=("g2",), course="c2"),
            make_lesson("c", day=1, start="08:15", teacher="t1", groups=("g1", "g2")),
        ]
        schedule = Schedule(lessons=lessons)
        assert [l.id for l in schedule.lessons_for_teacher("t1")] == ["a", "c"]
        assert [l.id for l in schedule.lessons_for_group("g2")] == ["b", "c"]
        assert [l.id for l in schedule.lessons_for_course("c2")] == ["b"]
        by_day = schedule.lessons_by_day()
        assert list(by_day) == [1, 2]
        assert [l.id for l in by_day[1]] == ["c", "b"]

    def test_json_roundtrip(self, tmp_path):
        schedule = Schedule(id="run1", name="KW 3", status=ScheduleStatus.ACTIVE,
                            lessons=[make_lesson()])
        path = tmp_path / "plan.json"
        schedule.save_json(path)
        assert '"dayOfWeek"' in path.read_text(encoding="utf-8")
        assert Schedule.load_json(path) == schedule

    def test_load_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            Schedule.load_json(tmp_path / "fehlt.json")


# ─── SCHOOLDATA / MACHBARKEIT ─────────────────────────────────────────────────

class TestSchoolData:
    def test_valid_data_feasible(self):
        report = make_school_data().validate_feasibility()
        assert report.is_feasible
        assert report.errors == []

    def test_duplicate_ids(self):
        data = make_school_data(teachers=[
            Teacher(id="t1", subject_ids=["math"]),
            Teacher(id="t1", subject_ids=["math"]),
        ])
        report = data.validate_feasibility()
        assert not report.is_feasible
        assert any("mehrfach" in e for e in report.errors)

    def test_unknown_group(self):
        data = make_school_data(courses=[
            Course(id="c1", subject_id="math", group_ids=["gX"], weekly_hours=2),
        ])
        report = data.validate_feasibility()
        assert not report.is_feasible
        assert any("gX" in e for e in report.errors)

    def test_subject_without_teacher(self):
        data = make_school_data(courses=[
            Course(id="c1", subject_id="art", group_ids=["g1"], weekly_hours=2),
        ])
        report = data.validate_feasibility()
        assert any("art" in e for e in report.errors)

    def test_unknown_pre_assigned_teacher(self):
        data = make_school_data(courses=[
            Course(id="c1", subject_id="math", teacher_id="t9", group_ids=["g1"], weekly_hours=2),
        ])
        report = data.validate_feasibility()
        assert any("t9" in e for e in report.errors)

    def test_short_working_hours_warning(self):
        data = make_school_data(teachers=[
            Teacher(id="t1", subject_ids=["math"],
                    working_hours=TimeWindow(start="08:15", end="09:00")),
        ])
        report = data.validate_feasibility()
        assert report.is_feasible
        assert any("t1" in w for w in report.warnings)

    def test_json_roundtrip(self, tmp_path):
        data = make_school_data(week_number=3, year=2025)
        path = tmp_path / "daten.json"
        data.save_json(path)
        loaded = SchoolData.load_json(path)
        assert loaded == data
        assert "groupIds" in path.read_text(encoding="utf-8")

    def test_summary(self):
        text = make_school_data().summary()
        assert "Kurse: 1" in text
        assert "Lehrkräfte: 1" in text
