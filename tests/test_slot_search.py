"""Tests für Slot-Raster, Belegungsprüfung und Greedy-Platzierung."""

from config.schema import GeneratorConstraints, TimeWindow
from models.course import Course
from models.group import Group, build_exclusion_map
from models.lesson import Lesson
from models.teacher import Teacher
from models.timeslot import TimeSlot
from solver.cache import FeasibilityCache
from solver.slot_search import (
    GROUP_BUSY,
    LUNCH,
    OK,
    SUBJECT_DAILY_LIMIT,
    TEACHER_BUSY,
    TEACHER_DAILY_LIMIT,
    CoursePlacement,
    GenerationRun,
    Occupancy,
    Placed,
    SlotSearchEngine,
    Unplaced,
    generate_time_slots,
)


def make_teacher(tid="t1", subjects=("math",), start="08:15", end="16:00") -> Teacher:
    return Teacher(id=tid, subject_ids=list(subjects),
                   working_hours=TimeWindow(start=start, end=end))


def make_course(cid="c1", subject="math", groups=("g1",), lessons=None, hours=3.0) -> Course:
    return Course(id=cid, subject_id=subject, group_ids=list(groups),
                  weekly_hours=hours, number_of_lessons=lessons)


def make_lesson(lid, day=1, start="08:15", teacher="t2", groups=("g9",),
                subject="art", course="cx") -> Lesson:
    return Lesson(id=lid, course_id=course, teacher_id=teacher, subject_id=subject,
                  group_ids=list(groups), day_of_week=day, start_time=start, duration=45)


def make_run(groups=()) -> GenerationRun:
    return GenerationRun(exclusions=build_exclusion_map(list(groups)))


# ─── SLOT-RASTER ──────────────────────────────────────────────────────────────

class TestTimeSlots:
    def test_default_grid(self):
        """Viertelstunden-Raster von 08:15 bis 15:15 an fünf Tagen."""
        slots = generate_time_slots(GeneratorConstraints())
        monday = [s.start_time for s in slots if s.day == 1]
        assert monday[0] == "08:15"
        assert monday[-1] == "15:15"
        assert len(monday) == 29
        assert len(slots) == 5 * 29
        assert {s.day for s in slots} == {1, 2, 3, 4, 5}

    def test_sorted_day_then_time(self):
        slots = generate_time_slots(GeneratorConstraints())
        keys = [(s.day, s.start_minutes) for s in slots]
        assert keys == sorted(keys)

    def test_full_hours_only_for_long_lessons(self):
        slots = generate_time_slots(GeneratorConstraints(lesson_duration=60))
        monday = [s.start_time for s in slots if s.day == 1]
        assert monday == ["09:00", "10:00", "11:00", "12:00", "13:00", "14:00", "15:00"]

    def test_candidate_slots_respect_teacher_window(self):
        """Stunde plus Pause muss in die Arbeitszeit passen."""
        engine = SlotSearchEngine()
        teacher = make_teacher(start="08:15", end="12:00")
        monday = [s.start_time for s in engine.candidate_slots(teacher) if s.day == 1]
        assert monday[0] == "08:15"
        assert monday[-1] == "11:00"

    def test_no_candidates_for_short_window(self):
        engine = SlotSearchEngine()
        assert engine.candidate_slots(make_teacher(start="08:15", end="09:00")) == []


# ─── BELEGUNG ─────────────────────────────────────────────────────────────────

class TestOccupancy:
    def test_exact_key_blocks(self):
        occ = Occupancy()
        occ.occupy(Occupancy.teacher("t1"), make_lesson("a", start="09:00"))
        assert not occ.is_free(Occupancy.teacher("t1"), 1, 540, 585, slot_key="1:09:00")
        assert occ.is_free(Occupancy.teacher("t2"), 1, 540, 585, slot_key="1:09:00")

    def test_interval_with_padding(self):
        occ = Occupancy()
        occ.occupy(Occupancy.group("g1"), make_lesson("a", start="09:00"))
        owner = Occupancy.group("g1")
        # 09:00-09:45 belegt, 10 Minuten Pause
        assert not occ.is_free(owner, 1, 585, 630, padding=10)
        assert occ.is_free(owner, 1, 595, 640, padding=10)
        assert occ.is_free(owner, 2, 540, 585, padding=10)
        assert occ.lessons_of(owner, 1) == ["a"]

    def test_register_updates_counters(self):
        run = make_run()
        run.register(make_lesson("a", teacher="t1", groups=("g1",), subject="math"))
        assert run.teacher_day_counts[("t1", 1)] == 1
        assert run.subject_day_counts[("g1", 1, "math")] == 1
        assert [l.id for l in run.lessons] == ["a"]

    def test_blocked_groups_default_to_self(self):
        run = make_run([Group(id="a", dependent_group_ids=["b"]), Group(id="b")])
        assert run.blocked_groups("a") == {"a", "b"}
        assert run.blocked_groups("x") == {"x"}


# ─── FEASIBILITY ──────────────────────────────────────────────────────────────

class TestCheckSlot:
    def test_free_slot(self):
        engine = SlotSearchEngine()
        assert engine.check_slot(make_course(), make_teacher(), TimeSlot(1, "08:15"), make_run()) == OK

    def test_teacher_busy(self):
        engine = SlotSearchEngine()
        run = make_run()
        run.register(make_lesson("a", start="09:00", teacher="t1"))
        result = engine.check_slot(make_course(), make_teacher(), TimeSlot(1, "09:30"), run)
        assert result == TEACHER_BUSY

    def test_dependent_group_busy(self):
        """Stunde der abhängigen Gruppe b blockiert Gruppe a."""
        engine = SlotSearchEngine()
        run = make_run([Group(id="a", dependent_group_ids=["b"]), Group(id="b")])
        run.register(make_lesson("x", start="09:00", groups=("b",)))
        course = make_course(groups=("a",))
        assert engine.check_slot(course, make_teacher(), TimeSlot(1, "09:00"), run) == GROUP_BUSY
        assert engine.check_slot(course, make_teacher(), TimeSlot(1, "10:00"), run) == OK

    def test_lunch(self):
        engine = SlotSearchEngine()
        run = make_run()
        assert engine.check_slot(make_course(), make_teacher(), TimeSlot(1, "11:30"), run) == LUNCH
        assert engine.check_slot(make_course(), make_teacher(), TimeSlot(1, "11:15"), run) == OK
        assert engine.check_slot(make_course(), make_teacher(), TimeSlot(1, "13:00"), run) == OK

    def test_teacher_daily_limit(self):
        engine = SlotSearchEngine(GeneratorConstraints(max_lessons_per_day=1))
        run = make_run()
        run.register(make_lesson("a", start="08:15", teacher="t1"))
        result = engine.check_slot(make_course(), make_teacher(), TimeSlot(1, "10:00"), run)
        assert result == TEACHER_DAILY_LIMIT

    def test_subject_daily_limit(self):
        engine = SlotSearchEngine(GeneratorConstraints(max_same_subject_per_day=1))
        run = make_run()
        run.register(make_lesson("a", start="08:15", teacher="t2", groups=("g1",), subject="math"))
        result = engine.check_slot(make_course(), make_teacher(), TimeSlot(1, "10:00"), run)
        assert result == SUBJECT_DAILY_LIMIT
        assert engine.check_slot(make_course(), make_teacher(), TimeSlot(2, "10:00"), run) == OK

    def test_iterations_counted(self):
        engine = SlotSearchEngine()
        run = make_run()
        engine.check_slot(make_course(), make_teacher(), TimeSlot(1, "08:15"), run)
        engine.check_slot(make_course(), make_teacher(), TimeSlot(1, "08:30"), run)
        assert run.iterations == 2


class CountingCache(FeasibilityCache):
    """Zählt Treffer für Konfliktprüfungen getrennt von den übrigen Einträgen."""

    def __init__(self) -> None:
        super().__init__()
        self.conflict_hits = 0

    def get(self, key):
        value = super().get(key)
        if value is not None and key.startswith("can_schedule:"):
            self.conflict_hits += 1
        return value


class TestCacheIntegration:
    def test_repeated_rejection_hits_cache(self):
        cache = CountingCache()
        engine = SlotSearchEngine(cache=cache)
        run = make_run()
        run.register(make_lesson("a", start="08:15", teacher="t1"))
        slot = TimeSlot(1, "08:15")
        assert engine.check_slot(make_course(), make_teacher(), slot, run) == TEACHER_BUSY
        assert engine.check_slot(make_course(), make_teacher(), slot, run) == TEACHER_BUSY
        assert cache.conflict_hits == 1

    def test_feasible_answer_not_cached(self):
        cache = CountingCache()
        engine = SlotSearchEngine(cache=cache)
        run = make_run()
        slot = TimeSlot(1, "08:15")
        assert engine.check_slot(make_course(), make_teacher(), slot, run) == OK
        assert engine.check_slot(make_course(), make_teacher(), slot, run) == OK
        assert cache.conflict_hits == 0

    def test_new_occupancy_changes_answer(self):
        """Nach einer neuen Belegung wird nicht die alte Antwort geliefert."""
        cache = FeasibilityCache()
        engine = SlotSearchEngine(cache=cache)
        run = make_run()
        slot = TimeSlot(1, "09:00")
        assert engine.check_slot(make_course(), make_teacher(), slot, run) == OK
        run.register(make_lesson("a", start="09:00", teacher="t1"))
        assert engine.check_slot(make_course(), make_teacher(), slot, run) == TEACHER_BUSY

    def test_rescans_reuse_rejections(self):
        """Jeder weitere place()-Durchlauf beginnt beim ersten Slot und trifft gecachte Ablehnungen."""
        cache = CountingCache()
        engine = SlotSearchEngine(cache=cache)
        placement = engine.place_course(make_course(lessons=4), make_teacher(), make_run())
        assert placement.is_complete
        assert cache.conflict_hits > 0

    def test_rejections_not_shared_between_runs(self):
        cache = CountingCache()
        engine = SlotSearchEngine(cache=cache)
        busy = make_run()
        busy.register(make_lesson("a", start="08:15", teacher="t1"))
        slot = TimeSlot(1, "08:15")
        assert engine.check_slot(make_course(), make_teacher(), slot, busy) == TEACHER_BUSY
        assert engine.check_slot(make_course(), make_teacher(), slot, make_run()) == OK

    def test_same_result_with_and_without_cache(self):
        course = make_course(lessons=6)
        teacher = make_teacher()
        plain = SlotSearchEngine().place_course(course, teacher, make_run())
        with FeasibilityCache() as cache:
            cached = SlotSearchEngine(cache=cache).place_course(course, teacher, make_run())
        assert [l.id for l in plain.lessons] == [l.id for l in cached.lessons]


# ─── PLATZIERUNG ──────────────────────────────────────────────────────────────

class TestPlacement:
    def test_earliest_slots(self):
        """Zwei Stunden: Mo 08:15 und Mo 09:15 (09:00 + 10 min Pause ist zu früh)."""
        engine = SlotSearchEngine()
        placement = engine.place_course(make_course(lessons=2), make_teacher(), make_run())
        assert placement.is_complete
        assert [l.id for l in placement.lessons] == ["lesson_c1_1_0815", "lesson_c1_1_0915"]
        assert all(l.duration == 45 and l.teacher_id == "t1" for l in placement.lessons)

    def test_same_subject_limit_moves_to_next_day(self):
        engine = SlotSearchEngine()
        placement = engine.place_course(make_course(lessons=3), make_teacher(), make_run())
        assert [l.day_of_week for l in placement.lessons] == [1, 1, 2]

    def test_place_returns_tagged_result(self):
        engine = SlotSearchEngine()
        result = engine.place(make_course(), make_teacher(), make_run())
        assert isinstance(result, Placed)
        assert result.lesson.start_time == "08:15"

    def test_short_window_unplaced(self):
        engine = SlotSearchEngine()
        result = engine.place(make_course(), make_teacher(end="09:00"), make_run())
        assert isinstance(result, Unplaced)
        assert "working hours" in result.reason

    def test_shortfall_message(self):
        engine = SlotSearchEngine()
        placement = engine.place_course(make_course(lessons=5), make_teacher(end="09:00"), make_run())
        assert placement.placed == 0
        assert placement.shortfall == 5
        assert "c1" in placement.message
        assert "shortfall 5" in placement.message

    def test_exhausted_slots(self):
        """Lehrkraft nur 08:15-09:10: genau eine Stunde pro Tag möglich."""
        engine = SlotSearchEngine()
        placement = engine.place_course(make_course(lessons=7), make_teacher(end="09:10"), make_run())
        assert placement.placed == 5
        assert placement.shortfall == 2
        assert "no feasible slot left" in placement.reason

    def test_needed_override(self):
        engine = SlotSearchEngine()
        placement = engine.place_course(make_course(lessons=4), make_teacher(), make_run(), needed=1)
        assert placement.placed == 1
        assert placement.is_complete

    def test_complete_placement_has_no_message(self):
        assert CoursePlacement(course_id="c1", teacher_id="t1", needed=0).message is None
