"""Testdaten-Generator für den Wochenplan-Generator.

Erzeugt einen reproduzierbaren Snapshot (gleicher Seed → gleiche Daten).

Aufbau je Klasse:
  - eine Gruppe für die ganze Klasse ("5a")
  - zwei Sprach-Teilgruppen ("5a-frz", "5a-lat"), beide abhängig von der
    Klassengruppe (gemeinsame Schüler), untereinander aber parallel planbar
  - Kurse für die Klassengruppe + je ein Sprachkurs pro Teilgruppe
  - Sport ist vorab einer festen Lehrkraft zugeordnet

Absichtliche Engpässe:
  1. Teilzeit-Lehrkräfte mit verkürzter Arbeitszeit (nur vormittags)
  2. Eine Lehrkraft beginnt erst um 10:00
  3. Vorbelastung (current_load) bei allen Lehrkräften
"""

import random
from datetime import date
from typing import Optional

from config.schema import GeneratorConstraints, TimeWindow
from models.course import Course, PreferredTimeSlot
from models.group import Group
from models.school_class import SchoolClass
from models.school_data import SchoolData
from models.subject import Subject
from models.teacher import Teacher

# ─── Namens-Listen ────────────────────────────────────────────────────────────

_FIRST_NAMES = [
    "Anna", "Bernd", "Christine", "Dieter", "Eva", "Franz", "Gabi", "Hans",
    "Iris", "Jürgen", "Kathrin", "Klaus", "Lena", "Markus", "Olga", "Peter",
    "Renate", "Stefan", "Tanja", "Ulrich", "Vera", "Werner", "Yusuf", "Zoe",
]

_LAST_NAMES = [
    "Müller", "Schmidt", "Schneider", "Fischer", "Weber", "Meyer",
    "Wagner", "Becker", "Schulz", "Hoffmann", "Schäfer", "Koch",
    "Bauer", "Richter", "Klein", "Wolf", "Schröder", "Neumann",
    "Schwarz", "Zimmermann", "Braun", "Krüger", "Hartmann", "Lange",
]

# ─── Fächer ───────────────────────────────────────────────────────────────────

# id → (Name, Pause nach der Stunde in Minuten)
_SUBJECTS: dict[str, tuple[str, int]] = {
    "math":    ("Mathematik", 10),
    "science": ("Naturwissenschaften", 10),
    "german":  ("Deutsch", 10),
    "english": ("Englisch", 10),
    "history": ("Geschichte", 10),
    "art":     ("Kunst", 10),
    "sports":  ("Sport", 15),
    "french":  ("Französisch", 10),
    "latin":   ("Latein", 10),
}

# Stunden pro Woche für die Klassengruppe
_CLASS_CURRICULUM: dict[str, int] = {
    "math": 4, "german": 4, "english": 3, "science": 2,
    "history": 2, "art": 2, "sports": 2,
}

# Teilgruppen-Suffix → (Fach, Stunden pro Woche)
_SPLIT_GROUPS: dict[str, tuple[str, int]] = {
    "frz": ("french", 3),
    "lat": ("latin", 3),
}

# Fächerkombinationen der Lehrkräfte; Sport-Lehrkräfte werden separat erzeugt
_SUBJECT_COMBOS: list[list[str]] = [
    ["math", "science"],
    ["math", "science"],
    ["german", "history"],
    ["german", "history"],
    ["english", "french"],
    ["english", "french"],
    ["latin", "german"],
    ["art", "history"],
    ["science", "math"],
    ["english", "latin"],
]


class FakeDataGenerator:
    """Generiert einen vollständigen Snapshot für Demo und Tests."""

    def __init__(
        self,
        constraints: Optional[GeneratorConstraints] = None,
        seed: Optional[int] = None,
        num_classes: int = 4,
    ) -> None:
        self.constraints = constraints or GeneratorConstraints()
        self.rng = random.Random(seed)
        self.num_classes = num_classes

    # ─── Fächer & Klassen ─────────────────────────────────────────────────────

    def _generate_subjects(self) -> list[Subject]:
        return [
            Subject(id=sid, name=name, break_duration=brk)
            for sid, (name, brk) in _SUBJECTS.items()
        ]

    def _class_ids(self) -> list[str]:
        """5a, 5b, 6a, 6b, ... (zwei Klassen pro Jahrgang)."""
        return [f"{5 + i // 2}{'ab'[i % 2]}" for i in range(self.num_classes)]

    def _generate_classes(self) -> list[SchoolClass]:
        return [
            SchoolClass(
                id=cid,
                name=f"Klasse {cid}",
                lunch_duration=self.rng.choice([30, 30, 45]),
            )
            for cid in self._class_ids()
        ]

    def _generate_groups(self, classes: list[SchoolClass]) -> list[Group]:
        groups: list[Group] = []
        for cls in classes:
            groups.append(Group(id=cls.id, name=f"Klasse {cls.id}", class_ids=[cls.id]))
            for suffix, (subject_id, _) in _SPLIT_GROUPS.items():
                groups.append(Group(
                    id=f"{cls.id}-{suffix}",
                    name=f"{cls.id} {_SUBJECTS[subject_id][0]}",
                    class_ids=[cls.id],
                    dependent_group_ids=[cls.id],
                ))
        return groups

    # ─── Lehrkräfte ───────────────────────────────────────────────────────────

    def _make_teacher(
        self,
        index: int,
        subject_ids: list[str],
        working_hours: Optional[TimeWindow] = None,
        max_load: Optional[float] = None,
    ) -> Teacher:
        """Erstellt eine Lehrkraft mit zufälligem Namen und Vorbelastung."""
        first = self.rng.choice(_FIRST_NAMES)
        last = self.rng.choice(_LAST_NAMES)
        return Teacher(
            id=f"t{index:02d}",
            name=f"{last}, {first}",
            subject_ids=subject_ids,
            working_hours=working_hours or self.constraints.working_hours,
            current_load=float(self.rng.randint(0, 6)),
            max_load=max_load,
        )

    def _generate_teachers(self) -> list[Teacher]:
        """Feste Sport-Lehrkraft + Kombinationen, skaliert mit der Klassenzahl.

        Die ersten beiden Kombi-Lehrkräfte sind Teilzeit (nur vormittags,
        max. 14h), eine weitere beginnt erst um 10:00.
        """
        teachers = [self._make_teacher(1, ["sports"])]
        repeats = max(1, (self.num_classes + 3) // 4)
        combos = _SUBJECT_COMBOS * repeats
        for offset, subject_ids in enumerate(combos):
            index = offset + 2
            if offset < 2:
                teachers.append(self._make_teacher(
                    index, list(subject_ids),
                    working_hours=TimeWindow(start="08:15", end="12:00"),
                    max_load=14.0,
                ))
            elif offset == 2:
                teachers.append(self._make_teacher(
                    index, list(subject_ids),
                    working_hours=TimeWindow(start="10:00", end="16:00"),
                ))
            else:
                teachers.append(self._make_teacher(index, list(subject_ids)))
        if self.num_classes > 4:
            teachers.append(self._make_teacher(len(teachers) + 1, ["sports", "art"]))
        return teachers

    # ─── Kurse ────────────────────────────────────────────────────────────────

    def _generate_courses(self, classes: list[SchoolClass], sports_teacher: Teacher) -> list[Course]:
        courses: list[Course] = []
        for cls in classes:
            for subject_id, hours in _CLASS_CURRICULUM.items():
                preferred: list[PreferredTimeSlot] = []
                if subject_id in self.constraints.core_subjects and self.rng.random() < 0.5:
                    preferred = [PreferredTimeSlot(
                        day_of_week=self.rng.randint(1, 5), start_time="08:15",
                    )]
                courses.append(Course(
                    id=f"{cls.id}-{subject_id}",
                    subject_id=subject_id,
                    teacher_id=sports_teacher.id if subject_id == "sports" else None,
                    group_ids=[cls.id],
                    weekly_hours=float(hours),
                    number_of_lessons=hours,
                    preferred_time_slots=preferred,
                ))
            for suffix, (subject_id, hours) in _SPLIT_GROUPS.items():
                courses.append(Course(
                    id=f"{cls.id}-{suffix}-{subject_id}",
                    subject_id=subject_id,
                    group_ids=[f"{cls.id}-{suffix}"],
                    weekly_hours=float(hours),
                    number_of_lessons=hours,
                ))
        return courses

    # ─── Vollständiger Datensatz ──────────────────────────────────────────────

    def generate(self, week_number: Optional[int] = None, year: Optional[int] = None) -> SchoolData:
        """Erzeugt den vollständigen Snapshot (Default: aktuelle Kalenderwoche)."""
        iso = date.today().isocalendar()
        subjects = self._generate_subjects()
        classes = self._generate_classes()
        groups = self._generate_groups(classes)
        teachers = self._generate_teachers()
        courses = self._generate_courses(classes, teachers[0])
        return SchoolData(
            courses=courses,
            teachers=teachers,
            groups=groups,
            subjects=subjects,
            classes=classes,
            week_number=week_number or iso[1],
            year=year or iso[0],
        )

    # ─── Ausgabe ──────────────────────────────────────────────────────────────

    def print_summary(self, data: SchoolData) -> None:
        """Gibt eine Rich-Tabelle mit Übersicht der erzeugten Daten aus."""
        from rich.console import Console
        from rich.table import Table
        from rich import box

        console = Console()
        table = Table(title="Erzeugte Testdaten", box=box.ROUNDED)
        table.add_column("Kategorie", style="bold cyan")
        table.add_column("Anzahl", justify="right")
        table.add_column("Details")

        pre_assigned = sum(1 for c in data.courses if c.is_pre_assigned)
        split = sum(1 for g in data.groups if g.dependent_group_ids)
        table.add_row("Fächer", str(len(data.subjects)), "")
        table.add_row("Klassen", str(len(data.classes)), "")
        table.add_row("Gruppen", str(len(data.groups)), f"{split} Teilgruppen")
        table.add_row("Lehrkräfte", str(len(data.teachers)), "")
        table.add_row("Kurse", str(len(data.courses)), f"{pre_assigned} mit fester Lehrkraft")

        console.print(table)
