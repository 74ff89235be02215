"""SchoolData: Eingabe-Snapshot eines Generierungslaufs + Machbarkeits-Check (Pydantic v2)."""

from pathlib import Path
from typing import TYPE_CHECKING, Optional

from pydantic import BaseModel

from config.schema import GeneratorConstraints
from models.base import SnapshotModel
from models.course import Course
from models.group import Group
from models.school_class import SchoolClass
from models.subject import Subject
from models.teacher import Teacher

if TYPE_CHECKING:
    from analysis.rule_validator import ValidationContext


class FeasibilityReport(BaseModel):
    """Ergebnis des Machbarkeits-Checks."""

    is_feasible: bool
    errors: list[str]      # Kritische Probleme (Kurse werden sicher scheitern)
    warnings: list[str]    # Hinweise (Plan möglicherweise unvollständig)

    def print_rich(self) -> None:
        """Gibt den Report formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel

        console = Console()
        if self.is_feasible:
            status = "[bold green]✓ LÖSBAR[/bold green]"
        else:
            status = "[bold red]✗ NICHT LÖSBAR[/bold red]"

        lines = [status]
        if self.errors:
            lines.append("\n[red bold]Fehler (kritisch):[/red bold]")
            for e in self.errors:
                lines.append(f"  [red]• {e}[/red]")
        if self.warnings:
            lines.append("\n[yellow bold]Warnungen:[/yellow bold]")
            for w in self.warnings:
                lines.append(f"  [yellow]• {w}[/yellow]")
        if not self.errors and not self.warnings:
            lines.append("[dim]Keine Probleme gefunden.[/dim]")

        console.print(Panel("\n".join(lines), title="Machbarkeits-Check", border_style="cyan"))


class SchoolData(SnapshotModel):
    """Unveränderlicher Eingabe-Snapshot: Kurse, Lehrkräfte, Gruppen, Fächer, Klassen."""

    courses: list[Course] = []
    teachers: list[Teacher] = []
    groups: list[Group] = []
    subjects: list[Subject] = []
    classes: list[SchoolClass] = []
    week_number: Optional[int] = None
    year: Optional[int] = None

    # ─── Nachschlagen ───

    @property
    def teacher_map(self) -> dict[str, Teacher]:
        return {t.id: t for t in self.teachers}

    @property
    def group_map(self) -> dict[str, Group]:
        return {g.id: g for g in self.groups}

    @property
    def subject_map(self) -> dict[str, Subject]:
        return {s.id: s for s in self.subjects}

    @property
    def class_map(self) -> dict[str, SchoolClass]:
        return {c.id: c for c in self.classes}

    def validation_context(self) -> "ValidationContext":
        """Referenzdaten für den RuleValidator."""
        from analysis.rule_validator import ValidationContext

        return ValidationContext(
            teachers=self.teachers,
            groups=self.groups,
            subjects=self.subjects,
            classes=self.classes,
        )

    # ─── Übersicht ───

    def summary(self) -> str:
        """Kurze Übersicht über den Datensatz."""
        total_hours = sum(c.weekly_hours for c in self.courses)
        pre_assigned = sum(1 for c in self.courses if c.is_pre_assigned)
        lines = [
            f"Kurse: {len(self.courses)} ({pre_assigned} mit fester Lehrkraft)",
            f"Wochenstunden gesamt: {total_hours:g}h",
            f"Lehrkräfte: {len(self.teachers)}",
            f"Gruppen: {len(self.groups)}",
            f"Fächer: {len(self.subjects)}" if self.subjects else "",
            f"Klassen: {len(self.classes)}" if self.classes else "",
            f"Kalenderwoche: {self.week_number}/{self.year}"
            if self.week_number and self.year else "",
        ]
        return "\n".join(l for l in lines if l)

    # ─── Machbarkeits-Check ───

    def validate_feasibility(
        self, constraints: Optional[GeneratorConstraints] = None
    ) -> FeasibilityReport:
        """Prüft vor dem Lauf, ob die Daten grundsätzlich verplanbar sind.

        Prüfungen:
        1. Doppelte IDs bei Kursen, Lehrkräften, Gruppen
        2. Kurse: unbekannte Gruppen, unbekannte/unqualifizierte feste Lehrkraft
        3. Pro Fach: mindestens eine qualifizierte Lehrkraft, Stundenkapazität
        4. Gruppen: unbekannte abhängige Gruppen und Klassen
        5. Lehrkräfte: Arbeitszeit kürzer als eine Stunde
        """
        constraints = constraints or GeneratorConstraints()
        errors: list[str] = []
        warnings: list[str] = []

        # ── 1. Doppelte IDs ─────────────────────────────────────────────
        for label, ids in (
            ("Kurs", [c.id for c in self.courses]),
            ("Lehrkraft", [t.id for t in self.teachers]),
            ("Gruppe", [g.id for g in self.groups]),
        ):
            seen: set[str] = set()
            for item_id in ids:
                if item_id in seen:
                    errors.append(f"{label} '{item_id}' ist mehrfach vorhanden.")
                seen.add(item_id)

        teacher_map = self.teacher_map
        group_map = self.group_map
        subject_map = self.subject_map
        class_map = self.class_map

        # ── 2. Kurs-Referenzen ──────────────────────────────────────────
        for course in self.courses:
            unknown_groups = [g for g in course.group_ids if g not in group_map]
            if unknown_groups:
                errors.append(
                    f"Kurs {course.id}: Unbekannte Gruppe(n) {', '.join(unknown_groups)}."
                )
            if course.teacher_id is not None:
                teacher = teacher_map.get(course.teacher_id)
                if teacher is None:
                    errors.append(
                        f"Kurs {course.id}: Feste Lehrkraft '{course.teacher_id}' existiert nicht."
                    )
                elif not teacher.is_qualified(course.subject_id):
                    warnings.append(
                        f"Kurs {course.id}: Feste Lehrkraft {teacher.id} ist nicht für "
                        f"'{course.subject_id}' qualifiziert."
                    )
            if subject_map and course.subject_id not in subject_map:
                warnings.append(
                    f"Kurs {course.id}: Fach '{course.subject_id}' ist nicht angelegt."
                )

        # ── 3. Pro Fach: Lehrkräfte und Kapazität ───────────────────────
        subject_need: dict[str, float] = {}
        for course in self.courses:
            if course.teacher_id is None:
                subject_need[course.subject_id] = (
                    subject_need.get(course.subject_id, 0.0) + course.weekly_hours
                )

        for subject_id, need in sorted(subject_need.items()):
            qualified = [t for t in self.teachers if t.is_qualified(subject_id)]
            if not qualified:
                errors.append(
                    f"Fach '{subject_id}': Keine qualifizierte Lehrkraft "
                    f"({need:g}h/Woche werden benötigt)."
                )
                continue
            capacity = sum(
                t.effective_max_load(constraints.default_max_load) - t.current_load
                for t in qualified
            )
            if capacity < need:
                warnings.append(
                    f"Fach '{subject_id}': Freie Kapazität ({capacity:g}h) unter Bedarf "
                    f"({need:g}h) – Lehrkräfte unterrichten evtl. mehrere Fächer."
                )

        # ── 4. Gruppen ──────────────────────────────────────────────────
        for group in self.groups:
            for dep_id in group.dependent_group_ids:
                if dep_id not in group_map:
                    warnings.append(
                        f"Gruppe {group.id}: Abhängige Gruppe '{dep_id}' existiert nicht."
                    )
            if class_map:
                for class_id in group.class_ids:
                    if class_id not in class_map:
                        warnings.append(
                            f"Gruppe {group.id}: Klasse '{class_id}' existiert nicht."
                        )

        # ── 5. Lehrkräfte ───────────────────────────────────────────────
        min_window = constraints.lesson_duration + constraints.break_duration
        for teacher in self.teachers:
            wh = teacher.working_hours
            if wh.end_minutes - wh.start_minutes < min_window:
                warnings.append(
                    f"Lehrkraft {teacher.id}: Arbeitszeit {wh} ist kürzer als eine Stunde "
                    f"plus Pause ({min_window} min)."
                )

        return FeasibilityReport(
            is_feasible=len(errors) == 0,
            errors=errors,
            warnings=warnings,
        )

    # ─── Persistenz ────────────────────────────────────────────────────────

    def save_json(self, path: Path) -> None:
        """Speichert den Snapshot als JSON-Datei (camelCase-Schlüssel)."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.model_dump_json(indent=2, by_alias=True))

    @classmethod
    def load_json(cls, path: Path) -> "SchoolData":
        """Lädt einen Snapshot aus einer JSON-Datei."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"JSON-Datei nicht gefunden: {path}")
        with open(path, "r", encoding="utf-8") as f:
            return cls.model_validate_json(f.read())
