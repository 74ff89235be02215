"""Excel-Export für den Wochenplan (openpyxl)."""

from pathlib import Path
from typing import Optional

from config.defaults import DAY_NAMES, WEEKDAYS
from config.schema import GeneratorConstraints
from models.group import Group
from models.lesson import Lesson
from models.school_data import SchoolData
from models.teacher import Teacher
from solver.scheduler import GenerationResult

from export.helpers import (
    COLORS, build_grid, count_gaps, count_teacher_minutes,
    format_lessons, get_subject_color, start_times, today_str,
)


class ExcelExporter:
    """Exportiert ein GenerationResult in eine Excel-Datei.

    Sheets: Übersicht, optional Regelprüfung, je Gruppe und je Lehrkraft ein
    Raster Startzeit × Wochentag.
    """

    # Spaltenbreiten (Excel-Einheiten)
    COL_ZEIT_W = 14
    COL_DAY_W  = 22

    # Zeilenhöhen (Punkte)
    ROW_HEADER_H = 22
    ROW_LESSON_H = 36

    def __init__(
        self,
        result: GenerationResult,
        school_data: SchoolData,
        constraints: Optional[GeneratorConstraints] = None,
    ):
        self.result      = result
        self.schedule    = result.schedule
        self.data        = school_data
        self.constraints = constraints or GeneratorConstraints()

    # ─── Öffentliche API ──────────────────────────────────────────────────────

    def export(self, output_path: Path) -> Path:
        """Erstellt die Excel-Datei mit allen Sheets."""
        from openpyxl import Workbook
        wb = Workbook()
        wb.remove(wb.active)   # Leeres Standard-Sheet entfernen

        self._sheet_uebersicht(wb)

        if self.result.validation is not None and not self.result.validation.is_valid:
            self._sheet_regelpruefung(wb)

        for group in sorted(self.data.groups, key=lambda g: g.id):
            self._sheet_gruppe(wb, group)

        for teacher in sorted(self.data.teachers, key=lambda t: t.id):
            self._sheet_lehrer(wb, teacher)

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        wb.save(output_path)
        return output_path

    # ─── Style-Helpers ────────────────────────────────────────────────────────

    def _fill(self, hex_color: str):
        from openpyxl.styles import PatternFill
        return PatternFill(start_color=hex_color, end_color=hex_color, fill_type="solid")

    def _center_align(self, wrap: bool = True):
        from openpyxl.styles import Alignment
        return Alignment(wrap_text=wrap, horizontal="center", vertical="center")

    def _thin_border(self):
        from openpyxl.styles import Border, Side
        s = Side(border_style="thin", color="BBBBBB")
        return Border(left=s, right=s, top=s, bottom=s)

    def _write_header(self, ws, row: int, headers: list[str]) -> None:
        from openpyxl.styles import Font
        fill = self._fill(COLORS["header"])
        border = self._thin_border()
        for col, text in enumerate(headers, 1):
            cell = ws.cell(row=row, column=col, value=text)
            cell.fill = fill
            cell.font = Font(bold=True, color="FFFFFF", size=10)
            cell.alignment = self._center_align(wrap=False)
            cell.border = border
        ws.row_dimensions[row].height = self.ROW_HEADER_H

    # ─── Zeitraster-Tabelle ───────────────────────────────────────────────────

    def _write_schedule_table(self, ws, lessons: list[Lesson], mode: str) -> int:
        """Schreibt das Raster (Zeit | Mo | … | Fr); gibt die nächste freie Zeile zurück.

        mode: 'group' | 'teacher'
        """
        from openpyxl.styles import Font
        from openpyxl.utils import get_column_letter

        ws.column_dimensions["A"].width = self.COL_ZEIT_W
        for col in range(2, 2 + len(WEEKDAYS)):
            ws.column_dimensions[get_column_letter(col)].width = self.COL_DAY_W

        self._write_header(ws, 1, ["Zeit"] + [DAY_NAMES[d] for d in WEEKDAYS])
        grid = build_grid(lessons)
        border = self._thin_border()

        excel_row = 2
        for start in start_times(lessons):
            here_any = next(l for l in lessons if l.start_time == start)
            c = ws.cell(row=excel_row, column=1, value=f"{start}–{here_any.end_time}")
            c.alignment = self._center_align(wrap=False)
            c.border = border
            c.font = Font(bold=True, size=9)

            for offset, day in enumerate(WEEKDAYS):
                here = grid.get((day, start), [])
                color = (
                    get_subject_color(here[0].subject_id, self.constraints.core_subjects)
                    if here else COLORS["free"]
                )
                # Mehrere Stunden einer Lehrkraft im selben Slot: Konflikt markieren
                if mode == "teacher" and len(here) > 1:
                    color = COLORS["conflict"]
                c = ws.cell(row=excel_row, column=offset + 2, value=format_lessons(here, mode))
                c.fill = self._fill(color)
                c.alignment = self._center_align()
                c.border = border
                c.font = Font(size=8)

            ws.row_dimensions[excel_row].height = self.ROW_LESSON_H
            excel_row += 1

        if not lessons:
            ws.cell(row=excel_row, column=1, value="Keine Stunden")
            excel_row += 1
        return excel_row

    # ─── Sheet: Übersicht ─────────────────────────────────────────────────────

    def _sheet_uebersicht(self, wb) -> None:
        from openpyxl.styles import Font
        ws = wb.create_sheet(title="Übersicht", index=0)
        m = self.result.metrics

        row = 1
        ws.cell(row=row, column=1, value=self.schedule.name or "Wochenplan").font = Font(bold=True, size=14)
        row += 1
        ws.cell(row=row, column=1, value=f"Erstellt: {today_str()}")
        if self.schedule.week_number and self.schedule.year:
            ws.cell(row=row, column=2, value=f"KW {self.schedule.week_number}/{self.schedule.year}")
        ws.cell(row=row, column=3, value=f"Status: {self.result.status.value}")
        ws.cell(row=row, column=4, value=f"Stunden: {m.lessons_placed}")
        ws.cell(row=row, column=5, value=f"Konflikte: {m.conflicts_resolved}")
        row += 2

        # Lehrer-Tabelle
        self._write_header(
            ws, row, ["ID", "Name", "Fächer", "Arbeitszeit", "Stunden", "Minuten", "Freistd."]
        )
        row += 1
        border = self._thin_border()
        for teacher in sorted(self.data.teachers, key=lambda t: t.id):
            t_lessons = self.schedule.lessons_for_teacher(teacher.id)
            values = [
                teacher.id,
                teacher.name,
                ", ".join(teacher.subject_ids),
                str(teacher.working_hours),
                len(t_lessons),
                count_teacher_minutes(self.schedule.lessons, teacher.id),
                count_gaps(t_lessons, self.constraints),
            ]
            for col, value in enumerate(values, 1):
                ws.cell(row=row, column=col, value=value).border = border
            row += 1

        # Meldungen des Laufs
        if self.result.messages:
            row += 1
            ws.cell(row=row, column=1, value="Meldungen").font = Font(bold=True)
            row += 1
            for msg in self.result.messages:
                ws.cell(row=row, column=1, value=msg)
                row += 1

        ws.column_dimensions["A"].width = 12
        ws.column_dimensions["B"].width = 28
        ws.column_dimensions["C"].width = 28
        ws.column_dimensions["D"].width = 14
        ws.column_dimensions["E"].width = 10
        ws.column_dimensions["F"].width = 10
        ws.column_dimensions["G"].width = 10

    # ─── Sheet: Regelprüfung ──────────────────────────────────────────────────

    def _sheet_regelpruefung(self, wb) -> None:
        ws = wb.create_sheet(title="Regelprüfung")
        self._write_header(ws, 1, ["Regel", "Entität", "Stunden", "Beschreibung"])
        border = self._thin_border()
        for row, v in enumerate(self.result.validation.violations, 2):
            values = [v.constraint, v.entity, ", ".join(v.lesson_ids), v.description]
            for col, value in enumerate(values, 1):
                c = ws.cell(row=row, column=col, value=value)
                c.border = border
                c.fill = self._fill(COLORS["conflict"])
        ws.column_dimensions["A"].width = 26
        ws.column_dimensions["B"].width = 12
        ws.column_dimensions["C"].width = 36
        ws.column_dimensions["D"].width = 80

    # ─── Sheet: Gruppe ────────────────────────────────────────────────────────

    def _sheet_gruppe(self, wb, group: Group) -> None:
        title = f"Gruppe {group.id}"[:31]
        ws = wb.create_sheet(title=title)
        self._write_schedule_table(ws, self.schedule.lessons_for_group(group.id), mode="group")

    # ─── Sheet: Lehrer ────────────────────────────────────────────────────────

    def _sheet_lehrer(self, wb, teacher: Teacher) -> None:
        from openpyxl.styles import Font
        title = f"Lehrer {teacher.id}"[:31]
        ws = wb.create_sheet(title=title)
        lessons = self.schedule.lessons_for_teacher(teacher.id)
        last_row = self._write_schedule_table(ws, lessons, mode="teacher")

        # Stat-Box unter dem Raster
        last_row += 1
        ws.cell(row=last_row, column=1, value="Arbeitszeit:").font = Font(bold=True)
        ws.cell(row=last_row, column=2, value=str(teacher.working_hours))
        ws.cell(row=last_row, column=3, value="Stunden:").font = Font(bold=True)
        ws.cell(row=last_row, column=4, value=len(lessons))
        ws.cell(row=last_row, column=5, value="Freistunden:").font = Font(bold=True)
        ws.cell(row=last_row, column=6, value=count_gaps(lessons, self.constraints))
