"""Datenmodell für einen Zeitslot im Wochenraster + Zeit-Hilfsfunktionen."""

from dataclasses import dataclass


def parse_time(value: str) -> int:
    """'HH:MM' → Minuten seit Mitternacht."""
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def format_time(minutes: int) -> str:
    """Minuten seit Mitternacht → 'HH:MM'."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def intervals_overlap(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    """True wenn sich die halboffenen Intervalle [a_start, a_end) und [b_start, b_end) schneiden."""
    return a_start < b_end and b_start < a_end


@dataclass(frozen=True)
class TimeSlot:
    """Repräsentiert einen möglichen Stundenbeginn im Wochenraster.

    Kombination aus Wochentag und Startzeit.
    Immutable (frozen=True) damit es als Dict-Key / Set-Element nutzbar ist.
    """

    # Wochentag (1=Montag, 2=Dienstag, ..., 5=Freitag)
    day: int
    # Startzeit "HH:MM"
    start_time: str

    @property
    def key(self) -> str:
        """Eindeutiger String-Bezeichner (z.B. "1:08:15" für Mo 08:15)."""
        return f"{self.day}:{self.start_time}"

    @property
    def start_minutes(self) -> int:
        return parse_time(self.start_time)

    @property
    def day_name(self) -> str:
        """Abgekürzter Tagesname."""
        names = ["Mo", "Di", "Mi", "Do", "Fr", "Sa", "So"]
        return names[self.day - 1] if 1 <= self.day <= len(names) else str(self.day)

    def __repr__(self) -> str:
        return f"TimeSlot({self.day_name}, {self.start_time})"

    def __str__(self) -> str:
        return f"{self.day_name} {self.start_time}"
