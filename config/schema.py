from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


def check_hhmm(value: str) -> str:
    """Prüft das Format "HH:MM" und gibt den normalisierten Wert zurück."""
    parts = value.split(":")
    if len(parts) != 2 or not all(p.isdigit() for p in parts):
        raise ValueError(f"Uhrzeit '{value}' ist nicht im Format HH:MM")
    hours, minutes = int(parts[0]), int(parts[1])
    if not (0 <= hours <= 23 and 0 <= minutes <= 59):
        raise ValueError(f"Uhrzeit '{value}' liegt außerhalb von 00:00-23:59")
    return f"{hours:02d}:{minutes:02d}"


class ConfigModel(BaseModel):
    """Basis aller Konfigurationsmodelle.

    Unbekannte Felder werden abgelehnt. Felder sind sowohl in snake_case
    als auch in der camelCase-Schreibweise der externen Schnittstelle
    (z.B. "lessonDuration") ansprechbar.
    """
    model_config = ConfigDict(
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )


# ─── ZEITFENSTER ───

class TimeWindow(ConfigModel):
    """Ein Zeitfenster innerhalb eines Tages, z.B. Arbeitszeit oder Mittagspause."""
    # Beginn im Format "HH:MM"
    start: str
    # Ende im Format "HH:MM" (exklusiv)
    end: str

    @field_validator("start", "end")
    @classmethod
    def _validate_format(cls, v: str) -> str:
        return check_hhmm(v)

    @model_validator(mode="after")
    def _validate_order(self):
        if self.start_minutes >= self.end_minutes:
            raise ValueError(
                f"Zeitfenster {self.start}-{self.end}: Beginn muss vor dem Ende liegen")
        return self

    @property
    def start_minutes(self) -> int:
        h, m = self.start.split(":")
        return int(h) * 60 + int(m)

    @property
    def end_minutes(self) -> int:
        h, m = self.end.split(":")
        return int(h) * 60 + int(m)

    def contains(self, start_minutes: int, end_minutes: int) -> bool:
        """True wenn [start, end) vollständig im Fenster liegt."""
        return start_minutes >= self.start_minutes and end_minutes <= self.end_minutes

    def overlaps(self, start_minutes: int, end_minutes: int) -> bool:
        """True wenn [start, end) das Fenster schneidet."""
        return start_minutes < self.end_minutes and self.start_minutes < end_minutes

    def __str__(self) -> str:
        return f"{self.start}-{self.end}"


# ─── GENERATOR-CONSTRAINTS ───

class GeneratorConstraints(ConfigModel):
    """Harte Regeln und Parameter eines Generierungslaufs.

    Entspricht dem Constraints-Objekt der externen Schnittstelle. Alle
    Optionen haben dokumentierte Defaults; unbekannte Optionen führen zu
    einem Validierungsfehler statt stillschweigend ignoriert zu werden.
    """
    # Dauer einer Unterrichtsstunde in Minuten
    lesson_duration: int = Field(45, ge=45, le=240,
        description="Dauer einer Stunde (Minuten, mind. 45)")
    # Pause nach jeder Stunde in Minuten
    break_duration: int = Field(10, ge=0, le=120,
        description="Pause nach einer Stunde (Minuten)")
    # Max. Stunden pro Lehrkraft und Tag
    max_lessons_per_day: int = Field(8, ge=1, le=16,
        description="Max. Stunden pro Lehrkraft und Tag")
    # Max. Stunden desselben Fachs pro Gruppe und Tag
    max_same_subject_per_day: int = Field(2, ge=1, le=16,
        description="Max. Stunden desselben Fachs pro Gruppe und Tag")
    # Mittagspause, in der keine Stunde liegen darf
    lunch_period: TimeWindow = Field(
        default_factory=lambda: TimeWindow(start="12:00", end="13:00"),
        description="Mittagspause (keine Stunden)")
    # Globaler Rahmen, in dem Stunden liegen dürfen
    working_hours: TimeWindow = Field(
        default_factory=lambda: TimeWindow(start="08:15", end="16:00"),
        description="Unterrichtsrahmen des Tages")
    # Kernfächer erhalten bei der Konfliktauflösung einen Prioritätsbonus
    core_subjects: list[str] = Field(
        default=["math", "science"],
        description="Fach-IDs mit Vorrang bei Konflikten")
    # Höhe des Kernfach-Bonus
    core_subject_bonus: int = Field(50, ge=0,
        description="Prioritätsbonus für Kernfächer")
    # Default für Lehrkräfte ohne max_load
    default_max_load: float = Field(25.0, gt=0,
        description="Max. Wochenstunden einer Lehrkraft (Default)")
    # Default-Belastung eines Kurses ohne Wochenstunden
    default_course_load: float = Field(3.0, gt=0,
        description="Wochenstunden eines Kurses (Default)")

    @model_validator(mode="after")
    def _validate_lunch_inside_day(self):
        """Die Mittagspause muss den Unterrichtsrahmen schneiden."""
        wh, lp = self.working_hours, self.lunch_period
        if not wh.overlaps(lp.start_minutes, lp.end_minutes):
            raise ValueError(
                f"Mittagspause {lp} liegt außerhalb des Unterrichtsrahmens {wh}")
        if wh.end_minutes - wh.start_minutes < self.lesson_duration:
            raise ValueError(
                f"Unterrichtsrahmen {wh} ist kürzer als eine Stunde "
                f"({self.lesson_duration} min)")
        return self


# ─── CACHE ───

class CacheConfig(ConfigModel):
    """Lebensdauern des Feasibility-Caches (Sekunden)."""
    # Cache überhaupt verwenden
    enabled: bool = Field(True, description="Feasibility-Cache aktiv")
    # Belegungsabhängige Prüfungen (Lehrkraft/Gruppe/Tageslimits)
    conflict_ttl_seconds: float = Field(30.0, gt=0,
        description="TTL Konfliktprüfungen")
    # Statische Prüfungen (Mittagspause)
    static_ttl_seconds: float = Field(60.0, gt=0,
        description="TTL statische Prüfungen")
    # Sortierte Kurslisten
    course_list_ttl_seconds: float = Field(600.0, gt=0,
        description="TTL sortierte Kurslisten")
    # Abstand der automatischen Bereinigung abgelaufener Einträge
    sweep_interval_seconds: float = Field(60.0, gt=0,
        description="Intervall der Bereinigung")


# ─── GESAMT-CONFIG ───

class EngineConfig(ConfigModel):
    """Gesamtkonfiguration des Wochenplan-Generators."""
    # Anzeigename (z.B. Name der Schule)
    name: str = Field("Wochenplan", description="Anzeigename")
    # Regeln des Generators
    constraints: GeneratorConstraints = Field(default_factory=GeneratorConstraints)
    # Cache-Einstellungen
    cache: CacheConfig = Field(default_factory=CacheConfig)
    # Log-Level der CLI (DEBUG, INFO, WARNING, ERROR)
    log_level: str = Field("WARNING", description="Log-Level der CLI")

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR"):
            raise ValueError(f"Unbekanntes Log-Level: {v}")
        return level
