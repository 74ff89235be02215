from config.schema import (
    CacheConfig,
    EngineConfig,
    GeneratorConstraints,
    TimeWindow,
)


# Wochentage 1-5 (Montag-Freitag), wie in Lesson.day_of_week
DAY_NAMES: dict[int, str] = {1: "Mo", 2: "Di", 3: "Mi", 4: "Do", 5: "Fr"}
WEEKDAYS: tuple[int, ...] = (1, 2, 3, 4, 5)

# Mindestdauer einer Unterrichtsstunde (Minuten)
MIN_LESSON_DURATION = 45

# Ab dieser Uhrzeit muss eine laufende Stunde von einer Mittagspause gefolgt werden
LUNCH_CHECK_TIME = "12:30"


def default_constraints() -> GeneratorConstraints:
    """Standard-Regeln eines Generierungslaufs.

    Stundenraster:
      Unterrichtsrahmen   08:15 - 16:00
      Mittagspause        12:00 - 13:00
      Stundenlänge        45 min, danach 10 min Pause
      Tageslimit          8 Stunden pro Lehrkraft,
                          2 Stunden desselben Fachs pro Gruppe
    """
    return GeneratorConstraints(
        lesson_duration=45,
        break_duration=10,
        max_lessons_per_day=8,
        max_same_subject_per_day=2,
        lunch_period=TimeWindow(start="12:00", end="13:00"),
        working_hours=TimeWindow(start="08:15", end="16:00"),
    )


def default_cache_config() -> CacheConfig:
    """30 s für Konfliktprüfungen, 60 s für statische Prüfungen, 10 min für Kurslisten."""
    return CacheConfig(
        conflict_ttl_seconds=30.0,
        static_ttl_seconds=60.0,
        course_list_ttl_seconds=600.0,
        sweep_interval_seconds=60.0,
    )


def default_engine_config() -> EngineConfig:
    """Vollständige Default-Konfiguration."""
    return EngineConfig(
        name="Wochenplan",
        constraints=default_constraints(),
        cache=default_cache_config(),
    )
