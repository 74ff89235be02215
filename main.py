"""Wochenplan-Generator: Haupt-CLI.

Verwendung:
  python main.py config init              Default-Konfiguration anlegen
  python main.py config show              Konfiguration anzeigen
  python main.py demo                     Demo-Snapshot erzeugen (JSON)
  python main.py check                    Machbarkeits-Check eines Snapshots
  python main.py generate                 Wochenplan berechnen
  python main.py generate --excel         ... und als Excel exportieren
  python main.py validate <plan.json>     Wochenplan gegen die Regeln prüfen
  python main.py export                   Excel aus gespeichertem Ergebnis
"""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich import box

console = Console()

# Standard-Pfade
DEFAULT_DATA_JSON = Path("output/school_data.json")
DEFAULT_RESULT_JSON = Path("output/result.json")
DEFAULT_EXCEL = Path("output/wochenplan.xlsx")


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load_config_or_abort(ctx: click.Context):
    """Lädt die Konfiguration (oder Defaults) oder bricht mit Fehlermeldung ab."""
    from config.manager import ConfigManager
    mgr = ConfigManager()
    try:
        config = mgr.load_or_default(ctx.obj.get("config_path"))
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    verbosity = ctx.obj.get("verbose", 0)
    level = {0: config.log_level, 1: "INFO"}.get(verbosity, "DEBUG")
    _setup_logging(level)
    return mgr, config


def _load_data_or_abort(json_path: str):
    """Lädt einen SchoolData-Snapshot oder bricht ab."""
    from models.school_data import SchoolData

    p = Path(json_path)
    if not p.exists():
        console.print(
            f"[red]Keine Datendatei gefunden: {p}[/red]\n"
            "Verwenden Sie [bold]python main.py demo[/bold] für einen Demo-Datensatz."
        )
        sys.exit(1)
    console.print(f"[bold]Lade Datensatz:[/bold] {p}")
    return SchoolData.load_json(p)


# ─── CONFIG ───────────────────────────────────────────────────────────────────

@click.group("config")
def cmd_config():
    """Konfiguration anlegen oder anzeigen."""


@cmd_config.command("init")
@click.option("--force", is_flag=True, default=False,
              help="Bestehende Konfiguration überschreiben.")
@click.pass_context
def config_init(ctx: click.Context, force: bool):
    """Legt eine Konfigurationsdatei mit allen Defaults an."""
    from config.defaults import default_engine_config
    from config.manager import ConfigManager

    mgr = ConfigManager()
    target = Path(ctx.obj.get("config_path") or mgr.DEFAULT_CONFIG)
    if target.exists() and not force:
        console.print(
            f"[yellow]Konfiguration existiert bereits: {target}[/yellow]\n"
            "Mit [bold]--force[/bold] überschreiben."
        )
        sys.exit(1)
    mgr.save(default_engine_config(), target)


@cmd_config.command("show")
@click.pass_context
def config_show(ctx: click.Context):
    """Zeigt die aktuelle Konfiguration an."""
    mgr, config = _load_config_or_abort(ctx)
    c = config.constraints

    console.print(Panel(
        f"[bold]{config.name}[/bold]  |  Log-Level {config.log_level}",
        title="Konfiguration",
        border_style="cyan",
    ))

    table = Table(title="Regeln", box=box.ROUNDED)
    table.add_column("Option")
    table.add_column("Wert")
    table.add_row("Stundenlänge", f"{c.lesson_duration} min")
    table.add_row("Pause", f"{c.break_duration} min")
    table.add_row("Max. Stunden/Tag (Lehrkraft)", str(c.max_lessons_per_day))
    table.add_row("Max. gleiches Fach/Tag (Gruppe)", str(c.max_same_subject_per_day))
    table.add_row("Unterrichtsrahmen", str(c.working_hours))
    table.add_row("Mittagspause", str(c.lunch_period))
    table.add_row("Kernfächer", ", ".join(c.core_subjects))
    table.add_row("Max. Last (Default)", f"{c.default_max_load:g}h")
    console.print(table)

    cc = config.cache
    console.print(
        f"\n[bold]Cache:[/bold] {'aktiv' if cc.enabled else 'aus'} | "
        f"TTL Konflikte {cc.conflict_ttl_seconds:g}s | "
        f"statisch {cc.static_ttl_seconds:g}s | "
        f"Kurslisten {cc.course_list_ttl_seconds:g}s"
    )


# ─── DEMO ─────────────────────────────────────────────────────────────────────

@click.command("demo")
@click.option("--seed", default=42, help="Zufalls-Seed für reproduzierbare Daten.")
@click.option("--classes", "num_classes", default=4, type=click.IntRange(1, 24),
              help="Anzahl Klassen.")
@click.option("--json-path", default=str(DEFAULT_DATA_JSON),
              help="Pfad für den JSON-Snapshot.")
@click.pass_context
def cmd_demo(ctx: click.Context, seed: int, num_classes: int, json_path: str):
    """Erzeugt einen Demo-Snapshot (Kurse, Lehrkräfte, Gruppen, Klassen)."""
    mgr, config = _load_config_or_abort(ctx)
    from data.fake_data import FakeDataGenerator

    console.print("[bold]Demo-Daten werden generiert...[/bold]")
    gen = FakeDataGenerator(config.constraints, seed=seed, num_classes=num_classes)
    data = gen.generate()
    gen.print_summary(data)
    console.print(f"\n[dim]{data.summary()}[/dim]")

    out_path = Path(json_path)
    data.save_json(out_path)
    console.print(f"[green]✓[/green] JSON gespeichert: {out_path}")


# ─── CHECK ────────────────────────────────────────────────────────────────────

@click.command("check")
@click.option("--json-path", default=str(DEFAULT_DATA_JSON),
              help="Pfad zum JSON-Snapshot.")
@click.pass_context
def cmd_check(ctx: click.Context, json_path: str):
    """Führt einen Machbarkeits-Check auf dem Snapshot durch."""
    mgr, config = _load_config_or_abort(ctx)
    data = _load_data_or_abort(json_path)

    console.print(f"\n{data.summary()}\n")
    report = data.validate_feasibility(config.constraints)
    report.print_rich()

    sys.exit(0 if report.is_feasible else 1)


# ─── GENERATE ─────────────────────────────────────────────────────────────────

@click.command("generate")
@click.option("--json-path", default=str(DEFAULT_DATA_JSON),
              help="Pfad zum JSON-Snapshot.")
@click.option("--pins", "pins_path", default=None, type=click.Path(path_type=Path),
              help="JSON-Datei mit gepinnten Stunden.")
@click.option("--validate/--no-validate", "run_validate", default=True,
              help="Ergebnis mit dem RuleValidator prüfen.")
@click.option("--output", "-o", default=str(DEFAULT_RESULT_JSON),
              help="Pfad für das Ergebnis (JSON).")
@click.option("--excel", "excel_path", default=None,
              help="Zusätzlich als Excel exportieren (Pfad).")
@click.pass_context
def cmd_generate(ctx: click.Context, json_path: str, pins_path: Optional[Path],
                 run_validate: bool, output: str, excel_path: Optional[str]):
    """Berechnet den Wochenplan für einen Snapshot."""
    mgr, config = _load_config_or_abort(ctx)
    data = _load_data_or_abort(json_path)

    from solver.cache import FeasibilityCache
    from solver.pinning import PinManager
    from solver.scheduler import GenerationInputError, GenerationStatus, ScheduleGenerator

    pins = PinManager()
    if pins_path is not None:
        try:
            pins.load_json(pins_path)
        except (FileNotFoundError, ValueError) as e:
            console.print(f"[red]{e}[/red]")
            sys.exit(1)
        console.print(f"[bold]Pins:[/bold] {len(pins)} gepinnte Stunden")

    cache = FeasibilityCache(config.cache) if config.cache.enabled else None
    generator = ScheduleGenerator(config.constraints, cache=cache, name=config.name)
    try:
        result = generator.generate(data, pins=pins.get_pins(), validate=run_validate)
    except GenerationInputError as e:
        console.print(f"[red bold]Ungültige Eingabe:[/red bold] {e}")
        sys.exit(1)
    finally:
        if cache is not None:
            cache.close()

    result.print_rich()
    if result.validation is not None:
        result.validation.print_rich()

    out_path = Path(output)
    result.save_json(out_path)
    console.print(f"[green]✓[/green] Ergebnis gespeichert: {out_path}")

    if excel_path:
        from export.excel_export import ExcelExporter
        xlsx = ExcelExporter(result, data, config.constraints).export(Path(excel_path))
        console.print(f"[green]✓[/green] Excel gespeichert: {xlsx}")

    sys.exit(1 if result.status == GenerationStatus.FAILED else 0)


# ─── VALIDATE ─────────────────────────────────────────────────────────────────

@click.command("validate")
@click.argument("plan", type=click.Path(exists=True, path_type=Path))
@click.option("--json-path", default=str(DEFAULT_DATA_JSON),
              help="Pfad zum JSON-Snapshot mit den Referenzdaten.")
@click.pass_context
def cmd_validate(ctx: click.Context, plan: Path, json_path: str):
    """Prüft einen Wochenplan (oder ein gespeichertes Ergebnis) gegen die Regeln."""
    mgr, config = _load_config_or_abort(ctx)
    data = _load_data_or_abort(json_path)

    from analysis.rule_validator import RuleValidator
    from models.schedule import Schedule

    with open(plan, "r", encoding="utf-8") as f:
        raw = json.load(f)
    # Ergebnisdateien enthalten den Plan unter "schedule"
    if isinstance(raw, dict) and "schedule" in raw:
        raw = raw["schedule"]
    schedule = Schedule.model_validate(raw)

    console.print(f"[bold]Prüfe:[/bold] {plan} ({len(schedule.lessons)} Stunden)")
    report = RuleValidator().validate(schedule, data.validation_context())
    report.print_rich()

    sys.exit(0 if report.is_valid else 1)


# ─── EXPORT ───────────────────────────────────────────────────────────────────

@click.command("export")
@click.option("--result", "result_path", default=str(DEFAULT_RESULT_JSON),
              help="Pfad zum gespeicherten Ergebnis (JSON).")
@click.option("--json-path", default=str(DEFAULT_DATA_JSON),
              help="Pfad zum JSON-Snapshot.")
@click.option("--output", "-o", default=str(DEFAULT_EXCEL),
              help="Pfad der Excel-Datei.")
@click.pass_context
def cmd_export(ctx: click.Context, result_path: str, json_path: str, output: str):
    """Exportiert ein gespeichertes Ergebnis als Excel-Datei."""
    mgr, config = _load_config_or_abort(ctx)
    data = _load_data_or_abort(json_path)

    from export.excel_export import ExcelExporter
    from solver.scheduler import GenerationResult

    try:
        result = GenerationResult.load_json(Path(result_path))
    except FileNotFoundError as e:
        console.print(f"[red]{e}[/red]\nVerwenden Sie zuerst [bold]python main.py generate[/bold].")
        sys.exit(1)

    xlsx = ExcelExporter(result, data, config.constraints).export(Path(output))
    console.print(f"[green]✓[/green] Excel gespeichert: {xlsx}")


# ─── HAUPT-CLI ────────────────────────────────────────────────────────────────

@click.group()
@click.option("--config", "config_path", default=None, type=click.Path(path_type=Path),
              help="Pfad zur Konfigurationsdatei (YAML).")
@click.option("-v", "--verbose", count=True, help="Mehr Log-Ausgaben (-v INFO, -vv DEBUG).")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path], verbose: int):
    """Wochenplan-Generator: Kurse, Lehrkräfte und Gruppen → Wochenplan.

    Starten Sie mit: python main.py demo && python main.py generate
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose


def main():
    """Einstiegspunkt. Zeigt beim ersten Aufruf ohne Argumente einen Hinweis."""
    from config.manager import ConfigManager
    mgr = ConfigManager()

    if len(sys.argv) == 1 and mgr.first_run_check():
        console.print(Panel(
            "[bold]Willkommen beim Wochenplan-Generator![/bold]\n\n"
            "Keine Konfiguration gefunden – es gelten die Defaults.\n"
            "Konfiguration anlegen: [bold]python main.py config init[/bold]",
            border_style="cyan",
        ))

    cli()


# Befehle registrieren
cli.add_command(cmd_config)
cli.add_command(cmd_demo)
cli.add_command(cmd_check)
cli.add_command(cmd_generate)
cli.add_command(cmd_validate)
cli.add_command(cmd_export)


if __name__ == "__main__":
    main()
