"""Tests für die Kommandozeile (click CliRunner)."""

import json
from pathlib import Path

from click.testing import CliRunner

from main import cli


def run(runner: CliRunner, *args: str):
    return runner.invoke(cli, list(args))


class TestHelp:
    def test_help_lists_commands(self):
        result = run(CliRunner(), "--help")
        assert result.exit_code == 0
        for name in ("config", "demo", "check", "generate", "validate", "export"):
            assert name in result.output


class TestConfigCommands:
    def test_init_and_show(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            result = run(runner, "config", "init")
            assert result.exit_code == 0, result.output
            assert Path("config/engine_config.yaml").exists()

            result = run(runner, "config", "show")
            assert result.exit_code == 0, result.output
            assert "Wochenplan" in result.output

    def test_init_refuses_overwrite(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            run(runner, "config", "init")
            assert run(runner, "config", "init").exit_code == 1
            assert run(runner, "config", "init", "--force").exit_code == 0

    def test_invalid_config_aborts(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            Path("kaputt.yaml").write_text("constraints:\n  lessonDuration: 10\n", encoding="utf-8")
            result = run(runner, "--config", "kaputt.yaml", "demo")
            assert result.exit_code == 1


class TestWorkflow:
    def test_demo_generate_validate_export(self):
        """Demo-Daten → Plan → Regelprüfung → Excel."""
        runner = CliRunner()
        with runner.isolated_filesystem():
            result = run(runner, "demo", "--seed", "3")
            assert result.exit_code == 0, result.output
            assert Path("output/school_data.json").exists()

            result = run(runner, "check")
            assert result.exit_code == 0, result.output

            result = run(runner, "generate")
            assert result.exit_code == 0, result.output
            assert Path("output/result.json").exists()

            result = run(runner, "validate", "output/result.json")
            assert result.exit_code == 0, result.output

            result = run(runner, "export", "-o", "output/plan.xlsx")
            assert result.exit_code == 0, result.output
            assert Path("output/plan.xlsx").exists()

    def test_generate_with_excel_and_pins(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            run(runner, "demo", "--seed", "5", "--classes", "2")
            Path("pins.json").write_text(json.dumps([
                {"courseId": "5a-sports", "dayOfWeek": 5, "startTime": "14:00"},
            ]), encoding="utf-8")
            result = run(runner, "generate", "--pins", "pins.json",
                         "--excel", "output/wochenplan.xlsx", "-o", "output/r.json")
            assert result.exit_code == 0, result.output
            assert Path("output/wochenplan.xlsx").exists()
            saved = json.loads(Path("output/r.json").read_text(encoding="utf-8"))
            ids = [l["id"] for l in saved["schedule"]["lessons"]]
            assert "lesson_5a-sports_5_1400" in ids

    def test_validate_reports_violations(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            run(runner, "demo")
            Path("plan.json").write_text(json.dumps({"lessons": [
                {"id": "x", "courseId": "c", "teacherId": "t02", "groupIds": ["5a"],
                 "dayOfWeek": 1, "startTime": "08:15", "duration": 30},
            ]}), encoding="utf-8")
            result = run(runner, "validate", "plan.json")
            assert result.exit_code == 1
            assert "VERLETZUNGEN GEFUNDEN" in result.output

    def test_generate_without_data(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            result = run(runner, "generate")
            assert result.exit_code == 1
            assert "Keine Datendatei" in result.output

    def test_export_without_result(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            run(runner, "demo")
            result = run(runner, "export")
            assert result.exit_code == 1
