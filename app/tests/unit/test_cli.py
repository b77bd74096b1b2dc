"""Tests for the CLI batch operations (app/cli.py)."""

import json

import pytest
from cli import build_parser, load_circuit, main, try_load_circuit


def _write(model, tmp_path, name):
    filepath = tmp_path / name
    filepath.write_text(json.dumps(model.to_dict()))
    return str(filepath)


@pytest.fixture
def led_file(series_led_circuit, tmp_path):
    return _write(series_led_circuit, tmp_path, "blink.json")


@pytest.fixture
def burnout_file(led_without_resistor, tmp_path):
    return _write(led_without_resistor, tmp_path, "burnout.json")


@pytest.fixture
def robot_file(robot_harness, tmp_path):
    return _write(robot_harness, tmp_path, "robot.json")


class TestLoadCircuit:
    def test_load_valid(self, led_file):
        model = load_circuit(led_file)
        assert set(model.components) == {"B1", "R1", "LED1", "GND1"}
        assert len(model.wires) == 3

    def test_missing_file(self, tmp_path):
        model, error = try_load_circuit(str(tmp_path / "missing.json"))
        assert model is None
        assert "file not found" in error

    def test_invalid_json(self, tmp_path):
        filepath = tmp_path / "bad.json"
        filepath.write_text("{ nope")
        model, error = try_load_circuit(str(filepath))
        assert model is None
        assert "invalid JSON" in error

    def test_not_utf8(self, tmp_path):
        filepath = tmp_path / "binary.json"
        filepath.write_bytes(b"\xff\xfe\x00garbage")
        model, error = try_load_circuit(str(filepath))
        assert model is None
        assert "could not read" in error

    def test_directory_path(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["analyze", str(tmp_path)])
        assert exc_info.value.code == 1
        assert "could not read" in capsys.readouterr().err

    def test_invalid_structure(self, tmp_path):
        filepath = tmp_path / "bad.json"
        filepath.write_text(json.dumps({"components": []}))
        _, error = try_load_circuit(str(filepath))
        assert "invalid circuit file" in error

    def test_load_circuit_exits(self, tmp_path):
        with pytest.raises(SystemExit) as exc_info:
            load_circuit(str(tmp_path / "missing.json"))
        assert exc_info.value.code == 1


class TestParser:
    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_simulate_defaults(self):
        args = build_parser().parse_args(["simulate", "c.json"])
        assert args.ticks == 60
        assert args.format == "json"

    def test_export_rejects_unknown_format(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["export", "c.json", "--format", "pdf"])


class TestAnalyze:
    def test_prints_json(self, led_file, capsys):
        assert main(["analyze", led_file]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["path_count"] == 1
        assert data["stats"]["running"] is False
        assert data["problems"] == []

    def test_ticks_reports_damage(self, burnout_file, capsys):
        assert main(["analyze", burnout_file, "--ticks", "1"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert any("damaged" in p["message"] for p in data["problems"])

    def test_output_file(self, led_file, tmp_path):
        out = tmp_path / "analysis.json"
        assert main(["analyze", led_file, "-o", str(out)]) == 0
        assert json.loads(out.read_text())["path_count"] == 1


class TestValidate:
    def test_complete_harness(self, robot_file, capsys):
        assert main(["validate", robot_file]) == 0
        out = capsys.readouterr().out
        assert "[x] Battery (+) → Pi (5V)" in out
        assert "10/10 connections" in out

    def test_incomplete_harness(self, robot_harness, tmp_path, capsys):
        data = robot_harness.to_dict()
        data["wires"] = data["wires"][:5]
        filepath = tmp_path / "partial.json"
        filepath.write_text(json.dumps(data))

        assert main(["validate", str(filepath)]) == 1
        captured = capsys.readouterr()
        assert "[ ] Pi (GPIO B) → Controller (IN_B)" in captured.out
        assert "5/10 connections" in captured.out
        assert "incomplete" in captured.err

    def test_no_robot_parts(self, led_file, capsys):
        assert main(["validate", led_file]) == 1
        assert "No robot components" in capsys.readouterr().err


class TestSimulate:
    def test_json_readings(self, led_file, capsys):
        assert main(["simulate", led_file, "--ticks", "3"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["running"] is True
        assert data["paths"] == [["B1", "R1", "LED1", "GND1"]]
        led = next(c for c in data["components"] if c["id"] == "LED1")
        assert led["is_on"] is True
        assert led["current"] == pytest.approx(9.0 / 430.03, rel=1e-3)

    def test_damage_warning(self, burnout_file, capsys):
        assert main(["simulate", burnout_file]) == 0
        captured = capsys.readouterr()
        assert "Warning: LED LED1 was damaged" in captured.err
        data = json.loads(captured.out)
        assert len(data["effects"]) == 1
        assert data["paths"] == []

    def test_csv_format(self, led_file, capsys):
        assert main(["simulate", led_file, "--format", "csv"]) == 0
        out = capsys.readouterr().out
        assert "Component,Type,Current (A),Voltage (V),Damaged" in out
        assert "LED1,LED" in out


class TestExport:
    def test_csv_to_stdout(self, led_file, capsys):
        assert main(["export", led_file]) == 0
        out = capsys.readouterr().out
        assert "Circuit Analysis" in out
        assert "blink" in out

    def test_xlsx(self, led_file, tmp_path):
        out = tmp_path / "report.xlsx"
        assert main(["export", led_file, "--format", "xlsx", "-o", str(out)]) == 0
        assert out.exists()

    def test_xlsx_requires_output(self, led_file, capsys):
        assert main(["export", led_file, "--format", "xlsx"]) == 1
        assert "--output is required" in capsys.readouterr().err


class TestInsights:
    def test_idle_circuit(self, led_file, capsys):
        assert main(["insights", led_file]) == 0
        assert "[SUCCESS] Circuit Ready!" in capsys.readouterr().out

    def test_running_burnout(self, burnout_file, capsys):
        assert main(["insights", burnout_file, "--running"]) == 0
        assert "Simulation Running - No Current Flow." in capsys.readouterr().out

    def test_missing_file_exits(self, tmp_path):
        with pytest.raises(SystemExit) as exc_info:
            main(["insights", str(tmp_path / "missing.json")])
        assert exc_info.value.code == 1
