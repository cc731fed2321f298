# tests/test_config.py
from pathlib import Path

import pytest

from fecap_core.hysteresis import Direction
from fecap_core.simulation import ConfigParsingError, SolverConfig, load_solver_config, parse_solver_config


def test_defaults():
    assert parse_solver_config(None) == SolverConfig()
    assert parse_solver_config({}) == SolverConfig()
    config = SolverConfig()
    assert config.max_iterations == 50
    assert config.initial_direction is Direction.DOWN
    assert config.bisection_fallback is False


def test_unit_strings_are_converted():
    config = parse_solver_config({
        "voltage_tol": "1 uV",
        "abs_charge_tol": "1e-12 C/m**2",
        "initial_voltage": "-500 mV",
        "max_bracket_span": "2 kV",
        "initial_direction": "up",
        "rel_charge_tol": 1e-6,
        "max_iterations": 80,
        "bisection_fallback": True,
    })
    assert config.voltage_tol == pytest.approx(1e-6)
    assert config.abs_charge_tol == pytest.approx(1e-12)
    assert config.initial_voltage == pytest.approx(-0.5)
    assert config.max_bracket_span == pytest.approx(2e3)
    assert config.initial_direction is Direction.UP
    assert config.rel_charge_tol == 1e-6
    assert config.max_iterations == 80
    assert config.bisection_fallback is True


def test_plain_numbers_are_si():
    config = parse_solver_config({"voltage_tol": 1e-9, "abs_charge_tol": "1e-14"})
    assert config.voltage_tol == 1e-9
    assert config.abs_charge_tol == pytest.approx(1e-14)


def test_charge_tolerance():
    config = SolverConfig(abs_charge_tol=1e-12, rel_charge_tol=1e-6)
    assert config.charge_tolerance(-2.0) == pytest.approx(1e-12 + 2e-6)


def test_wrong_dimension_is_rejected():
    with pytest.raises(ConfigParsingError) as excinfo:
        parse_solver_config({"voltage_tol": "1 s"})
    assert excinfo.value.parameter == "voltage_tol"
    assert "Solver Configuration Error" in excinfo.value.get_diagnostic_report()


@pytest.mark.parametrize("raw", [
    {"unknown_option": 1},
    {"max_iterations": 0},
    {"max_iterations": "ten"},
    {"rel_charge_tol": -1.0},
    {"initial_direction": "SIDEWAYS"},
    {"bisection_fallback": "yes"},
])
def test_schema_violations(raw):
    with pytest.raises(ConfigParsingError) as excinfo:
        parse_solver_config(raw)
    assert isinstance(excinfo.value, ValueError)
    assert excinfo.value.schema_errors
    assert next(iter(raw)) in excinfo.value.get_diagnostic_report()


@pytest.mark.parametrize("field, value", [
    ("damping_fraction", 0.0),
    ("max_bracket_span", -1.0),
    ("voltage_tol", float("nan")),
    ("max_iterations", True),
])
def test_out_of_range_values(field, value):
    with pytest.raises(ConfigParsingError) as excinfo:
        SolverConfig(**{field: value})
    assert excinfo.value.parameter == field


def test_to_dict():
    data = SolverConfig(initial_direction=Direction.UP).to_dict()
    assert data["initial_direction"] == "UP"
    assert parse_solver_config(data) == SolverConfig(initial_direction=Direction.UP)


class TestLoadSolverConfig:
    def test_load_yaml(self, tmp_path: Path):
        path = tmp_path / "solver.yaml"
        path.write_text("""
max_iterations: 30
voltage_tol: "10 nV"
bisection_fallback: true
initial_direction: UP
""")
        config = load_solver_config(path)
        assert config.max_iterations == 30
        assert config.voltage_tol == pytest.approx(1e-8)
        assert config.bisection_fallback is True
        assert config.initial_direction is Direction.UP

    def test_empty_file_gives_defaults(self, tmp_path: Path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_solver_config(path) == SolverConfig()

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigParsingError, match="not found"):
            load_solver_config(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path: Path):
        path = tmp_path / "broken.yaml"
        path.write_text("max_iterations: [1, 2\n")
        with pytest.raises(ConfigParsingError, match="Invalid YAML syntax"):
            load_solver_config(path)

    def test_root_must_be_mapping(self, tmp_path: Path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ConfigParsingError, match="dictionary"):
            load_solver_config(path)

    def test_source_file_is_reported(self, tmp_path: Path):
        path = tmp_path / "bad.yaml"
        path.write_text("damping_fraction: 0\n")
        with pytest.raises(ConfigParsingError) as excinfo:
            load_solver_config(path)
        assert excinfo.value.source_file == path.resolve()
        assert "bad.yaml" in excinfo.value.get_diagnostic_report()
