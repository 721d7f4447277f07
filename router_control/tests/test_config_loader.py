"""Tests for the dado job config loader.

Validates that:
    - the shipped dado.yaml loads and reproduces the reference job
    - every quantity syntax parses to the right unit and amount
    - malformed files raise ConfigError with an actionable message
"""

from __future__ import annotations

from pathlib import Path

import pytest

from router_control.configs.loader import (
    ConfigError,
    JobConfig,
    load_config,
    parse_quantity,
)
from router_control.gcode.compiler import compile_program
from router_control.toolpath.dado import generate_dado_path
from router_control.units.quantity import Quantity, Unit, inch, mm

VALID_JOB = """\
joint:
  plate_thickness: 3 mm
  retract_height: 10mm
  stock_thickness: {amount: 0.75, unit: in}
  cutter_diameter: 0.25 in
  work_offset_x: 15
  pass_length: 200 mm
machine:
  retract_feed: 600
logging:
  level: debug
"""


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def config() -> JobConfig:
    """Load the default dado.yaml shipped with the package."""
    return load_config()


@pytest.fixture()
def write_job(tmp_path: Path):
    def _write(text: str) -> Path:
        path = tmp_path / "job.yaml"
        path.write_text(text, encoding="utf-8")
        return path

    return _write


# ---------------------------------------------------------------------------
# Shipped default
# ---------------------------------------------------------------------------


class TestDefaultConfig:
    def test_reference_joint(self, config: JobConfig) -> None:
        j = config.joint
        assert j.plate_thickness == mm(4.2)
        assert j.retract_height == mm(5)
        assert j.stock_thickness == inch(0.5)
        assert j.cutter_diameter == inch(0.125)
        assert j.work_offset_x == mm(20)
        assert j.pass_length == inch(6)

    def test_machine_settings(self, config: JobConfig) -> None:
        assert config.machine.retract_feed == 300
        assert config.machine.depth_tolerance == pytest.approx(0.001)

    def test_logging_defaults(self, config: JobConfig) -> None:
        assert config.logging.level == "INFO"
        assert config.logging.json is False
        assert config.logging.file is None

    def test_generates_reference_program(self, config: JobConfig) -> None:
        lines = list(compile_program(
            generate_dado_path(config.joint, config.machine)
        ))
        assert "G0 Z5 F300" in lines
        assert lines.count("G0 X31.11 Y0") == 4
        assert lines[-1] == "M0 Stop Spindle"


# ---------------------------------------------------------------------------
# Quantity parsing
# ---------------------------------------------------------------------------


class TestParseQuantity:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("0.5 in", Quantity(Unit.INCH, 0.5)),
            ("4.2mm", Quantity(Unit.MILLIMETER, 4.2)),
            ("  12 MM ", Quantity(Unit.MILLIMETER, 12)),
            ("-3 in", Quantity(Unit.INCH, -3)),
            (".25 in", Quantity(Unit.INCH, 0.25)),
            ({"amount": 6, "unit": "in"}, Quantity(Unit.INCH, 6)),
        ],
    )
    def test_valid(self, raw: object, expected: Quantity) -> None:
        assert parse_quantity("x", raw) == expected

    def test_integer_text_stays_integer(self) -> None:
        q = parse_quantity("x", "5 mm")
        assert isinstance(q, Quantity)
        assert isinstance(q.amount, int)

    def test_bare_numbers_pass_through(self) -> None:
        assert parse_quantity("x", 7) == 7
        assert parse_quantity("x", 2.5) == 2.5

    @pytest.mark.parametrize(
        ("raw", "match"),
        [
            ("3 furlong", "unknown unit"),
            ("three in", "'<amount> <unit>'"),
            ("3", "'<amount> <unit>'"),
            ({"amount": 3}, "needs 'amount' and 'unit'"),
            ({"amount": "3", "unit": "mm"}, "must be a number"),
            (True, "must be a quantity"),
            ([1, "mm"], "must be a quantity"),
        ],
    )
    def test_invalid(self, raw: object, match: str) -> None:
        with pytest.raises(ConfigError, match=match):
            parse_quantity("stock_thickness", raw)

    def test_error_names_field(self) -> None:
        with pytest.raises(ConfigError, match="'pass_length'"):
            parse_quantity("pass_length", "6 ft")


# ---------------------------------------------------------------------------
# Loading files
# ---------------------------------------------------------------------------


class TestLoadConfig:
    def test_custom_file(self, write_job) -> None:
        cfg = load_config(write_job(VALID_JOB))
        assert cfg.joint.retract_height == mm(10)
        assert cfg.joint.stock_thickness == inch(0.75)
        assert cfg.joint.work_offset_x == 15
        assert cfg.machine.retract_feed == 600
        # Unspecified machine keys fall back to defaults
        assert cfg.machine.depth_tolerance == pytest.approx(0.001)
        assert cfg.logging.level == "DEBUG"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")

    def test_empty_file(self, write_job) -> None:
        with pytest.raises(ConfigError, match="Empty configuration"):
            load_config(write_job(""))

    def test_missing_joint_section(self, write_job) -> None:
        with pytest.raises(ConfigError, match="Missing required configuration key"):
            load_config(write_job("machine:\n  retract_feed: 300\n"))

    def test_missing_joint_parameter(self, write_job) -> None:
        text = VALID_JOB.replace("  pass_length: 200 mm\n", "")
        with pytest.raises(ConfigError, match="pass_length"):
            load_config(write_job(text))

    def test_unknown_joint_parameter(self, write_job) -> None:
        text = VALID_JOB.replace("machine:", "  dovetail_angle: 14 mm\nmachine:")
        with pytest.raises(ConfigError, match="dovetail_angle"):
            load_config(write_job(text))

    def test_bad_machine_value(self, write_job) -> None:
        text = VALID_JOB.replace("retract_feed: 600", "retract_feed: fast")
        with pytest.raises(ConfigError, match="Invalid configuration value"):
            load_config(write_job(text))

    def test_non_positive_feed(self, write_job) -> None:
        text = VALID_JOB.replace("retract_feed: 600", "retract_feed: 0")
        with pytest.raises(ConfigError, match="retract_feed"):
            load_config(write_job(text))

    def test_non_positive_cutter(self, write_job) -> None:
        text = VALID_JOB.replace("0.25 in", "0 in")
        with pytest.raises(ConfigError, match="cutter_diameter"):
            load_config(write_job(text))

    def test_unknown_log_level(self, write_job) -> None:
        text = VALID_JOB.replace("level: debug", "level: chatty")
        with pytest.raises(ConfigError, match="logging level"):
            load_config(write_job(text))

    def test_root_must_be_mapping(self, write_job) -> None:
        with pytest.raises(ConfigError, match="mapping"):
            load_config(write_job("- 1\n- 2\n"))
