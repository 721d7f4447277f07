"""Configuration loader for dado jobs.

Loads and validates a job YAML file into typed, frozen dataclasses.
Joint dimensions keep their units as :class:`Quantity` values; they are
converted only when the toolpath is generated.

Quantity syntax::

    stock_thickness: 0.5 in              # "<amount> <unit>"
    stock_thickness: 12.7mm              # unit may touch the amount
    stock_thickness: {amount: 0.5, unit: in}
    stock_thickness: 12.7                # bare number, ambient unit

Usage::

    from router_control.configs.loader import load_config
    cfg = load_config()                    # default path
    cfg = load_config("/custom/dado.yaml") # explicit path
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from router_control.toolpath.dado import DadoParams, MachineSettings
from router_control.units.quantity import Measure, Quantity, Unit
from router_control.utils.fs import load_yaml

logger = logging.getLogger(__name__)

_QUANTITY_RE = re.compile(
    r"^\s*(?P<amount>[-+]?(\d+(\.\d*)?|\.\d+)([eE][-+]?\d+)?)\s*(?P<unit>[A-Za-z]+)\s*$"
)

JOINT_FIELDS = (
    "plate_thickness",
    "retract_height",
    "stock_thickness",
    "cutter_diameter",
    "work_offset_x",
    "pass_length",
)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(Exception):
    """Raised when configuration validation fails."""

    pass


# ---------------------------------------------------------------------------
# Dataclasses -- mirror the YAML structure
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LoggingConfig:
    """Logging defaults for the CLI (flags override these)."""

    level: str = "INFO"
    json: bool = False
    file: str | None = None


@dataclass(frozen=True)
class JobConfig:
    """Complete dado job loaded from YAML."""

    joint: DadoParams
    machine: MachineSettings
    logging: LoggingConfig


# ---------------------------------------------------------------------------
# Internal parsing helpers
# ---------------------------------------------------------------------------


def _parse_unit(name: str, raw: Any) -> Unit:
    try:
        return Unit(str(raw).strip().lower())
    except ValueError:
        raise ConfigError(
            f"'{name}' has unknown unit {raw!r}; "
            f"expected one of {[u.value for u in Unit]}"
        ) from None


def parse_quantity(name: str, raw: Any) -> Measure:
    """Parse one quantity value from raw YAML.

    Parameters
    ----------
    name : str
        Field name, used in error messages.
    raw : str | dict | int | float
        ``"0.5 in"``, ``{"amount": 0.5, "unit": "in"}``, or a number.

    Returns
    -------
    Quantity | int | float

    Raises
    ------
    ConfigError
        On malformed text or an unknown unit.
    """
    if isinstance(raw, bool):
        raise ConfigError(f"'{name}' must be a quantity, got {raw!r}")
    if isinstance(raw, (int, float)):
        return raw
    if isinstance(raw, dict):
        if "amount" not in raw or "unit" not in raw:
            raise ConfigError(
                f"'{name}' mapping needs 'amount' and 'unit', got {raw!r}"
            )
        amount = raw["amount"]
        if isinstance(amount, bool) or not isinstance(amount, (int, float)):
            raise ConfigError(f"'{name}' amount must be a number, got {amount!r}")
        return Quantity(_parse_unit(name, raw["unit"]), amount)
    if isinstance(raw, str):
        match = _QUANTITY_RE.match(raw)
        if match is None:
            raise ConfigError(
                f"'{name}' must look like '<amount> <unit>', got {raw!r}"
            )
        text = match.group("amount")
        amount = float(text)
        if amount.is_integer() and re.fullmatch(r"[-+]?\d+", text):
            amount = int(text)
        return Quantity(_parse_unit(name, match.group("unit")), amount)
    raise ConfigError(f"'{name}' must be a quantity, got {raw!r}")


def _parse_joint(data: dict[str, Any]) -> DadoParams:
    if not isinstance(data, dict):
        raise ConfigError(f"'joint' must be a mapping, got {data!r}")
    missing = [f for f in JOINT_FIELDS if f not in data]
    if missing:
        raise ConfigError(f"Missing joint parameter(s): {', '.join(missing)}")
    unknown = sorted(set(data) - set(JOINT_FIELDS))
    if unknown:
        raise ConfigError(f"Unknown joint parameter(s): {', '.join(unknown)}")
    return DadoParams(**{f: parse_quantity(f, data[f]) for f in JOINT_FIELDS})


def _parse_machine(data: dict[str, Any]) -> MachineSettings:
    defaults = MachineSettings()
    return MachineSettings(
        retract_feed=float(data.get("retract_feed", defaults.retract_feed)),
        depth_tolerance=float(
            data.get("depth_tolerance", defaults.depth_tolerance)
        ),
    )


def _parse_logging(data: dict[str, Any]) -> LoggingConfig:
    level = str(data.get("level", "INFO")).upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ConfigError(f"Unknown logging level '{level}'")
    log_file = data.get("file")
    return LoggingConfig(
        level=level,
        json=bool(data.get("json", False)),
        file=str(log_file) if log_file else None,
    )


def _validate_config(cfg: JobConfig) -> None:
    """Cross-field checks on quantities that are plain numbers.

    Raises
    ------
    ConfigError
        On any invalid combination.
    """
    for name in ("stock_thickness", "pass_length"):
        value = getattr(cfg.joint, name)
        amount = value.amount if isinstance(value, Quantity) else value
        if amount <= 0:
            raise ConfigError(f"'{name}' must be positive, got {value}")

    cutter = cfg.joint.cutter_diameter
    amount = cutter.amount if isinstance(cutter, Quantity) else cutter
    if amount <= 0:
        raise ConfigError(f"'cutter_diameter' must be positive, got {cutter}")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(path: str | Path | None = None) -> JobConfig:
    """Load and validate a dado job from YAML.

    Parameters
    ----------
    path : str | Path | None
        Path to the job file.  ``None`` loads the default ``dado.yaml``
        shipped alongside this module.

    Returns
    -------
    JobConfig
        Fully validated, frozen configuration object.

    Raises
    ------
    ConfigError
        If any field is missing or fails validation.
    FileNotFoundError
        If *path* does not exist.
    """
    if path is None:
        path = Path(__file__).parent / "dado.yaml"
    else:
        path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    logger.info("Loading configuration from %s", path)

    data: dict[str, Any] = load_yaml(path)
    if data is None:
        raise ConfigError(f"Empty configuration file: {path}")
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration root must be a mapping: {path}")

    try:
        joint = _parse_joint(data["joint"])
        machine = _parse_machine(data.get("machine") or {})
        logging_cfg = _parse_logging(data.get("logging") or {})

        config = JobConfig(joint=joint, machine=machine, logging=logging_cfg)
        _validate_config(config)
        logger.info("Configuration loaded successfully")
        return config

    except KeyError as exc:
        raise ConfigError(
            f"Missing required configuration key: {exc}"
        ) from exc
    except (TypeError, ValueError, AttributeError) as exc:
        raise ConfigError(
            f"Invalid configuration value: {exc}"
        ) from exc
