"""Configuration loader and parameter parsing."""

from __future__ import annotations

import math
import os
import re
from pathlib import Path
from typing import Any, Mapping
from urllib.parse import parse_qs, urlencode, urlsplit

import yaml

from .exceptions import InvalidParametersError
from .models import ScenarioSettings, SimulationParameters

CONFIG_ENV_VAR = "RENTAL_RETIRE_CONFIG"
DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config.yaml"

# Hard cap on portfolio size, shared with the engine.
MAX_DOORS = 50
# Upper limits that keep 50 years of compounding finite.
MAX_AMOUNT = 1e12
MAX_PERCENT = 100
MAX_LOAN_TERM = 100

INT_FIELDS: frozenset[str] = frozenset(
    {"current_age", "retirement_age", "starting_doors", "loan_term", "refi_seasoning"}
)

_PARAMETER_FIELDS: frozenset[str] = frozenset(SimulationParameters.field_names())


def load_config(config_path: Path | str | None = None) -> dict[str, Any]:
    """Load config from YAML file.

    Resolution order: explicit path, ``$RENTAL_RETIRE_CONFIG``, project ``config.yaml``.
    An explicit or env-provided path must exist; the project default is optional.
    """
    if config_path is None:
        config_path = os.environ.get(CONFIG_ENV_VAR) or None
    if config_path is not None:
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Config not found: {path}")
    else:
        path = DEFAULT_CONFIG_PATH
        if not path.exists():
            return {}
    with open(path) as f:
        return yaml.safe_load(f) or {}


def get_simulation_parameters(config: dict[str, Any]) -> SimulationParameters:
    """Extract simulation parameters from config, defaulting missing fields."""
    return parse_parameters(config.get("simulation") or {})


def get_scenario_settings(config: dict[str, Any]) -> ScenarioSettings:
    """Extract what-if scenario settings from config."""
    sc = config.get("scenarios") or {}
    defaults = ScenarioSettings()
    alternates = sc.get("ltv_alternates", defaults.ltv_alternates)
    if not isinstance(alternates, (list, tuple)):
        alternates = [alternates]
    return ScenarioSettings(
        contribution_delta=float(sc.get("contribution_delta", defaults.contribution_delta)),
        ltv_alternates=tuple(float(a) for a in alternates),
        rate_shock=float(sc.get("rate_shock", defaults.rate_shock)),
    )


def normalize_key(key: str) -> str:
    """Map ``avgPrice`` / ``avg-price`` / ``avg_price`` to the field name ``avg_price``."""
    key = key.strip()
    key = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "_", key)
    return key.replace("-", "_").lower()


def _parse_number(value: Any, as_int: bool) -> float | int | None:
    """Parse a form/query value. Returns None when it is not a usable number."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip().replace(",", "")
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    if not math.isfinite(number):
        return None
    if as_int:
        # Truncate toward zero like the browser's parseInt
        return int(number)
    return number


def parse_parameters(
    raw: Mapping[str, Any],
    base: SimulationParameters | None = None,
) -> SimulationParameters:
    """Build parameters from a loosely typed mapping (form fields, query string, YAML).

    Unknown keys are ignored. Fields that are missing or fail to parse keep the
    value from ``base`` (the documented defaults when ``base`` is None).
    """
    base = base or SimulationParameters()
    values: dict[str, Any] = {}
    for key, value in raw.items():
        name = normalize_key(str(key))
        if name not in _PARAMETER_FIELDS:
            continue
        parsed = _parse_number(value, as_int=name in INT_FIELDS)
        if parsed is None:
            continue
        values[name] = parsed
    return base.replace(**values)


def parse_query_string(query: str, base: SimulationParameters | None = None) -> SimulationParameters:
    """Parse a shared calculator URL or bare query string into parameters."""
    if "?" in query or "://" in query:
        query = urlsplit(query).query
    raw = {k: v[0] for k, v in parse_qs(query).items() if v}
    return parse_parameters(raw, base=base)


def _format_number(value: float | int) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def to_query_string(params: SimulationParameters, only_changed: bool = True) -> str:
    """Serialize parameters to a shareable query string (form-id style keys)."""
    defaults = SimulationParameters()
    pairs = []
    for name in SimulationParameters.field_names():
        value = getattr(params, name)
        if only_changed and value == getattr(defaults, name):
            continue
        pairs.append((name.replace("_", "-"), _format_number(value)))
    return urlencode(pairs)


def parse_assignments(assignments: list[str]) -> dict[str, str]:
    """Parse ``KEY=VALUE`` strings from the command line."""
    result: dict[str, str] = {}
    for item in assignments:
        if "=" not in item:
            raise InvalidParametersError(f"expected KEY=VALUE, got {item!r}")
        key, value = item.split("=", 1)
        name = normalize_key(key)
        if name not in _PARAMETER_FIELDS:
            raise InvalidParametersError(f"unknown parameter {key.strip()!r}")
        result[name] = value.strip()
    return result


def validate_parameters(params: SimulationParameters) -> SimulationParameters:
    """Reject structurally invalid inputs before a run.

    Returns the parameters with whole-number fields coerced to ``int``.
    """
    problems: list[str] = []

    for name in INT_FIELDS:
        value = getattr(params, name)
        if isinstance(value, float) and not value.is_integer():
            problems.append(f"{name} must be a whole number, got {value}")

    for name in SimulationParameters.field_names():
        value = getattr(params, name)
        if not isinstance(value, (int, float)) or isinstance(value, bool) or not math.isfinite(value):
            problems.append(f"{name} must be a finite number, got {value!r}")
    if problems:
        raise InvalidParametersError(problems)

    if params.current_age < 0:
        problems.append("current_age must be >= 0")
    if params.retirement_age < 0:
        problems.append("retirement_age must be >= 0")
    for name in ("current_savings", "monthly_contribution", "target_income", "insurance_cost"):
        value = getattr(params, name)
        if value < 0:
            problems.append(f"{name} must be >= 0")
        elif value > MAX_AMOUNT:
            problems.append(f"{name} must be <= {MAX_AMOUNT:.0f}")
    if params.starting_doors < 0:
        problems.append("starting_doors must be >= 0")
    elif params.starting_doors > MAX_DOORS:
        problems.append(f"starting_doors must be <= {MAX_DOORS}")
    if params.avg_price <= 0:
        problems.append("avg_price must be > 0")
    elif params.avg_price > MAX_AMOUNT:
        problems.append(f"avg_price must be <= {MAX_AMOUNT:.0f}")
    if not 0 <= params.ltv_ratio <= 100:
        problems.append("ltv_ratio must be between 0 and 100")
    if params.interest_rate < 0:
        problems.append("interest_rate must be >= 0")
    elif params.interest_rate > MAX_PERCENT:
        problems.append(f"interest_rate must be <= {MAX_PERCENT}")
    if params.loan_term <= 0:
        problems.append("loan_term must be > 0")
    elif params.loan_term > MAX_LOAN_TERM:
        problems.append(f"loan_term must be <= {MAX_LOAN_TERM}")
    for name in ("closing_costs", "vacancy_rate", "maintenance_rate", "management_rate", "property_tax"):
        value = getattr(params, name)
        if value < 0:
            problems.append(f"{name} must be >= 0")
        elif value > MAX_PERCENT:
            problems.append(f"{name} must be <= {MAX_PERCENT}")
    for name in ("rent_growth", "appreciation", "expense_inflation"):
        value = getattr(params, name)
        if value <= -100:
            problems.append(f"{name} must be > -100")
        elif value > MAX_PERCENT:
            problems.append(f"{name} must be <= {MAX_PERCENT}")
    if params.dscr_target < 0:
        problems.append("dscr_target must be >= 0")
    if params.refi_ltv_threshold < 0:
        problems.append("refi_ltv_threshold must be >= 0")
    if params.refi_seasoning < 0:
        problems.append("refi_seasoning must be >= 0")

    if problems:
        raise InvalidParametersError(problems)
    return params.replace(**{name: int(getattr(params, name)) for name in INT_FIELDS})
