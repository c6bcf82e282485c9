"""Pytest fixtures."""

from pathlib import Path

import pytest
import yaml

from rental_retire.models import SimulationParameters, SimulationResult
from rental_retire.simulation import SimulationEngine


@pytest.fixture
def default_params() -> SimulationParameters:
    """Documented default inputs."""
    return SimulationParameters()


@pytest.fixture
def engine() -> SimulationEngine:
    return SimulationEngine()


@pytest.fixture
def default_result(engine: SimulationEngine) -> SimulationResult:
    """Full projection with default inputs."""
    return engine.simulate()


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """Small config with a short horizon."""
    path = tmp_path / "config.yaml"
    path.write_text(
        yaml.safe_dump(
            {
                "simulation": {"current_age": 40, "retirement_age": 45, "avg_price": 250000},
                "scenarios": {"contribution_delta": 500, "ltv_alternates": [65], "rate_shock": 2},
            }
        )
    )
    return path
