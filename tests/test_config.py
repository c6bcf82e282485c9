"""Tests for config loading and parameter parsing."""

from pathlib import Path

import pytest

from rental_retire.config import (
    CONFIG_ENV_VAR,
    get_scenario_settings,
    get_simulation_parameters,
    load_config,
    normalize_key,
    parse_assignments,
    parse_parameters,
    parse_query_string,
    to_query_string,
    validate_parameters,
)
from rental_retire.exceptions import InvalidParametersError
from rental_retire.models import SimulationParameters

PROJECT_CONFIG = Path(__file__).resolve().parent.parent / "config.yaml"


class TestLoadConfig:
    def test_missing_explicit_path(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")

    def test_project_config_matches_defaults(self) -> None:
        cfg = load_config(PROJECT_CONFIG)
        assert get_simulation_parameters(cfg) == SimulationParameters()
        settings = get_scenario_settings(cfg)
        assert settings.contribution_delta == 250
        assert settings.ltv_alternates == (70, 80)
        assert settings.rate_shock == 1.5

    def test_env_var(self, config_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(CONFIG_ENV_VAR, str(config_file))
        params = get_simulation_parameters(load_config())
        assert params.current_age == 40
        assert params.avg_price == 250000
        assert params.loan_term == 30

    def test_scenario_settings(self, config_file: Path) -> None:
        settings = get_scenario_settings(load_config(config_file))
        assert settings.contribution_delta == 500
        assert settings.ltv_alternates == (65,)
        assert settings.rate_shock == 2

    def test_empty_config_uses_defaults(self) -> None:
        assert get_simulation_parameters({}) == SimulationParameters()
        assert get_scenario_settings({}).ltv_alternates == (70, 80)


class TestParseParameters:
    def test_key_styles(self) -> None:
        assert normalize_key("avgPrice") == "avg_price"
        assert normalize_key("avg-price") == "avg_price"
        assert normalize_key("refiLtvThreshold") == "refi_ltv_threshold"
        assert normalize_key("dscr_target") == "dscr_target"

    def test_mixed_mapping(self) -> None:
        params = parse_parameters(
            {
                "avgPrice": "250000",
                "ltv-ratio": "80",
                "current_age": "40.9",
                "targetIncome": "abc",
                "prefill_name": "Jane",
            }
        )
        assert params.avg_price == 250000
        assert params.ltv_ratio == 80
        assert params.current_age == 40
        assert isinstance(params.current_age, int)
        assert params.target_income == 8000

    def test_zero_is_kept(self) -> None:
        params = parse_parameters({"targetIncome": "0", "ltvRatio": 0})
        assert params.target_income == 0
        assert params.ltv_ratio == 0

    def test_blank_and_non_finite_fall_back(self) -> None:
        params = parse_parameters({"avg_price": "", "interest_rate": "nan", "loan_term": None})
        assert params == SimulationParameters()

    def test_thousands_separator(self) -> None:
        assert parse_parameters({"avg_price": "1,250,000"}).avg_price == 1250000

    def test_base_is_respected(self) -> None:
        base = SimulationParameters(avg_price=150000)
        assert parse_parameters({"ltv_ratio": "70"}, base=base).avg_price == 150000


class TestQueryString:
    def test_parse_full_url(self) -> None:
        params = parse_query_string("https://example.com/calculator?avg-price=200000&ltv-ratio=0&x=1")
        assert params.avg_price == 200000
        assert params.ltv_ratio == 0

    def test_parse_bare_query(self) -> None:
        assert parse_query_string("current-age=30&retirement-age=55").retirement_age == 55

    def test_defaults_serialize_empty(self) -> None:
        assert to_query_string(SimulationParameters()) == ""

    def test_only_changed_fields(self) -> None:
        params = SimulationParameters(avg_price=250000.0, interest_rate=7.25)
        assert to_query_string(params) == "avg-price=250000&interest-rate=7.25"

    def test_share_and_load(self) -> None:
        params = SimulationParameters(avg_price=250000, refi_seasoning=12, dscr_target=1.3)
        assert parse_query_string(to_query_string(params)) == params

    def test_all_fields(self) -> None:
        qs = to_query_string(SimulationParameters(), only_changed=False)
        assert "current-age=35" in qs
        assert "refi-rate-delta=0.75" in qs


class TestAssignments:
    def test_parse(self) -> None:
        assert parse_assignments(["avg_price=250000", "ltvRatio = 80"]) == {
            "avg_price": "250000",
            "ltv_ratio": "80",
        }

    def test_missing_equals(self) -> None:
        with pytest.raises(InvalidParametersError):
            parse_assignments(["avg_price"])

    def test_unknown_key(self) -> None:
        with pytest.raises(InvalidParametersError, match="unknown parameter"):
            parse_assignments(["bedrooms=3"])


class TestValidateParameters:
    def test_defaults_are_valid(self) -> None:
        assert validate_parameters(SimulationParameters()) == SimulationParameters()

    def test_whole_number_fields_coerced(self) -> None:
        params = validate_parameters(SimulationParameters(loan_term=30.0, starting_doors=2.0))
        assert params.loan_term == 30
        assert isinstance(params.loan_term, int)
        assert isinstance(params.starting_doors, int)

    def test_fractional_whole_number_field(self) -> None:
        with pytest.raises(InvalidParametersError, match="loan_term must be a whole number"):
            validate_parameters(SimulationParameters(loan_term=30.5))

    def test_non_numeric_field(self) -> None:
        with pytest.raises(InvalidParametersError, match="avg_price must be a finite number"):
            validate_parameters(SimulationParameters(avg_price="cheap"))

    @pytest.mark.parametrize(
        "changes, problem",
        [
            ({"avg_price": 0}, "avg_price must be > 0"),
            ({"loan_term": 0}, "loan_term must be > 0"),
            ({"ltv_ratio": 101}, "ltv_ratio must be between 0 and 100"),
            ({"interest_rate": -1}, "interest_rate must be >= 0"),
            ({"current_savings": -1}, "current_savings must be >= 0"),
            ({"starting_doors": 51}, "starting_doors must be <= 50"),
            ({"vacancy_rate": -5}, "vacancy_rate must be >= 0"),
            ({"appreciation": -100}, "appreciation must be > -100"),
            ({"refi_seasoning": -1}, "refi_seasoning must be >= 0"),
            ({"interest_rate": 10000}, "interest_rate must be <= 100"),
            ({"loan_term": 100000}, "loan_term must be <= 100"),
            ({"appreciation": 1e10}, "appreciation must be <= 100"),
            ({"rent_growth": 150}, "rent_growth must be <= 100"),
            ({"vacancy_rate": 1e308}, "vacancy_rate must be <= 100"),
            ({"avg_price": 1e13}, "avg_price must be <= 1000000000000"),
            ({"monthly_contribution": 1e300}, "monthly_contribution must be <= 1000000000000"),
        ],
    )
    def test_rejected(self, changes: dict, problem: str) -> None:
        with pytest.raises(InvalidParametersError) as exc:
            validate_parameters(SimulationParameters(**changes))
        assert problem in exc.value.problems

    def test_negative_growth_allowed(self) -> None:
        validate_parameters(SimulationParameters(rent_growth=-2, appreciation=-1))
