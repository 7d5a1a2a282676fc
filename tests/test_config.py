"""Unit tests for configuration loading and validation."""

import logging

import pytest
from pydantic import ValidationError

from oddsengine.config.settings import EngineConfig, configure_logging
from oddsengine.models import ComparisonMode, DevigMethod, EVCase


@pytest.fixture
def clean_env(monkeypatch) -> None:
    """Clean environment variables before each test."""
    env_vars = [
        "ENV",
        "LOG_LEVEL",
        "DEVIG_METHODS",
        "DEVIG_MAX_ITER",
        "SHARP_PRESET",
        "EV_CASE",
        "MIN_EV",
        "MAX_EV",
        "COMPARISON_MODE",
        "BANKROLL",
        "KELLY_PERCENT",
        "BOOST_PERCENT",
    ]
    for var in env_vars:
        monkeypatch.delenv(var, raising=False)


def test_defaults(clean_env):
    """Test defaults with no environment."""
    config = EngineConfig(_env_file=None)

    assert config.env == "dev"
    assert config.log_level == "INFO"
    assert config.devig_methods == [DevigMethod.POWER, DevigMethod.MULTIPLICATIVE]
    assert config.devig_fallback is True
    assert config.sharp_preset == "market_average"
    assert config.ev_case == EVCase.WORST
    assert config.min_ev == 0.0
    assert config.max_ev == 20.0
    assert config.comparison_mode == ComparisonMode.AVERAGE
    assert config.min_books_per_side == 2
    assert config.bankroll == 1000.0
    assert config.kelly_percent == 25.0
    assert config.boost_percent == 0.0


def test_env_overrides(monkeypatch, clean_env):
    """Test values are read from environment variables."""
    env = {
        "ENV": "prod",
        "LOG_LEVEL": "DEBUG",
        "DEVIG_METHODS": '["probit", "additive"]',
        "SHARP_PRESET": "pinnacle_circa",
        "EV_CASE": "best",
        "MIN_EV": "1.5",
        "MAX_EV": "12",
        "COMPARISON_MODE": "next_best",
        "BANKROLL": "2500",
        "KELLY_PERCENT": "50",
    }
    for key, value in env.items():
        monkeypatch.setenv(key, value)

    config = EngineConfig(_env_file=None)

    assert config.env == "prod"
    assert config.log_level == "DEBUG"
    assert config.devig_methods == [DevigMethod.PROBIT, DevigMethod.ADDITIVE]
    assert config.sharp_preset == "pinnacle_circa"
    assert config.ev_case == EVCase.BEST
    assert config.min_ev == 1.5
    assert config.max_ev == 12.0
    assert config.comparison_mode == ComparisonMode.NEXT_BEST
    assert config.bankroll == 2500.0
    assert config.kelly_percent == 50.0


def test_invalid_env_value(monkeypatch, clean_env):
    """Test that invalid ENV value raises validation error."""
    monkeypatch.setenv("ENV", "production")

    with pytest.raises(ValidationError) as exc_info:
        EngineConfig(_env_file=None)

    errors = exc_info.value.errors()
    assert any(
        error["loc"] == ("env",) and "literal_error" in error["type"]
        for error in errors
    )


def test_unknown_devig_method(monkeypatch, clean_env):
    """Test that an unknown de-vig method is rejected."""
    monkeypatch.setenv("DEVIG_METHODS", '["shin"]')

    with pytest.raises(ValidationError):
        EngineConfig(_env_file=None)


def test_empty_devig_methods(clean_env):
    """Test that an empty method list is rejected."""
    with pytest.raises(ValidationError) as exc_info:
        EngineConfig(_env_file=None, devig_methods=[])

    errors = exc_info.value.errors()
    assert any(error["loc"] == ("devig_methods",) for error in errors)


def test_unknown_sharp_preset(clean_env):
    """Test that an unknown sharp preset is rejected."""
    with pytest.raises(ValidationError) as exc_info:
        EngineConfig(_env_file=None, sharp_preset="bovada_only")

    errors = exc_info.value.errors()
    assert any(error["loc"] == ("sharp_preset",) for error in errors)


def test_max_ev_less_than_min(monkeypatch, clean_env):
    """Test that max_ev < min_ev raises validation error."""
    monkeypatch.setenv("MIN_EV", "10")
    monkeypatch.setenv("MAX_EV", "5")

    with pytest.raises(ValidationError) as exc_info:
        EngineConfig(_env_file=None)

    errors = exc_info.value.errors()
    assert any(error["loc"] == ("max_ev",) for error in errors)


def test_max_ev_equal_to_min(clean_env):
    """Test that max_ev == min_ev is valid."""
    config = EngineConfig(_env_file=None, min_ev=5.0, max_ev=5.0)
    assert config.max_ev == 5.0


@pytest.mark.parametrize("value", ["0", "-10", "100.5"])
def test_kelly_percent_out_of_range(monkeypatch, clean_env, value):
    """Test that kelly_percent outside (0, 100] raises validation error."""
    monkeypatch.setenv("KELLY_PERCENT", value)

    with pytest.raises(ValidationError) as exc_info:
        EngineConfig(_env_file=None)

    errors = exc_info.value.errors()
    assert any(error["loc"] == ("kelly_percent",) for error in errors)


def test_kelly_percent_at_boundary(monkeypatch, clean_env):
    """Test that full Kelly is allowed."""
    monkeypatch.setenv("KELLY_PERCENT", "100")
    assert EngineConfig(_env_file=None).kelly_percent == 100.0


def test_negative_boost_rejected(clean_env):
    """Test that boost_percent < 0 raises validation error."""
    with pytest.raises(ValidationError):
        EngineConfig(_env_file=None, boost_percent=-10)


def test_devig_iteration_bounds(clean_env):
    """Test root-finding bounds are validated."""
    with pytest.raises(ValidationError):
        EngineConfig(_env_file=None, devig_max_iter=5)
    with pytest.raises(ValidationError):
        EngineConfig(_env_file=None, devig_tolerance=0.0)


def test_extra_env_vars_ignored(monkeypatch, clean_env):
    """Test that extra/unknown environment variables are ignored."""
    monkeypatch.setenv("UNKNOWN_VAR", "should-be-ignored")

    config = EngineConfig(_env_file=None)
    assert not hasattr(config, "unknown_var")


def test_case_insensitive_env_vars(monkeypatch, clean_env):
    """Test that environment variable names are case-insensitive."""
    monkeypatch.setenv("env", "staging")

    config = EngineConfig(_env_file=None)
    assert config.env == "staging"


def test_configure_logging_sets_package_level(clean_env):
    """Test that configure_logging applies log_level to the package logger."""
    package_logger = logging.getLogger("oddsengine")
    previous = package_logger.level
    try:
        configure_logging(EngineConfig(_env_file=None, log_level="DEBUG"))
        assert package_logger.level == logging.DEBUG
    finally:
        package_logger.setLevel(previous)
