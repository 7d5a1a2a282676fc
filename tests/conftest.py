"""Pytest configuration and shared quote fixtures."""

import pytest

from oddsengine.config.settings import EngineConfig
from oddsengine.odds.best_line import OddsQuote, Proposition


@pytest.fixture
def config(monkeypatch) -> EngineConfig:
    """Engine config with defaults, isolated from the caller's environment."""
    for var in ["DEVIG_METHODS", "SHARP_PRESET", "MIN_EV", "MAX_EV", "BANKROLL", "KELLY_PERCENT"]:
        monkeypatch.delenv(var, raising=False)
    return EngineConfig(_env_file=None)


@pytest.fixture
def four_book_market() -> Proposition:
    """Two-way market, four books per side, averaging +120 / -130."""
    return Proposition(
        event_id="evt_1",
        market="player_points",
        line=24.5,
        quotes={
            "over": (
                OddsQuote("draftkings", 120),
                OddsQuote("fanduel", 115),
                OddsQuote("betmgm", 125),
                OddsQuote("caesars", 120),
            ),
            "under": (
                OddsQuote("draftkings", -130),
                OddsQuote("fanduel", -125),
                OddsQuote("betmgm", -135),
                OddsQuote("caesars", -130),
            ),
        },
    )
