"""End-to-end tests for per-proposition evaluation."""

import pytest

from oddsengine import ComparisonSettings, KellySettings, evaluate_many, evaluate_proposition
from oddsengine.models import ComparisonMode, Condition, DevigMethod, EVCase
from oddsengine.odds.best_line import OddsQuote, Proposition


@pytest.fixture
def soft_line_market(four_book_market) -> Proposition:
    """The four-book market plus one soft book hanging +135 on the over."""
    quotes = dict(four_book_market.quotes)
    quotes["over"] = quotes["over"] + (OddsQuote("espnbet", 135),)
    return Proposition(
        event_id=four_book_market.event_id,
        market=four_book_market.market,
        line=four_book_market.line,
        quotes=quotes,
    )


class TestPositiveEVScenario:
    """Best +135 against a market centred near +120 / -130."""

    def test_best_line(self, config, soft_line_market):
        result = evaluate_proposition(soft_line_market, "over", config=config)
        assert result.best_line.best_price == 135
        assert result.best_line.book == "espnbet"

    def test_positive_ev_for_every_method(self, config, soft_line_market):
        """Every fair estimate is above the +135 breakeven of 100/235."""
        result = evaluate_proposition(soft_line_market, "over", config=config)
        assert result.condition is None
        assert set(result.ev.calculations) == {DevigMethod.POWER, DevigMethod.MULTIPLICATIVE}
        for calc in result.ev.calculations.values():
            assert calc.fair_prob > 100 / 235
            assert calc.ev_percent > 0
        assert result.ev.ev_worst <= result.ev.ev_best
        assert result.passes_filter

    def test_power_probabilities_sum_to_one(self, config, soft_line_market):
        result = evaluate_proposition(soft_line_market, "over", config=config)
        power = result.devig[DevigMethod.POWER]
        assert abs(sum(power.fair_probs) - 1.0) < 1e-6

    def test_stake_recommended(self, config, soft_line_market):
        result = evaluate_proposition(
            soft_line_market, "over", kelly=KellySettings(bankroll=1000), config=config
        )
        assert result.stake.path == "direct"
        assert result.stake.stake > 0

    def test_best_case_at_least_worst_case(self, config, soft_line_market):
        worst = evaluate_proposition(soft_line_market, "over", ev_case=EVCase.WORST, config=config)
        best = evaluate_proposition(soft_line_market, "over", ev_case="best", config=config)
        assert best.display_ev >= worst.display_ev
        assert best.stake.stake >= worst.stake.stake

    def test_boost_scales_display_only(self, config, soft_line_market):
        plain = evaluate_proposition(soft_line_market, "over", config=config)
        boosted = evaluate_proposition(
            soft_line_market,
            "over",
            kelly=KellySettings(bankroll=1000, boost_percent=50),
            config=config,
        )
        assert abs(boosted.display_ev - 1.5 * plain.display_ev) < 1e-9
        assert boosted.ev.ev_worst == plain.ev.ev_worst


class TestImprovement:
    """Comparison baseline wiring."""

    def test_average_baseline(self, config, soft_line_market):
        result = evaluate_proposition(soft_line_market, "over", config=config)
        assert result.baseline.mode == ComparisonMode.AVERAGE
        assert 115 < result.baseline.price < 135
        assert result.improvement_pct > 0

    def test_next_best(self, config, soft_line_market):
        result = evaluate_proposition(
            soft_line_market,
            "over",
            comparison=ComparisonSettings(mode=ComparisonMode.NEXT_BEST),
            config=config,
        )
        assert result.baseline.price == 125
        assert abs(result.improvement_pct - 8.0) < 1e-9

    def test_reference_book(self, config, soft_line_market):
        result = evaluate_proposition(
            soft_line_market,
            "over",
            comparison=ComparisonSettings(mode=ComparisonMode.BOOK, reference_book_id="fanduel"),
            config=config,
        )
        assert result.baseline.price == 115
        assert abs(result.improvement_pct - 20 / 115 * 100) < 1e-9


class TestConditions:
    """Degenerate markets surface conditions instead of raising."""

    def test_one_sided_market(self, config):
        prop = Proposition("evt_2", "player_points", 30.5, {"over": [OddsQuote("draftkings", 150)]})
        result = evaluate_proposition(prop, "over", config=config)
        assert result.condition == Condition.INSUFFICIENT_BOOKS
        assert result.display_ev is None
        assert not result.passes_filter
        assert result.stake.stake is None

    def test_no_margin_market_is_flagged(self, config):
        """+100 / +100 everywhere: EV is computed on raw probabilities and flagged."""
        prop = Proposition(
            "evt_5",
            "total",
            7.5,
            {
                "over": [OddsQuote("draftkings", 100), OddsQuote("fanduel", 100)],
                "under": [OddsQuote("draftkings", 100), OddsQuote("fanduel", 100)],
            },
        )
        result = evaluate_proposition(prop, "over", config=config)
        assert result.condition == Condition.NO_VIG_DETECTED
        assert all(r.condition == Condition.NO_VIG_DETECTED for r in result.devig.values())
        assert abs(result.ev.ev_worst) < 1e-9

    def test_missing_sharp_book(self, config, four_book_market):
        result = evaluate_proposition(four_book_market, "over", preset="pinnacle", config=config)
        assert result.condition == Condition.INSUFFICIENT_BOOKS
        assert result.best_line.best_price == 125

    def test_zero_bankroll(self, config, soft_line_market):
        result = evaluate_proposition(
            soft_line_market, "over", kelly=KellySettings(bankroll=0), config=config
        )
        assert result.stake.stake == 0
        assert result.stake.condition == Condition.ZERO_OR_NEGATIVE_BANKROLL

    def test_thin_side_has_no_baseline(self, config):
        prop = Proposition(
            "evt_3",
            "total",
            8.5,
            {"over": [OddsQuote("draftkings", -105)], "under": [OddsQuote("fanduel", -115)]},
        )
        result = evaluate_proposition(prop, "over", config=config)
        assert result.baseline.condition == Condition.INSUFFICIENT_BOOKS
        assert result.improvement_pct is None
        assert result.ev.ev_worst is not None

    def test_unknown_side_raises(self, config, four_book_market):
        with pytest.raises(ValueError, match="not in proposition sides"):
            evaluate_proposition(four_book_market, "yes", config=config)

    def test_empty_methods_raises(self, config, four_book_market):
        with pytest.raises(ValueError, match="At least one"):
            evaluate_proposition(four_book_market, "over", methods=[], config=config)


class TestEvaluateMany:
    def test_skips_propositions_without_side(self, config, four_book_market, soft_line_market):
        under_only = Proposition("evt_4", "total", 9.5, {"under": [OddsQuote("draftkings", -110)]})
        results = evaluate_many(
            [four_book_market, under_only, soft_line_market],
            "over",
            methods=["probit"],
            config=config,
        )
        assert [r.best_line.best_price for r in results] == [125, 135]
        assert all(set(r.ev.calculations) == {DevigMethod.PROBIT} for r in results)
