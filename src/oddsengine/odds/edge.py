"""Expected value and fractional Kelly sizing.

EV and Kelly use decimal odds and fair probabilities throughout:

    ev_percent = (decimal * fair_prob - 1) * 100
    full_kelly = (decimal * fair_prob - 1) / (decimal - 1), clamped to [0, 1]
    stake      = bankroll * full_kelly * kelly_percent / 100
"""

import logging
import math
from dataclasses import dataclass
from typing import Literal, Mapping

from oddsengine.models import EV_THRESHOLDS, Condition, DevigMethod, EVCase, EVTier
from oddsengine.odds.convert import (
    american_to_decimal,
    american_to_implied_probability,
    round_half_up,
)
from oddsengine.odds.devig import DevigResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EVCalculation:
    """EV of one price against one method's fair probability."""

    method: DevigMethod
    fair_prob: float
    book_prob: float  # implied probability of the price being bet
    book_decimal: float
    ev: float  # as a fraction, 0.05 = 5%
    ev_percent: float
    edge: float  # fair_prob - book_prob, positive when the book underprices the side
    kelly_fraction: float  # full Kelly at the boosted payout, >= 0
    fallback: DevigMethod | None = None  # set when fair_prob came from a fallback method


@dataclass(frozen=True)
class MultiEVResult:
    """Per-method EV plus the worst/best aggregates across methods."""

    calculations: dict[DevigMethod, EVCalculation]
    ev_worst: float | None  # min across methods (conservative)
    ev_best: float | None  # max across methods (optimistic)
    kelly_worst: float | None
    condition: Condition | None = None

    def base_ev(self, case: EVCase | str = EVCase.WORST) -> float | None:
        return self.ev_best if EVCase(case) == EVCase.BEST else self.ev_worst

    def display_ev(self, case: EVCase | str = EVCase.WORST, boost_percent: float = 0.0) -> float | None:
        """Aggregate EV for display, scaled by a promotional boost."""
        return apply_boost(self.base_ev(case), boost_percent)


@dataclass(frozen=True)
class StakeRecommendation:
    """Recommended stake in whole currency units.

    stake is None when no recommendation is available, which is distinct from
    a recommendation of 0.
    """

    stake: int | None
    kelly_fraction: float | None  # full Kelly used for sizing
    kelly_percent: float
    path: Literal["direct", "fallback"] | None = None
    condition: Condition | None = None


@dataclass(frozen=True)
class KellyStake:
    """Stake display values for a best/fair American odds pair."""

    stake: int
    kelly_pct: float  # full Kelly as a percent of bankroll
    display: str


def expected_value_percent(fair_prob: float, decimal_odds: float) -> float:
    """EV percent of betting decimal_odds when the true probability is fair_prob."""
    return (decimal_odds * fair_prob - 1.0) * 100.0


def kelly_fraction(fair_prob: float, decimal_odds: float) -> float:
    """Full-Kelly fraction of bankroll, never negative.

    Returns 0.0 for unfavorable bets (decimal_odds * fair_prob <= 1) and for
    decimal odds <= 1.
    """
    if decimal_odds <= 1.0:
        return 0.0
    edge = decimal_odds * fair_prob - 1.0
    if edge <= 0.0:
        return 0.0
    return min(1.0, edge / (decimal_odds - 1.0))


def boosted_decimal(decimal_odds: float, boost_percent: float) -> float:
    """Decimal odds after a profit boost (boost scales the profit, not the stake)."""
    if boost_percent <= 0:
        return decimal_odds
    return 1.0 + (decimal_odds - 1.0) * (1.0 + boost_percent / 100.0)


def apply_boost(ev_percent: float | None, boost_percent: float) -> float | None:
    """Scale a displayed EV by a promotional boost; the fair model is untouched."""
    if ev_percent is None:
        return None
    if boost_percent > 0:
        return ev_percent * (1.0 + boost_percent / 100.0)
    return ev_percent


def compute_ev(
    devig_results: Mapping[DevigMethod, DevigResult],
    side,
    best_price: float,
    boost_percent: float = 0.0,
) -> MultiEVResult:
    """Compute EV of the best price for one side under every de-vig method.

    Args:
        devig_results: Output of devig_multi for the market
        side: Side being bet (key into each DevigResult)
        best_price: Best available American price for that side
        boost_percent: Profit boost; affects the Kelly fractions only, EV stays unboosted

    Returns:
        MultiEVResult; methods without a fair estimate are skipped, and when
        none remain the aggregates are None and condition explains why. When
        every usable estimate carries a condition (NO_VIG_DETECTED pass-through,
        DEVIG_FAILED with fallback) that condition is kept on the result
    """
    decimal = american_to_decimal(best_price)
    book_prob = american_to_implied_probability(best_price)
    if decimal is None or book_prob is None:
        return MultiEVResult({}, None, None, None, Condition.INVALID_ODDS_VALUE)

    calculations: dict[DevigMethod, EVCalculation] = {}
    for method, result in devig_results.items():
        fair_prob = result.fair_prob(side)
        if fair_prob is None:
            continue
        ev_percent = expected_value_percent(fair_prob, decimal)
        calculations[method] = EVCalculation(
            method=method,
            fair_prob=fair_prob,
            book_prob=book_prob,
            book_decimal=decimal,
            ev=ev_percent / 100.0,
            ev_percent=ev_percent,
            edge=fair_prob - book_prob,
            kelly_fraction=kelly_fraction(fair_prob, boosted_decimal(decimal, boost_percent)),
            fallback=result.fallback,
        )

    if not calculations:
        conditions = [r.condition for r in devig_results.values() if r.condition is not None]
        return MultiEVResult({}, None, None, None, conditions[0] if conditions else Condition.DEVIG_FAILED)

    # Every estimate used was raw pass-through or a fallback: surface why
    used = [devig_results[m].condition for m in calculations]
    condition = used[0] if all(c is not None for c in used) else None

    evs = [c.ev_percent for c in calculations.values()]
    return MultiEVResult(
        calculations=calculations,
        ev_worst=min(evs),
        ev_best=max(evs),
        kelly_worst=min(c.kelly_fraction for c in calculations.values()),
        condition=condition,
    )


def _size(bankroll: float, full_kelly: float, kelly_percent: float) -> int:
    if full_kelly <= 0:
        return 0
    stake = bankroll * full_kelly * (kelly_percent / 100.0)
    if stake <= 0:
        return 0
    if stake < 1:
        return 1
    return round_half_up(stake)


def recommended_stake(
    bankroll: float,
    kelly_percent: float,
    fair_prob: float | None = None,
    best_price: float | None = None,
    precomputed_kelly: float | None = None,
    boost_percent: float = 0.0,
) -> StakeRecommendation:
    """Recommend a fractional-Kelly stake.

    Args:
        bankroll: Available bankroll
        kelly_percent: Fractional Kelly throttle (25 = quarter Kelly)
        fair_prob: Fair probability of the side being bet
        best_price: Best available American price
        precomputed_kelly: Full-Kelly fraction used when fair_prob/best_price
            cannot be used; must already reflect boost_percent, as
            compute_ev(..., boost_percent=...) produces it
        boost_percent: Profit boost applied to the price (direct path only)

    Returns:
        StakeRecommendation

    Notes:
        - bankroll <= 0 -> stake 0 with ZERO_OR_NEGATIVE_BANKROLL
        - direct path: full Kelly from decimal odds and fair_prob
        - fallback path: precomputed_kelly scaled by the same throttle, boost
          not applied again
        - neither available -> stake None
        - positive stakes below 1 are raised to 1; zero Kelly gives 0
    """
    if bankroll <= 0:
        return StakeRecommendation(
            stake=0,
            kelly_fraction=None,
            kelly_percent=kelly_percent,
            condition=Condition.ZERO_OR_NEGATIVE_BANKROLL,
        )

    decimal = american_to_decimal(best_price)
    if decimal is not None and fair_prob is not None and 0.0 < fair_prob < 1.0:
        full = kelly_fraction(fair_prob, boosted_decimal(decimal, boost_percent))
        return StakeRecommendation(
            stake=_size(bankroll, full, kelly_percent),
            kelly_fraction=full,
            kelly_percent=kelly_percent,
            path="direct",
        )

    if precomputed_kelly is not None and math.isfinite(precomputed_kelly):
        full = max(0.0, precomputed_kelly)
        return StakeRecommendation(
            stake=_size(bankroll, full, kelly_percent),
            kelly_fraction=full,
            kelly_percent=kelly_percent,
            path="fallback",
        )

    return StakeRecommendation(stake=None, kelly_fraction=None, kelly_percent=kelly_percent)


def kelly_stake_display(
    bankroll: float,
    best_odds: float,
    fair_odds: float,
    kelly_percent: float = 25.0,
    boost_percent: float = 0.0,
) -> KellyStake:
    """Stake and full-Kelly percent from best and fair American odds."""
    fair_prob = american_to_implied_probability(fair_odds)
    recommendation = recommended_stake(
        bankroll=bankroll,
        kelly_percent=kelly_percent,
        fair_prob=fair_prob,
        best_price=best_odds,
        boost_percent=boost_percent,
    )
    stake = recommendation.stake or 0
    full = recommendation.kelly_fraction or 0.0
    return KellyStake(stake=stake, kelly_pct=full * 100.0, display=f"${stake:,}")


def classify_ev(ev_percent: float | None) -> EVTier:
    """Bucket an EV percent; values at or above 'suspicious' are likely data errors."""
    if ev_percent is None or ev_percent <= EV_THRESHOLDS["positive"]:
        return EVTier.NONE
    if ev_percent >= EV_THRESHOLDS["suspicious"]:
        return EVTier.SUSPICIOUS
    if ev_percent >= EV_THRESHOLDS["excellent"]:
        return EVTier.EXCELLENT
    if ev_percent >= EV_THRESHOLDS["great"]:
        return EVTier.GREAT
    if ev_percent >= EV_THRESHOLDS["good"]:
        return EVTier.GOOD
    return EVTier.POSITIVE


def passes_ev_filter(ev_percent: float | None, min_ev: float, max_ev: float) -> bool:
    """True when EV is strictly above min_ev, at most max_ev, and below the hard maximum."""
    if ev_percent is None:
        return False
    if ev_percent > EV_THRESHOLDS["maximum"]:
        return False
    return min_ev < ev_percent <= max_ev
