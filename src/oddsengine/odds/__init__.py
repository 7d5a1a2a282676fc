"""Odds conversion, de-vig, comparison baselines, EV and Kelly sizing."""

from oddsengine.odds.baseline import ComparisonBaseline, improvement_percent, select_baseline
from oddsengine.odds.best_line import (
    BestLine,
    OddsQuote,
    Proposition,
    SharpReference,
    best_quote,
    get_best_lines,
    sharp_reference_probabilities,
)
from oddsengine.odds.convert import (
    InvalidOddsValue,
    american_to_decimal,
    american_to_implied_probability,
    decimal_to_american,
    probability_to_american_odds,
    round_half_up,
)
from oddsengine.odds.devig import (
    DevigResult,
    devig_multi,
    devig_prices,
    devig_probabilities,
)
from oddsengine.odds.edge import (
    EVCalculation,
    MultiEVResult,
    StakeRecommendation,
    compute_ev,
    kelly_fraction,
    kelly_stake_display,
    recommended_stake,
)

__all__ = [
    "ComparisonBaseline",
    "improvement_percent",
    "select_baseline",
    "BestLine",
    "OddsQuote",
    "Proposition",
    "SharpReference",
    "best_quote",
    "get_best_lines",
    "sharp_reference_probabilities",
    "InvalidOddsValue",
    "american_to_decimal",
    "american_to_implied_probability",
    "decimal_to_american",
    "probability_to_american_odds",
    "round_half_up",
    "DevigResult",
    "devig_multi",
    "devig_prices",
    "devig_probabilities",
    "EVCalculation",
    "MultiEVResult",
    "StakeRecommendation",
    "compute_ev",
    "kelly_fraction",
    "kelly_stake_display",
    "recommended_stake",
]
