"""Per-proposition evaluation: fair odds, EV, baseline improvement and stake.

Data flow for one side of one proposition:
quotes -> sharp reference raw probabilities -> de-vig per method
-> EV of the best price -> comparison baseline -> Kelly stake.
"""

import logging
from dataclasses import dataclass
from typing import Iterable

from oddsengine.config import EngineConfig, get_config
from oddsengine.models import ComparisonMode, Condition, DevigMethod, EVCase
from oddsengine.odds.baseline import ComparisonBaseline, improvement_percent, select_baseline
from oddsengine.odds.best_line import (
    BestLine,
    Proposition,
    SharpReference,
    get_best_line,
    sharp_reference_probabilities,
)
from oddsengine.odds.devig import DevigResult, devig_multi
from oddsengine.odds.edge import (
    MultiEVResult,
    StakeRecommendation,
    compute_ev,
    passes_ev_filter,
    recommended_stake,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ComparisonSettings:
    """User-selected comparison baseline."""

    mode: ComparisonMode = ComparisonMode.AVERAGE
    reference_book_id: str | None = None


@dataclass(frozen=True)
class KellySettings:
    """Bankroll and Kelly throttle for stake sizing."""

    bankroll: float
    kelly_percent: float = 25.0
    boost_percent: float = 0.0


@dataclass(frozen=True)
class PropositionEvaluation:
    """Everything the presentation layer renders for one side of a proposition."""

    event_id: str
    market: str
    line: float | None
    side: str
    best_line: BestLine | None
    reference: SharpReference
    devig: dict[DevigMethod, DevigResult]
    ev: MultiEVResult
    ev_case: EVCase
    display_ev: float | None  # case aggregate, boost applied
    baseline: ComparisonBaseline
    improvement_pct: float | None
    stake: StakeRecommendation
    passes_filter: bool

    @property
    def condition(self) -> Condition | None:
        return self.ev.condition


def evaluate_proposition(
    proposition: Proposition,
    side,
    methods: Iterable[DevigMethod | str] | None = None,
    comparison: ComparisonSettings | None = None,
    kelly: KellySettings | None = None,
    preset: str | None = None,
    ev_case: EVCase | str | None = None,
    config: EngineConfig | None = None,
) -> PropositionEvaluation:
    """Evaluate the best available price for one side of a proposition.

    Args:
        proposition: Quote snapshot for every side
        side: Side being bet
        methods: De-vig methods (defaults to config.devig_methods)
        comparison: Baseline selection (defaults from config)
        kelly: Bankroll settings (defaults from config)
        preset: Sharp reference preset (defaults to config.sharp_preset)
        ev_case: Aggregate surfaced as display_ev (defaults to config.ev_case)
        config: Engine config

    Returns:
        PropositionEvaluation

    Raises:
        ValueError: If side is not a side of the proposition or methods is empty

    Notes:
        - Degenerate markets never raise; they surface as conditions and
          None values on the evaluation
        - The stake uses the fair probability of the method behind the
          selected EV case, with kelly_worst as the fallback fraction
    """
    config = config or get_config()
    selected = list(methods) if methods is not None else list(config.devig_methods)
    if not selected:
        raise ValueError("At least one de-vig method must be selected")
    if side not in proposition.sides:
        raise ValueError(f"Side {side!r} not in proposition sides {proposition.sides}")

    comparison = comparison or ComparisonSettings(
        mode=config.comparison_mode,
        reference_book_id=config.comparison_book,
    )
    kelly = kelly or KellySettings(
        bankroll=config.bankroll,
        kelly_percent=config.kelly_percent,
        boost_percent=config.boost_percent,
    )
    ev_case = EVCase(ev_case or config.ev_case)

    best_line = get_best_line(proposition, side)

    # Fair probabilities from the blended reference
    reference = sharp_reference_probabilities(proposition, preset or config.sharp_preset)
    devig: dict[DevigMethod, DevigResult] = {}
    if reference.condition is None:
        sides = proposition.sides
        devig = devig_multi(
            [reference.raw_probs[s] for s in sides],
            selected,
            sides=sides,
            config=config,
        )
    else:
        logger.debug(
            f"No sharp reference for {proposition.event_id}/{proposition.market}/{proposition.line}: "
            f"{reference.condition.value}"
        )

    # EV of the best price
    if best_line is None:
        ev = MultiEVResult({}, None, None, None, Condition.INSUFFICIENT_BOOKS)
    elif reference.condition is not None:
        ev = MultiEVResult({}, None, None, None, reference.condition)
    else:
        ev = compute_ev(devig, side, best_line.best_price, boost_percent=kelly.boost_percent)

    # Price improvement over the chosen baseline
    baseline = select_baseline(
        proposition.quotes_for(side),
        comparison.mode,
        reference_book_id=comparison.reference_book_id,
        min_books=config.min_books_per_side,
    )
    improvement = improvement_percent(
        best_line.best_price if best_line is not None else None,
        baseline.price,
    )

    # Stake sized off the method behind the surfaced case
    fair_prob = None
    if ev.calculations:
        pick = max if ev_case == EVCase.BEST else min
        fair_prob = pick(ev.calculations.values(), key=lambda c: c.ev_percent).fair_prob
    stake = recommended_stake(
        bankroll=kelly.bankroll,
        kelly_percent=kelly.kelly_percent,
        fair_prob=fair_prob,
        best_price=best_line.best_price if best_line is not None else None,
        precomputed_kelly=ev.kelly_worst,
        boost_percent=kelly.boost_percent,
    )

    return PropositionEvaluation(
        event_id=proposition.event_id,
        market=proposition.market,
        line=proposition.line,
        side=side,
        best_line=best_line,
        reference=reference,
        devig=devig,
        ev=ev,
        ev_case=ev_case,
        display_ev=ev.display_ev(ev_case, kelly.boost_percent),
        baseline=baseline,
        improvement_pct=improvement,
        stake=stake,
        passes_filter=passes_ev_filter(ev.base_ev(ev_case), config.min_ev, config.max_ev),
    )


def evaluate_many(
    propositions: Iterable[Proposition],
    side,
    **kwargs,
) -> list[PropositionEvaluation]:
    """Evaluate the same side across many propositions (e.g. every 'over' in a table)."""
    return [
        evaluate_proposition(proposition, side, **kwargs)
        for proposition in propositions
        if side in proposition.sides
    ]
