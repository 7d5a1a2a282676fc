"""Fair (vig-free) probability estimation.

Four interchangeable methods, each mapping the raw implied probabilities of
every side of a market to fair probabilities summing to 1.0:

- multiplicative: q_i / sum(q)
- additive: q_i - overround / n
- power: q_i ** k with k solved by bisection so that sum(q ** k) = 1
- probit: Phi(Phi^-1(q_i) - c) with c solved by Brent's method

Root finding is bounded by devig_max_iter and devig_tolerance. Degenerate
markets and non-convergence come back as a Condition on the result rather
than an exception.
"""

import logging
from dataclasses import dataclass, replace
from typing import Callable, Iterable, Sequence

import numpy as np
from numpy.typing import NDArray
from scipy.optimize import brentq
from scipy.stats import norm

from oddsengine.config import EngineConfig, get_config
from oddsengine.models import Condition, DevigMethod
from oddsengine.odds.convert import american_to_implied_probability

logger = logging.getLogger(__name__)

# Upper bracket for the power exponent; a two-way market needs k > 1024 only
# with an overround far beyond anything a book would post
_POWER_K_MAX = 1024.0

# Upper bracket for the probit shift (in standard deviations)
_PROBIT_C_MAX = 10.0

# Tolerance on the unit sum of a method's output
_SUM_TOL = 1e-6


@dataclass(frozen=True)
class DevigResult:
    """Fair probability estimate for every side of one market.

    fair_probs is None when no estimate is available. With NO_VIG_DETECTED the
    raw implied probabilities are passed through as the fair estimate; with
    DEVIG_FAILED and a fallback method set, fair_probs holds the fallback's
    estimate.
    """

    method: DevigMethod
    sides: tuple
    raw_probs: tuple[float | None, ...]
    fair_probs: tuple[float, ...] | None
    margin: float | None  # sum(raw) - 1 (overround)
    condition: Condition | None = None
    fallback: DevigMethod | None = None

    @property
    def success(self) -> bool:
        """True when the method itself produced the estimate."""
        return self.condition is None

    @property
    def usable(self) -> bool:
        """True when some fair estimate (own, raw pass-through or fallback) exists."""
        return self.fair_probs is not None

    def fair_prob(self, side) -> float | None:
        """Fair probability for a side key (or positional index when sides are unnamed)."""
        if self.fair_probs is None:
            return None
        if self.sides:
            if side not in self.sides:
                return None
            return self.fair_probs[self.sides.index(side)]
        if not isinstance(side, int) or isinstance(side, bool) or not 0 <= side < len(self.fair_probs):
            return None
        return self.fair_probs[side]


def _multiplicative(q: NDArray[np.float64], max_iter: int, tol: float) -> NDArray[np.float64]:
    return q / q.sum()


def _additive(q: NDArray[np.float64], max_iter: int, tol: float) -> NDArray[np.float64] | None:
    overround = q.sum() - 1.0
    fair = q - overround / len(q)
    if np.any(fair <= 0.0):
        # Longshot priced below its share of the margin
        return None
    return fair


def _power(q: NDArray[np.float64], max_iter: int, tol: float) -> NDArray[np.float64] | None:
    def excess(k: float) -> float:
        return float(np.sum(q**k)) - 1.0

    # sum(q ** k) is strictly decreasing in k and exceeds 1 at k = 1
    lo, hi = 1.0, 2.0
    while excess(hi) > 0.0:
        lo, hi = hi, hi * 2.0
        if hi > _POWER_K_MAX:
            return None

    for _ in range(max_iter):
        mid = (lo + hi) * 0.5
        value = excess(mid)
        if value > 0.0:
            lo = mid
        else:
            hi = mid
        if abs(value) < tol or (hi - lo) < tol:
            break
    else:
        return None

    k = (lo + hi) * 0.5
    fair = q**k
    if abs(fair.sum() - 1.0) > _SUM_TOL:
        return None
    return fair / fair.sum()


def _probit(q: NDArray[np.float64], max_iter: int, tol: float) -> NDArray[np.float64] | None:
    z = norm.ppf(q)

    def excess(c: float) -> float:
        return float(np.sum(norm.cdf(z - c))) - 1.0

    try:
        c = brentq(excess, 0.0, _PROBIT_C_MAX, xtol=tol, maxiter=max_iter)
    except (ValueError, RuntimeError) as e:
        logger.warning(f"Probit root finding failed: {e}")
        return None

    fair = norm.cdf(z - c)
    if abs(fair.sum() - 1.0) > _SUM_TOL:
        return None
    return fair / fair.sum()


_METHODS: dict[DevigMethod, Callable[..., NDArray[np.float64] | None]] = {
    DevigMethod.MULTIPLICATIVE: _multiplicative,
    DevigMethod.ADDITIVE: _additive,
    DevigMethod.POWER: _power,
    DevigMethod.PROBIT: _probit,
}


def devig_probabilities(
    raw_probs: Sequence[float | None],
    method: DevigMethod | str,
    sides: Sequence = (),
    config: EngineConfig | None = None,
) -> DevigResult:
    """De-vig one market given each side's raw implied probability.

    Args:
        raw_probs: Raw (vig-inclusive) implied probability per side; None marks
            a side whose odds were invalid
        method: De-vig method
        sides: Optional side keys, aligned with raw_probs
        config: Engine config (iteration bound and tolerance)

    Returns:
        DevigResult; see Condition for the degenerate cases

    Raises:
        ValueError: If fewer than two sides are given or sides/raw_probs lengths differ

    Notes:
        - Any side None -> INVALID_ODDS_VALUE, no estimate
        - Any side <= 0 or >= 1 -> NO_VIG_DETECTED, no estimate
        - sum(raw) <= 1 -> NO_VIG_DETECTED, raw probabilities passed through
        - Method cannot produce a valid distribution -> DEVIG_FAILED
    """
    config = config or get_config()
    method = DevigMethod(method)
    raw = tuple(None if p is None else float(p) for p in raw_probs)
    sides = tuple(sides)

    if len(raw) < 2:
        raise ValueError(f"De-vig needs at least two sides, got {len(raw)}")
    if sides and len(sides) != len(raw):
        raise ValueError(f"sides and raw_probs differ in length: {len(sides)} != {len(raw)}")

    def result(fair, margin, condition=None) -> DevigResult:
        return DevigResult(
            method=method,
            sides=sides,
            raw_probs=raw,
            fair_probs=None if fair is None else tuple(float(p) for p in fair),
            margin=margin,
            condition=condition,
        )

    if any(p is None for p in raw):
        return result(None, None, Condition.INVALID_ODDS_VALUE)

    q = np.asarray(raw, dtype=np.float64)

    if not np.all(np.isfinite(q)) or np.any(q <= 0.0) or np.any(q >= 1.0):
        logger.debug(f"Degenerate raw probabilities {raw}, no vig to remove")
        return result(None, None, Condition.NO_VIG_DETECTED)

    margin = float(q.sum() - 1.0)
    if margin <= 0.0:
        logger.debug(f"No margin detected (overround {margin:.6f}), passing raw probabilities through")
        return result(q, margin, Condition.NO_VIG_DETECTED)

    fair = _METHODS[method](q, config.devig_max_iter, config.devig_tolerance)
    if fair is None or not np.all(np.isfinite(fair)) or np.any(fair <= 0.0):
        logger.warning(f"Devig failed for method {method.value} on raw probabilities {raw}")
        return result(None, margin, Condition.DEVIG_FAILED)

    return result(fair, margin)


def devig_prices(
    prices: Sequence[float],
    method: DevigMethod | str,
    sides: Sequence = (),
    config: EngineConfig | None = None,
) -> DevigResult:
    """De-vig one market given each side's American odds."""
    raw = [american_to_implied_probability(price) for price in prices]
    return devig_probabilities(raw, method, sides=sides, config=config)


def devig_multi(
    raw_probs: Sequence[float | None],
    methods: Iterable[DevigMethod | str],
    sides: Sequence = (),
    fallback: bool | None = None,
    config: EngineConfig | None = None,
) -> dict[DevigMethod, DevigResult]:
    """Run every selected method over the same market.

    Args:
        raw_probs: Raw implied probability per side
        methods: Non-empty selection of methods
        sides: Optional side keys
        fallback: Substitute multiplicative fair probabilities for a failed
            method (defaults to config.devig_fallback)
        config: Engine config

    Returns:
        Mapping of method to DevigResult, in selection order

    Raises:
        ValueError: If no method is selected
    """
    config = config or get_config()
    selected = list(dict.fromkeys(DevigMethod(m) for m in methods))
    if not selected:
        raise ValueError("At least one de-vig method must be selected")
    if fallback is None:
        fallback = config.devig_fallback

    results = {
        method: devig_probabilities(raw_probs, method, sides=sides, config=config)
        for method in selected
    }

    if fallback:
        failed = [m for m, r in results.items() if r.condition == Condition.DEVIG_FAILED]
        if failed:
            simple = results.get(DevigMethod.MULTIPLICATIVE) or devig_probabilities(
                raw_probs, DevigMethod.MULTIPLICATIVE, sides=sides, config=config
            )
            for method in failed:
                logger.warning(f"Falling back to multiplicative for failed method {method.value}")
                results[method] = replace(
                    results[method],
                    fair_probs=simple.fair_probs,
                    fallback=DevigMethod.MULTIPLICATIVE,
                )

    return results

