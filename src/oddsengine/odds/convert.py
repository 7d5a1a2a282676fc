"""Conversion between American odds, decimal odds, and implied probability.

Every function here is pure. Invalid American odds (magnitude below 100)
yield None from the conversion functions; only validate_american_odds raises.
"""

import math

# American odds magnitude floor; anything in (-100, 100) is not a price
MIN_ODDS_MAGNITUDE = 100


class InvalidOddsValue(ValueError):
    """American odds value strictly between -100 and 100."""


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward positive infinity.

    Matches JavaScript Math.round: 2.5 -> 3, -2.5 -> -2.
    """
    return int(math.floor(value + 0.5))


def is_valid_american(price: float | None) -> bool:
    """Return True if price is a finite American odds value with |price| >= 100."""
    if price is None:
        return False
    try:
        price = float(price)
    except (TypeError, ValueError):
        return False
    return math.isfinite(price) and abs(price) >= MIN_ODDS_MAGNITUDE


def validate_american_odds(price: float) -> float:
    """Return price unchanged or raise InvalidOddsValue.

    Raises:
        InvalidOddsValue: If price is non-finite or in (-100, 100)
    """
    if not is_valid_american(price):
        raise InvalidOddsValue(
            f"Invalid American odds {price!r}: magnitude must be >= {MIN_ODDS_MAGNITUDE}"
        )
    return price


def american_to_implied_probability(price: float | None) -> float | None:
    """Convert American odds to raw (vig-inclusive) implied probability.

    Args:
        price: American odds, e.g. -110 or +140

    Returns:
        Implied probability in (0, 1), or None if price is not valid American odds

    Example:
        >>> american_to_implied_probability(-110)
        0.5238...
        >>> american_to_implied_probability(150)
        0.4
    """
    if not is_valid_american(price):
        return None
    price = float(price)
    if price >= MIN_ODDS_MAGNITUDE:
        return 100.0 / (price + 100.0)
    return -price / (-price + 100.0)


def american_to_decimal(price: float | None) -> float | None:
    """Convert American odds to decimal (European) odds, None if invalid."""
    if not is_valid_american(price):
        return None
    price = float(price)
    if price > 0:
        return price / 100.0 + 1.0
    return 100.0 / -price + 1.0


def decimal_to_implied_probability(decimal_odds: float | None) -> float | None:
    """Convert decimal odds to implied probability, None for odds <= 1.0."""
    if decimal_odds is None or not math.isfinite(decimal_odds) or decimal_odds <= 1.0:
        return None
    return 1.0 / decimal_odds


def probability_to_american_odds(p: float) -> int:
    """Convert a probability to rounded American odds.

    Args:
        p: Probability strictly inside (0, 1)

    Returns:
        Negative odds for p >= 0.5 (favorite), positive odds otherwise

    Raises:
        ValueError: If p is not in (0, 1); 0 and 1 map to infinite/zero odds
    """
    if not (0.0 < p < 1.0):
        raise ValueError(f"Probability must be in (0, 1), got: {p}")
    if p >= 0.5:
        return round_half_up(-100.0 * p / (1.0 - p))
    return round_half_up(100.0 * (1.0 - p) / p)


def decimal_to_american_exact(decimal_odds: float | None) -> float | None:
    """Convert decimal odds to unrounded American odds, None for odds <= 1.0."""
    if decimal_odds is None or not math.isfinite(decimal_odds) or decimal_odds <= 1.0:
        return None
    if decimal_odds >= 2.0:
        return 100.0 * (decimal_odds - 1.0)
    return -100.0 / (decimal_odds - 1.0)


def decimal_to_american(decimal_odds: float | None) -> int | None:
    """Convert decimal odds back to American odds for display.

    Example:
        >>> decimal_to_american(2.50)
        150
        >>> decimal_to_american(1.67)
        -149
    """
    exact = decimal_to_american_exact(decimal_odds)
    if exact is None:
        return None
    return round_half_up(exact)
