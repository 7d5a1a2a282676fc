"""Display formatting for odds, edges, Kelly fractions and hit rates.

Pure functions returning strings. Nothing in the engine reads these values back;
numeric decisions always use the unformatted numbers.
"""

from oddsengine.odds.convert import round_half_up

PLACEHOLDER = "—"


def format_american_odds(price: float | None) -> str:
    """Format American odds with an explicit sign on positive values.

    Example:
        >>> format_american_odds(140)
        '+140'
        >>> format_american_odds(-110)
        '-110'
    """
    if price is None:
        return PLACEHOLDER
    value = round_half_up(price)
    return f"+{value}" if value > 0 else str(value)


def format_edge(edge_pct: float | None) -> str:
    """Format an edge percentage with sign and one decimal."""
    if edge_pct is None:
        return PLACEHOLDER
    sign = "+" if edge_pct >= 0 else ""
    return f"{sign}{edge_pct:.1f}%"


def format_kelly(fraction: float | None) -> str:
    """Format a Kelly fraction (0.034) as a percentage ('3.4%')."""
    if fraction is None or fraction <= 0:
        return PLACEHOLDER
    return f"{fraction * 100:.1f}%"


def format_hit_rate(hit_rate: int | None) -> str:
    if hit_rate is None:
        return PLACEHOLDER
    return f"{hit_rate}%"
