"""Comparison baseline for price improvement.

The baseline is the single American price a best price is measured against:
the market average, the next-best price, or a named reference book.
"""

import logging
import math
from dataclasses import dataclass
from typing import Iterable

from oddsengine.models import ComparisonMode, Condition
from oddsengine.odds.best_line import OddsQuote, valid_quotes
from oddsengine.odds.convert import decimal_to_american_exact

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ComparisonBaseline:
    """Baseline price for one side, derived per request."""

    mode: ComparisonMode  # mode that produced price (AVERAGE after a fallback)
    price: float | None  # American odds, unrounded for average mode
    requested_mode: ComparisonMode
    reference_book_id: str | None = None
    fell_back: bool = False  # book mode fell back to the average
    condition: Condition | None = None


def average_price(quotes: Iterable[OddsQuote]) -> float | None:
    """Average price in decimal-odds space, expressed as unrounded American odds.

    Averaging American odds directly is wrong: they are not linear in
    probability and jump from -100 to +100 at even money.
    """
    decimals = [q.decimal for q in valid_quotes(quotes)]
    if not decimals:
        return None
    return decimal_to_american_exact(sum(decimals) / len(decimals))


def next_best_price(quotes: Iterable[OddsQuote]) -> float | None:
    """Price of the next-best book, or the best price itself when tied at the top."""
    prices = sorted((float(q.price) for q in valid_quotes(quotes)), reverse=True)
    if not prices:
        return None
    best = prices[0]
    if prices.count(best) > 1:
        # Another book already matches the best price; nothing to improve on
        return best
    return next((p for p in prices if p < best), None)


def select_baseline(
    quotes: Iterable[OddsQuote],
    mode: ComparisonMode | str = ComparisonMode.AVERAGE,
    reference_book_id: str | None = None,
    min_books: int = 1,
) -> ComparisonBaseline:
    """Select the comparison baseline for one side of a proposition.

    Args:
        quotes: Every book's quote for the side
        mode: average | next_best | book
        reference_book_id: Reference book for book mode (case-insensitive)
        min_books: Minimum valid quotes required before any baseline is produced

    Returns:
        ComparisonBaseline; price is None with INSUFFICIENT_BOOKS when the
        quote set is too thin

    Notes:
        - book mode without a quote from the reference book falls back to the
          average and sets fell_back=True
        - next_best with a multi-way tie at the top returns the tied price
    """
    mode = ComparisonMode(mode)
    quotes = valid_quotes(quotes)

    if len(quotes) < max(min_books, 1):
        logger.debug(f"Insufficient books for {mode.value} baseline: {len(quotes)} < {min_books}")
        return ComparisonBaseline(
            mode=mode,
            price=None,
            requested_mode=mode,
            reference_book_id=reference_book_id,
            condition=Condition.INSUFFICIENT_BOOKS,
        )

    if mode == ComparisonMode.BOOK:
        target = reference_book_id.lower() if reference_book_id else None
        entry = next((q for q in quotes if target and q.book_id.lower() == target), None)
        if entry is not None:
            return ComparisonBaseline(
                mode=mode,
                price=float(entry.price),
                requested_mode=mode,
                reference_book_id=entry.book_id,
            )
        logger.info(f"Reference book {reference_book_id!r} has no quote, falling back to average")
        return ComparisonBaseline(
            mode=ComparisonMode.AVERAGE,
            price=average_price(quotes),
            requested_mode=mode,
            reference_book_id=reference_book_id,
            fell_back=True,
        )

    if mode == ComparisonMode.NEXT_BEST:
        price = next_best_price(quotes)
        return ComparisonBaseline(
            mode=mode,
            price=price,
            requested_mode=mode,
            condition=Condition.INSUFFICIENT_BOOKS if price is None else None,
        )

    return ComparisonBaseline(mode=mode, price=average_price(quotes), requested_mode=mode)


def improvement_percent(best_price: float | None, baseline: float | None) -> float | None:
    """Improvement of best_price over baseline, in percent of |baseline|.

    Subtracts American odds directly, (best - baseline) / |baseline| * 100.
    This is a display metric, not a probability-consistent edge.
    """
    if best_price is None or baseline is None:
        return None
    if not math.isfinite(best_price) or not math.isfinite(baseline) or baseline == 0:
        return None
    return (best_price - baseline) / abs(baseline) * 100.0
