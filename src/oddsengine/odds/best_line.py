"""Best-line selection and sharp reference blending across sportsbooks.

Operates on an in-memory snapshot of one proposition: every book's American
price for every side of the market.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Mapping

from oddsengine.models import SHARP_PRESETS, Condition
from oddsengine.odds.convert import (
    american_to_decimal,
    american_to_implied_probability,
    is_valid_american,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OddsQuote:
    """One book's price for one side of one proposition."""

    book_id: str
    price: float  # American odds, |price| >= 100
    limit_max: float | None = None  # max stake accepted at this price

    @property
    def is_valid(self) -> bool:
        return is_valid_american(self.price)

    @property
    def decimal(self) -> float | None:
        return american_to_decimal(self.price)

    @property
    def implied_prob(self) -> float | None:
        return american_to_implied_probability(self.price)


@dataclass(frozen=True)
class Proposition:
    """A bettable line with every book's quotes, keyed by side.

    Two sides of the same (event_id, market, line) form a complementary pair;
    multi-way markets carry more sides.
    """

    event_id: str
    market: str
    line: float | None
    quotes: Mapping[str, tuple[OddsQuote, ...]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        normalized = {}
        for side, side_quotes in self.quotes.items():
            side_quotes = tuple(side_quotes)
            seen: set[str] = set()
            for quote in side_quotes:
                key = quote.book_id.lower()
                if key in seen:
                    raise ValueError(
                        f"Duplicate quote for book {quote.book_id} on side {side} "
                        f"of {self.event_id}/{self.market}/{self.line}"
                    )
                seen.add(key)
            normalized[side] = side_quotes
        object.__setattr__(self, "quotes", normalized)

    @property
    def sides(self) -> tuple:
        return tuple(self.quotes.keys())

    def quotes_for(self, side) -> tuple[OddsQuote, ...]:
        return self.quotes.get(side, ())


@dataclass(frozen=True)
class BestLine:
    """Best available price for one side of a proposition."""

    side: str
    best_price: float  # American odds
    book: str  # Book offering the best price (after tie-break)
    tied_books: tuple[str, ...]  # Every book quoting best_price
    book_count: int  # Valid quotes on this side
    limit_max: float | None = None

    @property
    def best_decimal(self) -> float:
        return american_to_decimal(self.best_price)


@dataclass(frozen=True)
class SharpReference:
    """Blended raw implied probabilities used as the de-vig input."""

    preset: str
    raw_probs: dict  # side -> raw implied probability
    books: tuple[str, ...]  # Books that contributed
    condition: Condition | None = None


def valid_quotes(quotes: Iterable[OddsQuote]) -> list[OddsQuote]:
    """Drop quotes whose price is not valid American odds."""
    kept = []
    for quote in quotes:
        if quote.is_valid:
            kept.append(quote)
        else:
            logger.warning(f"Dropping invalid American odds {quote.price!r} from book {quote.book_id}")
    return kept


def best_quote(quotes: Iterable[OddsQuote]) -> OddsQuote | None:
    """Return the most favorable quote for the bettor.

    Highest American price wins; ties prefer the larger limit_max, then the
    alphabetically first book id so the choice is deterministic.
    """
    candidates = valid_quotes(quotes)
    if not candidates:
        return None
    return min(
        candidates,
        key=lambda q: (
            -float(q.price),
            -(q.limit_max if q.limit_max is not None else -1.0),
            q.book_id.lower(),
        ),
    )


def get_best_line(proposition: Proposition, side) -> BestLine | None:
    """Best line for one side, or None when no valid quote exists."""
    quotes = valid_quotes(proposition.quotes_for(side))
    best = best_quote(quotes)
    if best is None:
        return None
    tied = tuple(sorted(q.book_id for q in quotes if q.price == best.price))
    return BestLine(
        side=side,
        best_price=best.price,
        book=best.book_id,
        tied_books=tied,
        book_count=len(quotes),
        limit_max=best.limit_max,
    )


def get_best_lines(proposition: Proposition) -> list[BestLine]:
    """Get best available lines for every side of a proposition.

    Returns:
        List of BestLine objects, one per side with at least one valid quote
    """
    lines = []
    for side in proposition.sides:
        line = get_best_line(proposition, side)
        if line is not None:
            lines.append(line)
    return lines


def sharp_reference_probabilities(
    proposition: Proposition,
    preset: str = "market_average",
    weights: Mapping[str, float] | None = None,
) -> SharpReference:
    """Blend raw implied probabilities per side from the reference books.

    Args:
        proposition: Quote snapshot
        preset: Key of SHARP_PRESETS
        weights: Custom book -> weight mapping; overrides the preset's books

    Returns:
        SharpReference with one raw probability per side, or an
        INSUFFICIENT_BOOKS condition and empty raw_probs

    Raises:
        ValueError: If preset is unknown and no weights are given

    Notes:
        - Blending happens in probability space, never on American odds
        - market_average weights every valid quote equally, side by side
        - Weighted presets only use books that quote every side, with weights
          renormalised over those books
    """
    if weights is None:
        if preset not in SHARP_PRESETS:
            raise ValueError(f"Unknown sharp preset: {preset}")
        weights = SHARP_PRESETS[preset]

    sides = proposition.sides
    if len(sides) < 2:
        logger.debug(f"Proposition {proposition.event_id}/{proposition.market} has fewer than two sides")
        return SharpReference(preset, {}, (), Condition.INSUFFICIENT_BOOKS)

    if not weights:
        raw_probs = {}
        books: set[str] = set()
        for side in sides:
            quotes = valid_quotes(proposition.quotes_for(side))
            if not quotes:
                return SharpReference(preset, {}, (), Condition.INSUFFICIENT_BOOKS)
            raw_probs[side] = sum(q.implied_prob for q in quotes) / len(quotes)
            books.update(q.book_id for q in quotes)
        return SharpReference(preset, raw_probs, tuple(sorted(books)))

    # Per-book prices for every side, case-insensitive book ids
    by_book: dict[str, dict] = {}
    for side in sides:
        for quote in valid_quotes(proposition.quotes_for(side)):
            by_book.setdefault(quote.book_id.lower(), {})[side] = quote.implied_prob

    usable = {
        book.lower(): weight
        for book, weight in weights.items()
        if weight > 0 and len(by_book.get(book.lower(), {})) == len(sides)
    }
    total_weight = sum(usable.values())
    if total_weight <= 0:
        logger.debug(f"No reference book for preset {preset} quotes every side of {proposition.event_id}")
        return SharpReference(preset, {}, (), Condition.INSUFFICIENT_BOOKS)

    raw_probs = {
        side: sum(by_book[book][side] * weight for book, weight in usable.items()) / total_weight
        for side in sides
    }
    return SharpReference(preset, raw_probs, tuple(sorted(usable)))
