"""Hit-rate / edge matrix for threshold props ("make N+ of X").

Each cell pairs a historical hit rate with the current market at that
threshold. The edge is best price vs market average in decimal-odds space:

    edge_pct = (best_decimal / avg_decimal - 1) * 100

and is only reported when at least two books quote the line.
"""

import logging
from dataclasses import dataclass, replace
from typing import Iterable, Mapping, Sequence

from oddsengine.config import get_config
from oddsengine.models import EDGE_FLOOR_PCT, MATRIX_MIN_BOOKS, THRESHOLD_LINES, HitRateWindow
from oddsengine.odds.best_line import OddsQuote, best_quote, valid_quotes
from oddsengine.odds.convert import decimal_to_american, round_half_up

logger = logging.getLogger(__name__)

_WINDOW_GAMES = {
    HitRateWindow.LAST_5: 5,
    HitRateWindow.LAST_10: 10,
    HitRateWindow.LAST_20: 20,
    HitRateWindow.SEASON: None,
}


@dataclass(frozen=True)
class ThresholdStat:
    """One threshold cell of a player's matrix row."""

    line: float
    hits: int
    games: int
    hit_rate: int | None  # percent, None when games == 0
    best_odds: int | None  # American, display only
    best_book: str | None
    best_decimal: float | None
    avg_decimal: float | None
    book_count: int
    edge_pct: float | None
    actual_line: float | None = None  # sportsbook line used, may differ from line
    is_best_cell: bool = False

    @property
    def is_dead(self) -> bool:
        return is_dead_zone(self.book_count, self.edge_pct)


@dataclass(frozen=True)
class MatrixRow:
    """A player's thresholds for one market."""

    player_id: int | str
    market: str
    thresholds: tuple[ThresholdStat, ...]

    @property
    def best_line(self) -> ThresholdStat | None:
        return next((t for t in self.thresholds if t.is_best_cell), None)


def hit_rate(hits: int, games: int) -> int | None:
    """Hit rate as a rounded percent, None when there are no games."""
    if games <= 0:
        return None
    return round_half_up(hits / games * 100.0)


def count_hits(
    values: Sequence[float],
    line: float,
    window: HitRateWindow | str = HitRateWindow.LAST_10,
) -> tuple[int, int]:
    """Count games clearing a threshold within a lookback window.

    Args:
        values: Per-game stat values, most recent first
        line: Threshold; a game hits when value >= line
        window: Lookback window

    Returns:
        (hits, games)
    """
    size = _WINDOW_GAMES[HitRateWindow(window)]
    sample = list(values) if size is None else list(values)[:size]
    hits = sum(1 for value in sample if value >= line)
    return hits, len(sample)


def matrix_edge_pct(
    best_decimal: float | None,
    avg_decimal: float | None,
    book_count: int,
) -> float | None:
    """Edge of best price over market average, None without enough market."""
    if book_count < MATRIX_MIN_BOOKS or best_decimal is None or avg_decimal is None:
        return None
    if avg_decimal <= 0:
        return None
    return (best_decimal / avg_decimal - 1.0) * 100.0


def is_dead_zone(book_count: int, edge_pct: float | None) -> bool:
    """A cell is dead when fewer than two books quote it or it has no edge.

    Dead cells still show their hit rate but never an edge.
    """
    return book_count < MATRIX_MIN_BOOKS or edge_pct is None


def build_threshold_stat(
    line: float,
    hits: int,
    games: int,
    quotes: Iterable[OddsQuote] = (),
    actual_line: float | None = None,
) -> ThresholdStat:
    """Combine a threshold's hit counts with every book's quote for it."""
    quotes = valid_quotes(quotes)
    best = best_quote(quotes)
    decimals = [q.decimal for q in quotes]
    book_count = len(quotes)

    best_decimal = best.decimal if best is not None else None
    avg_decimal = sum(decimals) / book_count if book_count else None
    edge_pct = matrix_edge_pct(best_decimal, avg_decimal, book_count)

    return ThresholdStat(
        line=line,
        hits=hits,
        games=games,
        hit_rate=hit_rate(hits, games),
        best_odds=decimal_to_american(best_decimal),
        best_book=best.book_id if best is not None else None,
        best_decimal=best_decimal,
        avg_decimal=avg_decimal,
        book_count=book_count,
        edge_pct=edge_pct,
        actual_line=actual_line,
    )


def best_line_from_row(thresholds: Iterable[ThresholdStat]) -> ThresholdStat | None:
    """Threshold with the highest positive edge; ties go to the lower line."""
    candidates = [
        t
        for t in thresholds
        if not t.is_dead and t.edge_pct is not None and t.edge_pct > 0 and t.best_odds is not None
    ]
    if not candidates:
        return None
    return min(candidates, key=lambda t: (-t.edge_pct, t.line))


def edge_strip_visible(stat: ThresholdStat, min_edge: float | None = None) -> bool:
    """Show the edge strip only above both the user filter and the 5% floor.

    min_edge defaults to config.min_edge_pct.
    """
    if stat.is_dead or stat.edge_pct is None:
        return False
    if min_edge is None:
        min_edge = get_config().min_edge_pct
    return stat.edge_pct >= EDGE_FLOOR_PCT and stat.edge_pct >= min_edge


def build_matrix_row(
    player_id: int | str,
    market: str,
    thresholds: Iterable[ThresholdStat],
) -> MatrixRow:
    """Assemble a row, ordered by line, with the best cell flagged."""
    ordered = sorted(thresholds, key=lambda t: t.line)
    best = best_line_from_row(ordered)
    marked = tuple(replace(t, is_best_cell=(best is not None and t.line == best.line)) for t in ordered)
    return MatrixRow(player_id=player_id, market=market, thresholds=marked)


def build_player_row(
    player_id: int | str,
    market: str,
    values: Sequence[float],
    quotes_by_line: Mapping[float, Iterable[OddsQuote]],
    window: HitRateWindow | str = HitRateWindow.LAST_10,
    lines: Sequence[float] = THRESHOLD_LINES,
) -> MatrixRow:
    """Build a full matrix row from game logs and per-threshold quotes.

    Args:
        player_id: Player identifier
        market: Stat market, e.g. 'player_points'
        values: Per-game stat values, most recent first
        quotes_by_line: Threshold line -> every book's quote for "line+"
        window: Hit-rate lookback window
        lines: Threshold lines to include
    """
    stats = []
    for line in lines:
        hits, games = count_hits(values, line, window)
        stats.append(build_threshold_stat(line, hits, games, quotes_by_line.get(line, ())))
    row = build_matrix_row(player_id, market, stats)
    if row.best_line is None:
        logger.debug(f"No positive-edge threshold for player {player_id} in {market}")
    return row
