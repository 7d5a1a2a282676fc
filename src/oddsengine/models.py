"""Lightweight enums and constants shared across the engine."""

from enum import Enum


class DevigMethod(str, Enum):
    """De-vig (fair probability) method."""

    POWER = "power"
    MULTIPLICATIVE = "multiplicative"
    ADDITIVE = "additive"
    PROBIT = "probit"


class ComparisonMode(str, Enum):
    """Baseline used to measure price improvement."""

    AVERAGE = "average"
    NEXT_BEST = "next_best"
    BOOK = "book"


class EVCase(str, Enum):
    """Which aggregate EV is surfaced by default."""

    WORST = "worst"
    BEST = "best"


class EVTier(str, Enum):
    """EV percentage bucket for display filtering."""

    NONE = "none"
    POSITIVE = "positive"
    GOOD = "good"
    GREAT = "great"
    EXCELLENT = "excellent"
    SUSPICIOUS = "suspicious"


class Condition(str, Enum):
    """Recoverable condition attached to a result instead of raising."""

    INVALID_ODDS_VALUE = "invalid_odds_value"
    NO_VIG_DETECTED = "no_vig_detected"
    INSUFFICIENT_BOOKS = "insufficient_books"
    DEVIG_FAILED = "devig_failed"
    ZERO_OR_NEGATIVE_BANKROLL = "zero_or_negative_bankroll"


class HitRateWindow(str, Enum):
    """Lookback window for hit-rate counting."""

    LAST_5 = "last_5"
    LAST_10 = "last_10"
    LAST_20 = "last_20"
    SEASON = "season"


# Default method set
DEFAULT_DEVIG_METHODS = (DevigMethod.POWER, DevigMethod.MULTIPLICATIVE)

ALL_DEVIG_METHODS = (
    DevigMethod.POWER,
    DevigMethod.MULTIPLICATIVE,
    DevigMethod.ADDITIVE,
    DevigMethod.PROBIT,
)

# EV percentage thresholds
EV_THRESHOLDS = {
    "positive": 0.0,
    "good": 2.0,
    "great": 5.0,
    "excellent": 10.0,
    "suspicious": 15.0,
    "maximum": 25.0,
}

# Sharp reference presets: book id -> weight. Empty mapping means all books.
SHARP_PRESETS: dict[str, dict[str, float]] = {
    "pinnacle": {"pinnacle": 1.0},
    "circa": {"circa": 1.0},
    "prophetx": {"prophetx": 1.0},
    "pinnacle_circa": {"pinnacle": 0.5, "circa": 0.5},
    "hardrock_thescore": {"hardrock": 0.5, "thescore": 0.5},
    "draftkings": {"draftkings": 1.0},
    "fanduel": {"fanduel": 1.0},
    "betmgm": {"betmgm": 1.0},
    "caesars": {"caesars": 1.0},
    "hardrock": {"hardrock": 1.0},
    "bet365": {"bet365": 1.0},
    "market_average": {},
}

# Matrix threshold lines ("make N+")
THRESHOLD_LINES = (5, 10, 15, 20, 25, 30, 35, 40, 45, 50)

# Hard product floor for the matrix edge strip (percent)
EDGE_FLOOR_PCT = 5.0

# Minimum quoting books before a matrix edge is reported
MATRIX_MIN_BOOKS = 2
