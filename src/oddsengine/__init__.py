"""Odds aggregation and positive-EV detection engine."""

from oddsengine.engine import (
    ComparisonSettings,
    KellySettings,
    PropositionEvaluation,
    evaluate_many,
    evaluate_proposition,
)

__all__ = [
    "ComparisonSettings",
    "KellySettings",
    "PropositionEvaluation",
    "evaluate_many",
    "evaluate_proposition",
]
