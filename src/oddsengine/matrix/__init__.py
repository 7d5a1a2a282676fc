"""Hit-rate / edge matrix for threshold props."""

from oddsengine.matrix.hit_rate import (
    MatrixRow,
    ThresholdStat,
    best_line_from_row,
    build_matrix_row,
    build_player_row,
    build_threshold_stat,
    count_hits,
    edge_strip_visible,
    hit_rate,
    is_dead_zone,
)

__all__ = [
    "MatrixRow",
    "ThresholdStat",
    "best_line_from_row",
    "build_matrix_row",
    "build_player_row",
    "build_threshold_stat",
    "count_hits",
    "edge_strip_visible",
    "hit_rate",
    "is_dead_zone",
]
