"""
Level-Distribution Interpolation

Maps a chart's position in the list sorted by absolute score (hardest first)
to a continuous difficulty on the nominal level scale.

Each nominal level claims a stretch of positions proportional to how many
charts carry it. Unrated ("?") charts have no level of their own; their count
is smeared over the levels along a bell curve centred on LEVEL_MEAN. Positions
are then linearly interpolated between neighbouring level boundaries.
"""

import math
from collections import Counter

import numpy as np

from src.config import LEVEL_MEAN, LEVEL_STDEV, TOP_LEVEL_MARGIN


def normal_distribution(level, mean=LEVEL_MEAN, stdev=LEVEL_STDEV):
    """Gaussian probability density at `level`."""
    exponent = -0.5 * ((level - mean) / stdev) ** 2
    return math.exp(exponent) / (stdev * math.sqrt(2 * math.pi))


def level_boundaries(numeric_levels, mean=LEVEL_MEAN, stdev=LEVEL_STDEV, margin=TOP_LEVEL_MARGIN):
    """
    Build the (level, index) boundaries used for interpolation.

    Boundaries run from the hard end: (max_level + margin, 0), then one per
    distinct level in descending order at the cumulative weight of that level
    and every harder one, then (0, total chart count).

    Args:
        numeric_levels: Nominal level of every chart, None for unrated charts
        mean: Centre of the bell curve spreading unrated charts
        stdev: Spread of that bell curve
        margin: Headroom above the highest level

    Returns:
        Tuple of (levels, indexes) numpy arrays of equal length
    """
    numeric_levels = list(numeric_levels)
    rated = [level for level in numeric_levels if level is not None]
    question_count = len(numeric_levels) - len(rated)

    counts = Counter(rated)
    distinct = sorted(counts, reverse=True)
    weights = [question_count * normal_distribution(level, mean, stdev) + counts[level] for level in distinct]

    # No rated chart at all: treat the top level as 0
    max_level = distinct[0] if distinct else 0

    levels = np.array([max_level + margin, *distinct, 0], dtype=float)
    indexes = np.concatenate([[0.0], np.cumsum(weights), [float(len(numeric_levels))]])
    return levels, indexes


def interpolate_positions(count, levels, indexes):
    """
    Interpolate positions 0..count-1 against the boundaries.

    For each position the upper boundary is the first one whose index
    exceeds it; the value is linear between that boundary and the previous.
    """
    if count == 0:
        return np.array([], dtype=float)

    positions = np.arange(count, dtype=float)
    upper = np.argmax(indexes[np.newaxis, :] > positions[:, np.newaxis], axis=1)
    lower = upper - 1

    span = indexes[upper] - indexes[lower]
    return levels[lower] + (levels[upper] - levels[lower]) * (positions - indexes[lower]) / span


def relative_scores(sorted_charts, mean=LEVEL_MEAN, stdev=LEVEL_STDEV, margin=TOP_LEVEL_MARGIN):
    """
    Relative difficulty of each chart, in the order given.

    Args:
        sorted_charts: Charts sorted by absolute score, hardest first

    Returns:
        List of floats aligned with sorted_charts
    """
    levels, indexes = level_boundaries(
        [chart.numeric_level for chart in sorted_charts], mean, stdev, margin
    )
    return interpolate_positions(len(sorted_charts), levels, indexes).tolist()
