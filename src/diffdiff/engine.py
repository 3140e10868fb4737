"""
Diff-Diff Engine

This module infers chart difficulty from player accuracy. Every pair of
charts is compared through the players who cleared both:
- Accuracies are passed through acc_judge and averaged per pair
- Pairs with an implausible average difference are logged and dropped
- Deltas accumulate into a per-chart absolute score, but only against
  week-old (mature) charts, so new charts are calibrated on a stable baseline
- Charts sorted by absolute score get a relative score on the level scale

Usage:
    from src.diffdiff.engine import compute_diff_diff
    results = compute_diff_diff(musics, context)
"""

import statistics

import pandas as pd

from src.config import ACC_JUDGE_WEIGHT, ALL_PLATFORMS, OUTLIER_THRESHOLD
from src.diffdiff.charts import enumerate_charts
from src.diffdiff.interpolation import relative_scores
from src.diffdiff.models import DiffDiffResult
from src.utils import atomic_write_json, setup_logging

# --- Module Logger ---
logger = setup_logging(__name__)


def acc_judge(acc, weight=ACC_JUDGE_WEIGHT):
    """
    Map an accuracy percentage onto the comparison scale.

    Monotonic in acc; only a perfect 100 saturates at 1, which is never
    damped by weight.
    """
    factor = acc / 100
    if factor == 1:
        return 1
    return weight * (factor - factor ** 2 + factor ** 4)


def build_rank_map(chart, context):
    """Accuracy per player ("user_id" + "platform") on one chart, excluded content removed."""
    ranks = context.gateway.get_ranks(chart.uid, chart.difficulty, ALL_PLATFORMS)
    return {
        f"{entry.user_id}{entry.platform}": entry.acc
        for entry in ranks
        if not context.is_excluded(entry.character_uid, entry.elfin_uid)
    }


def average_diff(rank_a, rank_b, weight=ACC_JUDGE_WEIGHT):
    """
    Mean of acc_judge(acc_a) - acc_judge(acc_b) over players who played both.

    Returns:
        The average, or None when the charts share no player
    """
    shared = [key for key in rank_a if key in rank_b]
    if not shared:
        return None
    total = sum(acc_judge(rank_a[key], weight) - acc_judge(rank_b[key], weight) for key in shared)
    return total / len(shared)


def aggregate_absolute_scores(charts, rank_maps, is_week_old,
                              outlier_threshold=OUTLIER_THRESHOLD, weight=ACC_JUDGE_WEIGHT):
    """
    Fold every pairwise comparison into a running absolute score per chart.

    For a pair (A, B) with average difference d: when B is week-old, A's
    score drops by d; when A is week-old, B's score rises by d. Both can
    apply to the same pair, and neither applies between two new charts.

    Args:
        charts: Charts in enumeration order
        rank_maps: dict of chart key -> {player key: accuracy}
        is_week_old: Callable uid -> bool
        outlier_threshold: Pairs with |d| above this are skipped
        weight: acc_judge weight

    Returns:
        dict of (uid, difficulty) -> absolute score
    """
    absolute = {chart.key: 0.0 for chart in charts}
    compared = 0
    outliers = 0

    for i, chart in enumerate(charts):
        rank = rank_maps[chart.key]
        for other in charts[i + 1:]:
            diff = average_diff(rank, rank_maps[other.key], weight)
            if diff is None:
                continue
            compared += 1

            if abs(diff) > outlier_threshold:
                outliers += 1
                logger.warning(
                    f"diffdiff outlier {diff:.4f} between {chart.key} and {other.key} "
                    f"({len(rank)} vs {len(rank_maps[other.key])} players), pair skipped"
                )
                continue

            if is_week_old(other.uid):
                absolute[chart.key] -= diff
            if is_week_old(chart.uid):
                absolute[other.key] += diff

    logger.info(f"Compared {compared} chart pairs with shared players, {outliers} outliers skipped")
    return absolute


def rank_charts(charts, absolute):
    """Charts sorted by absolute score, hardest first; ties keep input order."""
    return sorted(charts, key=lambda chart: absolute[chart.key], reverse=True)


def results_frame(results) -> pd.DataFrame:
    return pd.DataFrame(
        [(r.uid, r.difficulty, r.level, r.absolute, r.relative) for r in results],
        columns=['uid', 'difficulty', 'level', 'absolute', 'relative'],
    )


def compute_diff_diff(musics, context, outlier_threshold=OUTLIER_THRESHOLD):
    """
    Run the full Diff-Diff computation for one tune.

    Reads ranks through the gateway, replaces the stored results, writes the
    per-chart index and dumps every result to JSON.

    Args:
        musics: Iterable of MusicData
        context: RunContext of the current tune
        outlier_threshold: Pairs with |average diff| above this are skipped

    Returns:
        List of DiffDiffResult, hardest first
    """
    logger.info(f"tune {context.tune_name}")
    charts = enumerate_charts(musics)
    logger.info(f"Enumerated {len(charts)} charts")

    rank_maps = {}
    for chart in charts:
        rank_maps[chart.key] = build_rank_map(chart, context)
        context.is_week_old(chart.uid)

    absolute = aggregate_absolute_scores(charts, rank_maps, context.is_week_old, outlier_threshold)
    ranked = rank_charts(charts, absolute)
    relative = relative_scores(ranked)

    results = [
        DiffDiffResult(
            uid=chart.uid,
            difficulty=chart.difficulty,
            level=chart.level,
            absolute=absolute[chart.key],
            relative=score,
        )
        for chart, score in zip(ranked, relative)
    ]

    if results:
        values = [r.relative for r in results]
        logger.info("Relative Score Distribution:")
        logger.info(f"  Min: {min(values):.2f}")
        logger.info(f"  Max: {max(values):.2f}")
        logger.info(f"  Median: {statistics.median(values):.2f}")

    context.gateway.put_diff_diff_results(results)
    for result in results:
        context.gateway.put_chart_diff_diff_index(result.chart, result.absolute, result.relative)

    dump_path = context.dump_path('diffdiff')
    atomic_write_json(results_frame(results), dump_path)
    logger.info(f"Stored {len(results)} Diff-Diff results, dump at {dump_path}")

    return results
