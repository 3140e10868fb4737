"""
Player Rating (rl)

Turns each player's best accuracies into a single skill score weighted by
the relative difficulty of the charts they played. Only week-old charts
count; a brand-new chart contributes nothing until it has settled.

The score folds the weighted results weakest first with a decay, so the
strongest results dominate while depth still helps:
    r = value + r * RL_DECAY,  rl = r / RL_DIVISOR

Usage:
    from src.diffdiff.player_rating import compute_player_ratings
    ranked = compute_player_ratings(context)
"""

import statistics

import pandas as pd

from src.config import PLAYER_ACC_JUDGE_WEIGHT, RL_DECAY, RL_DIVISOR
from src.diffdiff.engine import acc_judge
from src.diffdiff.models import PlayerRating
from src.utils import atomic_write_json, setup_logging

# --- Module Logger ---
logger = setup_logging(__name__)


def build_relative_lookup(results, is_week_old):
    """(uid, difficulty) -> relative score, zero for charts that are not week-old yet."""
    lookup = {}
    for result in results:
        lookup[(result.uid, result.difficulty)] = result.relative if is_week_old(result.uid) else 0
    return lookup


def best_accuracies(plays, is_excluded):
    """Best accuracy per (uid, difficulty), ignoring excluded characters and elfins."""
    best = {}
    for play in plays:
        if is_excluded(play.character_uid, play.elfin_uid):
            continue
        key = (play.uid, play.difficulty)
        if key not in best or play.acc > best[key]:
            best[key] = play.acc
    return best


def decayed_sum(values, decay=RL_DECAY):
    """Fold values in ascending order: r = value + r * decay."""
    r = 0
    for value in sorted(values):
        r = value + r * decay
    return r


def player_rl(plays, lookup, is_excluded, decay=RL_DECAY, divisor=RL_DIVISOR):
    """rl of one player; 0 when no play qualifies."""
    values = [
        acc_judge(acc, PLAYER_ACC_JUDGE_WEIGHT) * lookup.get(key, 0)
        for key, acc in best_accuracies(plays, is_excluded).items()
    ]
    return decayed_sum(values, decay) / divisor


def rank_players(player_rls):
    """
    Sort (player_id, rl) pairs by rl descending and number them from 1.

    Ties keep iteration order and still get distinct ranks.
    """
    ordered = sorted(player_rls, key=lambda pair: pair[1], reverse=True)
    return [
        PlayerRating(player_id=player_id, rl=rl, rank=i + 1)
        for i, (player_id, rl) in enumerate(ordered)
    ]


def compute_player_ratings(context, decay=RL_DECAY, divisor=RL_DIVISOR):
    """
    Recompute every player's rl from the stored Diff-Diff results.

    Replaces the stored ratings and ranked list, appends one history record
    per player and dumps the ranked list to JSON.

    Args:
        context: RunContext of the current tune
        decay: Fold decay applied to weaker results
        divisor: Final scale divisor

    Returns:
        List of PlayerRating, best first
    """
    gateway = context.gateway
    lookup = build_relative_lookup(gateway.get_diff_diff_results(), context.is_week_old)
    logger.info(f"Loaded {len(lookup)} chart difficulties, "
                f"{sum(1 for v in lookup.values() if v)} counting toward rl")

    player_rls = []
    for player_id, plays in gateway.iterate_players():
        rl = player_rl(plays, lookup, context.is_excluded, decay, divisor)
        player_rls.append((player_id, rl))

    gateway.clear_player_ratings()
    gateway.put_player_ratings(player_rls)

    ranked = rank_players(player_rls)
    gateway.set_player_rating_rank(ranked)
    for rating in ranked:
        gateway.append_player_rating_history(rating.player_id, rating.rl, rating.rank, context.tune_name)

    if ranked:
        values = [rating.rl for rating in ranked]
        logger.info(f"Rated {len(ranked)} players:")
        logger.info(f"  Max rl: {max(values):.4f}")
        logger.info(f"  Mean rl: {statistics.mean(values):.4f}")
        logger.info(f"  Median rl: {statistics.median(values):.4f}")

    df = pd.DataFrame(
        [(r.player_id, r.rl, r.rank) for r in ranked],
        columns=['id', 'rl', 'rank'],
    )
    dump_path = context.dump_path('playerdiff')
    atomic_write_json(df, dump_path)
    logger.info(f"Player ranking dump at {dump_path}")

    return ranked
