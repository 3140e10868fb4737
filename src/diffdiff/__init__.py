"""
Diff-Diff Inference

Modules:
- charts: Chart enumeration from song metadata
- engine: Pairwise comparison and absolute score aggregation
- interpolation: Level-distribution interpolation to relative scores
- player_rating: Player rl aggregation and ranking
- worker: Single background worker dispatch
- tune: End-to-end tuning run
"""


def __getattr__(name):
    """Lazy imports to avoid RuntimeWarning when running modules directly."""
    if name == "compute_diff_diff":
        from src.diffdiff.engine import compute_diff_diff
        return compute_diff_diff
    if name == "compute_player_ratings":
        from src.diffdiff.player_rating import compute_player_ratings
        return compute_player_ratings
    if name == "run_tune":
        from src.diffdiff.tune import run_tune
        return run_tune
    if name == "run_tune_main":
        from src.diffdiff.tune import main
        return main
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
