"""
Tune Runner

Runs one complete tuning pass: Diff-Diff chart difficulties first, then
player ratings built on them. Both computations go through the background
worker so the calling thread stays free.

Usage:
    python -m src.diffdiff.tune
    OR
    from src.diffdiff import run_tune
"""

import sys
from pathlib import Path

# Enable both `python src/diffdiff/tune.py` and `python -m src.diffdiff.tune` execution.
# Required for src.config/src.utils imports to resolve correctly.
_project_root = str(Path(__file__).parent.parent.parent)
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from src.config import COMPUTE_DIFF_DIFF, COMPUTE_PLAYER_RATINGS, DATA_FOLDER, MUSIC_FILE, OUTPUT_FOLDER
from src.diffdiff.charts import load_musics
from src.diffdiff.context import RunContext
from src.diffdiff.engine import compute_diff_diff
from src.diffdiff.player_rating import compute_player_ratings
from src.diffdiff.worker import JobDispatcher
from src.storage.csv_store import CsvGateway
from src.utils import setup_logging

# --- Module Logger ---
logger = setup_logging(__name__)


def create_dispatcher() -> JobDispatcher:
    return JobDispatcher({
        COMPUTE_DIFF_DIFF: compute_diff_diff,
        COMPUTE_PLAYER_RATINGS: compute_player_ratings,
    })


def run_tune(musics, context, dispatcher=None):
    """
    Compute Diff-Diff results and then player ratings for one tune.

    Args:
        musics: List of MusicData
        context: RunContext of this tune
        dispatcher: JobDispatcher to run on; commands run inline when None
    """
    dispatcher = dispatcher or create_dispatcher()

    logger.info("=" * 60)
    logger.info(f"Tune {context.tune_name}: computing Diff-Diff")
    logger.info("=" * 60)
    dispatcher.dispatch(COMPUTE_DIFF_DIFF, musics, context)

    logger.info("=" * 60)
    logger.info(f"Tune {context.tune_name}: computing player ratings")
    logger.info("=" * 60)
    dispatcher.dispatch(COMPUTE_PLAYER_RATINGS, context)


def main():
    musics = load_musics(MUSIC_FILE)
    context = RunContext(gateway=CsvGateway(DATA_FOLDER), output_folder=OUTPUT_FOLDER)

    dispatcher = create_dispatcher()
    dispatcher.start()
    try:
        run_tune(musics, context, dispatcher)
    finally:
        dispatcher.stop()

    logger.info(f"Tune {context.tune_name} complete")
    return context


if __name__ == "__main__":
    main()
