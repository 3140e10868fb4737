"""
Central configuration for the Diff-Diff tuning pipeline.

All shared constants and configuration values should be defined here
to avoid duplication and ensure consistency across modules.
"""

from pathlib import Path

# --- Project Paths ---
PROJECT_ROOT = Path(__file__).parent.parent
DATA_FOLDER = PROJECT_ROOT / "data"
OUTPUT_FOLDER = DATA_FOLDER / "processed"
ASSETS_FOLDER = DATA_FOLDER / "raw"

# Song metadata (uid + per-difficulty level labels), read at the start of a tune
MUSIC_FILE = ASSETS_FOLDER / "musics.json"

# --- Chart Enumeration ---
ABSENT_LEVEL = "0"  # Level label used upstream for "no chart at this difficulty"
ALL_PLATFORMS = "all"  # Rank lookups across every platform

# --- Content Exclusion ---
# Characters and elfins retired from scoring; their plays never count
CHARACTER_SKIP = frozenset({"16"})
ELFIN_SKIP = frozenset({"7"})

# --- Pairwise Comparison ---
ACC_JUDGE_WEIGHT = 0.36  # Damping applied to accuracy when comparing charts
OUTLIER_THRESHOLD = 100  # Pairs with |average diff| above this are dropped
WEEK_OLD_DAYS = 7  # A chart becomes a stable benchmark after this many days

# --- Level Interpolation ---
LEVEL_MEAN = 10  # Centre of the bell curve used to smear unrated charts
LEVEL_STDEV = 0.8
TOP_LEVEL_MARGIN = 0.5  # Headroom above the highest nominal level

# --- Player Rating ---
PLAYER_ACC_JUDGE_WEIGHT = 1
RL_DECAY = 0.8  # Each weaker result counts this much less than the next
RL_DIVISOR = 5

# --- Worker Commands ---
COMPUTE_DIFF_DIFF = "computeDiffDiff"
COMPUTE_PLAYER_RATINGS = "computePlayerRatings"
ALLOWED_COMMANDS = frozenset({COMPUTE_DIFF_DIFF, COMPUTE_PLAYER_RATINGS})
