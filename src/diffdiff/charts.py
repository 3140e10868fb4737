"""
Chart Enumeration

Turns raw song metadata into Chart records, one per difficulty slot that
actually holds a chart. Also loads song metadata from the raw JSON asset.
"""

import json
from pathlib import Path

from src.config import ABSENT_LEVEL, MUSIC_FILE
from src.diffdiff.models import Chart, MusicData
from src.utils import setup_logging

# --- Module Logger ---
logger = setup_logging(__name__)


def parse_music(music: MusicData, absent_level: str = ABSENT_LEVEL) -> list[Chart]:
    """Expand one song into its charts, skipping absent difficulty slots."""
    return [
        Chart(uid=music.uid, difficulty=difficulty, level=str(level))
        for difficulty, level in enumerate(music.difficulty)
        if level is not None and str(level) != absent_level
    ]


def enumerate_charts(musics, absent_level: str = ABSENT_LEVEL) -> list[Chart]:
    """Flatten every song into charts, preserving song then difficulty order."""
    charts = []
    for music in musics:
        charts.extend(parse_music(music, absent_level))
    return charts


def load_musics(path: Path = MUSIC_FILE) -> list[MusicData]:
    """
    Load song metadata from a JSON array of {"uid": ..., "difficulty": [...]}.

    Args:
        path: JSON file exported from the upstream album API

    Returns:
        List of MusicData in file order
    """
    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)

    musics = [
        MusicData(uid=str(item["uid"]), difficulty=tuple(item["difficulty"]))
        for item in raw
    ]
    logger.info(f"Loaded {len(musics)} songs from {path}")
    return musics
