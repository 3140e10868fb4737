"""
Data records passed between the Diff-Diff components and the gateway.
"""

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class MusicData:
    """One song: its uid and the level label of each difficulty slot."""

    uid: str
    difficulty: tuple[str | None, ...]


@dataclass(frozen=True)
class Chart:
    """A song at one difficulty. `level` is the raw nominal label, e.g. "11" or "?"."""

    uid: str
    difficulty: int
    level: str

    @property
    def key(self) -> tuple[str, int]:
        return (self.uid, self.difficulty)

    @property
    def numeric_level(self) -> float | None:
        """Parsed level, or None for unrated ("question") charts."""
        try:
            value = float(self.level)
        except (TypeError, ValueError):
            return None
        if math.isnan(value):
            return None
        return value


@dataclass(frozen=True)
class RankEntry:
    platform: str
    user_id: str
    acc: float
    character_uid: str
    elfin_uid: str


@dataclass(frozen=True)
class PlayRecord:
    uid: str
    difficulty: int
    acc: float
    character_uid: str
    elfin_uid: str


@dataclass(frozen=True)
class DiffDiffResult:
    uid: str
    difficulty: int
    level: str
    absolute: float
    relative: float

    @property
    def chart(self) -> Chart:
        return Chart(self.uid, self.difficulty, self.level)


@dataclass(frozen=True)
class PlayerRating:
    player_id: str
    rl: float
    rank: int
