"""
Persistence Gateway

The narrow read/write contract the Diff-Diff engine uses to reach chart
ranks, song freshness, player play logs and its own results.
Implementations:
- memory: dict-backed store (tests, ad-hoc runs)
- csv_store: folder of CSV tables
"""

from abc import ABC, abstractmethod
from typing import Iterable, Iterator

from src.diffdiff.models import Chart, DiffDiffResult, PlayerRating, PlayRecord, RankEntry


class GatewayError(Exception):
    """Base exception for persistence failures"""
    pass


class MissingTableError(GatewayError):
    """Raised when a required table is not present in the store"""
    pass


class PersistenceGateway(ABC):

    @abstractmethod
    def get_ranks(self, uid: str, difficulty: int, platform: str) -> list[RankEntry]:
        """Leaderboard entries for one chart; platform "all" means every platform."""

    @abstractmethod
    def get_diff_diff_results(self) -> list[DiffDiffResult]:
        ...

    @abstractmethod
    def put_diff_diff_results(self, results: list[DiffDiffResult]) -> None:
        """Replace every stored result with `results`."""

    @abstractmethod
    def put_chart_diff_diff_index(self, chart: Chart, absolute: float, relative: float) -> None:
        """Secondary per-chart write, looked up by (uid, difficulty)."""

    @abstractmethod
    def is_week_old(self, uid: str) -> bool:
        ...

    @abstractmethod
    def iterate_players(self) -> Iterator[tuple[str, list[PlayRecord]]]:
        """Lazy, single-pass sequence of (player_id, plays)."""

    @abstractmethod
    def clear_player_ratings(self) -> None:
        ...

    @abstractmethod
    def put_player_ratings(self, ratings: Iterable[tuple[str, float]]) -> None:
        """Write a batch of (player_id, rl) pairs."""

    @abstractmethod
    def set_player_rating_rank(self, ranked: list[PlayerRating]) -> None:
        """Replace the ranked player list."""

    @abstractmethod
    def append_player_rating_history(self, player_id: str, rl: float, rank: int,
                                     tune_name: str | None = None) -> None:
        """Add one history record; history is never cleared."""
