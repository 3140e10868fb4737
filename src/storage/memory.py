"""
In-memory Persistence Gateway

Dict-backed store holding every table of the gateway contract. Used by the
test-suite and for ad-hoc runs where nothing needs to survive the process.
"""

from datetime import datetime, timedelta, timezone

from src.config import ALL_PLATFORMS, WEEK_OLD_DAYS
from src.storage.gateway import PersistenceGateway


def _utc_now():
    return datetime.now(timezone.utc)


class InMemoryGateway(PersistenceGateway):
    """
    Args:
        ranks: dict of (uid, difficulty) -> list of RankEntry
        first_seen: dict of uid -> datetime the song was first published
        players: dict of player_id -> list of PlayRecord
        now: zero-argument callable returning the current datetime
        week_old_days: age at which a song counts as week-old
    """

    def __init__(self, ranks=None, first_seen=None, players=None, now=_utc_now,
                 week_old_days=WEEK_OLD_DAYS):
        self.ranks = dict(ranks or {})
        self.first_seen = dict(first_seen or {})
        self.players = dict(players or {})
        self.now = now
        self.week_old_days = week_old_days

        self.diff_diff_results = []
        self.chart_index = {}
        self.player_ratings = {}
        self.player_rating_rank = []
        self.player_rating_history = []

    def get_ranks(self, uid, difficulty, platform):
        entries = self.ranks.get((uid, difficulty), [])
        if platform == ALL_PLATFORMS:
            return list(entries)
        return [entry for entry in entries if entry.platform == platform]

    def get_diff_diff_results(self):
        return list(self.diff_diff_results)

    def put_diff_diff_results(self, results):
        self.diff_diff_results = list(results)

    def put_chart_diff_diff_index(self, chart, absolute, relative):
        self.chart_index[chart.key] = {'absolute': absolute, 'relative': relative}

    def is_week_old(self, uid):
        first_seen = self.first_seen.get(uid)
        if first_seen is None:
            return False
        return self.now() - first_seen >= timedelta(days=self.week_old_days)

    def iterate_players(self):
        for player_id, plays in self.players.items():
            yield player_id, list(plays)

    def clear_player_ratings(self):
        self.player_ratings = {}

    def put_player_ratings(self, ratings):
        for player_id, rl in ratings:
            self.player_ratings[player_id] = rl

    def set_player_rating_rank(self, ranked):
        self.player_rating_rank = list(ranked)

    def append_player_rating_history(self, player_id, rl, rank, tune_name=None):
        self.player_rating_history.append({
            'player_id': player_id,
            'rl': rl,
            'rank': rank,
            'tune_name': tune_name,
        })
