"""
CSV Persistence Gateway

Stores every gateway table as a CSV file inside one folder. Inputs are
produced by the upstream collectors; outputs are rewritten atomically.

Tables:
- ranks.csv: uid, difficulty, platform, user_id, acc, character_uid, elfin_uid
- songs.csv: uid, first_seen
- plays.csv: player_id, uid, difficulty, acc, character_uid, elfin_uid
- diffdiff.csv / diffdiff_chart.csv: Diff-Diff results and per-chart index
- player_ratings.csv / player_rating_rank.csv / player_rating_history.csv

Usage:
    from src.storage.csv_store import CsvGateway
    gateway = CsvGateway(DATA_FOLDER)
"""

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pandas as pd

from src.config import ALL_PLATFORMS, WEEK_OLD_DAYS
from src.diffdiff.models import DiffDiffResult, PlayerRating, PlayRecord, RankEntry
from src.storage.gateway import MissingTableError, PersistenceGateway
from src.utils import atomic_write_csv, setup_logging

# --- Module Logger ---
logger = setup_logging(__name__)

# Identifier columns are kept as strings so "007" and "7" stay distinct
ID_DTYPES = {
    'uid': str,
    'platform': str,
    'user_id': str,
    'player_id': str,
    'character_uid': str,
    'elfin_uid': str,
    'level': str,
}

DIFF_DIFF_COLUMNS = ['uid', 'difficulty', 'level', 'absolute', 'relative']
CHART_INDEX_COLUMNS = ['uid', 'difficulty', 'absolute', 'relative']
PLAYER_RATING_COLUMNS = ['player_id', 'rl']
RANK_COLUMNS = ['rank', 'player_id', 'rl']
HISTORY_COLUMNS = ['tune_name', 'player_id', 'rl', 'rank']


def _utc_now():
    return datetime.now(timezone.utc)


class CsvGateway(PersistenceGateway):

    def __init__(self, folder: Path, now=_utc_now, week_old_days=WEEK_OLD_DAYS):
        self.folder = Path(folder)
        self.now = now
        self.week_old_days = week_old_days
        self._ranks = None
        self._first_seen = None
        self._chart_index = None

    # --- Table helpers ---
    def _path(self, name: str) -> Path:
        return self.folder / f"{name}.csv"

    def _read(self, name: str, required: bool = True) -> pd.DataFrame | None:
        path = self._path(name)
        if not path.exists():
            if required:
                raise MissingTableError(f"Table '{name}' not found at {path}")
            return None
        return pd.read_csv(path, dtype=ID_DTYPES, keep_default_na=False)

    def _write(self, name: str, df: pd.DataFrame) -> None:
        atomic_write_csv(df, self._path(name), index=False)

    # --- Inputs ---
    def get_ranks(self, uid, difficulty, platform):
        if self._ranks is None:
            df = self._read('ranks')
            self._ranks = {
                (str(key_uid), int(key_difficulty)): group
                for (key_uid, key_difficulty), group in df.groupby(['uid', 'difficulty'], sort=False)
            }
            logger.info(f"Loaded {len(df)} rank entries for {len(self._ranks)} charts")

        group = self._ranks.get((uid, difficulty))
        if group is None:
            return []
        if platform != ALL_PLATFORMS:
            group = group[group['platform'] == platform]

        return [
            RankEntry(
                platform=row['platform'],
                user_id=row['user_id'],
                acc=float(row['acc']),
                character_uid=row['character_uid'],
                elfin_uid=row['elfin_uid'],
            )
            for row in group.to_dict('records')
        ]

    def is_week_old(self, uid):
        if self._first_seen is None:
            df = self._read('songs')
            first_seen = pd.to_datetime(df['first_seen'], utc=True)
            self._first_seen = dict(zip(df['uid'], first_seen))

        first_seen = self._first_seen.get(uid)
        if first_seen is None:
            return False
        return self.now() - first_seen.to_pydatetime() >= timedelta(days=self.week_old_days)

    def iterate_players(self):
        df = self._read('plays')
        for player_id, group in df.groupby('player_id', sort=False):
            plays = [
                PlayRecord(
                    uid=row['uid'],
                    difficulty=int(row['difficulty']),
                    acc=float(row['acc']),
                    character_uid=row['character_uid'],
                    elfin_uid=row['elfin_uid'],
                )
                for row in group.to_dict('records')
            ]
            yield player_id, plays

    # --- Diff-Diff results ---
    def get_diff_diff_results(self):
        df = self._read('diffdiff', required=False)
        if df is None:
            return []
        return [
            DiffDiffResult(
                uid=row['uid'],
                difficulty=int(row['difficulty']),
                level=row['level'],
                absolute=float(row['absolute']),
                relative=float(row['relative']),
            )
            for row in df.to_dict('records')
        ]

    def put_diff_diff_results(self, results):
        df = pd.DataFrame(
            [(r.uid, r.difficulty, r.level, r.absolute, r.relative) for r in results],
            columns=DIFF_DIFF_COLUMNS,
        )
        self._write('diffdiff', df)

    def put_chart_diff_diff_index(self, chart, absolute, relative):
        if self._chart_index is None:
            df = self._read('diffdiff_chart', required=False)
            self._chart_index = {}
            if df is not None:
                for row in df.to_dict('records'):
                    self._chart_index[(row['uid'], int(row['difficulty']))] = (row['absolute'], row['relative'])

        self._chart_index[chart.key] = (absolute, relative)
        df = pd.DataFrame(
            [(uid, difficulty, a, r) for (uid, difficulty), (a, r) in self._chart_index.items()],
            columns=CHART_INDEX_COLUMNS,
        )
        self._write('diffdiff_chart', df)

    # --- Player ratings ---
    def clear_player_ratings(self):
        self._write('player_ratings', pd.DataFrame(columns=PLAYER_RATING_COLUMNS))

    def put_player_ratings(self, ratings):
        current = self._read('player_ratings', required=False)
        batch = pd.DataFrame(list(ratings), columns=PLAYER_RATING_COLUMNS)
        if current is not None and not current.empty:
            current = current[~current['player_id'].isin(batch['player_id'])]
            batch = pd.concat([current, batch], ignore_index=True)
        self._write('player_ratings', batch)

    def set_player_rating_rank(self, ranked):
        df = pd.DataFrame(
            [(p.rank, p.player_id, p.rl) for p in ranked],
            columns=RANK_COLUMNS,
        )
        self._write('player_rating_rank', df)

    def get_player_rating_rank(self) -> list[PlayerRating]:
        df = self._read('player_rating_rank', required=False)
        if df is None:
            return []
        return [
            PlayerRating(player_id=row['player_id'], rl=float(row['rl']), rank=int(row['rank']))
            for row in df.to_dict('records')
        ]

    def append_player_rating_history(self, player_id, rl, rank, tune_name=None):
        path = self._path('player_rating_history')
        path.parent.mkdir(parents=True, exist_ok=True)
        row = pd.DataFrame([(tune_name or '', player_id, rl, rank)], columns=HISTORY_COLUMNS)
        row.to_csv(path, mode='a', header=not path.exists(), index=False)
