"""
Tests for the persistence gateways.
"""

import pandas as pd
import pytest

from conftest import NEW, NOW, OLD, play, rank
from src.diffdiff.models import Chart, DiffDiffResult, PlayerRating
from src.storage.csv_store import CsvGateway
from src.storage.gateway import MissingTableError

RESULTS = [
    DiffDiffResult("s2", 1, "10", 1.25, 10.5),
    DiffDiffResult("s1", 0, "?", 0.0, 9.75),
    DiffDiffResult("007", 3, "8", -0.5, 7.0),
]


def key_set(results):
    return {(r.uid, r.difficulty, r.level, r.absolute, r.relative) for r in results}


@pytest.fixture
def csv_gateway(tmp_path):
    pd.DataFrame([
        ("s1", 0, "pc", "u1", 91.5, "1", "1"),
        ("s1", 0, "mobile", "u1", 88.0, "16", "1"),
        ("s1", 1, "pc", "u2", 70.0, "1", "1"),
    ], columns=['uid', 'difficulty', 'platform', 'user_id', 'acc', 'character_uid', 'elfin_uid']).to_csv(
        tmp_path / "ranks.csv", index=False
    )
    pd.DataFrame([
        ("s1", OLD.isoformat()),
        ("s2", NEW.isoformat()),
    ], columns=['uid', 'first_seen']).to_csv(tmp_path / "songs.csv", index=False)
    pd.DataFrame([
        ("p1", "s1", 0, 91.5, "1", "1"),
        ("p2", "s1", 1, 70.0, "1", "1"),
        ("p1", "s1", 1, 60.0, "1", "7"),
    ], columns=['player_id', 'uid', 'difficulty', 'acc', 'character_uid', 'elfin_uid']).to_csv(
        tmp_path / "plays.csv", index=False
    )
    return CsvGateway(tmp_path, now=lambda: NOW)


class TestInMemoryGateway:
    """Tests for InMemoryGateway."""

    def test_diff_diff_round_trip(self, make_gateway):
        gateway = make_gateway()
        gateway.put_diff_diff_results(RESULTS)
        assert key_set(gateway.get_diff_diff_results()) == key_set(RESULTS)

    def test_platform_filter(self, make_gateway):
        gateway = make_gateway(ranks={("s", 0): [rank("u1", 90, "pc"), rank("u2", 80, "mobile")]})
        assert len(gateway.get_ranks("s", 0, "all")) == 2
        assert [e.user_id for e in gateway.get_ranks("s", 0, "mobile")] == ["u2"]
        assert gateway.get_ranks("missing", 0, "all") == []

    def test_week_old(self, make_gateway):
        gateway = make_gateway(first_seen={"old": OLD, "new": NEW})
        assert gateway.is_week_old("old") is True
        assert gateway.is_week_old("new") is False
        assert gateway.is_week_old("unknown") is False

    def test_iterate_players(self, make_gateway):
        gateway = make_gateway(players={"p1": [play("s", 0, 90)], "p2": []})
        assert [player_id for player_id, _ in gateway.iterate_players()] == ["p1", "p2"]


class TestCsvGateway:
    """Tests for CsvGateway."""

    def test_diff_diff_round_trip(self, tmp_path):
        gateway = CsvGateway(tmp_path)
        gateway.put_diff_diff_results(RESULTS)
        assert key_set(gateway.get_diff_diff_results()) == key_set(RESULTS)

    def test_no_results_yet(self, tmp_path):
        assert CsvGateway(tmp_path).get_diff_diff_results() == []

    def test_get_ranks(self, csv_gateway):
        entries = csv_gateway.get_ranks("s1", 0, "all")
        assert [(e.user_id, e.platform, e.acc) for e in entries] == [("u1", "pc", 91.5), ("u1", "mobile", 88.0)]
        assert entries[1].character_uid == "16"
        assert len(csv_gateway.get_ranks("s1", 0, "pc")) == 1
        assert csv_gateway.get_ranks("s9", 0, "all") == []

    def test_week_old(self, csv_gateway):
        assert csv_gateway.is_week_old("s1") is True
        assert csv_gateway.is_week_old("s2") is False
        assert csv_gateway.is_week_old("s3") is False

    def test_iterate_players(self, csv_gateway):
        players = dict(csv_gateway.iterate_players())
        assert set(players) == {"p1", "p2"}
        assert [(p.uid, p.difficulty, p.acc) for p in players["p1"]] == [("s1", 0, 91.5), ("s1", 1, 60.0)]
        assert players["p1"][1].elfin_uid == "7"

    def test_missing_table(self, tmp_path):
        with pytest.raises(MissingTableError):
            CsvGateway(tmp_path).get_ranks("s1", 0, "all")

    def test_chart_index_accumulates(self, tmp_path):
        gateway = CsvGateway(tmp_path)
        gateway.put_chart_diff_diff_index(Chart("s1", 0, "5"), 0.5, 5.5)
        gateway.put_chart_diff_diff_index(Chart("s1", 1, "8"), -0.5, 8.25)
        gateway.put_chart_diff_diff_index(Chart("s1", 0, "5"), 0.75, 5.75)

        df = pd.read_csv(tmp_path / "diffdiff_chart.csv", dtype={'uid': str})
        assert df.to_dict('records') == [
            {'uid': "s1", 'difficulty': 0, 'absolute': 0.75, 'relative': 5.75},
            {'uid': "s1", 'difficulty': 1, 'absolute': -0.5, 'relative': 8.25},
        ]

    def test_player_ratings_replace_all(self, tmp_path):
        gateway = CsvGateway(tmp_path)
        gateway.put_player_ratings([("ghost", 1.0)])
        gateway.clear_player_ratings()
        gateway.put_player_ratings([("p1", 2.0), ("p2", 0.5)])

        df = pd.read_csv(tmp_path / "player_ratings.csv", dtype={'player_id': str})
        assert df.to_dict('records') == [{'player_id': "p1", 'rl': 2.0}, {'player_id': "p2", 'rl': 0.5}]

    def test_rank_round_trip(self, tmp_path):
        gateway = CsvGateway(tmp_path)
        ranked = [PlayerRating("p1", 2.0, 1), PlayerRating("p2", 0.5, 2)]
        gateway.set_player_rating_rank(ranked)
        assert gateway.get_player_rating_rank() == ranked

    def test_history_appends(self, tmp_path):
        gateway = CsvGateway(tmp_path)
        gateway.append_player_rating_history("p1", 2.0, 1, "t1")
        gateway.append_player_rating_history("p1", 2.5, 1, "t2")

        df = pd.read_csv(tmp_path / "player_rating_history.csv", dtype={'player_id': str, 'tune_name': str})
        assert df['tune_name'].tolist() == ["t1", "t2"]
        assert df['rl'].tolist() == [2.0, 2.5]
