"""
Tests for chart enumeration.
"""

import json

import pytest

from src.diffdiff.charts import enumerate_charts, load_musics, parse_music
from src.diffdiff.models import Chart, MusicData


class TestParseMusic:
    """Tests for parse_music function."""

    def test_skips_absent_difficulties(self):
        music = MusicData(uid="0-1", difficulty=("3", "0", "9", "0"))
        charts = parse_music(music)
        assert charts == [Chart("0-1", 0, "3"), Chart("0-1", 2, "9")]

    def test_keeps_question_levels(self):
        music = MusicData(uid="0-2", difficulty=("?", "11"))
        charts = parse_music(music)
        assert [c.level for c in charts] == ["?", "11"]

    def test_none_is_absent(self):
        music = MusicData(uid="0-3", difficulty=("2", None, "7"))
        charts = parse_music(music)
        assert [c.difficulty for c in charts] == [0, 2]

    def test_all_absent(self):
        assert parse_music(MusicData(uid="0-4", difficulty=("0", "0", "0"))) == []


class TestEnumerateCharts:
    """Tests for enumerate_charts function."""

    def test_preserves_song_then_difficulty_order(self):
        musics = [
            MusicData(uid="a", difficulty=("1", "5")),
            MusicData(uid="b", difficulty=("0", "8")),
        ]
        keys = [c.key for c in enumerate_charts(musics)]
        assert keys == [("a", 0), ("a", 1), ("b", 1)]

    def test_empty(self):
        assert enumerate_charts([]) == []


class TestNumericLevel:
    """Tests for Chart.numeric_level."""

    def test_integer_label(self):
        assert Chart("a", 0, "11").numeric_level == 11.0

    def test_question_label(self):
        assert Chart("a", 0, "?").numeric_level is None

    def test_nan_label_is_unrated(self):
        assert Chart("a", 0, "nan").numeric_level is None


class TestLoadMusics:
    """Tests for load_musics function."""

    def test_reads_json(self, tmp_path):
        path = tmp_path / "musics.json"
        path.write_text(json.dumps([
            {"uid": "0-0", "difficulty": ["2", "5", "0"]},
            {"uid": 7, "difficulty": [1, 0]},
        ]), encoding="utf-8")

        musics = load_musics(path)

        assert musics[0] == MusicData(uid="0-0", difficulty=("2", "5", "0"))
        assert musics[1].uid == "7"
        assert [c.key for c in enumerate_charts(musics)] == [("0-0", 0), ("0-0", 1), ("7", 0)]

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_musics(tmp_path / "missing.json")
