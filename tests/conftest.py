"""
Shared fixtures for Diff-Diff tests.
"""

from datetime import datetime, timedelta, timezone

import pytest

from src.diffdiff.context import RunContext
from src.diffdiff.models import PlayRecord, RankEntry
from src.storage.memory import InMemoryGateway

NOW = datetime(2026, 1, 19, 12, 0, tzinfo=timezone.utc)
OLD = NOW - timedelta(days=30)
NEW = NOW - timedelta(days=1)


def rank(user_id, acc, platform="pc", character_uid="1", elfin_uid="1"):
    return RankEntry(platform=platform, user_id=user_id, acc=acc,
                     character_uid=character_uid, elfin_uid=elfin_uid)


def play(uid, difficulty, acc, character_uid="1", elfin_uid="1"):
    return PlayRecord(uid=uid, difficulty=difficulty, acc=acc,
                      character_uid=character_uid, elfin_uid=elfin_uid)


@pytest.fixture
def make_gateway():
    """Factory for an in-memory gateway with a frozen clock."""
    def _make(ranks=None, first_seen=None, players=None):
        return InMemoryGateway(ranks=ranks, first_seen=first_seen, players=players, now=lambda: NOW)
    return _make


@pytest.fixture
def make_context(tmp_path):
    """Factory for a RunContext writing its dumps under tmp_path."""
    def _make(gateway, tune_name="test"):
        return RunContext(gateway=gateway, tune_name=tune_name, output_folder=tmp_path)
    return _make
