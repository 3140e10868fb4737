"""
Per-run state shared by the Diff-Diff commands of one tune.
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from src.config import CHARACTER_SKIP, ELFIN_SKIP, OUTPUT_FOLDER
from src.storage.gateway import PersistenceGateway


def make_tune_name(now: datetime | None = None) -> str:
    """Tune identifier used to tag dumps and history, e.g. "20260119-0930"."""
    return (now or datetime.now()).strftime('%Y%m%d-%H%M')


@dataclass
class RunContext:
    """
    Built once at the start of a tune and passed to every command.

    Attributes:
        gateway: Persistence gateway for this run
        tune_name: Identifier of the run, used in dump file names and history
        output_folder: Where the JSON inspection dumps are written
        character_skip: Character uids whose plays are ignored
        elfin_skip: Elfin uids whose plays are ignored
    """

    gateway: PersistenceGateway
    tune_name: str = field(default_factory=make_tune_name)
    output_folder: Path = OUTPUT_FOLDER
    character_skip: frozenset = CHARACTER_SKIP
    elfin_skip: frozenset = ELFIN_SKIP
    _week_old: dict = field(default_factory=dict, repr=False)

    def is_week_old(self, uid: str) -> bool:
        """Gateway freshness lookup, asked at most once per uid per run."""
        if uid not in self._week_old:
            self._week_old[uid] = self.gateway.is_week_old(uid)
        return self._week_old[uid]

    def is_excluded(self, character_uid, elfin_uid) -> bool:
        return str(character_uid) in self.character_skip or str(elfin_uid) in self.elfin_skip

    def dump_path(self, kind: str) -> Path:
        return self.output_folder / f"tune-{self.tune_name}-{kind}.json"
