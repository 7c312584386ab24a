"""
DB-backed level store; same API as store.MemoryLevelStore.

Public methods:
- get_level(difficulty) -> int   (1 when nothing saved yet)
- save_level(difficulty, level) -> None
- all_levels() -> dict
- reset() -> None

Takes a session factory rather than a session: a game session outlives the
request that created it, so each call opens and closes its own DB session.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Dict

from sqlalchemy import delete
from sqlalchemy.orm import Session

from .models import LevelRecord
from .types import DIFFICULTIES, Difficulty

logger = logging.getLogger(__name__)


class DBLevelStore:
    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def get_level(self, difficulty: Difficulty) -> int:
        with self.session_factory() as db:
            record = db.get(LevelRecord, difficulty)
            return record.level if record else 1

    def save_level(self, difficulty: Difficulty, level: int) -> None:
        if level < 1:
            raise ValueError("Level starts at 1.")
        with self.session_factory() as db:
            record = db.get(LevelRecord, difficulty)
            if record is None:
                record = LevelRecord(difficulty=difficulty)
                db.add(record)
            record.level = level
            record.updated_at = datetime.utcnow()
            db.commit()
        logger.debug("saved level %d for %s", level, difficulty)

    def all_levels(self) -> Dict[Difficulty, int]:
        return {difficulty: self.get_level(difficulty) for difficulty in DIFFICULTIES}

    def reset(self) -> None:
        with self.session_factory() as db:
            db.execute(delete(LevelRecord))
            db.commit()
