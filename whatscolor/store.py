"""
In-memory stores
- MemoryLevelStore: level per difficulty without a database
- SessionStore: live game sessions by id
"""

from threading import RLock
from typing import Dict, Optional
from uuid import uuid4

from .session import SessionController
from .types import DIFFICULTIES, Difficulty


class MemoryLevelStore:
    def __init__(self) -> None:
        self._levels: Dict[Difficulty, int] = {}
        self._lock = RLock()

    def get_level(self, difficulty: Difficulty) -> int:
        with self._lock:
            return self._levels.get(difficulty, 1)

    def save_level(self, difficulty: Difficulty, level: int) -> None:
        if level < 1:
            raise ValueError("Level starts at 1.")
        with self._lock:
            self._levels[difficulty] = level

    def all_levels(self) -> Dict[Difficulty, int]:
        return {difficulty: self.get_level(difficulty) for difficulty in DIFFICULTIES}

    def reset(self) -> None:
        with self._lock:
            self._levels.clear()


class SessionStore:
    """
    Each SessionController is single-threaded; the lock only guards the registry
    and lets the API serialize calls into one session.
    """

    def __init__(self) -> None:
        self._sessions: Dict[str, SessionController] = {}
        self._lock = RLock()

    @property
    def lock(self) -> RLock:
        return self._lock

    def add(self, controller: SessionController) -> str:
        session_id = str(uuid4())
        with self._lock:
            self._sessions[session_id] = controller
        return session_id

    def get(self, session_id: str) -> Optional[SessionController]:
        with self._lock:
            return self._sessions.get(session_id)

    def remove(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
