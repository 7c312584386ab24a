"""
SQLAlchemy ORM models.

Tables:
- levels: one row per difficulty, holding the level the player has reached
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Enum, Integer
from sqlalchemy.orm import Mapped, mapped_column

from .db import Base
from .types import Difficulty


class LevelRecord(Base):
    __tablename__ = "levels"

    difficulty: Mapped[Difficulty] = mapped_column(
        Enum("easy", "normal", "hard", name="difficulty"),
        primary_key=True,
    )
    level: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
