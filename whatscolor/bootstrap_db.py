"""
Dev convenience: create tables if they don't exist.
Call this at startup in local/dev only
"""

from . import models  # noqa: F401  registers LevelRecord on Base
from .db import Base, engine


def create_all():
    Base.metadata.create_all(bind=engine)
