"""Persistence layer for beatcache.

This module provides:
- Async engine and session factory (asyncpg in production)
- The beatmap ORM table
- A session-scoped repository and a result-returning store on top of it
"""

from beatcache.persistence.db import (
    create_engine,
    create_session_factory,
    get_engine,
    get_session_factory,
    init_db,
)
from beatcache.persistence.repositories import BeatmapRepository
from beatcache.persistence.store import BeatmapStore
from beatcache.persistence.tables import Base, BeatmapTable

__all__ = [
    # DB
    "create_engine",
    "create_session_factory",
    "get_engine",
    "get_session_factory",
    "init_db",
    # Tables
    "Base",
    "BeatmapTable",
    # Access
    "BeatmapRepository",
    "BeatmapStore",
]
