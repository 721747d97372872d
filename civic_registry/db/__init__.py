"""Database package — async SQLAlchemy engine, session factory, Base, transaction scope."""
from civic_registry.db.base import Base, async_session_factory, engine, get_db, session_scope

__all__ = ["Base", "async_session_factory", "engine", "get_db", "session_scope"]
