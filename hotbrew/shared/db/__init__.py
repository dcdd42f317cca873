"""SQLite connection management."""
from hotbrew.shared.db.connection import ConnectionPool

__all__ = ["ConnectionPool"]
