"""Database layer package.

Public re-exports so callers can write::

    from searchengine.db import get_connection, init_db, transaction
"""

from searchengine.db.connection import get_connection, transaction
from searchengine.db.migrations import init_db

__all__ = ["get_connection", "init_db", "transaction"]
