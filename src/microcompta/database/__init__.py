"""Database layer for microcompta application."""

from microcompta.database.base import Database
from microcompta.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
