"""Database layer for finagenda application."""

from finagenda.database.base import Database
from finagenda.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
