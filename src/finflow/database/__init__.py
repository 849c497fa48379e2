"""Database layer for finflow application."""

from finflow.database.base import Database
from finflow.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
