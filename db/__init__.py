"""Database package for the dogebot backend."""

from .models import init_db, get_connection

__all__ = ["init_db", "get_connection"]
