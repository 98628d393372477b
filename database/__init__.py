"""Database module."""
from database.db import get_connection, get_db, init_db, reset_db

__all__ = ['get_connection', 'get_db', 'init_db', 'reset_db']
