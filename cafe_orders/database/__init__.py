"""Persistence layer"""
from ..config import Config
from .base import BaseDatabase, StoreConnection
from .database import Database
from .memory import MemoryDatabase


def create_database() -> BaseDatabase:
    """PostgreSQL when DATABASE_URL is set, otherwise the in-memory store"""
    if Config.DATABASE_URL:
        return Database(Config.DATABASE_URL)
    return MemoryDatabase()


__all__ = [
    'BaseDatabase',
    'StoreConnection',
    'Database',
    'MemoryDatabase',
    'create_database'
]
