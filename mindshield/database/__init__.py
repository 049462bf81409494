"""
Database package for the MindShield call protection service.
Contains database models, connection management, and utilities.
"""

from .connection import get_db, engine, SessionLocal, check_database_health, create_tables, drop_tables
from .models import Base, CallRecord, FlaggedNumber
from .utils import CallRecordRepository

__all__ = [
    "get_db",
    "engine",
    "SessionLocal",
    "check_database_health",
    "create_tables",
    "drop_tables",
    "Base",
    "CallRecord",
    "FlaggedNumber",
    "CallRecordRepository"
]
