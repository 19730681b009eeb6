"""
Database module - MongoDB store and PostgreSQL mirror connections.
"""
from gigconnect.db.postgres import get_engine, test_postgres_connection
from gigconnect.db.mongodb import get_mongo_db, test_mongo_connection

__all__ = [
    "get_engine",
    "test_postgres_connection",
    "get_mongo_db",
    "test_mongo_connection"
]
