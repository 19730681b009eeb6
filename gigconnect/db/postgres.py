"""
PostgreSQL mirror - engine and table definitions.

Each local collection key maps to one table keyed by the entity id.
Column names match the snake_case keys used in the local store, so
rows and local dicts convert by picking columns.
"""
import logging
from contextlib import contextmanager
from typing import Optional

from sqlalchemy import (
    Boolean, Column, Float, Integer, JSON, MetaData, String, Table, Text,
    create_engine, text,
)
from sqlalchemy.engine import Engine

from gigconnect.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

metadata = MetaData()


def _money(name: str) -> Column:
    return Column(name, Float)


profiles = Table(
    "profiles", metadata,
    Column("id", String, primary_key=True),
    Column("email", String),
    Column("name", String),
    Column("role", String),
    Column("approved", Boolean),
    Column("referral_code", String),
    Column("profile_bio", Text),
    Column("skills", JSON),
    Column("portfolio_links", JSON),
    Column("experience_level", String),
    Column("availability", String),
    Column("company_name", String),
    Column("company_description", Text),
    Column("website", String),
    Column("industry", String),
    Column("bank_details", JSON),
)

jobs = Table(
    "jobs", metadata,
    Column("id", String, primary_key=True),
    Column("employer_id", String),
    Column("title", String),
    Column("description", Text),
    Column("category", String),
    _money("payment"),
    Column("deadline", String),
    Column("status", String),
    Column("created_at", String),
    Column("is_featured", Boolean),
    Column("hired_user_id", String),
    Column("payment_status", String),
    _money("paid_amount"),
    _money("platform_fee"),
    Column("paid_at", String),
    Column("work_type", String),
    Column("location", String),
    Column("source_name", String),
    Column("source_website", String),
    Column("source_email", String),
    Column("source_phone", String),
    Column("verification_status", String),
    Column("verification_note", Text),
    Column("safety_notes", Text),
)

applications = Table(
    "applications", metadata,
    Column("id", String, primary_key=True),
    Column("job_id", String),
    Column("job_seeker_id", String),
    Column("cover_letter", Text),
    Column("status", String),
    Column("applied_at", String),
)

messages = Table(
    "messages", metadata,
    Column("id", String, primary_key=True),
    Column("from_user_id", String),
    Column("to_user_id", String),
    Column("content", Text),
    Column("timestamp", String),
    Column("is_read", Boolean),
)

notifications = Table(
    "notifications", metadata,
    Column("id", String, primary_key=True),
    Column("user_id", String),
    Column("message", Text),
    Column("link", JSON),
    Column("is_read", Boolean),
    Column("created_at", String),
)

reviews = Table(
    "reviews", metadata,
    Column("id", String, primary_key=True),
    Column("job_id", String),
    Column("reviewer_id", String),
    Column("reviewee_id", String),
    Column("rating", Integer),
    Column("comment", Text),
    Column("created_at", String),
)

subscribers = Table(
    "subscribers", metadata,
    Column("id", String, primary_key=True),
    Column("email", String),
    Column("phone", String),
    Column("subscribed_at", String),
)

wallet_transactions = Table(
    "wallet_transactions", metadata,
    Column("id", String, primary_key=True),
    Column("user_id", String),
    Column("direction", String),
    Column("type", String),
    _money("amount"),
    Column("description", Text),
    Column("job_id", String),
    Column("created_at", String),
)

payout_requests = Table(
    "payout_requests", metadata,
    Column("id", String, primary_key=True),
    Column("user_id", String),
    _money("amount"),
    Column("method", String),
    Column("bank_details", JSON),
    Column("status", String),
    Column("note", Text),
    Column("created_at", String),
    Column("processed_at", String),
)

platform_transactions = Table(
    "platform_transactions", metadata,
    Column("id", String, primary_key=True),
    _money("amount"),
    Column("job_id", String),
    Column("payer_id", String),
    Column("payee_id", String),
    Column("created_at", String),
    Column("description", Text),
)

blog_posts = Table(
    "blog_posts", metadata,
    Column("id", String, primary_key=True),
    Column("title", String),
    Column("slug", String),
    Column("excerpt", Text),
    Column("content", Text),
    Column("category", String),
    Column("tags", JSON),
    Column("author_name", String),
    Column("status", String),
    Column("created_at", String),
    Column("updated_at", String),
    Column("published_at", String),
    Column("cover_image", String),
    Column("is_ai", Boolean),
    Column("source", String),
)

referral_events = Table(
    "referral_events", metadata,
    Column("id", String, primary_key=True),
    Column("referrer_id", String),
    Column("referred_user_id", String),
    Column("type", String),
    Column("job_id", String),
    _money("amount"),
    Column("created_at", String),
)


_engine: Optional[Engine] = None


def get_engine() -> Optional[Engine]:
    """
    Get or create the mirror engine.
    Returns None when no PostgreSQL host is configured.
    """
    global _engine
    if _engine is None and settings.remote_sync_enabled:
        # pool_size=5: maintain 5 connections ready
        # max_overflow=10: allow 10 extra connections under load
        _engine = create_engine(
            settings.postgres_url,
            pool_size=5,
            max_overflow=10,
            pool_pre_ping=True,
            echo=settings.debug  # Log SQL queries in debug mode
        )
    return _engine


@contextmanager
def get_db_connection(engine: Engine):
    """
    Transactional connection. Commits on success, rolls back on error.
    Usage:
        with get_db_connection(engine) as conn:
            conn.execute(jobs.select())
    """
    with engine.begin() as conn:
        yield conn


def create_tables(engine: Engine) -> None:
    """Create mirror tables that don't exist yet."""
    metadata.create_all(engine)


def test_postgres_connection(engine: Optional[Engine] = None) -> bool:
    """
    Test if PostgreSQL is reachable.
    Returns True if connection successful, False otherwise.
    """
    engine = engine if engine is not None else get_engine()
    if engine is None:
        return False
    try:
        with engine.connect() as conn:
            row = conn.execute(text("SELECT 1 as test")).fetchone()
            return row[0] == 1
    except Exception as e:
        logger.warning("PostgreSQL connection failed: %s", e)
        return False
