"""
Small shared helpers: timestamps, ids and cent arithmetic.
"""

import math
import re
import secrets
import time
from datetime import datetime, timezone


def to_iso(value: datetime) -> str:
    """UTC datetime as ISO-8601 with millisecond precision and a Z suffix."""
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def now_iso() -> str:
    return to_iso(datetime.now(timezone.utc))


def parse_iso(value: str) -> datetime:
    """Parse timestamps written by now_iso (and other ISO-8601 strings)."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def new_id(prefix: str, suffix: str = None) -> str:
    """
    Build ids like txn-1700000000000-3fa2c1-earn.
    The random part keeps ids unique within the same millisecond.
    """
    parts = [prefix, str(int(time.time() * 1000)), secrets.token_hex(3)]
    if suffix:
        parts.append(suffix)
    return "-".join(parts)


def round_half_up(value: float) -> int:
    """Round halves up; round() would use banker's rounding."""
    return int(math.floor(value + 0.5))


def to_cents(amount: float) -> int:
    return round_half_up(float(amount) * 100)


def from_cents(cents: int) -> float:
    return round_half_up(cents) / 100


def slugify(value: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower().strip())
    return slug.strip("-")


def normalize_email(email: str) -> str:
    return email.strip().lower()
