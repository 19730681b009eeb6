"""
Table Sync Service - best-effort mirror of local collections to PostgreSQL.

- hydrate(): full-table read of every mapped table into the local store
- sync_item(): upsert one entity right after a local write
- schedule_sync(): debounced whole-collection upsert, one timer per key
- delete_item(): delete one row

The local store stays authoritative. Every remote failure is logged and
dropped; nothing here raises into the calling service. Rows are matched on
`id`, last writer wins.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from sqlalchemy import Table, delete, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Engine

from gigconnect.core.config import get_settings
from gigconnect.db import postgres
from gigconnect.services.storage_service import StorageService, get_storage_service

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TableConfig:
    key: str
    table: Table
    id_field: str = "id"


TABLE_MAP: Dict[str, TableConfig] = {
    "users": TableConfig("users", postgres.profiles),
    "jobs": TableConfig("jobs", postgres.jobs),
    "applications": TableConfig("applications", postgres.applications),
    "messages": TableConfig("messages", postgres.messages),
    "notifications": TableConfig("notifications", postgres.notifications),
    "reviews": TableConfig("reviews", postgres.reviews),
    "subscribers": TableConfig("subscribers", postgres.subscribers),
    "walletTransactions": TableConfig("walletTransactions", postgres.wallet_transactions),
    "payoutRequests": TableConfig("payoutRequests", postgres.payout_requests),
    "platformTransactions": TableConfig("platformTransactions", postgres.platform_transactions),
    "blogPosts": TableConfig("blogPosts", postgres.blog_posts),
    "referralEvents": TableConfig("referralEvents", postgres.referral_events),
}


def to_row(config: TableConfig, item: dict) -> dict:
    """Local entity -> table row. Keys without a column (password_hash) are dropped."""
    return {column.name: item.get(column.name) for column in config.table.columns}


def from_row(config: TableConfig, row: Any) -> dict:
    """Table row -> local entity. NULL columns are left out."""
    return {key: value for key, value in dict(row._mapping).items() if value is not None}


def build_upsert(engine: Engine, config: TableConfig, rows: List[dict]):
    """INSERT ... ON CONFLICT (id) DO UPDATE for the engine's dialect."""
    dialect = engine.dialect.name
    if dialect == "postgresql":
        stmt = postgresql.insert(config.table).values(rows)
    elif dialect == "sqlite":
        stmt = sqlite.insert(config.table).values(rows)
    else:
        raise NotImplementedError(f"Upsert not supported for dialect '{dialect}'")
    update_cols = {
        column.name: stmt.excluded[column.name]
        for column in config.table.columns
        if column.name != config.id_field
    }
    return stmt.on_conflict_do_update(index_elements=[config.id_field], set_=update_cols)


class TableSyncService:
    """
    Mirrors the local store to a relational database.
    A service built without an engine is disabled and every call is a no-op.
    """

    def __init__(
        self,
        engine: Optional[Engine] = None,
        storage: Optional[StorageService] = None,
        debounce_seconds: float = 1.2,
    ):
        self.engine = engine
        self.storage = storage or get_storage_service()
        self.debounce_seconds = debounce_seconds
        self.hydrating = False
        self._timers: Dict[str, threading.Timer] = {}
        self._pending: Dict[str, List[dict]] = {}
        self._lock = threading.Lock()

    def is_enabled(self) -> bool:
        return self.engine is not None

    # ------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------

    def hydrate(self) -> List[str]:
        """
        Replace each mapped local collection with the remote table contents.
        Each remote row is laid over the local item with the same id, so
        local-only fields (password_hash) survive.
        Returns the keys that hydrated; a failing table is logged and skipped.
        """
        if not self.is_enabled():
            return []
        hydrated = []
        self.hydrating = True
        try:
            for key, config in TABLE_MAP.items():
                try:
                    with self.engine.connect() as conn:
                        rows = conn.execute(select(config.table)).fetchall()
                except Exception as e:
                    logger.warning("Remote hydrate failed for %s: %s", config.table.name, e)
                    continue
                local_by_id = {item.get("id"): item for item in self.storage.get_collection(key)}
                merged = []
                for row in rows:
                    item = from_row(config, row)
                    merged.append({**local_by_id.get(item.get("id"), {}), **item})
                self.storage.save_collection(key, merged)
                hydrated.append(key)
        finally:
            self.hydrating = False
        logger.info("Hydrated %d collections from remote database", len(hydrated))
        return hydrated

    # ------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------

    def _upsert(self, config: TableConfig, items: List[dict]) -> bool:
        rows = [to_row(config, item) for item in items if item]
        if not rows:
            return False
        try:
            with self.engine.begin() as conn:
                conn.execute(build_upsert(self.engine, config, rows))
            return True
        except Exception as e:
            logger.warning("Remote upsert failed for %s: %s", config.table.name, e)
            return False

    def sync_item(self, key: str, item: Optional[dict]) -> bool:
        """Upsert one entity. Returns True if the row was written."""
        config = TABLE_MAP.get(key)
        if config is None or not self.is_enabled() or not item:
            return False
        return self._upsert(config, [item])

    def schedule_sync(self, key: str, items: List[dict]) -> None:
        """Debounced whole-collection upsert. A newer call for the key replaces the pending one."""
        config = TABLE_MAP.get(key)
        if config is None or not self.is_enabled():
            return
        with self._lock:
            existing = self._timers.pop(key, None)
            if existing is not None:
                existing.cancel()
            self._pending[key] = list(items)
            timer = threading.Timer(self.debounce_seconds, self._run_scheduled, args=(key,))
            timer.daemon = True
            self._timers[key] = timer
            timer.start()

    def _run_scheduled(self, key: str) -> None:
        with self._lock:
            self._timers.pop(key, None)
            items = self._pending.pop(key, None)
        if items:
            self._upsert(TABLE_MAP[key], items)

    def flush(self) -> None:
        """Run every pending scheduled sync now."""
        with self._lock:
            keys = list(self._timers)
            for key in keys:
                self._timers[key].cancel()
        for key in keys:
            self._run_scheduled(key)

    def shutdown(self) -> None:
        """Cancel pending timers without syncing."""
        with self._lock:
            for timer in self._timers.values():
                timer.cancel()
            self._timers.clear()
            self._pending.clear()

    def delete_item(self, key: str, item_id: str) -> bool:
        config = TABLE_MAP.get(key)
        if config is None or not self.is_enabled() or not item_id:
            return False
        try:
            with self.engine.begin() as conn:
                conn.execute(delete(config.table).where(config.table.c[config.id_field] == item_id))
            return True
        except Exception as e:
            logger.warning("Remote delete failed for %s/%s: %s", config.table.name, item_id, e)
            return False


# Singleton instance
_sync_service: TableSyncService = None


def get_sync_service() -> TableSyncService:
    """Get or create the sync adapter (singleton pattern)"""
    global _sync_service
    if _sync_service is None:
        settings = get_settings()
        _sync_service = TableSyncService(
            engine=postgres.get_engine(),
            storage=get_storage_service(),
            debounce_seconds=settings.sync_debounce_seconds,
        )
    return _sync_service
