"""
Shared plumbing for domain services: the store, the remote mirror and
index lookups over whole collections.
"""

from typing import List, Optional, Tuple

from gigconnect.core.errors import NotFoundError
from gigconnect.services.storage_service import StorageService, get_storage_service
from gigconnect.services.sync_service import TableSyncService, get_sync_service


class BaseService:

    def __init__(self, storage: Optional[StorageService] = None, sync: Optional[TableSyncService] = None):
        self.storage = storage or get_storage_service()
        self.sync = sync or get_sync_service()

    @staticmethod
    def find_index(items: List[dict], item_id: str) -> int:
        for index, item in enumerate(items):
            if item.get("id") == item_id:
                return index
        return -1

    def load_one(self, key: str, item_id: str, label: str) -> Tuple[List[dict], int]:
        """Load a collection and locate one item; NotFoundError if absent."""
        items = self.storage.get_collection(key)
        index = self.find_index(items, item_id)
        if index == -1:
            raise NotFoundError(f"{label} not found.")
        return items, index
