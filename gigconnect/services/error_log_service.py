"""
Error Log Service - captured application errors, newest first.
"""

import logging
import traceback
from typing import List, Optional

from gigconnect.services.base import BaseService
from gigconnect.utils.helpers import new_id, now_iso

logger = logging.getLogger(__name__)

KEY = "errorLogs"
MAX_LOGS = 100


class ErrorLogService(BaseService):

    def log_error(self, error: BaseException, context: Optional[str] = None) -> dict:
        """Store an error entry. Write failures are logged by the storage layer."""
        stack = "".join(traceback.format_exception(type(error), error, error.__traceback__))
        entry = {
            "id": new_id("log"),
            "timestamp": now_iso(),
            "message": str(error),
            "stack": f"{stack}\nContext: {context or 'N/A'}",
        }
        self.storage.prepend(KEY, entry, MAX_LOGS)
        logger.error("GigConnect error logged: %s", entry["message"])
        return entry

    def get_logs(self) -> List[dict]:
        return self.storage.get_collection(KEY)

    def clear_logs(self) -> None:
        self.storage.save_collection(KEY, [])
