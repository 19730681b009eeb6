"""
Self-Healing Service - core-data checks, error log pruning and
error-spike incidents.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import List

from gigconnect.schemas.schemas import UserRole
from gigconnect.services.base import BaseService
from gigconnect.utils.helpers import new_id, now_iso, parse_iso

logger = logging.getLogger(__name__)

ACTIONS_KEY = "healingActions"
INCIDENTS_KEY = "healthIncidents"
MAX_ACTIONS = 50
MAX_INCIDENTS = 20
ERROR_LOG_KEEP = 50
ERROR_SPIKE_THRESHOLD = 10


class SelfHealingService(BaseService):

    def _log_action(self, action: str, result: str, details: str) -> dict:
        entry = {
            "id": new_id("heal"),
            "action": action,
            "result": result,
            "details": details,
            "created_at": now_iso(),
        }
        self.storage.prepend(ACTIONS_KEY, entry, MAX_ACTIONS)
        return entry

    def _log_incident(self, severity: str, summary: str) -> dict:
        incident = {"id": new_id("incident"), "severity": severity, "summary": summary, "created_at": now_iso()}
        self.storage.prepend(INCIDENTS_KEY, incident, MAX_INCIDENTS)
        logger.warning("Health incident (%s): %s", severity, summary)
        return incident

    def ensure_core_data(self) -> None:
        if not self.storage.get_collection("users"):
            self.storage.save_collection("users", [{
                "id": "admin-recovery",
                "email": "admin@gig.co",
                "name": "Recovery Admin",
                "role": UserRole.admin.value,
                "approved": True,
            }])
            self._log_action("Recreated core admin user", "Fixed",
                             "Users store was empty. Restored minimal admin user.")
        if not self.storage.get_collection("jobs"):
            self._log_action("Job catalog check", "Needs Review", "No jobs found. Consider seeding sample jobs.")

    def prune_old_errors(self) -> None:
        logs = self.storage.get_collection("errorLogs")
        if len(logs) > ERROR_LOG_KEEP:
            self.storage.save_collection("errorLogs", logs[:ERROR_LOG_KEEP])
            self._log_action("Error log prune", "Fixed", f"Trimmed error logs to latest {ERROR_LOG_KEEP} entries.")

    def check_incidents(self) -> None:
        cutoff = datetime.now(timezone.utc) - timedelta(hours=1)
        recent = [
            log for log in self.storage.get_collection("errorLogs")
            if log.get("timestamp") and parse_iso(log["timestamp"]) > cutoff
        ]
        if len(recent) >= ERROR_SPIKE_THRESHOLD:
            self._log_incident("High", f"Spike detected: {len(recent)} errors in the last hour.")
            self._log_action("Escalate error spike", "Needs Review",
                             "High error rate detected. Recommend manual investigation.")

    def run_self_heal(self) -> None:
        self.ensure_core_data()
        self.prune_old_errors()
        self.check_incidents()

    def get_actions(self) -> List[dict]:
        return self.storage.get_collection(ACTIONS_KEY)

    def get_incidents(self) -> List[dict]:
        return self.storage.get_collection(INCIDENTS_KEY)
