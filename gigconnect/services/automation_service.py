"""
Automation Service - periodic background agents.

run_background_tick() is called on a timer while a user is signed in.
Each agent runs only when it is enabled in the automation settings and
its interval has elapsed since its last run:

    auto_match        20 min   notify seekers about matching open jobs
    auto_moderation   45 min   flag suspicious job descriptions
    innovation_radar 120 min   radar scan
    growth_hunt       60 min   outreach leads (admins are notified)
    self_healing      30 min   core-data and error-log checks
    auto_blog       1440 min   one newsroom post

Last-run times live under STATUS_KEY, outside the exported keys.
"""

import logging
import re
from datetime import datetime, timezone
from typing import Dict, List, Optional

from gigconnect.schemas.schemas import UserRole
from gigconnect.services.base import BaseService
from gigconnect.services.blog_service import BlogService
from gigconnect.services.growth_service import GrowthService
from gigconnect.services.job_service import JobService
from gigconnect.services.notification_service import NotificationService, link
from gigconnect.services.radar_service import RadarService
from gigconnect.services.self_healing_service import SelfHealingService
from gigconnect.services.storage_service import DEFAULT_AUTOMATION_SETTINGS
from gigconnect.utils.helpers import new_id, now_iso, parse_iso, to_iso

logger = logging.getLogger(__name__)

SETTINGS_KEY = "automationSettings"
EVENTS_KEY = "automationEvents"
STATUS_KEY = "automationStatus"
MAX_EVENTS = 100
MAX_MATCHES_PER_USER = 3

FLAGGED_CONTENT = re.compile(r"scam|bitcoin|crypto|adult", re.IGNORECASE)

# setting -> (status field, interval in minutes)
SCHEDULE = {
    "auto_match": ("last_auto_match_at", 20),
    "auto_moderation": ("last_auto_moderation_at", 45),
    "innovation_radar": ("last_radar_at", 120),
    "growth_hunt": ("last_growth_at", 60),
    "self_healing": ("last_self_heal_at", 30),
    "auto_blog": ("last_auto_blog_at", 1440),
}


def minutes_since(iso: Optional[str], now: datetime) -> float:
    if not iso:
        return float("inf")
    return (now - parse_iso(iso)).total_seconds() / 60


class AutomationService(BaseService):

    def __init__(self, storage=None, sync=None, notifications=None):
        super().__init__(storage, sync)
        self.notifications = notifications or NotificationService(self.storage, self.sync)
        self.jobs = JobService(self.storage, self.sync, notifications=self.notifications)
        self.radar = RadarService(self.storage, self.sync)
        self.growth = GrowthService(self.storage, self.sync)
        self.healing = SelfHealingService(self.storage, self.sync)
        self.blog = BlogService(self.storage, self.sync)

    # ============================================================
    # SETTINGS / EVENTS
    # ============================================================

    def get_settings(self) -> Dict[str, bool]:
        stored = self.storage.get(SETTINGS_KEY)
        if stored:
            return {**DEFAULT_AUTOMATION_SETTINGS, **stored}
        defaults = dict(DEFAULT_AUTOMATION_SETTINGS)
        self.storage.set(SETTINGS_KEY, defaults)
        return defaults

    def update_settings(self, updates: Dict[str, bool]) -> Dict[str, bool]:
        settings = self.get_settings()
        settings.update({k: bool(v) for k, v in updates.items() if k in DEFAULT_AUTOMATION_SETTINGS})
        self.storage.set(SETTINGS_KEY, settings)
        return settings

    def get_events(self) -> List[dict]:
        return self.storage.get_collection(EVENTS_KEY)

    def _log_event(self, event_type: str, message: str, status: str = "success") -> dict:
        event = {
            "id": new_id("auto"),
            "type": event_type,
            "message": message,
            "status": status,
            "created_at": now_iso(),
        }
        self.storage.prepend(EVENTS_KEY, event, MAX_EVENTS)
        return event

    # ============================================================
    # AGENTS
    # ============================================================

    def run_auto_match(self) -> int:
        """Notify approved seekers of up to 3 open jobs mentioning their skills."""
        seekers = [
            u for u in self.storage.get_collection("users")
            if u.get("role") == UserRole.job_seeker.value and u.get("approved")
        ]
        jobs = self.jobs.get_open_jobs()
        if not seekers or not jobs:
            self._log_event("autoMatch", "Auto-match scan skipped. Not enough users or jobs.", "warning")
            return 0

        sent = 0
        for user in seekers:
            skills = {skill.lower() for skill in user.get("skills") or []}
            if not skills:
                continue
            matches = [
                job for job in jobs
                if any(skill in f"{job.get('title', '')} {job.get('description', '')} {job.get('category', '')}".lower()
                       for skill in skills)
            ]
            for job in matches[:MAX_MATCHES_PER_USER]:
                self.notifications.create_notification(
                    user["id"], f'New match: "{job["title"]}" looks aligned with your skills.', link("dashboard")
                )
                sent += 1
        self._log_event("autoMatch", "Auto-match scan complete. Candidates notified.")
        return sent

    def run_auto_moderation(self) -> List[dict]:
        flagged = [
            job for job in self.storage.get_collection("jobs")
            if FLAGGED_CONTENT.search(job.get("description") or "")
        ]
        if not flagged:
            self._log_event("autoModeration", "Auto-moderation scan complete. No flags.")
            return []
        for job in flagged:
            self.notifications.create_notification(
                job["employer_id"], f'Your job "{job["title"]}" may need edits before approval.', link("dashboard")
            )
        self._log_event("autoModeration", f"Auto-moderation flagged {len(flagged)} job(s) for review.", "warning")
        return flagged

    def _run_radar(self, current_user: Optional[dict]) -> None:
        self.radar.run_scan()
        self._log_event("innovationRadar", "Innovation radar scan queued in background.")

    def _run_growth(self, current_user: Optional[dict]) -> None:
        leads = self.growth.generate_leads()
        if leads and current_user and current_user.get("role") == UserRole.admin.value:
            self.notifications.create_notification(
                current_user["id"], f"Growth engine found {len(leads)} new outreach leads.", link("dashboard")
            )
        self._log_event(
            "growthHunt", f"Growth hunt completed with {len(leads)} new lead(s).",
            "success" if leads else "warning",
        )

    def _run_self_heal(self, current_user: Optional[dict]) -> None:
        self.healing.run_self_heal()
        self._log_event("selfHealing", "Self-healing cycle completed.")

    def _run_auto_blog(self, current_user: Optional[dict]) -> None:
        posts = self.blog.generate_auto_posts(1)
        self._log_event("autoBlog", f"Auto blog published {len(posts)} post(s).")

    # ============================================================
    # TICK
    # ============================================================

    def run_background_tick(self, current_user: Optional[dict] = None, now: Optional[datetime] = None) -> List[str]:
        """Run every due agent. Returns the settings keys that ran."""
        now = now or datetime.now(timezone.utc)
        settings = self.get_settings()
        status = self.storage.get(STATUS_KEY) or {}
        runners = {
            "auto_match": lambda user: self.run_auto_match(),
            "auto_moderation": lambda user: self.run_auto_moderation(),
            "innovation_radar": self._run_radar,
            "growth_hunt": self._run_growth,
            "self_healing": self._run_self_heal,
            "auto_blog": self._run_auto_blog,
        }

        ran = []
        for name, (status_field, interval) in SCHEDULE.items():
            if not settings.get(name) or minutes_since(status.get(status_field), now) <= interval:
                continue
            runners[name](current_user)
            status[status_field] = to_iso(now)
            ran.append(name)

        self.storage.set(STATUS_KEY, status)
        if ran:
            logger.info("Background agents ran: %s", ", ".join(ran))
        return ran
