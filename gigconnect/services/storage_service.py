"""
Storage Service - the local key-value store.

Every key holds one JSON value (usually an array of entity dicts), kept as
a single MongoDB document:

    {"_id": "jobs", "value": [...], "updated_at": datetime}

Services read a whole collection, filter/mutate it in memory and write it
back. There is no schema enforcement and no transaction across keys.
"""

import copy
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from pymongo.database import Database

from gigconnect.db.mongodb import get_kv_collection, get_mongo_db
from gigconnect.schemas.schemas import (
    BlogStatus, JobStatus, PaymentStatus, UserRole, VerificationStatus,
)
from gigconnect.core.auth import hash_password
from gigconnect.utils.helpers import new_id, now_iso

logger = logging.getLogger(__name__)


# Keys included in export/import. Session keys are not exported.
DATABASE_KEYS = (
    "users",
    "jobs",
    "applications",
    "messages",
    "notifications",
    "reviews",
    "errorLogs",
    "subscribers",
    "automationSettings",
    "automationEvents",
    "radarFindings",
    "radarScans",
    "growthCampaigns",
    "outreachLeads",
    "healingActions",
    "healthIncidents",
    "walletTransactions",
    "payoutRequests",
    "platformTransactions",
    "platformRevenue",
    "blogPosts",
    "referralEvents",
)

DEFAULT_AUTOMATION_SETTINGS = {
    "auto_match": True,
    "auto_moderation": True,
    "innovation_radar": True,
    "growth_hunt": True,
    "self_healing": True,
    "auto_publisher": True,
    "auto_blog": True,
}


class StorageService:
    """
    Flat key-value store on top of one MongoDB collection.
    Read and write failures are logged, never raised.
    """

    def __init__(self, db: Database = None):
        self.collection = get_kv_collection(db)

    # ------------------------------------------------------------
    # Raw key access
    # ------------------------------------------------------------

    def get(self, key: str) -> Any:
        try:
            doc = self.collection.find_one({"_id": key})
        except Exception as e:
            logger.error("Error getting item %s from store: %s", key, e)
            return None
        if doc is None:
            return None
        # Callers mutate what they read; never hand out shared state
        return copy.deepcopy(doc.get("value"))

    def set(self, key: str, value: Any) -> None:
        try:
            self.collection.update_one(
                {"_id": key},
                {"$set": {"value": value, "updated_at": datetime.now(timezone.utc)}},
                upsert=True
            )
        except Exception as e:
            logger.error("Error setting item %s in store: %s", key, e)

    def remove(self, key: str) -> None:
        try:
            self.collection.delete_one({"_id": key})
        except Exception as e:
            logger.error("Error removing item %s from store: %s", key, e)

    # ------------------------------------------------------------
    # Collections
    # ------------------------------------------------------------

    def get_collection(self, key: str) -> List[dict]:
        return self.get(key) or []

    def save_collection(self, key: str, items: List[dict]) -> None:
        self.set(key, items)

    def prepend(self, key: str, item: dict, limit: Optional[int] = None) -> None:
        """Insert newest-first, trimming to `limit` entries."""
        items = [item] + self.get_collection(key)
        if limit is not None:
            items = items[:limit]
        self.save_collection(key, items)

    def get_platform_revenue(self) -> float:
        return self.get("platformRevenue") or 0

    def save_platform_revenue(self, amount: float) -> None:
        self.set("platformRevenue", amount)

    # ------------------------------------------------------------
    # Export / import
    # ------------------------------------------------------------

    def export_database(self) -> Dict[str, Any]:
        """Full dump of every database key (absent keys export as None)."""
        return {key: self.get(key) for key in DATABASE_KEYS}

    def import_database(self, data: Dict[str, Any]) -> List[str]:
        """
        Restore keys from an export. Unknown keys are ignored.
        Returns the keys that were written.
        """
        restored = []
        for key in DATABASE_KEYS:
            if key in data:
                self.set(key, data[key])
                restored.append(key)
        return restored

    # ------------------------------------------------------------
    # Seeding
    # ------------------------------------------------------------

    def seed_data(self, remote_enabled: bool = False, force_local: bool = False) -> bool:
        """
        Seed demo users, jobs and posts on an empty store.

        Skipped when the remote mirror is enabled (it hydrates real data)
        unless force_local is set. Returns True if anything was seeded.
        """
        if remote_enabled and not force_local:
            return False
        if self.get("users"):
            return False

        now = datetime.now(timezone.utc)
        self.set("users", [
            {
                "id": "admin-1", "email": "admin@gig.co", "password_hash": hash_password("admin"),
                "name": "Admin User", "role": UserRole.admin.value, "approved": True,
                "referral_code": "ref-admin",
            },
            {
                "id": "employer-1", "email": "employer@gig.co", "password_hash": hash_password("password"),
                "name": "Tech Solutions Inc.", "role": UserRole.employer.value, "approved": True,
                "company_name": "Tech Solutions Inc.", "company_description": "We build amazing software.",
                "industry": "Technology", "website": "https://example.com", "referral_code": "ref-employer",
            },
            {
                "id": "seeker-1", "email": "seeker@gig.co", "password_hash": hash_password("password"),
                "name": "Jane Doe", "role": UserRole.job_seeker.value, "approved": True,
                "skills": ["React", "TypeScript", "Node.js"],
                "profile_bio": "Experienced full-stack developer seeking new challenges.",
                "experience_level": "Expert", "availability": "Full-time",
                "portfolio_links": ["https://github.com/janedoe"], "referral_code": "ref-seeker",
            },
        ])

        def seed_job(job_id, title, description, category, payment, days, **extra):
            job = {
                "id": job_id,
                "employer_id": "employer-1",
                "title": title,
                "description": description,
                "category": category,
                "payment": payment,
                "deadline": (now + timedelta(days=days)).isoformat(),
                "status": JobStatus.open.value,
                "created_at": now_iso(),
                "is_featured": False,
                "payment_status": PaymentStatus.unpaid.value,
                "work_type": "Remote",
                "verification_status": VerificationStatus.pending.value,
                "source_name": "Tech Solutions Inc.",
                "source_website": "https://example.com",
            }
            job.update(extra)
            return job

        self.set("jobs", [
            seed_job("job-1", "Senior React Developer",
                     "Build our next-gen platform using React and TypeScript.",
                     "Web Development", 5000, 10, is_featured=True,
                     verification_status=VerificationStatus.verified.value),
            seed_job("job-2", "UI/UX Designer",
                     "Design beautiful and intuitive user interfaces.",
                     "Graphic Design", 3500, 15, work_type="Hybrid", location="Lagos, Nigeria"),
            seed_job("job-3", "Backend Node.js Engineer",
                     "Develop and maintain our server-side logic.",
                     "Web Development", 4500, 20),
        ])

        for key in ("applications", "messages", "notifications", "reviews", "errorLogs"):
            self.set(key, [])

        defaults = {
            "subscribers": [],
            "automationSettings": dict(DEFAULT_AUTOMATION_SETTINGS),
            "automationEvents": [],
            "radarFindings": [],
            "radarScans": [],
            "growthCampaigns": [],
            "outreachLeads": [],
            "healingActions": [],
            "healthIncidents": [],
            "walletTransactions": [],
            "payoutRequests": [],
            "platformTransactions": [],
            "platformRevenue": 0,
            "referralEvents": [],
        }
        for key, value in defaults.items():
            if self.get(key) is None:
                self.set(key, value)

        if self.get("blogPosts") is None:
            stamp = now_iso()
            self.set("blogPosts", [
                {
                    "id": new_id("blog", "1"),
                    "title": "How to Win Your First Client on GigConnect",
                    "slug": "win-your-first-client-on-gigconnect",
                    "excerpt": "A simple, proven path to landing your first paid gig with strong proposals and fast delivery.",
                    "content": "Landing your first client is about clarity and speed. Start with a focused profile, apply to small gigs, and write proposals that show you read the brief. Deliver fast and request a review. Consistency beats perfection.",
                    "category": "Freelancer Success",
                    "tags": ["freelance", "clients", "proposals"],
                    "author_name": "GigConnect Team",
                    "status": BlogStatus.published.value,
                    "created_at": stamp,
                    "published_at": stamp,
                    "is_ai": False,
                },
                {
                    "id": new_id("blog", "2"),
                    "title": "Hiring in 2026: The Skills Clients Want Most",
                    "slug": "hiring-2026-skills-clients-want",
                    "excerpt": "The fastest-growing freelance categories and how to position your services.",
                    "content": "Clients are prioritizing speed, clarity, and measurable impact. The hottest areas remain web development, design systems, marketing automation, data dashboards, and AI-assisted workflows. Focus on outcomes and offer clear milestones.",
                    "category": "Work News",
                    "tags": ["trends", "skills", "hiring"],
                    "author_name": "GigConnect Team",
                    "status": BlogStatus.published.value,
                    "created_at": stamp,
                    "published_at": stamp,
                    "is_ai": False,
                },
            ])

        logger.info("Seeded local store with demo data")
        return True


# Singleton instance
_storage_service: StorageService = None


def get_storage_service() -> StorageService:
    """Get or create the store (singleton pattern)"""
    global _storage_service
    if _storage_service is None:
        _storage_service = StorageService(get_mongo_db())
    return _storage_service
