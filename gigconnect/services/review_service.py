"""
Review Service - one review per reviewer per job.
"""

from typing import List, Optional

from gigconnect.core.errors import ServiceError
from gigconnect.services.base import BaseService
from gigconnect.services.notification_service import NotificationService, link
from gigconnect.utils.helpers import new_id, now_iso

KEY = "reviews"


class ReviewService(BaseService):

    def __init__(self, storage=None, sync=None, notifications=None):
        super().__init__(storage, sync)
        self.notifications = notifications or NotificationService(self.storage, self.sync)

    def get_reviews_for_user(self, user_id: str) -> List[dict]:
        """Reviews received by user_id, newest first."""
        reviews = [r for r in self.storage.get_collection(KEY) if r.get("reviewee_id") == user_id]
        return sorted(reviews, key=lambda r: r["created_at"], reverse=True)

    def has_user_reviewed_job(self, reviewer_id: str, job_id: str) -> bool:
        return any(
            r.get("reviewer_id") == reviewer_id and r.get("job_id") == job_id
            for r in self.storage.get_collection(KEY)
        )

    def create_review(
        self,
        job_id: str,
        reviewer_id: str,
        reviewee_id: str,
        rating: int,
        comment: str = "",
    ) -> dict:
        if not 1 <= int(rating) <= 5:
            raise ServiceError("Rating must be between 1 and 5.")
        if self.has_user_reviewed_job(reviewer_id, job_id):
            raise ServiceError("You have already submitted a review for this job.")

        reviews = self.storage.get_collection(KEY)
        review = {
            "id": new_id("review"),
            "job_id": job_id,
            "reviewer_id": reviewer_id,
            "reviewee_id": reviewee_id,
            "rating": int(rating),
            "comment": comment,
            "created_at": now_iso(),
        }
        reviews.append(review)
        self.storage.save_collection(KEY, reviews)
        self.sync.sync_item(KEY, review)

        self.notifications.create_notification(
            reviewee_id, f"You have received a new {review['rating']}-star review!", link("profile")
        )
        return review

    def get_average_rating(self, user_id: str) -> Optional[float]:
        ratings = [r["rating"] for r in self.get_reviews_for_user(user_id)]
        if not ratings:
            return None
        return round(sum(ratings) / len(ratings), 1)
