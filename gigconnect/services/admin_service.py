"""
Admin Service - account and job moderation.
"""

from typing import List, Optional, Union

from gigconnect.core.errors import NotFoundError
from gigconnect.schemas.schemas import JobStatus, VerificationStatus
from gigconnect.services.base import BaseService
from gigconnect.services.notification_service import NotificationService

USERS_KEY = "users"
JOBS_KEY = "jobs"


class AdminService(BaseService):

    def __init__(self, storage=None, sync=None, notifications=None):
        super().__init__(storage, sync)
        self.notifications = notifications or NotificationService(self.storage, self.sync)

    def get_pending_users(self) -> List[dict]:
        return [u for u in self.storage.get_collection(USERS_KEY) if not u.get("approved")]

    def get_pending_jobs(self) -> List[dict]:
        return [
            j for j in self.storage.get_collection(JOBS_KEY)
            if j.get("status") == JobStatus.pending_approval.value
        ]

    def get_completed_jobs(self) -> List[dict]:
        return [j for j in self.storage.get_collection(JOBS_KEY) if j.get("status") == JobStatus.completed.value]

    def approve_user(self, user_id: str) -> dict:
        users, index = self.load_one(USERS_KEY, user_id, "User")
        users[index]["approved"] = True
        self.storage.save_collection(USERS_KEY, users)
        self.sync.sync_item(USERS_KEY, users[index])
        self.notifications.create_notification(user_id, "Your account has been approved! You can now log in.")
        return users[index]

    def reject_user(self, user_id: str) -> None:
        """Delete the account here and in the remote mirror."""
        users = [u for u in self.storage.get_collection(USERS_KEY) if u.get("id") != user_id]
        self.storage.save_collection(USERS_KEY, users)
        self.sync.delete_item(USERS_KEY, user_id)

    def _set_job_status(self, job_id: str, status: JobStatus, message: str) -> dict:
        jobs, index = self.load_one(JOBS_KEY, job_id, "Job")
        job = jobs[index]
        job["status"] = status.value
        self.storage.save_collection(JOBS_KEY, jobs)
        self.sync.sync_item(JOBS_KEY, job)
        self.notifications.create_notification(job["employer_id"], message.format(title=job["title"]))
        return job

    def approve_job(self, job_id: str) -> dict:
        return self._set_job_status(job_id, JobStatus.open, 'Your job post "{title}" has been approved.')

    def reject_job(self, job_id: str) -> dict:
        return self._set_job_status(job_id, JobStatus.rejected, 'Your job post "{title}" was rejected.')

    def set_job_verification(
        self,
        job_id: str,
        status: Union[VerificationStatus, str],
        note: Optional[str] = None,
    ) -> dict:
        status = VerificationStatus(status)
        jobs, index = self.load_one(JOBS_KEY, job_id, "Job")
        job = jobs[index]
        job["verification_status"] = status.value
        if note is not None:
            job["verification_note"] = note
        self.storage.save_collection(JOBS_KEY, jobs)
        self.sync.sync_item(JOBS_KEY, job)
        self.notifications.create_notification(
            job["employer_id"], f'Source verification for "{job["title"]}" is now {status.value}.'
        )
        return job
