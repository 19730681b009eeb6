"""
Job Service - postings, applications and the job payment state machine.

Job.status:
    Pending Approval -> Open -> In Progress -> Completed
                     \-> Rejected
- Accepting an application moves the job to In Progress and hires the
  applicant; every other Submitted application for that job is rejected.
- Paying (through the platform or externally) completes the job.
- Notifications are sent after the state change is saved; a notification
  failure does not undo the change.
"""

import logging
from typing import List, Optional, Union

from gigconnect.core.config import get_settings
from gigconnect.core.errors import NotFoundError, ServiceError
from gigconnect.schemas.schemas import (
    ApplicationStatus, ExternalPaymentDetails, JobStatus, PaymentStatus,
    UserRole, VerificationStatus,
)
from gigconnect.services.base import BaseService
from gigconnect.services.notification_service import NotificationService, link
from gigconnect.services.wallet_service import WalletService
from gigconnect.utils.helpers import new_id, now_iso

logger = logging.getLogger(__name__)

JOBS_KEY = "jobs"
APPLICATIONS_KEY = "applications"


class JobService(BaseService):

    def __init__(self, storage=None, sync=None, notifications=None, wallet=None,
                 require_approval: Optional[bool] = None):
        super().__init__(storage, sync)
        self.notifications = notifications or NotificationService(self.storage, self.sync)
        self.wallet = wallet or WalletService(self.storage, self.sync)
        self.require_approval = (
            require_approval if require_approval is not None else get_settings().require_job_approval
        )

    # ============================================================
    # JOBS
    # ============================================================

    def get_all_jobs(self) -> List[dict]:
        return self.storage.get_collection(JOBS_KEY)

    def get_open_jobs(self) -> List[dict]:
        return [j for j in self.get_all_jobs() if j.get("status") == JobStatus.open.value]

    def get_jobs_by_employer(self, employer_id: str) -> List[dict]:
        return [j for j in self.get_all_jobs() if j.get("employer_id") == employer_id]

    def get_job(self, job_id: str) -> Optional[dict]:
        return next((j for j in self.get_all_jobs() if j.get("id") == job_id), None)

    def create_job(self, job_data: dict) -> dict:
        """Post a job. Admins are asked to verify the source."""
        jobs = self.get_all_jobs()
        status = JobStatus.pending_approval if self.require_approval else JobStatus.open
        job = dict(job_data)
        job.update({
            "id": new_id("job"),
            "status": status.value,
            "created_at": now_iso(),
            "payment_status": PaymentStatus.unpaid.value,
            "verification_status": job_data.get("verification_status") or VerificationStatus.pending.value,
        })
        job.setdefault("is_featured", False)
        job.pop("hired_user_id", None)
        jobs.append(job)
        self.storage.save_collection(JOBS_KEY, jobs)
        self.sync.sync_item(JOBS_KEY, job)

        admins = [u for u in self.storage.get_collection("users") if u.get("role") == UserRole.admin.value]
        for admin in admins:
            self.notifications.create_notification(
                admin["id"], f'New job "{job["title"]}" requires source verification.'
            )
        return job

    def update_job(self, updated_job: dict) -> dict:
        jobs, index = self.load_one(JOBS_KEY, updated_job.get("id"), "Job")
        jobs[index] = updated_job
        self.storage.save_collection(JOBS_KEY, jobs)
        self.sync.sync_item(JOBS_KEY, updated_job)
        return updated_job

    # ============================================================
    # APPLICATIONS
    # ============================================================

    def apply_for_job(self, job_id: str, job_seeker_id: str, cover_letter: str) -> dict:
        job = self.get_job(job_id)
        if job is None:
            raise NotFoundError("Job not found.")

        applications = self.storage.get_collection(APPLICATIONS_KEY)
        application = {
            "id": new_id("app"),
            "job_id": job_id,
            "job_seeker_id": job_seeker_id,
            "cover_letter": cover_letter,
            "status": ApplicationStatus.submitted.value,
            "applied_at": now_iso(),
        }
        applications.append(application)
        self.storage.save_collection(APPLICATIONS_KEY, applications)
        self.sync.sync_item(APPLICATIONS_KEY, application)

        self.notifications.create_notification(
            job["employer_id"], f'You have a new application for "{job["title"]}".', link("dashboard")
        )
        return application

    def get_applications_for_job(self, job_id: str) -> List[dict]:
        return [a for a in self.storage.get_collection(APPLICATIONS_KEY) if a.get("job_id") == job_id]

    def get_applications_by_seeker(self, seeker_id: str) -> List[dict]:
        return [a for a in self.storage.get_collection(APPLICATIONS_KEY) if a.get("job_seeker_id") == seeker_id]

    def update_application_status(
        self,
        application_id: str,
        status: Union[ApplicationStatus, str],
        job: Optional[dict] = None,
    ) -> dict:
        """
        Set an application's status.

        Accepting with `job` given hires the applicant, moves the job to
        In Progress and rejects the job's other Submitted applications.
        """
        status = ApplicationStatus(status)
        applications, index = self.load_one(APPLICATIONS_KEY, application_id, "Application")
        application = applications[index]
        application["status"] = status.value

        rejected_siblings = []
        if status == ApplicationStatus.accepted and job is not None:
            job = dict(job)
            job["status"] = JobStatus.in_progress.value
            job["hired_user_id"] = application["job_seeker_id"]
            self.update_job(job)

            for other in applications:
                if (other.get("job_id") == job["id"]
                        and other["id"] != application_id
                        and other.get("status") == ApplicationStatus.submitted.value):
                    other["status"] = ApplicationStatus.rejected.value
                    rejected_siblings.append(other)

        self.storage.save_collection(APPLICATIONS_KEY, applications)
        for other in rejected_siblings:
            self.sync.sync_item(APPLICATIONS_KEY, other)
        self.sync.sync_item(APPLICATIONS_KEY, application)

        title = job["title"] if job is not None else (self.get_job(application["job_id"]) or {}).get("title")
        for other in rejected_siblings:
            self.notifications.create_notification(
                other["job_seeker_id"], f'Your application for "{title}" was not selected.', link("dashboard")
            )
        self.notifications.create_notification(
            application["job_seeker_id"], f'Your application for "{title}" was {status.value}.', link("dashboard")
        )
        return application

    # ============================================================
    # PAYMENT STATE MACHINE
    # ============================================================

    def _load_payable(self, job_id: str, amount: float, action: str):
        jobs, index = self.load_one(JOBS_KEY, job_id, "Job")
        job = jobs[index]
        if job.get("payment_status") == PaymentStatus.paid.value:
            raise ServiceError("Job has already been paid.")
        if job.get("status") != JobStatus.in_progress.value:
            raise ServiceError(f"Job must be in progress to {action}.")
        if not job.get("hired_user_id"):
            raise ServiceError("No hired user assigned to this job.")
        if not amount or amount <= 0:
            raise ServiceError("Payment amount must be greater than zero.")
        return jobs, job

    def _mark_paid(self, jobs: List[dict], job: dict, amount: float, fee: float) -> None:
        job.update({
            "status": JobStatus.completed.value,
            "payment_status": PaymentStatus.paid.value,
            "paid_amount": amount,
            "platform_fee": fee,
            "paid_at": now_iso(),
        })
        self.storage.save_collection(JOBS_KEY, jobs)
        self.sync.sync_item(JOBS_KEY, job)

    def _request_reviews(self, job: dict) -> None:
        review_link = link("profile", reviewJobId=job["id"])
        self.notifications.create_notification(
            job["employer_id"],
            f'Job "{job["title"]}" is complete! Please leave a review for the job seeker.', review_link,
        )
        self.notifications.create_notification(
            job["hired_user_id"],
            f'Job "{job["title"]}" is complete! Please leave a review for the employer.', review_link,
        )

    def pay_for_job(self, job_id: str, amount: float) -> dict:
        """Pay the hired user through the platform and complete the job."""
        jobs, job = self._load_payable(job_id, amount, "process payment")
        payment = self.wallet.record_job_payment(job, job["employer_id"], job["hired_user_id"], amount)
        self._mark_paid(jobs, job, amount, payment["fee"])

        self.notifications.create_notification(
            job["employer_id"], f'Payment processed for "{job["title"]}". Success fee applied.', link("dashboard")
        )
        self.notifications.create_notification(
            job["hired_user_id"], f'You\'ve been paid for "{job["title"]}". Check your wallet.', link("wallet")
        )
        self._request_reviews(job)
        return job

    def mark_paid_externally(
        self,
        job_id: str,
        amount: float,
        details: Union[ExternalPaymentDetails, dict],
    ) -> dict:
        """Record an off-platform payment; the success fee is noted as due."""
        jobs, job = self._load_payable(job_id, amount, "mark paid")
        fee_info = self.wallet.record_external_payment(
            job, job["employer_id"], job["hired_user_id"], amount, details
        )
        self._mark_paid(jobs, job, amount, fee_info["fee"])

        self.notifications.create_notification(
            job["employer_id"],
            f'Job "{job["title"]}" marked as paid externally. Platform fee due: ${fee_info["fee"]:.2f}.',
            link("dashboard"),
        )
        self.notifications.create_notification(
            job["hired_user_id"], f'Employer marked "{job["title"]}" as paid externally.', link("dashboard")
        )
        self._request_reviews(job)
        return job

    def complete_job(self, job_id: str) -> dict:
        """Close a paid job and ask both parties for reviews."""
        jobs, index = self.load_one(JOBS_KEY, job_id, "Job")
        job = jobs[index]
        if job.get("payment_status") != PaymentStatus.paid.value:
            raise ServiceError("Job must be paid before it can be completed.")

        job["status"] = JobStatus.completed.value
        self.storage.save_collection(JOBS_KEY, jobs)
        self.sync.sync_item(JOBS_KEY, job)

        if job.get("hired_user_id"):
            self._request_reviews(job)
        return job
