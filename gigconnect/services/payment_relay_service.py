"""
Payment Relay Service - settles a verified Paystack payment against a job.

confirm_payment() verifies the reference with the gateway, then in ONE
database transaction:
1. marks the job Completed / Paid with the amount, fee and paid_at
2. upserts the earning (net, hired user) and payment (gross, employer)
   wallet rows
3. upserts the platform success-fee row
4. upserts a notification for each party

A job that is already Paid returns "already_paid" and writes nothing, so
retrying a confirmation never double-credits. The job update only matches
an unpaid row, which also settles two confirmations racing on the same job.
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy import or_, select, update
from sqlalchemy.engine import Engine

from gigconnect.core.config import get_settings
from gigconnect.core.errors import ConfigurationError, NotFoundError, ServiceError
from gigconnect.db import postgres
from gigconnect.schemas.schemas import (
    JobStatus, PaymentStatus, TransactionDirection, TransactionType,
)
from gigconnect.services.notification_service import link
from gigconnect.services.paystack_client import PaystackClient, get_paystack_client
from gigconnect.services.sync_service import TABLE_MAP, build_upsert, to_row
from gigconnect.services.wallet_service import split_payment
from gigconnect.utils.helpers import new_id, now_iso

logger = logging.getLogger(__name__)


class PaymentRelayService:

    def __init__(self, client: Optional[PaystackClient] = None, engine: Optional[Engine] = None,
                 commission_rate: Optional[float] = None):
        self.client = client or get_paystack_client()
        self.engine = engine if engine is not None else postgres.get_engine()
        self.commission_rate = (
            commission_rate if commission_rate is not None else get_settings().platform_fee_rate
        )

    def _upsert(self, conn, key: str, *items: dict) -> None:
        config = TABLE_MAP[key]
        conn.execute(build_upsert(self.engine, config, [to_row(config, item) for item in items]))

    def confirm_payment(self, reference: Optional[str], job_id: Optional[str]) -> Dict[str, Any]:
        if not reference or not job_id:
            raise ServiceError("Reference and jobId are required.")
        if not self.client.is_configured():
            raise ConfigurationError("PAYSTACK_SECRET_KEY is not configured.")
        if self.engine is None:
            raise ConfigurationError("Remote database is not configured.")

        verification = self.client.verify_transaction(reference)
        if verification.get("status") != "success":
            raise ServiceError("Payment not successful.")
        amount = verification["amount"]

        jobs = postgres.jobs
        with self.engine.begin() as conn:
            job = conn.execute(select(jobs).where(jobs.c.id == job_id)).mappings().first()
            if job is None:
                raise NotFoundError("Job not found in database.")
            if not job["hired_user_id"]:
                raise ServiceError("Job has no hired user.")
            if job["payment_status"] == PaymentStatus.paid.value:
                logger.info("Job %s already paid; reference %s ignored", job_id, reference)
                return {"status": "already_paid", "job_id": job_id, "amount": amount}

            split = split_payment(amount, self.commission_rate)
            paid_at = verification.get("paid_at") or now_iso()
            created_at = now_iso()
            title = job["title"]
            employer_id = job["employer_id"]
            hired_user_id = job["hired_user_id"]

            # Conditional on Unpaid so a concurrent confirm that read the same row loses here
            result = conn.execute(
                update(jobs)
                .where(
                    jobs.c.id == job_id,
                    or_(jobs.c.payment_status.is_(None), jobs.c.payment_status != PaymentStatus.paid.value),
                )
                .values(
                    status=JobStatus.completed.value,
                    payment_status=PaymentStatus.paid.value,
                    paid_amount=amount,
                    platform_fee=split["fee"],
                    paid_at=paid_at,
                )
            )
            if result.rowcount == 0:
                logger.info("Job %s paid concurrently; reference %s ignored", job_id, reference)
                return {"status": "already_paid", "job_id": job_id, "amount": amount}
            self._upsert(
                conn, "walletTransactions",
                {
                    "id": new_id("txn", TransactionType.earning.value),
                    "user_id": hired_user_id,
                    "direction": TransactionDirection.credit.value,
                    "type": TransactionType.earning.value,
                    "amount": split["net"],
                    "description": f'Payment for "{title}"',
                    "job_id": job_id,
                    "created_at": created_at,
                },
                {
                    "id": new_id("txn", TransactionType.payment.value),
                    "user_id": employer_id,
                    "direction": TransactionDirection.debit.value,
                    "type": TransactionType.payment.value,
                    "amount": amount,
                    "description": f'Payment sent for "{title}"',
                    "job_id": job_id,
                    "created_at": created_at,
                },
            )
            self._upsert(conn, "platformTransactions", {
                "id": new_id("plt"),
                "amount": split["fee"],
                "job_id": job_id,
                "payer_id": employer_id,
                "payee_id": hired_user_id,
                "created_at": created_at,
                "description": f'Success fee for "{title}"',
            })
            self._upsert(
                conn, "notifications",
                {
                    "id": new_id("notif", "employer"),
                    "user_id": employer_id,
                    "message": f'Payment processed for "{title}". Success fee applied.',
                    "link": link("dashboard"),
                    "is_read": False,
                    "created_at": created_at,
                },
                {
                    "id": new_id("notif", "talent"),
                    "user_id": hired_user_id,
                    "message": f'You\'ve been paid for "{title}". Check your wallet.',
                    "link": link("wallet"),
                    "is_read": False,
                    "created_at": created_at,
                },
            )

        logger.info("Confirmed payment %s for job %s: amount=%.2f fee=%.2f", reference, job_id, amount, split["fee"])
        return {
            "status": "success",
            "job_id": job_id,
            "amount": amount,
            "fee": split["fee"],
            "net": split["net"],
            "paid_at": paid_at,
        }


# Singleton instance
_relay_service: PaymentRelayService = None


def get_payment_relay_service() -> PaymentRelayService:
    """Get or create the relay (singleton pattern)"""
    global _relay_service
    if _relay_service is None:
        _relay_service = PaymentRelayService()
    return _relay_service
