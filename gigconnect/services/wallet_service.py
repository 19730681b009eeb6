"""
Wallet Service - append-only ledger, derived balances and payouts.

Money rules:
- Amounts are computed in integer cents and stored back as decimals.
- Balance is never stored; it is the signed sum of a user's transactions,
  recomputed from the full history on every call.
- The platform keeps a success fee (commission) on payments made through
  the platform. External payments only record the fee as due.

Payout lifecycle:
    Pending --approve--> Approved --mark_paid--> Paid
    Pending --reject---> Rejected  (refund transaction returns the hold)
Paid and Rejected are terminal.
"""

import logging
from typing import Dict, List, Optional, Union

from gigconnect.core.config import get_settings
from gigconnect.core.errors import ServiceError
from gigconnect.schemas.schemas import (
    BankDetails, ExternalPaymentDetails, PayoutMethod, PayoutStatus,
    TransactionDirection, TransactionType,
)
from gigconnect.services.base import BaseService
from gigconnect.utils.helpers import from_cents, new_id, now_iso, round_half_up, to_cents

logger = logging.getLogger(__name__)

TRANSACTIONS_KEY = "walletTransactions"
PLATFORM_KEY = "platformTransactions"
PAYOUTS_KEY = "payoutRequests"

MAX_TRANSACTIONS = 500
MAX_PLATFORM_TRANSACTIONS = 500
MAX_PAYOUTS = 200

ALLOWED_PAYOUT_TRANSITIONS = {
    PayoutStatus.pending: {PayoutStatus.approved, PayoutStatus.rejected},
    PayoutStatus.approved: {PayoutStatus.paid},
    PayoutStatus.paid: set(),
    PayoutStatus.rejected: set(),
}


def split_payment(amount: float, rate: float) -> Dict[str, float]:
    """Split an amount into platform fee and net. fee + net == amount to the cent."""
    amount_cents = to_cents(amount)
    fee_cents = round_half_up(amount_cents * rate)
    return {"fee": from_cents(fee_cents), "net": from_cents(amount_cents - fee_cents)}


class WalletService(BaseService):

    def __init__(self, storage=None, sync=None, commission_rate: Optional[float] = None):
        super().__init__(storage, sync)
        self.commission_rate = (
            commission_rate if commission_rate is not None else get_settings().platform_fee_rate
        )

    # ============================================================
    # LEDGER PRIMITIVES
    # ============================================================

    def compute_fee(self, amount: float) -> Dict[str, float]:
        return split_payment(amount, self.commission_rate)

    def _add_transaction(
        self,
        user_id: str,
        direction: TransactionDirection,
        txn_type: TransactionType,
        amount: float,
        description: str,
        job_id: Optional[str] = None,
    ) -> dict:
        transaction = {
            "id": new_id("txn", txn_type.value),
            "user_id": user_id,
            "direction": direction.value,
            "type": txn_type.value,
            "amount": amount,
            "description": description,
            "job_id": job_id,
            "created_at": now_iso(),
        }
        self.storage.prepend(TRANSACTIONS_KEY, transaction, MAX_TRANSACTIONS)
        self.sync.sync_item(TRANSACTIONS_KEY, transaction)
        return transaction

    def _add_platform_transaction(
        self,
        amount: float,
        description: str,
        job_id: Optional[str] = None,
        payer_id: Optional[str] = None,
        payee_id: Optional[str] = None,
    ) -> dict:
        transaction = {
            "id": new_id("plt"),
            "amount": amount,
            "job_id": job_id,
            "payer_id": payer_id,
            "payee_id": payee_id,
            "created_at": now_iso(),
            "description": description,
        }
        self.storage.prepend(PLATFORM_KEY, transaction, MAX_PLATFORM_TRANSACTIONS)
        revenue = self.storage.get_platform_revenue()
        self.storage.save_platform_revenue(from_cents(to_cents(revenue) + to_cents(amount)))
        self.sync.sync_item(PLATFORM_KEY, transaction)
        return transaction

    # ============================================================
    # BALANCES
    # ============================================================

    def get_user_transactions(self, user_id: str) -> List[dict]:
        return [t for t in self.storage.get_collection(TRANSACTIONS_KEY) if t.get("user_id") == user_id]

    def get_balance(self, user_id: str) -> float:
        total = 0
        for txn in self.get_user_transactions(user_id):
            cents = to_cents(txn["amount"])
            total += cents if txn["direction"] == TransactionDirection.credit.value else -cents
        return from_cents(total)

    # ============================================================
    # JOB PAYMENTS
    # ============================================================

    def record_job_payment(self, job: dict, payer_id: str, payee_id: str, amount: float) -> Dict[str, float]:
        """
        Record a payment made through the platform.
        Payee earns the net, payer pays the gross, platform keeps the fee.
        Amount is assumed positive; callers validate.
        """
        split = self.compute_fee(amount)
        title = job.get("title")

        self._add_transaction(
            payee_id, TransactionDirection.credit, TransactionType.earning, split["net"],
            f'Payment for "{title}"', job.get("id"),
        )
        self._add_transaction(
            payer_id, TransactionDirection.debit, TransactionType.payment, amount,
            f'Payment sent for "{title}"', job.get("id"),
        )
        self._add_platform_transaction(
            split["fee"], f'Success fee for "{title}"', job.get("id"), payer_id, payee_id,
        )
        logger.info("Job %s paid: amount=%.2f fee=%.2f net=%.2f", job.get("id"), amount, split["fee"], split["net"])
        return split

    def record_external_payment(
        self,
        job: dict,
        payer_id: str,
        payee_id: str,
        amount: float,
        details: Union[ExternalPaymentDetails, dict],
    ) -> Dict[str, float]:
        """
        Record a payment settled outside the platform.
        The full amount moves between the parties; the fee is only noted as due
        on a zero-amount platform transaction.
        """
        if isinstance(details, dict):
            details = ExternalPaymentDetails(**details)
        fee = self.compute_fee(amount)["fee"]
        summary = details.summary()
        title = job.get("title")

        self._add_transaction(
            payee_id, TransactionDirection.credit, TransactionType.earning, amount,
            f'External payment for "{title}". {summary}', job.get("id"),
        )
        self._add_transaction(
            payer_id, TransactionDirection.debit, TransactionType.payment, amount,
            f'External payment sent for "{title}". {summary}', job.get("id"),
        )
        self._add_platform_transaction(
            0, f"External payment logged. Estimated fee due: ${fee:.2f}. {summary}",
            job.get("id"), payer_id, payee_id,
        )
        return {"fee": fee}

    def record_referral_bonus(self, referrer_id: str, referred_user_id: str, job_id: str, amount: float) -> dict:
        return self._add_transaction(
            referrer_id, TransactionDirection.credit, TransactionType.bonus, amount,
            f"Referral bonus: user {referred_user_id} applied to job {job_id}", job_id,
        )

    # ============================================================
    # PAYOUTS
    # ============================================================

    def request_payout(
        self,
        user_id: str,
        amount: float,
        method: Union[PayoutMethod, str],
        bank_details: Union[BankDetails, dict],
    ) -> dict:
        """Place a hold for `amount` and open a Pending payout request."""
        if amount <= 0:
            raise ServiceError("Payout amount must be greater than zero.")
        if to_cents(amount) > to_cents(self.get_balance(user_id)):
            raise ServiceError("Insufficient wallet balance for this payout request.")

        if isinstance(bank_details, dict):
            bank_details = BankDetails(**bank_details)

        payout = {
            "id": new_id("payout"),
            "user_id": user_id,
            "amount": amount,
            "method": PayoutMethod(method).value,
            "bank_details": bank_details.model_dump(exclude_none=True),
            "status": PayoutStatus.pending.value,
            "created_at": now_iso(),
        }

        self._add_transaction(
            user_id, TransactionDirection.debit, TransactionType.hold, amount, "Payout request hold",
        )
        self.storage.prepend(PAYOUTS_KEY, payout, MAX_PAYOUTS)
        self.sync.sync_item(PAYOUTS_KEY, payout)
        logger.info("Payout %s requested by %s for %.2f", payout["id"], user_id, amount)
        return payout

    def _update_payout_status(self, payout_id: str, status: PayoutStatus, note: Optional[str] = None) -> dict:
        payouts, index = self.load_one(PAYOUTS_KEY, payout_id, "Payout request")
        payout = payouts[index]

        current = PayoutStatus(payout["status"])
        if status not in ALLOWED_PAYOUT_TRANSITIONS[current]:
            raise ServiceError(f"Cannot move payout from {current.value} to {status.value}.")

        payout.update({"status": status.value, "note": note, "processed_at": now_iso()})
        self.storage.save_collection(PAYOUTS_KEY, payouts)
        self.sync.sync_item(PAYOUTS_KEY, payout)

        if status == PayoutStatus.rejected:
            self._add_transaction(
                payout["user_id"], TransactionDirection.credit, TransactionType.refund, payout["amount"],
                "Payout request rejected - funds returned",
            )
        logger.info("Payout %s: %s -> %s", payout_id, current.value, status.value)
        return payout

    def approve_payout(self, payout_id: str) -> dict:
        return self._update_payout_status(payout_id, PayoutStatus.approved)

    def mark_payout_paid(self, payout_id: str) -> dict:
        return self._update_payout_status(payout_id, PayoutStatus.paid)

    def reject_payout(self, payout_id: str, note: Optional[str] = None) -> dict:
        return self._update_payout_status(payout_id, PayoutStatus.rejected, note)

    def get_all_payout_requests(self) -> List[dict]:
        return self.storage.get_collection(PAYOUTS_KEY)

    def get_user_payout_requests(self, user_id: str) -> List[dict]:
        return [p for p in self.storage.get_collection(PAYOUTS_KEY) if p.get("user_id") == user_id]

    # ============================================================
    # PLATFORM
    # ============================================================

    def get_platform_revenue(self) -> float:
        return self.storage.get_platform_revenue()

    def get_platform_transactions(self) -> List[dict]:
        return self.storage.get_collection(PLATFORM_KEY)
