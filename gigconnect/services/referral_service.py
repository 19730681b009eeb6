"""
Referral Service - signup and application events, with a wallet bonus
for each referred application.
"""

import logging
from typing import List, Optional

from gigconnect.core.config import get_settings
from gigconnect.services.base import BaseService
from gigconnect.services.wallet_service import WalletService
from gigconnect.utils.helpers import new_id, now_iso

logger = logging.getLogger(__name__)

KEY = "referralEvents"
MAX_EVENTS = 1000


class ReferralService(BaseService):

    def __init__(self, storage=None, sync=None, wallet=None, bonus: Optional[float] = None):
        super().__init__(storage, sync)
        self.wallet = wallet or WalletService(self.storage, self.sync)
        self.bonus = bonus if bonus is not None else get_settings().referral_bonus

    def _add_event(self, event: dict) -> dict:
        self.storage.prepend(KEY, event, MAX_EVENTS)
        self.sync.sync_item(KEY, event)
        return event

    def _exists(self, **match) -> bool:
        return any(
            all(event.get(field) == value for field, value in match.items())
            for event in self.storage.get_collection(KEY)
        )

    def get_events_by_referrer(self, referrer_id: str) -> List[dict]:
        return [e for e in self.storage.get_collection(KEY) if e.get("referrer_id") == referrer_id]

    def record_signup(self, referrer_id: str, referred_user_id: str) -> Optional[dict]:
        if not referrer_id or referrer_id == referred_user_id:
            return None
        if self._exists(referrer_id=referrer_id, referred_user_id=referred_user_id, type="signup"):
            return None
        return self._add_event({
            "id": new_id("ref"),
            "referrer_id": referrer_id,
            "referred_user_id": referred_user_id,
            "type": "signup",
            "created_at": now_iso(),
        })

    def record_application(self, referrer_id: str, referred_user_id: str, job_id: str) -> Optional[dict]:
        """Record a referred application once and credit the referrer."""
        if not referrer_id or referrer_id == referred_user_id:
            return None
        if self._exists(referrer_id=referrer_id, referred_user_id=referred_user_id,
                        job_id=job_id, type="application"):
            return None
        event = self._add_event({
            "id": new_id("ref"),
            "referrer_id": referrer_id,
            "referred_user_id": referred_user_id,
            "type": "application",
            "job_id": job_id,
            "amount": self.bonus,
            "created_at": now_iso(),
        })
        self.wallet.record_referral_bonus(referrer_id, referred_user_id, job_id, self.bonus)
        logger.info("Referral bonus %.2f credited to %s", self.bonus, referrer_id)
        return event
