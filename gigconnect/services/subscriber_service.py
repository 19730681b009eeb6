"""
Subscriber Service - newsletter sign-ups.
"""

from typing import List, Optional

from gigconnect.core.errors import ServiceError
from gigconnect.services.base import BaseService
from gigconnect.utils.helpers import new_id, normalize_email, now_iso

KEY = "subscribers"


class SubscriberService(BaseService):

    def get_subscribers(self) -> List[dict]:
        return self.storage.get_collection(KEY)

    def subscribe(self, email: str, phone: Optional[str] = None) -> dict:
        email = normalize_email(email)
        subscribers = self.get_subscribers()
        if any(normalize_email(s.get("email", "")) == email for s in subscribers):
            raise ServiceError("This email is already subscribed.")
        subscriber = {
            "id": new_id("sub"),
            "email": email,
            "phone": phone,
            "subscribed_at": now_iso(),
        }
        subscribers.append(subscriber)
        self.storage.save_collection(KEY, subscribers)
        self.sync.sync_item(KEY, subscriber)
        return subscriber
