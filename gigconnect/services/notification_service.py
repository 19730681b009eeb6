"""
Notification Service - per-user notification feed.
"""

from typing import List, Optional

from gigconnect.schemas.schemas import NotificationLink
from gigconnect.services.base import BaseService
from gigconnect.utils.helpers import new_id, now_iso

KEY = "notifications"


def link(view: str, **params) -> dict:
    """Navigation target attached to a notification."""
    return NotificationLink(view=view, params=params).model_dump()


class NotificationService(BaseService):

    def get_notifications_for_user(self, user_id: str) -> List[dict]:
        """User's notifications, newest first."""
        notifications = [n for n in self.storage.get_collection(KEY) if n.get("user_id") == user_id]
        return sorted(notifications, key=lambda n: n["created_at"], reverse=True)

    def get_unread_count(self, user_id: str) -> int:
        return sum(1 for n in self.get_notifications_for_user(user_id) if not n.get("is_read"))

    def create_notification(self, user_id: str, message: str, link: Optional[dict] = None) -> dict:
        notifications = self.storage.get_collection(KEY)
        notification = {
            "id": new_id("notif"),
            "user_id": user_id,
            "message": message,
            "link": link,
            "is_read": False,
            "created_at": now_iso(),
        }
        notifications.append(notification)
        self.storage.save_collection(KEY, notifications)
        self.sync.sync_item(KEY, notification)
        return notification

    def mark_as_read(self, notification_id: str) -> bool:
        notifications = self.storage.get_collection(KEY)
        index = self.find_index(notifications, notification_id)
        if index == -1:
            return False
        notifications[index]["is_read"] = True
        self.storage.save_collection(KEY, notifications)
        self.sync.sync_item(KEY, notifications[index])
        return True

    def mark_all_as_read(self, user_id: str) -> int:
        notifications = self.storage.get_collection(KEY)
        changed = []
        for notification in notifications:
            if notification.get("user_id") == user_id and not notification.get("is_read"):
                notification["is_read"] = True
                changed.append(notification)
        self.storage.save_collection(KEY, notifications)
        for notification in changed:
            self.sync.sync_item(KEY, notification)
        return len(changed)
