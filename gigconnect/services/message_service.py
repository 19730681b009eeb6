"""
Message Service - direct messages between two users.
"""

from typing import Dict, List

from gigconnect.services.base import BaseService
from gigconnect.utils.helpers import new_id, now_iso, parse_iso

KEY = "messages"


def _by_time(messages: List[dict]) -> List[dict]:
    return sorted(messages, key=lambda m: parse_iso(m["timestamp"]))


class MessageService(BaseService):

    def get_conversations(self, user_id: str) -> List[Dict]:
        """One entry per counterpart: {"with_user": id, "messages": [...oldest first]}."""
        grouped: Dict[str, List[dict]] = {}
        for msg in self.storage.get_collection(KEY):
            if msg.get("from_user_id") == user_id:
                other = msg.get("to_user_id")
            elif msg.get("to_user_id") == user_id:
                other = msg.get("from_user_id")
            else:
                continue
            grouped.setdefault(other, []).append(msg)
        return [{"with_user": other, "messages": _by_time(msgs)} for other, msgs in grouped.items()]

    def get_messages_with_user(self, user_id: str, other_user_id: str) -> List[dict]:
        pair = {user_id, other_user_id}
        return _by_time([
            m for m in self.storage.get_collection(KEY)
            if {m.get("from_user_id"), m.get("to_user_id")} == pair
        ])

    def send_message(self, from_user_id: str, to_user_id: str, content: str) -> dict:
        messages = self.storage.get_collection(KEY)
        message = {
            "id": new_id("msg"),
            "from_user_id": from_user_id,
            "to_user_id": to_user_id,
            "content": content,
            "timestamp": now_iso(),
            "is_read": False,
        }
        messages.append(message)
        self.storage.save_collection(KEY, messages)
        self.sync.sync_item(KEY, message)
        return message

    def mark_thread_read(self, user_id: str, other_user_id: str) -> int:
        """Mark messages from other_user_id to user_id as read. Returns how many changed."""
        messages = self.storage.get_collection(KEY)
        changed = []
        for msg in messages:
            if (msg.get("from_user_id") == other_user_id and msg.get("to_user_id") == user_id
                    and not msg.get("is_read")):
                msg["is_read"] = True
                changed.append(msg)
        if changed:
            self.storage.save_collection(KEY, messages)
            for msg in changed:
                self.sync.sync_item(KEY, msg)
        return len(changed)
