"""
Auth Service - signup, login and the single active session.

The session is one user id kept under SESSION_KEY in the local store.
GodMode lets an admin act as another user; the admin's id is parked
under GOD_MODE_KEY until exit_god_mode() restores it.
Neither key is exported with the database.
"""

import logging
from typing import Optional, Union

from gigconnect.core.auth import hash_password, verify_password
from gigconnect.core.config import get_settings
from gigconnect.core.errors import NotFoundError, ServiceError
from gigconnect.schemas.schemas import UserRole
from gigconnect.services.base import BaseService
from gigconnect.utils.helpers import new_id, normalize_email

logger = logging.getLogger(__name__)

USERS_KEY = "users"
SESSION_KEY = "currentUserId"
GOD_MODE_KEY = "godModeAdminId"


def public_user(user: Optional[dict]) -> Optional[dict]:
    """User without the password hash."""
    if user is None:
        return None
    return {k: v for k, v in user.items() if k != "password_hash"}


class AuthService(BaseService):

    def __init__(self, storage=None, sync=None, admin_email: Optional[str] = None):
        super().__init__(storage, sync)
        email = admin_email if admin_email is not None else get_settings().admin_email
        self.admin_email = normalize_email(email) if email else ""

    def _find_by_email(self, email: str) -> Optional[dict]:
        email = normalize_email(email)
        return next(
            (u for u in self.storage.get_collection(USERS_KEY) if normalize_email(u.get("email", "")) == email),
            None,
        )

    def _get_user(self, user_id: str) -> Optional[dict]:
        return next((u for u in self.storage.get_collection(USERS_KEY) if u.get("id") == user_id), None)

    # ============================================================
    # ACCOUNTS
    # ============================================================

    def signup(self, name: str, email: str, password: str, role: Union[UserRole, str]) -> dict:
        """Create an approved account and start its session."""
        email = normalize_email(email)
        if self._find_by_email(email) is not None:
            raise ServiceError("User with this email already exists.")

        role = UserRole(role)
        if self.admin_email and email == self.admin_email:
            role = UserRole.admin

        user = {
            "id": new_id("user"),
            "name": name,
            "email": email,
            "password_hash": hash_password(password),
            "role": role.value,
            "approved": True,
            "referral_code": new_id("ref"),
        }
        if role == UserRole.job_seeker:
            user["skills"] = []
        elif role == UserRole.employer:
            user["company_name"] = name

        users = self.storage.get_collection(USERS_KEY)
        users.append(user)
        self.storage.save_collection(USERS_KEY, users)
        self.sync.sync_item(USERS_KEY, user)
        self.storage.set(SESSION_KEY, user["id"])
        logger.info("New %s account %s", role.value, user["id"])
        return public_user(user)

    def login(self, email: str, password: str) -> Optional[dict]:
        """Returns the user, None on bad credentials; raises if not yet approved."""
        user = self._find_by_email(email)
        if user is None or not verify_password(password, user.get("password_hash", "")):
            return None
        if not user.get("approved"):
            raise ServiceError("Your account is pending admin approval.")
        self.storage.set(SESSION_KEY, user["id"])
        return public_user(user)

    def login_by_id(self, user_id: str) -> Optional[dict]:
        user = self._get_user(user_id)
        if user is None:
            return None
        self.storage.set(SESSION_KEY, user_id)
        return public_user(user)

    def logout(self) -> None:
        self.storage.remove(SESSION_KEY)
        self.storage.remove(GOD_MODE_KEY)

    def get_current_user(self) -> Optional[dict]:
        user_id = self.storage.get(SESSION_KEY)
        if not user_id:
            return None
        return public_user(self._get_user(user_id))

    def update_current_user(self, updates: dict) -> Optional[dict]:
        """Merge `updates` into the signed-in user's profile."""
        user_id = self.storage.get(SESSION_KEY)
        if not user_id:
            return None
        users = self.storage.get_collection(USERS_KEY)
        index = self.find_index(users, user_id)
        if index == -1:
            return None
        protected = {"id", "password_hash"}
        users[index].update({k: v for k, v in updates.items() if k not in protected})
        self.storage.save_collection(USERS_KEY, users)
        self.sync.sync_item(USERS_KEY, users[index])
        return public_user(users[index])

    # ============================================================
    # GOD MODE
    # ============================================================

    def start_god_mode(self, target_user_id: str) -> dict:
        current = self.get_current_user()
        if current is None or current.get("role") != UserRole.admin.value:
            raise ServiceError("Only admins can use GodMode.")
        target = self._get_user(target_user_id)
        if target is None:
            raise NotFoundError("User not found.")
        if not self.is_god_mode():
            self.storage.set(GOD_MODE_KEY, current["id"])
        self.storage.set(SESSION_KEY, target_user_id)
        logger.info("Admin %s is viewing as %s", self.storage.get(GOD_MODE_KEY), target_user_id)
        return public_user(target)

    def exit_god_mode(self) -> Optional[dict]:
        """Back to the admin's own session; logs out if the admin is gone."""
        admin_id = self.storage.get(GOD_MODE_KEY)
        self.storage.remove(GOD_MODE_KEY)
        admin = self._get_user(admin_id) if admin_id else None
        if admin is None:
            self.logout()
            return None
        self.storage.set(SESSION_KEY, admin_id)
        return public_user(admin)

    def is_god_mode(self) -> bool:
        return bool(self.storage.get(GOD_MODE_KEY))
