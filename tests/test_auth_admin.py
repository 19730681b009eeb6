"""
Account tests: signup/login, GodMode and admin moderation.
"""

import pytest

from gigconnect.core.errors import NotFoundError, ServiceError
from gigconnect.services.admin_service import AdminService
from gigconnect.services.auth_service import AuthService
from gigconnect.services.storage_service import DATABASE_KEYS


@pytest.fixture
def auth(storage, sync):
    return AuthService(storage, sync, admin_email="Boss@Gig.co")


@pytest.fixture
def admin(storage, sync, notifications):
    return AdminService(storage, sync, notifications=notifications)


# ============================================================
# SIGNUP / LOGIN
# ============================================================

def test_signup_normalizes_and_hashes(auth, storage):
    user = auth.signup("Jane", "  Jane@Example.COM ", "s3cret", "JobSeeker")

    assert user["email"] == "jane@example.com"
    assert user["approved"] is True
    assert user["skills"] == []
    assert "password_hash" not in user
    stored = storage.get_collection("users")[0]
    assert stored["password_hash"] != "s3cret"
    assert auth.get_current_user()["id"] == user["id"]


def test_signup_duplicate_email(auth):
    auth.signup("Jane", "jane@example.com", "pw", "JobSeeker")
    with pytest.raises(ServiceError, match="User with this email already exists."):
        auth.signup("Other Jane", "JANE@example.com", "pw", "Employer")


def test_signup_admin_email_gets_admin_role(auth):
    user = auth.signup("Boss", "boss@gig.co", "pw", "Employer")
    assert user["role"] == "Admin"


def test_employer_signup_sets_company(auth):
    user = auth.signup("Acme Ltd", "hr@acme.co", "pw", "Employer")
    assert user["company_name"] == "Acme Ltd"


def test_login(auth):
    auth.signup("Jane", "jane@example.com", "pw", "JobSeeker")
    auth.logout()
    assert auth.get_current_user() is None

    assert auth.login("JANE@example.com", "wrong") is None
    assert auth.login("nobody@example.com", "pw") is None
    user = auth.login("jane@example.com", "pw")
    assert user["email"] == "jane@example.com"
    assert auth.get_current_user()["id"] == user["id"]


def test_login_pending_approval(auth, storage):
    user = auth.signup("Jane", "jane@example.com", "pw", "JobSeeker")
    users = storage.get_collection("users")
    users[0]["approved"] = False
    storage.save_collection("users", users)

    with pytest.raises(ServiceError, match="Your account is pending admin approval."):
        auth.login("jane@example.com", "pw")
    assert auth.login_by_id(user["id"])["id"] == user["id"]


def test_update_current_user(auth):
    user = auth.signup("Jane", "jane@example.com", "pw", "JobSeeker")
    updated = auth.update_current_user({"profile_bio": "Designer", "id": "hijack", "password_hash": "x"})
    assert updated["id"] == user["id"]
    assert updated["profile_bio"] == "Designer"
    assert auth.login("jane@example.com", "pw") is not None


def test_session_keys_not_exported(auth):
    auth.signup("Jane", "jane@example.com", "pw", "JobSeeker")
    assert "currentUserId" not in DATABASE_KEYS
    assert "godModeAdminId" not in DATABASE_KEYS


# ============================================================
# GOD MODE
# ============================================================

def test_god_mode_round_trip(auth, users):
    auth.login_by_id("admin-1")

    viewed = auth.start_god_mode("seeker-1")

    assert viewed["id"] == "seeker-1"
    assert auth.is_god_mode() is True
    assert auth.get_current_user()["id"] == "seeker-1"

    restored = auth.exit_god_mode()
    assert restored["id"] == "admin-1"
    assert auth.is_god_mode() is False


def test_god_mode_admin_only(auth, users):
    auth.login_by_id("employer-1")
    with pytest.raises(ServiceError, match="Only admins"):
        auth.start_god_mode("seeker-1")


def test_god_mode_unknown_target(auth, users):
    auth.login_by_id("admin-1")
    with pytest.raises(NotFoundError):
        auth.start_god_mode("ghost")


def test_exit_god_mode_logs_out_when_admin_gone(auth, users, storage):
    auth.login_by_id("admin-1")
    auth.start_god_mode("seeker-1")
    storage.save_collection("users", [u for u in users if u["id"] != "admin-1"])

    assert auth.exit_god_mode() is None
    assert auth.get_current_user() is None


# ============================================================
# ADMIN
# ============================================================

def test_approve_user_notifies(admin, storage, users, notifications):
    pending = {"id": "seeker-9", "email": "new@gig.co", "role": "JobSeeker", "approved": False}
    storage.save_collection("users", users + [pending])

    assert [u["id"] for u in admin.get_pending_users()] == ["seeker-9"]
    admin.approve_user("seeker-9")

    assert admin.get_pending_users() == []
    assert notifications.get_notifications_for_user("seeker-9")[0]["message"] == (
        "Your account has been approved! You can now log in."
    )


def test_reject_user_deletes_locally_and_remotely(storage, remote_sync, users):
    admin = AdminService(storage, remote_sync)
    remote_sync.sync_item("users", users[3])

    admin.reject_user("seeker-2")

    assert "seeker-2" not in {u["id"] for u in storage.get_collection("users")}
    assert remote_sync.hydrate()
    assert "seeker-2" not in {u["id"] for u in storage.get_collection("users")}


def test_approve_and_reject_jobs(admin, storage, users, notifications):
    storage.save_collection("jobs", [
        {"id": "job-1", "employer_id": "employer-1", "title": "Logo", "status": "Pending Approval"},
        {"id": "job-2", "employer_id": "employer-1", "title": "Spam", "status": "Pending Approval"},
    ])
    assert len(admin.get_pending_jobs()) == 2

    assert admin.approve_job("job-1")["status"] == "Open"
    assert admin.reject_job("job-2")["status"] == "Rejected"
    assert admin.get_pending_jobs() == []

    messages = [n["message"] for n in notifications.get_notifications_for_user("employer-1")]
    assert 'Your job post "Logo" has been approved.' in messages
    assert 'Your job post "Spam" was rejected.' in messages


def test_set_job_verification(admin, storage, users):
    storage.save_collection("jobs", [{"id": "job-1", "employer_id": "employer-1", "title": "Logo"}])
    job = admin.set_job_verification("job-1", "Verified", "Checked company registry")
    assert job["verification_status"] == "Verified"
    assert job["verification_note"] == "Checked company registry"
    with pytest.raises(ValueError):
        admin.set_job_verification("job-1", "Maybe")


def test_admin_unknown_records(admin):
    with pytest.raises(NotFoundError):
        admin.approve_user("ghost")
    with pytest.raises(NotFoundError):
        admin.approve_job("ghost")
