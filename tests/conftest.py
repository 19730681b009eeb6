"""
Shared fixtures: an in-memory MongoDB store (mongomock), a disabled
remote mirror and an in-memory SQLite mirror database.
"""

import mongomock
import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from gigconnect.db.postgres import create_tables
from gigconnect.services.job_service import JobService
from gigconnect.services.notification_service import NotificationService
from gigconnect.services.storage_service import StorageService
from gigconnect.services.sync_service import TableSyncService
from gigconnect.services.wallet_service import WalletService


@pytest.fixture
def storage():
    return StorageService(mongomock.MongoClient().db)


@pytest.fixture
def sync(storage):
    """Mirror with no engine: every call is a no-op."""
    return TableSyncService(engine=None, storage=storage)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    create_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def remote_sync(engine, storage):
    service = TableSyncService(engine=engine, storage=storage, debounce_seconds=0.3)
    yield service
    service.shutdown()


@pytest.fixture
def notifications(storage, sync):
    return NotificationService(storage, sync)


@pytest.fixture
def wallet(storage, sync):
    return WalletService(storage, sync, commission_rate=0.10)


@pytest.fixture
def jobs(storage, sync, notifications, wallet):
    return JobService(storage, sync, notifications=notifications, wallet=wallet, require_approval=False)


@pytest.fixture
def users(storage):
    """An admin, an employer and two job seekers."""
    people = [
        {"id": "admin-1", "email": "admin@gig.co", "name": "Admin", "role": "Admin", "approved": True},
        {"id": "employer-1", "email": "employer@gig.co", "name": "Acme", "role": "Employer", "approved": True},
        {"id": "seeker-1", "email": "jane@gig.co", "name": "Jane", "role": "JobSeeker", "approved": True,
         "skills": ["React", "Python"]},
        {"id": "seeker-2", "email": "sam@gig.co", "name": "Sam", "role": "JobSeeker", "approved": True,
         "skills": []},
    ]
    storage.save_collection("users", people)
    return people


@pytest.fixture
def hired_job(jobs, users):
    """A job in progress with seeker-1 hired."""
    job = jobs.create_job({
        "employer_id": "employer-1",
        "title": "Landing page",
        "description": "Build a React landing page",
        "category": "Web Development",
        "payment": 100,
    })
    application = jobs.apply_for_job(job["id"], "seeker-1", "I can do this")
    jobs.update_application_status(application["id"], "Accepted", job)
    return jobs.get_job(job["id"])
