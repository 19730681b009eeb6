"""
Background agent tests: scheduling, auto-match, moderation, growth,
radar and self-healing.
"""

from datetime import datetime, timedelta, timezone

import pytest

from gigconnect.services.automation_service import AutomationService, STATUS_KEY
from gigconnect.services.growth_service import GrowthService
from gigconnect.services.radar_service import RadarService
from gigconnect.services.self_healing_service import SelfHealingService
from gigconnect.utils.helpers import to_iso

NOW = datetime(2026, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def automation(storage, sync, notifications):
    return AutomationService(storage, sync, notifications=notifications)


def open_job(job_id, title, description, employer_id="employer-1"):
    return {"id": job_id, "employer_id": employer_id, "title": title, "description": description,
            "category": "Web Development", "status": "Open"}


# ============================================================
# SETTINGS / SCHEDULE
# ============================================================

def test_settings_default_and_update(automation):
    settings = automation.get_settings()
    assert all(settings.values())

    updated = automation.update_settings({"growth_hunt": False, "unknown_agent": True})
    assert updated["growth_hunt"] is False
    assert "unknown_agent" not in updated
    assert automation.get_settings()["growth_hunt"] is False


def test_first_tick_runs_every_enabled_agent(automation, users):
    automation.update_settings({"auto_blog": False})
    ran = automation.run_background_tick(users[0], now=NOW)
    assert set(ran) == {"auto_match", "auto_moderation", "innovation_radar", "growth_hunt", "self_healing"}


def test_agents_wait_for_their_interval(automation, users, storage):
    automation.run_background_tick(users[0], now=NOW)

    assert automation.run_background_tick(users[0], now=NOW + timedelta(minutes=10)) == []
    assert automation.run_background_tick(users[0], now=NOW + timedelta(minutes=21)) == ["auto_match"]
    later = automation.run_background_tick(users[0], now=NOW + timedelta(minutes=46))
    assert set(later) == {"auto_match", "auto_moderation", "self_healing"}
    assert storage.get(STATUS_KEY)["last_auto_match_at"] == to_iso(NOW + timedelta(minutes=46))


def test_disabled_agent_never_runs(automation, users):
    automation.update_settings({key: False for key in automation.get_settings()})
    assert automation.run_background_tick(users[0], now=NOW) == []


def test_growth_notifies_admin_only(automation, users, notifications):
    automation.update_settings({"auto_match": False, "auto_moderation": False, "innovation_radar": False,
                                "self_healing": False, "auto_blog": False})
    automation.run_background_tick(users[1], now=NOW)
    assert notifications.get_notifications_for_user("employer-1") == []

    automation.run_background_tick(users[0], now=NOW + timedelta(minutes=61))
    message = notifications.get_notifications_for_user("admin-1")[0]["message"]
    assert message.startswith("Growth engine found")


# ============================================================
# AGENTS
# ============================================================

def test_auto_match_caps_at_three(automation, users, storage, notifications):
    storage.save_collection("jobs", [
        open_job(f"job-{i}", f"Python gig {i}", "Backend work") for i in range(5)
    ] + [open_job("job-x", "Welding", "Metal work")])

    sent = automation.run_auto_match()

    assert sent == 3
    matched = notifications.get_notifications_for_user("seeker-1")
    assert len(matched) == 3
    assert all(n["message"].startswith('New match: "Python gig') for n in matched)
    # seeker-2 has no skills
    assert notifications.get_notifications_for_user("seeker-2") == []


def test_auto_match_skips_without_jobs(automation, users):
    assert automation.run_auto_match() == 0
    assert automation.get_events()[0]["status"] == "warning"


def test_auto_moderation_flags_keywords(automation, users, storage, notifications):
    storage.save_collection("jobs", [
        open_job("job-1", "Trader", "Earn fast with Bitcoin"),
        open_job("job-2", "Designer", "Design a logo"),
    ])

    flagged = automation.run_auto_moderation()

    assert [j["id"] for j in flagged] == ["job-1"]
    assert notifications.get_notifications_for_user("employer-1")[0]["message"] == (
        'Your job "Trader" may need edits before approval.'
    )


def test_events_capped(automation):
    for _ in range(105):
        automation.run_auto_moderation()
    assert len(automation.get_events()) == 100


def test_growth_leads(storage, sync):
    service = GrowthService(storage, sync)
    leads = service.generate_leads()
    assert 3 <= len(leads) <= 6
    assert service.get_leads()[:len(leads)] == leads
    for _ in range(20):
        service.generate_leads()
    assert len(service.get_leads()) == 50


def test_growth_campaign(storage, sync):
    service = GrowthService(storage, sync)
    campaign = service.create_campaign("Spring push", "Email", "Free onboarding")
    assert campaign["status"] == "Draft"
    assert "free onboarding" in campaign["message"]
    with pytest.raises(ValueError):
        service.create_campaign("Bad", "Fax")


def test_radar_scan(storage, sync):
    service = RadarService(storage, sync)
    scan = service.run_scan()
    assert 5 <= scan["findings_count"] <= 8
    assert len(service.get_findings()) == scan["findings_count"]
    assert service.get_scans() == [scan]
    for _ in range(25):
        service.run_scan()
    assert len(service.get_scans()) == 20
    assert len(service.get_findings()) == 50


# ============================================================
# SELF-HEALING
# ============================================================

def test_self_heal_restores_admin(storage, sync):
    service = SelfHealingService(storage, sync)
    service.run_self_heal()

    assert storage.get_collection("users")[0]["id"] == "admin-recovery"
    results = {a["action"]: a["result"] for a in service.get_actions()}
    assert results["Recreated core admin user"] == "Fixed"
    assert results["Job catalog check"] == "Needs Review"


def test_self_heal_prunes_and_escalates(storage, sync, users):
    service = SelfHealingService(storage, sync)
    storage.save_collection("jobs", [open_job("job-1", "Logo", "A logo")])
    recent = to_iso(datetime.now(timezone.utc))
    storage.save_collection("errorLogs", [
        {"id": f"log-{i}", "timestamp": recent, "message": "boom"} for i in range(60)
    ])

    service.run_self_heal()

    assert len(storage.get_collection("errorLogs")) == 50
    incident = service.get_incidents()[0]
    assert incident["severity"] == "High"
    assert incident["summary"] == "Spike detected: 50 errors in the last hour."


def test_old_errors_do_not_escalate(storage, sync, users):
    service = SelfHealingService(storage, sync)
    storage.save_collection("jobs", [open_job("job-1", "Logo", "A logo")])
    old = to_iso(datetime.now(timezone.utc) - timedelta(hours=3))
    storage.save_collection("errorLogs", [{"id": f"log-{i}", "timestamp": old} for i in range(12)])

    service.run_self_heal()

    assert service.get_incidents() == []
    assert service.get_actions() == []
