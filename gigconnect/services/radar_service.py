"""
Radar Service - canned market-signal scans.
"""

import random
from datetime import datetime, timedelta, timezone
from typing import List

from gigconnect.services.base import BaseService
from gigconnect.utils.helpers import new_id, now_iso, to_iso

FINDINGS_KEY = "radarFindings"
SCANS_KEY = "radarScans"
MAX_FINDINGS = 50
MAX_SCANS = 20

CATEGORIES = [
    ("AI-Assisted Proposals", "product"),
    ("Escrow & Milestone Payments", "pricing"),
    ("Verified Talent Badges", "marketplace"),
    ("Async Interviews", "community"),
    ("AI Match Scoring", "product"),
    ("Success-Fee Transparency", "pricing"),
]

TRENDS = [
    "Rising demand for outcome-based pricing.",
    "Clients requesting faster shortlists and pre-vetted talent.",
    "Higher conversion when proposals include a 30-second pitch.",
    "Employers prefer clear success-fee transparency.",
    "Talent wants clear timelines and milestone clarity.",
    "Growth spikes from community-driven referral loops.",
]

SUGGESTIONS = [
    "Launch a 48-hour fast shortlist lane for time-sensitive employers.",
    "Add proposal templates with AI-driven project plans.",
    "Bundle escrow into the job post flow to reduce churn.",
    "Introduce verified-skill badges with lightweight assessments.",
    "Create a referral flywheel with double-sided credits.",
    "Build a project kickoff pack that auto-generates milestones.",
]

IMPACTS = ("Low", "Medium", "High")


class RadarService(BaseService):

    def _generate_findings(self) -> List[dict]:
        findings = []
        for index in range(random.randint(5, 8)):
            category, source_type = CATEGORIES[index % len(CATEGORIES)]
            findings.append({
                "id": new_id("radar", str(index)),
                "category": category,
                "trend": random.choice(TRENDS),
                "impact": random.choice(IMPACTS),
                "suggestion": random.choice(SUGGESTIONS),
                "source_type": source_type,
                "scanned_at": now_iso(),
            })
        return findings

    def run_scan(self) -> dict:
        findings = self._generate_findings()
        started = datetime.now(timezone.utc) - timedelta(minutes=2)
        scan = {
            "id": new_id("scan"),
            "started_at": to_iso(started),
            "finished_at": now_iso(),
            "findings_count": len(findings),
            "summary": f"Generated {len(findings)} strategic signals from marketplace, pricing and product trends.",
        }
        self.storage.save_collection(FINDINGS_KEY, (findings + self.get_findings())[:MAX_FINDINGS])
        self.storage.prepend(SCANS_KEY, scan, MAX_SCANS)
        return scan

    def get_findings(self) -> List[dict]:
        return self.storage.get_collection(FINDINGS_KEY)

    def get_scans(self) -> List[dict]:
        return self.storage.get_collection(SCANS_KEY)
