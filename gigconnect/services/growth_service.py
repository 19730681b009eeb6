"""
Growth Service - outreach campaigns and canned lead generation.
"""

import random
from typing import List, Optional

from gigconnect.services.base import BaseService
from gigconnect.utils.helpers import new_id, now_iso

CAMPAIGNS_KEY = "growthCampaigns"
LEADS_KEY = "outreachLeads"
MAX_CAMPAIGNS = 50
MAX_LEADS = 50

SEGMENTS = [
    "Early-stage SaaS founders",
    "Local agencies scaling delivery",
    "Ecommerce shops needing ops help",
    "Design studios with overflow",
    "B2B teams hiring fractional talent",
]

INTENT_SIGNALS = [
    "Hiring post detected in community forums",
    "Recent funding announcement",
    "Rapid hiring on social channels",
    "Looking for freelancers in niche groups",
    "Project launch window in the next 30 days",
]

OFFERS = [
    "Zero upfront fees - pay only when you pay talent through GigConnect",
    "No posting fees, no subscriptions - success fee only on completed payments",
    "Priority matching included with success-fee-only pricing",
    "Free onboarding concierge with pay-only-when-paid terms",
    "Fast shortlist with no fees until you pay through the platform",
]

CHANNELS = ("Email", "Social", "Community", "Partnerships", "Referral")


def build_outreach_message(segment: str, offer: str) -> str:
    return (
        "Hi there,\n\n"
        f"We are helping {segment.lower()} hire faster. GigConnect is free to join and uses a "
        "success-fee-only model, so we only earn when you pay talent through the platform. "
        f"We can also offer {offer.lower()} to help you move quickly. If you want a curated "
        "shortlist in 48 hours, reply and we will set it up.\n\n"
        "Best,\nGigConnect Growth Team"
    )


class GrowthService(BaseService):

    def get_campaigns(self) -> List[dict]:
        return self.storage.get_collection(CAMPAIGNS_KEY)

    def get_leads(self) -> List[dict]:
        return self.storage.get_collection(LEADS_KEY)

    def create_campaign(self, name: str, channel: str, offer: Optional[str] = None) -> dict:
        if channel not in CHANNELS:
            raise ValueError(f"Unknown channel '{channel}'")
        offer = offer or random.choice(OFFERS)
        campaign = {
            "id": new_id("campaign"),
            "name": name,
            "channel": channel,
            "offer": offer,
            "status": "Draft",
            "message": build_outreach_message("growth-focused teams", offer),
            "created_at": now_iso(),
        }
        self.storage.prepend(CAMPAIGNS_KEY, campaign, MAX_CAMPAIGNS)
        return campaign

    def generate_leads(self) -> List[dict]:
        """3 to 6 fresh leads, stored ahead of older ones."""
        leads = []
        for index in range(random.randint(3, 6)):
            segment = random.choice(SEGMENTS)
            leads.append({
                "id": new_id("lead", str(index)),
                "segment": segment,
                "intent_signal": random.choice(INTENT_SIGNALS),
                "suggested_action": "Send a free-access invite with curated shortlist",
                "outreach_message": build_outreach_message(segment, random.choice(OFFERS)),
                "created_at": now_iso(),
            })
        self.storage.save_collection(LEADS_KEY, (leads + self.get_leads())[:MAX_LEADS])
        return leads
