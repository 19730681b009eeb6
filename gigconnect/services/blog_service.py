"""
Blog Service - posts with unique slugs and template-driven auto posts.
"""

import random
from typing import List, Optional

from gigconnect.core.errors import NotFoundError
from gigconnect.schemas.schemas import BlogStatus
from gigconnect.services.base import BaseService
from gigconnect.utils.helpers import new_id, now_iso, slugify

KEY = "blogPosts"
MAX_POSTS = 200

AUTO_AUTHOR = "GigConnect Newsroom"
AUTO_SOURCE = "Auto Mode"

TEMPLATES = [
    {
        "title": "Weekly Work Trends: What Clients Are Hiring For",
        "excerpt": "A quick snapshot of the most requested services and how freelancers can position themselves.",
        "content": "Hiring momentum remains strong for web development, brand design and AI automation. "
                   "Clients want clear timelines and fixed milestones. Freelancers who show short case "
                   "studies and specify deliverables are winning faster decisions.",
        "category": "Work News",
        "tags": ["trends", "hiring", "skills"],
    },
    {
        "title": "How to Craft Proposals That Get Replies",
        "excerpt": "Stand out in a crowded market with a proposal structure that clients actually read.",
        "content": "Start with a 2-line summary, then show your plan in 3 bullets. Confirm the timeline, "
                   "ask one smart question and end with a clear call-to-action. Short beats long.",
        "category": "Freelancer Success",
        "tags": ["proposals", "clients", "growth"],
    },
    {
        "title": "Employer Playbook: How to Hire Faster and Better",
        "excerpt": "Reduce hiring time with a clear scope, budget range and milestone plan.",
        "content": "The fastest hires happen when clients share the exact outcome they want, attach "
                   "examples and provide a budget range. Posting a short scope and offering a paid "
                   "test task improves quality and speed.",
        "category": "Employer Insights",
        "tags": ["employers", "hiring", "best-practices"],
    },
    {
        "title": "Remote Work Readiness: A 5-Point Checklist",
        "excerpt": "Quick steps to make your freelance profile irresistible for remote teams.",
        "content": "Show time zone availability, response time, portfolio links, clear pricing and a "
                   "2-3 sentence summary. Keep your profile consistent and updated every week.",
        "category": "Remote Work",
        "tags": ["remote", "profile", "checklist"],
    },
    {
        "title": "AI + Freelancing: How to Work 2x Faster",
        "excerpt": "Practical ways freelancers use AI for drafts, research and faster delivery.",
        "content": "Use AI to outline first drafts, summarize client notes and generate alternative "
                   "ideas. Always review outputs and tailor them to client goals. Speed helps only "
                   "when quality stays high.",
        "category": "Productivity",
        "tags": ["ai", "productivity", "workflow"],
    },
]


def unique_slug(title: str, existing: List[dict]) -> str:
    """slug, slug-2, slug-3, ... whichever is free first."""
    base = slugify(title)
    taken = {post.get("slug") for post in existing}
    slug, counter = base, 2
    while slug in taken:
        slug = f"{base}-{counter}"
        counter += 1
    return slug


class BlogService(BaseService):

    def _add_post(self, post: dict) -> dict:
        self.storage.prepend(KEY, post, MAX_POSTS)
        self.sync.sync_item(KEY, post)
        return post

    def get_all_posts(self) -> List[dict]:
        return self.storage.get_collection(KEY)

    def get_published_posts(self) -> List[dict]:
        return [p for p in self.get_all_posts() if p.get("status") == BlogStatus.published.value]

    def get_post_by_slug(self, slug: str) -> Optional[dict]:
        return next((p for p in self.get_all_posts() if p.get("slug") == slug), None)

    def create_post(self, data: dict) -> dict:
        now = now_iso()
        post = dict(data)
        post.setdefault("status", BlogStatus.draft.value)
        post.update({
            "id": new_id("blog"),
            "slug": unique_slug(data["title"], self.get_all_posts()),
            "created_at": now,
            "updated_at": now,
        })
        return self._add_post(post)

    def publish_post(self, post_id: str) -> dict:
        posts = self.get_all_posts()
        index = self.find_index(posts, post_id)
        if index == -1:
            raise NotFoundError("Post not found.")
        now = now_iso()
        posts[index].update({"status": BlogStatus.published.value, "published_at": now, "updated_at": now})
        self.storage.save_collection(KEY, posts)
        self.sync.sync_item(KEY, posts[index])
        return posts[index]

    def generate_auto_posts(self, count: int = 1) -> List[dict]:
        """Publish `count` posts from the newsroom templates."""
        existing = self.get_all_posts()
        start = random.randrange(len(TEMPLATES))
        created = []
        for i in range(count):
            template = TEMPLATES[(start + i) % len(TEMPLATES)]
            now = now_iso()
            post = dict(template, tags=list(template["tags"]))
            post.update({
                "id": new_id("blog-auto", str(i)),
                "slug": unique_slug(template["title"], existing + created),
                "author_name": AUTO_AUTHOR,
                "status": BlogStatus.published.value,
                "created_at": now,
                "published_at": now,
                "updated_at": now,
                "is_ai": True,
                "source": AUTO_SOURCE,
            })
            created.append(self._add_post(post))
        return created
