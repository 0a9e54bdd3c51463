"""
Regeneration throttle for shopping recommendations.

Decides whether a cached recommendation set is recomputed. Rules, in priority
order:

1. No entry: regenerate.
2. Younger than the cool-down window: serve, even if stale or fully clicked.
3. Older than the long window: regenerate.
4. Every recommendation clicked: regenerate.
5. Wardrobe changed since generation: regenerate.
6. Otherwise serve.

The cool-down is checked first so that click-spamming or rapid wardrobe edits
can never cause back-to-back generations. Both windows are inclusive on the
regenerate side: an entry exactly one cool-down old is eligible.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from stylebook.core.config import settings
from stylebook.features.cache.service import is_valid
from stylebook.models.cache import CachedGeneration
from stylebook.models.person import ensure_utc, utc_now


class ThrottleDecision(str, Enum):
    SERVE_CACHE = "serve_cache"
    REGENERATE = "regenerate"


@dataclass(frozen=True)
class ThrottleVerdict:
    decision: ThrottleDecision
    reason: str

    @property
    def regenerate(self) -> bool:
        return self.decision == ThrottleDecision.REGENERATE


@dataclass(frozen=True)
class ThrottleWindows:
    cooldown: timedelta
    max_age: timedelta

    @classmethod
    def from_settings(cls) -> "ThrottleWindows":
        return cls(
            cooldown=timedelta(hours=settings.SHOPPING_COOLDOWN_HOURS),
            max_age=timedelta(days=settings.SHOPPING_MAX_AGE_DAYS),
        )


def all_clicked(entry: CachedGeneration) -> bool:
    """Every stored recommendation has been clicked. An empty set never counts."""
    count = len(entry.payload)
    return count > 0 and entry.click_count >= count


def evaluate(
    entry: Optional[CachedGeneration],
    wardrobe_modified_at: datetime,
    now: Optional[datetime] = None,
    windows: Optional[ThrottleWindows] = None,
) -> ThrottleVerdict:
    if entry is None:
        return ThrottleVerdict(ThrottleDecision.REGENERATE, "missing")

    windows = windows or ThrottleWindows.from_settings()
    moment = ensure_utc(now) or utc_now()
    age = moment - entry.updated_at

    if age < windows.cooldown:
        return ThrottleVerdict(ThrottleDecision.SERVE_CACHE, "cooldown")
    if age >= windows.max_age:
        return ThrottleVerdict(ThrottleDecision.REGENERATE, "expired")
    if all_clicked(entry):
        return ThrottleVerdict(ThrottleDecision.REGENERATE, "all_clicked")
    if not is_valid(entry, wardrobe_modified_at):
        return ThrottleVerdict(ThrottleDecision.REGENERATE, "stale")
    return ThrottleVerdict(ThrottleDecision.SERVE_CACHE, "fresh")
