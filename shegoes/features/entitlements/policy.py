"""
Premium gating policy.

Two plans, resolved from ``UserState.is_premium``:
- free: one dream, no streak grace, no Dream Drops, no recaps
- premium: unlimited dreams, bounded streak grace, Dream Drops, recaps

An entitlement value of -1 means unlimited.
"""

from typing import Any, Dict, Optional

from shegoes.core.config import settings
from shegoes.core.errors import PremiumRequiredError
from shegoes.models.user_state import UserState

UNLIMITED = -1

DEFAULT_PLANS: Dict[str, Dict[str, Any]] = {
    "free": {
        "name": "Free",
        "entitlements": {
            "dreams.max": settings.FREE_DREAMS_MAX,
            "streak.grace_days": 0,
            "dream_drops": False,
            "recaps": False,
            "streak_protection": False,
        },
    },
    "premium": {
        "name": "Dream Builder",
        "entitlements": {
            "dreams.max": UNLIMITED,
            "streak.grace_days": settings.STREAK_GRACE_DAYS,
            "dream_drops": True,
            "recaps": True,
            "streak_protection": True,
        },
    },
}

FEATURE_LABELS = {
    "dreams.max": "Unlimited active dreams",
    "streak_protection": "Streak protection",
    "dream_drops": "Monthly Dream Drops",
    "recaps": "Personal progress recaps",
}


def plan_id_for(state: UserState) -> str:
    return "premium" if state.is_premium else "free"


def get_entitlement(state: UserState, key: str) -> Any:
    return DEFAULT_PLANS[plan_id_for(state)]["entitlements"][key]


def can_add_dream(state: UserState) -> bool:
    """Free accounts may hold at most ``dreams.max`` dreams in total."""
    limit = get_entitlement(state, "dreams.max")
    if limit == UNLIMITED:
        return True
    return len(state.dreams) < limit


def streak_grace_days(state: UserState, grace_threshold: Optional[int] = None) -> int:
    """Whole-day gap that still continues a streak; 0 means no grace.

    Grace applies only to premium accounts with streak protection switched on.
    """
    if not (state.is_premium and state.streak_protection_enabled):
        return 0
    if grace_threshold is not None:
        return grace_threshold
    return get_entitlement(state, "streak.grace_days")


def has_feature(state: UserState, feature: str) -> bool:
    return bool(get_entitlement(state, feature))


def require_feature(state: UserState, feature: str) -> None:
    if not has_feature(state, feature):
        label = FEATURE_LABELS.get(feature, feature)
        raise PremiumRequiredError(f"{label} is part of the premium plan")


def can_toggle_streak_protection(state: UserState) -> bool:
    return has_feature(state, "streak_protection")
