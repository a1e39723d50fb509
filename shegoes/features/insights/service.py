"""
Read-only views over a UserState: monthly progress recap, share card and
Dream Drops. Nothing here writes state.
"""

from datetime import date
from typing import Dict, List, Optional

from shegoes.core.clock import local_today
from shegoes.core.errors import NotFoundError
from shegoes.features.content.catalog import MONTHLY_DREAM_DROPS, featured_drop
from shegoes.features.entitlements.policy import require_feature
from shegoes.features.streaks.milestones import MILESTONES, next_milestone
from shegoes.models.user_state import UserState, Win

BRAND = "She Goes"
TAGLINE = "Small actions. Big lives."


def wins_in_month(wins: List[Win], day: date, tz_name: Optional[str] = None) -> List[Win]:
    """Wins whose local calendar month (in ``tz_name``, default TIMEZONE) is ``day``'s month."""
    month = (day.year, day.month)
    return [w for w in wins if _local_month(w, tz_name) == month]


def _local_month(win: Win, tz_name: Optional[str]):
    local = local_today(tz_name, win.timestamp)
    return local.year, local.month


def build_progress_recap(state: UserState, today: date, tz_name: Optional[str] = None) -> Dict[str, object]:
    """Premium recap for the calendar month containing ``today``."""
    require_feature(state, "recaps")

    month_wins = wins_in_month(state.wins, today, tz_name)
    upcoming = next_milestone(len(state.wins), MILESTONES)
    return {
        "month": today.strftime("%B"),
        "year": today.year,
        "winsThisMonth": len(month_wins),
        "totalWins": len(state.wins),
        "streak": state.streak,
        "milestonesReached": sorted(state.milestones_reached),
        "nextMilestone": (
            {"threshold": upcoming[0], "winsRemaining": upcoming[1]} if upcoming else None
        ),
        "energyMix": _energy_mix(month_wins),
    }


def _energy_mix(wins: List[Win]) -> Dict[str, int]:
    mix = {"low": 0, "medium": 0, "high": 0}
    for win in wins:
        if win.energy_level:
            mix[win.energy_level] += 1
    return mix


def share_text(action: str, dream_title: str) -> str:
    return f"I just logged a win on {BRAND}: \"{action}\" towards my dream of {dream_title}. 🥂✨"


def build_share_card(state: UserState, win_id: Optional[str] = None, identity_label: str = "Dreamer") -> Dict[str, object]:
    """Deterministic share card for one win (the newest when ``win_id`` is None).

    Only public-safe fields: no email, no user id, no avatar.
    """
    win = _select_win(state, win_id)
    dream = state.find_dream(win.dream_id)
    dream_title = dream.title if dream else "my dream"
    return {
        "title": win.action,
        "subtitle": dream_title,
        "identityLabel": identity_label,
        "reflection": win.reflection,
        "streak": state.streak,
        "day": local_today(now=win.timestamp).isoformat(),
        "shareText": share_text(win.action, dream_title),
        "brand": BRAND,
        "tagline": TAGLINE,
    }


def _select_win(state: UserState, win_id: Optional[str]) -> Win:
    if not state.wins:
        raise NotFoundError("No wins to share yet")
    if win_id is None:
        return state.wins[0]
    for win in state.wins:
        if win.id == win_id:
            return win
    raise NotFoundError(f"Win {win_id} not found")


def dream_drops(state: UserState, today: date) -> Dict[str, object]:
    require_feature(state, "dream_drops")
    return {"featured": featured_drop(today), "library": list(MONTHLY_DREAM_DROPS)}
