from datetime import date, datetime, timedelta, timezone

from shegoes.models.user_state import Dream, UserState, Win

DREAM = Dream(
    id="dream-1",
    category="Travel",
    title="Solo trip to Italy",
    created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
)


def make_wins(count: int, *, start: date = date(2023, 12, 1)) -> list:
    """``count`` wins, newest first, one per day ending on start + count - 1."""
    wins = []
    for i in range(count):
        day = start + timedelta(days=i)
        wins.append(
            Win(
                id=f"seed-{i + 1}",
                dream_id=DREAM.id,
                action=f"Seed action {i + 1}",
                timestamp=datetime(day.year, day.month, day.day, 9, 0, tzinfo=timezone.utc),
            )
        )
    return list(reversed(wins))


def make_state(**overrides) -> UserState:
    fields = {
        "uid": "user-1",
        "email": "traveller@example.com",
        "has_onboarded": True,
        "active_dream_id": DREAM.id,
        "dreams": [DREAM],
    }
    fields.update(overrides)
    return UserState(**fields)


def at(day: date, hour: int = 12) -> datetime:
    return datetime(day.year, day.month, day.day, hour, 0, tzinfo=timezone.utc)
