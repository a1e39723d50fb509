from datetime import date, datetime, timedelta, timezone

import pytest

from shegoes.core.errors import ConflictError, NotFoundError, PremiumRequiredError, ValidationError
from shegoes.features.ai.service import FALLBACK_IDENTITY, FALLBACK_REFLECTION, TextGenerationService
from shegoes.features.users.repository import UserStateRepository
from shegoes.features.content.catalog import QUOTES
from shegoes.features.users import service as user_service_module
from shegoes.features.users.service import UserService
from shegoes.features.users.store import InMemoryUserStateStore
from shegoes.models.identity import Identity
from shegoes.tests.factories import at, make_state, make_wins
from shegoes.tests.mocks import FakeGroq

NOW = datetime(2024, 1, 10, 9, 0, tzinfo=timezone.utc)


def onboarded(user_service, user_id="u1"):
    user_service.sign_in(Identity(user_id=user_id, email="a@example.com", display_name="Ada"))
    return user_service.complete_onboarding(user_id, "Travel", "Solo trip to Italy", now=NOW)


class TestSignIn:
    def test_first_sign_in_creates_default_state(self, user_service, store):
        view = user_service.sign_in(Identity(user_id="u1", email="a@example.com"))

        assert view.created is True
        assert view.state.display_name == "Adventurer"
        assert view.state.streak == 0
        assert view.state.has_onboarded is False
        assert view.identity_label == FALLBACK_IDENTITY
        assert view.affirmation is None
        assert store.get("u1")["uid"] == "u1"

    def test_second_sign_in_loads_and_refreshes_profile(self, user_service, store):
        user_service.sign_in(Identity(user_id="u1"))

        view = user_service.sign_in(Identity(user_id="u1", display_name="Ada", avatar_url="https://img/ada.png"))

        assert view.created is False
        assert view.state.display_name == "Ada"
        assert store.get("u1")["photoURL"] == "https://img/ada.png"

    def test_sign_in_with_active_dream_gets_affirmation(self, user_service):
        onboarded(user_service)

        view = user_service.sign_in(Identity(user_id="u1"))

        assert view.affirmation


class TestDreams:
    def test_onboarding_creates_and_activates_first_dream(self, user_service):
        state = onboarded(user_service)

        assert state.has_onboarded is True
        assert len(state.dreams) == 1
        assert state.active_dream_id == state.dreams[0].id == "id-1"
        assert state.dreams[0].created_at == NOW

    def test_onboarding_is_one_way(self, user_service):
        onboarded(user_service)
        with pytest.raises(ConflictError):
            user_service.complete_onboarding("u1", "Confidence", "Speak up", now=NOW)

    def test_free_user_cannot_add_second_dream(self, user_service):
        onboarded(user_service)
        with pytest.raises(PremiumRequiredError):
            user_service.add_dream("u1", "Confidence", "Speak at a conference", now=NOW)

    def test_premium_user_adds_and_switches_dreams(self, user_service):
        first = onboarded(user_service)
        user_service.upgrade_to_premium("u1")

        state = user_service.add_dream("u1", "Confidence", "Speak at a conference", now=NOW)
        assert len(state.dreams) == 2
        assert state.active_dream_id == state.dreams[1].id

        state = user_service.set_active_dream("u1", first.dreams[0].id)
        assert state.active_dream_id == first.dreams[0].id

    def test_add_dream_without_activating(self, user_service):
        onboarded(user_service)
        user_service.upgrade_to_premium("u1")

        state = user_service.add_dream("u1", "Travel", "Bucket list safari", now=NOW, activate=False)

        assert state.active_dream_id == state.dreams[0].id

    def test_set_active_unknown_dream(self, user_service):
        onboarded(user_service)
        with pytest.raises(NotFoundError):
            user_service.set_active_dream("u1", "nope")

    def test_blank_title_rejected(self, user_service):
        user_service.sign_in(Identity(user_id="u1"))
        with pytest.raises(ValidationError):
            user_service.complete_onboarding("u1", "Travel", "   ", now=NOW)


class TestAccount:
    def test_streak_protection_requires_premium(self, user_service):
        onboarded(user_service)
        with pytest.raises(PremiumRequiredError):
            user_service.set_streak_protection("u1", False)

        user_service.upgrade_to_premium("u1")
        assert user_service.set_streak_protection("u1", False).streak_protection_enabled is False

    def test_preferences_and_profile(self, user_service, store):
        onboarded(user_service)

        user_service.update_preferences("u1", theme="dark", preferred_energy="low")
        state = user_service.update_profile("u1", display_name="  Ada L. ")

        assert state.theme == "dark"
        assert state.preferred_energy == "low"
        assert state.display_name == "Ada L."
        assert store.get("u1")["theme"] == "dark"

    def test_blank_display_name_rejected(self, user_service):
        onboarded(user_service)
        with pytest.raises(ValidationError):
            user_service.update_profile("u1", display_name=" ")


class TestDailyRitual:
    def test_complete_today_persists_and_reports(self, user_service, store):
        onboarded(user_service)
        today = date(2024, 1, 10)

        outcome = user_service.complete_today("u1", today=today, now=at(today), action_text="Open a map", energy="medium")

        assert outcome.applied
        assert outcome.persisted
        assert outcome.state.streak == 1
        assert outcome.result.win.reflection == FALLBACK_REFLECTION
        assert store.get("u1")["lastCompletedDate"] == "2024-01-10"
        assert store.get("u1")["wins"][0]["action"] == "Open a map"

    def test_second_completion_same_day_is_no_op(self, user_service, store):
        onboarded(user_service)
        today = date(2024, 1, 10)
        user_service.complete_today("u1", today=today, now=at(today))

        again = user_service.complete_today("u1", today=today, now=at(today, 18))

        assert not again.applied
        assert again.result.transition == "already_done"
        assert len(store.get("u1")["wins"]) == 1

    def test_consecutive_days_build_streak_and_milestone(self, user_service):
        onboarded(user_service)
        day = date(2024, 1, 10)
        outcomes = []
        for _ in range(3):
            outcomes.append(user_service.complete_today("u1", today=day, now=at(day)))
            day += timedelta(days=1)

        assert [o.state.streak for o in outcomes] == [1, 2, 3]
        assert [o.result.milestone_triggered for o in outcomes] == [None, None, 3]
        assert user_service.get_state("u1").milestones_reached == [3]

    def test_completion_without_dream_is_no_op(self, user_service):
        user_service.sign_in(Identity(user_id="u1"))
        outcome = user_service.complete_today("u1", today=date(2024, 1, 10), now=NOW)
        assert outcome.result.transition == "no_active_dream"

    def test_identity_label_evolves_every_third_win(self, store, id_source):
        client = FakeGroq("Brave Wanderer")
        service = UserService(UserStateRepository(store), TextGenerationService(client=client), id_source=id_source)
        onboarded(service)
        day = date(2024, 1, 10)
        for _ in range(3):
            outcome = service.complete_today("u1", today=day, now=at(day))
            day += timedelta(days=1)

        assert outcome.identity_label == "Brave Wanderer"
        assert service.identity_label("u1") == "Brave Wanderer"

    def test_day_status(self, user_service):
        onboarded(user_service)
        today = date(2024, 1, 10)

        before = user_service.day_status("u1", today)
        user_service.complete_today("u1", today=today, now=at(today))
        after = user_service.day_status("u1", today)

        assert before["isDoneToday"] is False
        assert after["isDoneToday"] is True
        assert after["nextMilestone"] == {"threshold": 3, "winsRemaining": 2}
        assert after["activeDream"]["title"] == "Solo trip to Italy"

    def test_fetch_action_requires_dream(self, user_service):
        user_service.sign_in(Identity(user_id="u1"))
        with pytest.raises(ValidationError):
            user_service.fetch_action("u1")

    def test_fetch_action_falls_back_offline(self, user_service):
        onboarded(user_service)
        action = user_service.fetch_action("u1", "low")
        assert action.is_fallback

    def test_day_status_carries_quote_of_the_day(self, user_service):
        onboarded(user_service)

        first = user_service.day_status("u1", date(2024, 1, 10))["quote"]
        again = user_service.day_status("u1", date(2024, 1, 10))["quote"]
        next_day = user_service.day_status("u1", date(2024, 1, 11))["quote"]

        assert first in QUOTES
        assert first == again
        assert next_day != first

    def test_sign_out_forgets_label_and_cache(self, store, id_source):
        repository = UserStateRepository(store)
        repository.create(make_state(uid="u1", wins=make_wins(2)))
        service = UserService(repository, TextGenerationService(client=FakeGroq("Brave Wanderer")), id_source=id_source)
        service.sign_in(Identity(user_id="u1"))
        assert service.identity_label("u1") == "Brave Wanderer"

        service.sign_out("u1")

        assert service.identity_label("u1") == FALLBACK_IDENTITY
        assert repository.cached("u1") is None
        assert len(service.get_state("u1").wins) == 2

    def test_identity_labels_are_bounded(self, store, id_source, monkeypatch):
        monkeypatch.setattr(user_service_module, "MAX_IDENTITY_LABELS", 2)
        repository = UserStateRepository(store)
        service = UserService(repository, TextGenerationService(client=FakeGroq("Brave Wanderer")), id_source=id_source)
        for uid in ("u1", "u2", "u3"):
            repository.create(make_state(uid=uid, wins=make_wins(2)))
            service.sign_in(Identity(user_id=uid))

        assert service.identity_label("u1") == FALLBACK_IDENTITY
        assert service.identity_label("u2") == "Brave Wanderer"
        assert service.identity_label("u3") == "Brave Wanderer"


class FlakyStore(InMemoryUserStateStore):
    fail = False

    def patch(self, user_id, fields):
        if self.fail:
            raise TimeoutError("write timed out")
        super().patch(user_id, fields)


def test_failed_write_keeps_optimistic_state(id_source):
    store = FlakyStore()
    service = UserService(UserStateRepository(store), TextGenerationService(client=None, api_key=""), id_source=id_source)
    onboarded(service)
    store.fail = True
    today = date(2024, 1, 10)

    outcome = service.complete_today("u1", today=today, now=at(today))

    assert outcome.persisted is False
    assert service.get_state("u1").streak == 1
    assert store.get("u1")["streak"] == 0
    assert service.reconcile("u1").diverged_fields == ["last_completed_date", "streak", "wins"]
