"""
User lifecycle orchestration.

Sits where the presentation layer used to call the engine and the store:
load state, ask the pure engine (or policy) what changes, apply the change
through the repository, and call the text-generation collaborator for the
flavor text around it.
"""

import threading
from collections import OrderedDict
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from shegoes.core.errors import ConflictError, NotFoundError, PremiumRequiredError, ValidationError
from shegoes.core.ids import IdSource, default_id_source
from shegoes.core.logging import log_event
from shegoes.features.ai.service import FALLBACK_IDENTITY, TextGenerationService
from shegoes.features.content.catalog import quote_for_day
from shegoes.features.entitlements.policy import can_add_dream, can_toggle_streak_protection
from shegoes.features.streaks.engine import (
    DEFAULT_ACTION_TEXT,
    CompletionResult,
    evaluate_day_status,
    record_completion,
)
from shegoes.features.streaks.milestones import MILESTONES, next_milestone
from shegoes.features.users.repository import ApplyResult, ReconcileReport, UserStateRepository
from shegoes.models.identity import Identity
from shegoes.models.micro_action import MicroAction
from shegoes.models.user_state import (
    Category,
    Dream,
    EnergyLevel,
    Theme,
    UserState,
    new_user_state,
)

RECENT_WINS_FOR_IDENTITY = 3
# Least recently refreshed labels are dropped past this.
MAX_IDENTITY_LABELS = 10_000


@dataclass(frozen=True)
class SessionView:
    state: UserState
    created: bool
    identity_label: str
    affirmation: Optional[str]


@dataclass(frozen=True)
class CompletionOutcome:
    result: CompletionResult
    state: UserState
    persisted: bool
    identity_label: str

    @property
    def applied(self) -> bool:
        return self.result.applied


class UserService:
    def __init__(
        self,
        repository: UserStateRepository,
        text_service: TextGenerationService,
        id_source: IdSource = default_id_source,
        grace_threshold: Optional[int] = None,
    ):
        self._repository = repository
        self._text = text_service
        self._id_source = id_source
        self._grace_threshold = grace_threshold
        self._identity_labels: "OrderedDict[str, str]" = OrderedDict()
        self._labels_lock = threading.Lock()

    @property
    def repository(self) -> UserStateRepository:
        return self._repository

    # Session ----------------------------------------------------------
    def sign_in(self, identity: Identity) -> SessionView:
        """Load the user's document, creating it with defaults on first sign-in."""
        state = self._repository.load(identity.user_id)
        created = False
        if state is None:
            state = self._repository.create(
                new_user_state(
                    identity.user_id,
                    email=identity.email,
                    display_name=identity.display_name,
                    photo_url=identity.avatar_url,
                )
            )
            created = True
            log_event("info", "user.created", user_id=identity.user_id, event_type="user.created")
        else:
            profile = {}
            if identity.display_name and identity.display_name != state.display_name:
                profile["display_name"] = identity.display_name
            if identity.avatar_url and identity.avatar_url != state.photo_url:
                profile["photo_url"] = identity.avatar_url
            if profile:
                state = self._repository.apply(state.uid, profile, base=state).state

        affirmation = None
        dream = state.active_dream
        if dream is not None:
            affirmation = self._text.daily_affirmation(dream.title)
            label = self._text.evolve_identity(
                dream.title, [w.action for w in state.wins[:RECENT_WINS_FOR_IDENTITY]]
            )
            self._remember_label(state.uid, label)

        return SessionView(
            state=state,
            created=created,
            identity_label=self.identity_label(state.uid),
            affirmation=affirmation,
        )

    def get_state(self, user_id: str) -> UserState:
        return self._repository.get(user_id)

    def identity_label(self, user_id: str) -> str:
        return self._identity_labels.get(user_id, FALLBACK_IDENTITY)

    def _remember_label(self, user_id: str, label: str) -> None:
        with self._labels_lock:
            self._identity_labels[user_id] = label
            self._identity_labels.move_to_end(user_id)
            while len(self._identity_labels) > MAX_IDENTITY_LABELS:
                self._identity_labels.popitem(last=False)

    def sign_out(self, user_id: str) -> None:
        """Drop everything held in memory for the user; the stored document is untouched."""
        self._repository.forget(user_id)
        with self._labels_lock:
            self._identity_labels.pop(user_id, None)

    def reconcile(self, user_id: str) -> ReconcileReport:
        return self._repository.reconcile(user_id)

    # Dreams -----------------------------------------------------------
    def complete_onboarding(self, user_id: str, category: Category, title: str, *, now: datetime) -> UserState:
        state = self._repository.get(user_id)
        if state.has_onboarded:
            raise ConflictError("Onboarding already completed")
        dream = self._new_dream(category, title, now)
        return self._apply(
            state,
            {
                "dreams": [*state.dreams, dream],
                "active_dream_id": dream.id,
                "has_onboarded": True,
            },
        ).state

    def add_dream(
        self,
        user_id: str,
        category: Category,
        title: str,
        *,
        now: datetime,
        activate: bool = True,
    ) -> UserState:
        state = self._repository.get(user_id)
        if not can_add_dream(state):
            raise PremiumRequiredError("Unlimited active dreams is part of the premium plan")
        dream = self._new_dream(category, title, now)
        changes = {"dreams": [*state.dreams, dream]}
        if activate or state.active_dream_id is None:
            changes["active_dream_id"] = dream.id
        return self._apply(state, changes).state

    def set_active_dream(self, user_id: str, dream_id: str) -> UserState:
        state = self._repository.get(user_id)
        if state.find_dream(dream_id) is None:
            raise NotFoundError(f"Dream {dream_id} not found")
        if state.active_dream_id == dream_id:
            return state
        return self._apply(state, {"active_dream_id": dream_id}).state

    def _new_dream(self, category: Category, title: str, now: datetime) -> Dream:
        cleaned = (title or "").strip()
        if not cleaned:
            raise ValidationError("Dream title is required")
        return Dream(id=self._id_source.new_id(), category=category, title=cleaned, created_at=now)

    # Account ----------------------------------------------------------
    def upgrade_to_premium(self, user_id: str) -> UserState:
        state = self._repository.get(user_id)
        if state.is_premium:
            return state
        log_event("info", "user.upgraded", user_id=user_id, event_type="premium.upgrade")
        return self._apply(state, {"is_premium": True}).state

    def set_streak_protection(self, user_id: str, enabled: bool) -> UserState:
        state = self._repository.get(user_id)
        if not can_toggle_streak_protection(state):
            raise PremiumRequiredError("Streak protection is part of the premium plan")
        return self._apply(state, {"streak_protection_enabled": enabled}).state

    def update_preferences(
        self,
        user_id: str,
        *,
        theme: Optional[Theme] = None,
        preferred_energy: Optional[EnergyLevel] = None,
    ) -> UserState:
        state = self._repository.get(user_id)
        changes = {}
        if theme is not None:
            changes["theme"] = theme
        if preferred_energy is not None:
            changes["preferred_energy"] = preferred_energy
        return self._apply(state, changes).state

    def update_profile(
        self,
        user_id: str,
        *,
        display_name: Optional[str] = None,
        photo_url: Optional[str] = None,
    ) -> UserState:
        state = self._repository.get(user_id)
        changes = {}
        if display_name is not None:
            if not display_name.strip():
                raise ValidationError("Display name cannot be blank")
            changes["display_name"] = display_name.strip()
        if photo_url is not None:
            changes["photo_url"] = photo_url
        return self._apply(state, changes).state

    # Daily ritual -----------------------------------------------------
    def day_status(self, user_id: str, today: date) -> dict:
        state = self._repository.get(user_id)
        upcoming = next_milestone(len(state.wins), MILESTONES)
        dream = state.active_dream
        return {
            "isDoneToday": evaluate_day_status(state, today),
            "today": today.isoformat(),
            "streak": state.streak,
            "totalWins": len(state.wins),
            "activeDream": dream.model_dump(mode="json", by_alias=True) if dream else None,
            "identityLabel": self.identity_label(user_id),
            "quote": quote_for_day(today),
            "nextMilestone": (
                {"threshold": upcoming[0], "winsRemaining": upcoming[1]} if upcoming else None
            ),
        }

    def fetch_action(self, user_id: str, energy: Optional[EnergyLevel] = None) -> MicroAction:
        state = self._repository.get(user_id)
        dream = state.active_dream
        if dream is None:
            raise ValidationError("Pick a dream before asking for today's action")
        return self._text.generate(
            dream.category,
            dream.title,
            energy or state.preferred_energy,
            self.identity_label(user_id),
        )

    def complete_today(
        self,
        user_id: str,
        *,
        today: date,
        now: datetime,
        action_text: Optional[str] = None,
        energy: Optional[EnergyLevel] = None,
    ) -> CompletionOutcome:
        state = self._repository.get(user_id)
        dream = state.active_dream

        reflection = None
        if dream is not None and not evaluate_day_status(state, today):
            reflection = self._text.reflect(dream.title, (action_text or "").strip() or DEFAULT_ACTION_TEXT)

        result = record_completion(
            state,
            today,
            action_text,
            now=now,
            id_source=self._id_source,
            energy_level=energy,
            reflection=reflection,
            grace_threshold=self._grace_threshold,
        )
        if not result.applied:
            return CompletionOutcome(
                result=result,
                state=state,
                persisted=True,
                identity_label=self.identity_label(user_id),
            )

        applied = self._repository.apply(user_id, result.changes, base=state)
        log_event(
            "info",
            "ritual.completed",
            user_id=user_id,
            event_type="ritual.complete",
            transition=result.transition,
            streak=applied.state.streak,
            milestone=result.milestone_triggered,
            persisted=applied.persisted,
        )

        if result.identity_refresh_due:
            self._remember_label(
                user_id,
                self._text.evolve_identity(
                    dream.title, [w.action for w in applied.state.wins[:RECENT_WINS_FOR_IDENTITY]]
                ),
            )

        return CompletionOutcome(
            result=result,
            state=applied.state,
            persisted=applied.persisted,
            identity_label=self.identity_label(user_id),
        )

    def _apply(self, state: UserState, changes: dict) -> ApplyResult:
        return self._repository.apply(state.uid, changes, base=state)
