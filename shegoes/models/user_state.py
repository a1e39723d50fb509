"""
User state document and its append-only history records.

Domain value types only. The document is persisted as one flat camelCase JSON
object; ``to_document``/``from_document`` are the only (de)serialization path.
"""

from datetime import date, datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

Category = Literal["Travel", "Career & Money", "Confidence", "Lifestyle Upgrade"]
EnergyLevel = Literal["low", "medium", "high"]
Theme = Literal["light", "dark"]

DEFAULT_DISPLAY_NAME = "Adventurer"

_DOCUMENT_CONFIG = ConfigDict(
    frozen=True,
    alias_generator=to_camel,
    populate_by_name=True,
    extra="ignore",
)


class Dream(BaseModel):
    model_config = _DOCUMENT_CONFIG

    id: str = Field(..., min_length=1)
    category: Category
    title: str = Field(..., min_length=1)
    created_at: datetime


class Win(BaseModel):
    model_config = _DOCUMENT_CONFIG

    id: str = Field(..., min_length=1)
    dream_id: str
    action: str
    timestamp: datetime
    reflection: Optional[str] = None
    energy_level: Optional[EnergyLevel] = None


class UserState(BaseModel):
    model_config = _DOCUMENT_CONFIG

    uid: str = Field(..., min_length=1)
    email: Optional[str] = None
    display_name: str = DEFAULT_DISPLAY_NAME
    photo_url: Optional[str] = Field(default=None, alias="photoURL")
    has_onboarded: bool = False
    active_dream_id: Optional[str] = None
    dreams: List[Dream] = Field(default_factory=list)
    wins: List[Win] = Field(default_factory=list)
    streak: int = Field(default=0, ge=0)
    last_completed_date: Optional[date] = None
    is_premium: bool = False
    streak_protection_enabled: bool = True
    milestones_reached: List[int] = Field(default_factory=list)
    preferred_energy: EnergyLevel = "medium"
    theme: Theme = "light"

    @field_validator("milestones_reached")
    @classmethod
    def _milestones_unique(cls, value: List[int]) -> List[int]:
        if len(set(value)) != len(value):
            raise ValueError("milestonesReached must not contain duplicates")
        return value

    @model_validator(mode="after")
    def _active_dream_exists(self) -> "UserState":
        if self.active_dream_id is not None and self.find_dream(self.active_dream_id) is None:
            raise ValueError(f"activeDreamId {self.active_dream_id!r} does not reference a dream")
        dream_ids = [d.id for d in self.dreams]
        if len(set(dream_ids)) != len(dream_ids):
            raise ValueError("dream ids must be unique")
        return self

    def find_dream(self, dream_id: Optional[str]) -> Optional[Dream]:
        if dream_id is None:
            return None
        for dream in self.dreams:
            if dream.id == dream_id:
                return dream
        return None

    @property
    def active_dream(self) -> Optional[Dream]:
        return self.find_dream(self.active_dream_id)


def new_user_state(
    uid: str,
    *,
    email: Optional[str] = None,
    display_name: Optional[str] = None,
    photo_url: Optional[str] = None,
) -> UserState:
    """Defaults written on first sign-in."""
    name = display_name.strip() if display_name and display_name.strip() else DEFAULT_DISPLAY_NAME
    return UserState(uid=uid, email=email, display_name=name, photo_url=photo_url)


def to_document(state: UserState) -> Dict[str, Any]:
    return state.model_dump(mode="json", by_alias=True)


def from_document(document: Dict[str, Any]) -> UserState:
    return UserState.model_validate(document)


def document_fields(state: UserState, fields) -> Dict[str, Any]:
    """Subset of the camelCase document for the given python field names."""
    return state.model_dump(mode="json", by_alias=True, include=set(fields))


def field_alias(name: str) -> str:
    field = UserState.model_fields[name]
    return field.alias or name
