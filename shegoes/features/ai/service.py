"""
Text generation for micro-actions and flavor text.

Best-effort only: every call has a static fallback and never raises to the
caller. Without GROQ_API_KEY no request is made and fallbacks are returned.
"""

import json
import logging
from typing import Any, Optional, Sequence

from shegoes.core.config import settings
from shegoes.features.ai.prompts import (
    AFFIRMATION_PROMPT,
    BASE_PROMPT,
    ENERGY_GUIDANCE,
    IDENTITY_PROMPT,
    MICRO_ACTION_PROMPT,
    REFLECTION_PROMPT,
)
from shegoes.models.micro_action import MicroAction

logger = logging.getLogger("shegoes")

FALLBACK_ACTION = MicroAction(
    task="Take 3 deep breaths and visualize yourself already there.",
    encouragement="You're exactly where you need to be today.",
    brave_note="Slowing down long enough to picture your dream is a brave act.",
    is_fallback=True,
)
FALLBACK_REFLECTION = "Every small step you take is proof that you keep your promises to yourself."
FALLBACK_IDENTITY = "Dreamer"
FALLBACK_AFFIRMATION = "Your dream is valid. Let's move towards it."

MAX_TASK_CHARS = 200
MAX_LABEL_CHARS = 40


def _clamp(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: max(0, limit - 3)].rstrip() + "..."


class TextGenerationService:
    """Groq-backed generator with static fallbacks."""

    def __init__(self, client: Any = None, *, model: Optional[str] = None, api_key: Optional[str] = None):
        self._client = client
        self._model = model or settings.GROQ_MODEL
        self._api_key = api_key if api_key is not None else settings.GROQ_API_KEY

    @property
    def client(self) -> Any:
        if self._client is None and self._api_key:
            import groq

            self._client = groq.Groq(api_key=self._api_key)
        return self._client

    def _complete(self, prompt: str, *, json_mode: bool = False, temperature: float = 0.8) -> str:
        client = self.client
        if client is None:
            raise RuntimeError("text generation is not configured")
        kwargs = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        response = client.chat.completions.create(
            model=self._model,
            messages=[
                {"role": "system", "content": BASE_PROMPT},
                {"role": "user", "content": prompt},
            ],
            temperature=temperature,
            **kwargs,
        )
        content = response.choices[0].message.content
        if not content or not content.strip():
            raise ValueError("empty completion")
        return content.strip()

    def generate(
        self,
        category: str,
        dream_title: str,
        energy_level: str = "medium",
        identity_label: str = FALLBACK_IDENTITY,
    ) -> MicroAction:
        prompt = MICRO_ACTION_PROMPT.format(
            category=category,
            dream=dream_title,
            identity=identity_label,
            energy=ENERGY_GUIDANCE.get(energy_level, ENERGY_GUIDANCE["medium"]),
        )
        try:
            payload = json.loads(self._complete(prompt, json_mode=True))
            task = str(payload.get("task") or "").strip()
            encouragement = str(payload.get("encouragement") or "").strip()
            if not task or not encouragement:
                raise ValueError("micro-action missing task or encouragement")
            brave_note = payload.get("braveNote") or payload.get("brave_note")
            return MicroAction(
                task=_clamp(task, MAX_TASK_CHARS),
                encouragement=encouragement,
                brave_note=str(brave_note).strip() if brave_note else None,
            )
        except Exception as e:
            logger.warning(f"[ai] micro-action generation failed, using fallback: {e}")
            return FALLBACK_ACTION

    def reflect(self, dream_title: str, win_action: str) -> str:
        try:
            return self._complete(REFLECTION_PROMPT.format(dream=dream_title, action=win_action))
        except Exception as e:
            logger.warning(f"[ai] reflection failed, using fallback: {e}")
            return FALLBACK_REFLECTION

    def evolve_identity(self, dream_title: str, recent_win_actions: Sequence[str]) -> str:
        if not recent_win_actions:
            return FALLBACK_IDENTITY
        wins = "; ".join(f'"{action}"' for action in recent_win_actions[:3])
        try:
            label = self._complete(IDENTITY_PROMPT.format(dream=dream_title, wins=wins), temperature=0.6)
            return _clamp(label.strip().strip('"').strip(), MAX_LABEL_CHARS)
        except Exception as e:
            logger.warning(f"[ai] identity evolution failed, using fallback: {e}")
            return FALLBACK_IDENTITY

    def daily_affirmation(self, dream_title: str) -> str:
        try:
            return self._complete(AFFIRMATION_PROMPT.format(dream=dream_title))
        except Exception as e:
            logger.warning(f"[ai] affirmation failed, using fallback: {e}")
            return FALLBACK_AFFIRMATION
