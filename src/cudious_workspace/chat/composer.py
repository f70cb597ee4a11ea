"""Builds generation requests for a mode and normalizes the service reply."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from cudious_workspace.chat.conversation import Message, Role
from cudious_workspace.chat.modes import Mode, get_system_instruction

LOGGER = logging.getLogger(__name__)


class GenerationError(Exception):
    """Describes a failed generation call; the cause is chained on ``__cause__``."""


@dataclass(slots=True, frozen=True)
class Turn:
    role: Role
    text: str


@dataclass(slots=True, frozen=True)
class GenerationRequest:
    """Exact payload handed to the generation service."""

    model: str
    system_instruction: str
    turns: tuple[Turn, ...]


@dataclass(slots=True, frozen=True)
class GenerationOutcome:
    text: str | None = None
    error: GenerationError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class GenerationClient(Protocol):
    model: str

    def complete(self, request: GenerationRequest) -> str | None: ...


class RequestComposer:
    """Composes mode instruction, prior turns and the new prompt into one request."""

    def __init__(self, client: GenerationClient, *, model: str | None = None) -> None:
        self._client = client
        self._model = model or getattr(client, "model", "")

    @property
    def model(self) -> str:
        return self._model

    def build_request(self, mode: Mode, prior_log: Sequence[Message], new_text: str) -> GenerationRequest:
        turns = [Turn(role=message.role, text=message.text) for message in prior_log]
        turns.append(Turn(role=Role.USER, text=new_text))
        return GenerationRequest(
            model=self._model,
            system_instruction=get_system_instruction(mode),
            turns=tuple(turns),
        )

    def generate(self, mode: Mode, prior_log: Sequence[Message], new_text: str) -> GenerationOutcome:
        request = self.build_request(mode, prior_log, new_text)
        LOGGER.debug(
            "Requesting %s completion: mode=%s turns=%d prompt_chars=%d",
            request.model or "default",
            mode.value,
            len(request.turns),
            len(new_text),
        )
        try:
            reply = self._client.complete(request)
        except Exception as exc:
            LOGGER.error("Generation failed for %s mode: %s", mode.value, exc, exc_info=True)
            error = GenerationError(f"Generation service call failed: {exc}")
            error.__cause__ = exc
            return GenerationOutcome(error=error)
        if reply is None:
            reply = ""
        if not isinstance(reply, str):
            error = GenerationError(f"Generation service returned {type(reply).__name__}, expected text")
            LOGGER.error("%s", error)
            return GenerationOutcome(error=error)
        return GenerationOutcome(text=reply)
