"""Submission handling that ties the conversation store to the request composer."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

from cudious_workspace.chat.composer import GenerationError, RequestComposer
from cudious_workspace.chat.conversation import ConversationStore, Message, Reaction
from cudious_workspace.chat.modes import Mode

LOGGER = logging.getLogger(__name__)

FALLBACK_MESSAGE = "Error: Failed to connect to Cudious systems. Please check your connection."


class ValidationError(ValueError):
    """Raised when a submission is rejected before any request is issued."""


class SessionBusyError(RuntimeError):
    """Raised when a submission arrives while another request is in flight."""


@dataclass(slots=True, frozen=True)
class SubmissionResult:
    mode: Mode
    user_message: Message
    reply: Message | None
    error: GenerationError | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


class WorkspaceSession:
    """Serializes submissions and records replies under the mode they were sent from."""

    def __init__(
        self,
        store: ConversationStore,
        composer: RequestComposer,
        *,
        append_empty_replies: bool = False,
    ) -> None:
        self._store = store
        self._composer = composer
        self._append_empty_replies = append_empty_replies
        self._in_flight = threading.Lock()

    @property
    def store(self) -> ConversationStore:
        return self._store

    @property
    def busy(self) -> bool:
        return self._in_flight.locked()

    def submit(self, text: str) -> SubmissionResult:
        if not text or not text.strip():
            message = "Message must not be empty"
            raise ValidationError(message)
        if not self._in_flight.acquire(blocking=False):
            message = "A request is already in flight; wait for it to finish"
            raise SessionBusyError(message)
        try:
            return self._submit(text)
        finally:
            self._in_flight.release()

    def _submit(self, text: str) -> SubmissionResult:
        mode = self._store.active_mode
        prior_log = self._store.log(mode)
        user_message = Message.user(text)
        self._store.append(mode, user_message)

        outcome = self._composer.generate(mode, prior_log, text)
        if outcome.error is not None:
            LOGGER.warning("Falling back after generation failure in %s mode: %s", mode.value, outcome.error)
            reply = Message.assistant(FALLBACK_MESSAGE)
            self._store.append(mode, reply)
            return SubmissionResult(mode=mode, user_message=user_message, reply=reply, error=outcome.error)

        reply_text = outcome.text or ""
        if not reply_text and not self._append_empty_replies:
            LOGGER.warning("Generation service returned an empty reply in %s mode; nothing appended", mode.value)
            return SubmissionResult(mode=mode, user_message=user_message, reply=None)
        reply = Message.assistant(reply_text)
        self._store.append(mode, reply)
        return SubmissionResult(mode=mode, user_message=user_message, reply=reply)

    def select(self, mode: Mode) -> None:
        self._store.select(mode)

    def react(self, index: int, reaction: Reaction) -> Message:
        return self._store.set_reaction(self._store.active_mode, index, reaction)

    def clear(self) -> None:
        self._store.clear(self._store.active_mode)
