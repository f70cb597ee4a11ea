"""Per-mode conversation logs for the workspace."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, replace
from enum import Enum

from cudious_workspace.chat.modes import Mode

LOGGER = logging.getLogger(__name__)


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class Reaction(str, Enum):
    """Feedback state attached to an assistant message."""

    NONE = "none"
    APPROVE = "approve"
    REJECT = "reject"

    def toggle(self, requested: Reaction) -> Reaction:
        """Return the state after the user clicks ``requested``.

        Clicking the current reaction again clears it; clicking the other one
        replaces it.
        """
        if requested is Reaction.NONE or requested is self:
            return Reaction.NONE
        return requested


class InvalidOperationError(Exception):
    """Raised when the store is asked to do something its contract forbids."""


@dataclass(slots=True, frozen=True)
class Message:
    """Represents a single conversational turn."""

    role: Role
    text: str
    reaction: Reaction = Reaction.NONE

    @classmethod
    def user(cls, text: str) -> Message:
        return cls(role=Role.USER, text=text)

    @classmethod
    def assistant(cls, text: str) -> Message:
        return cls(role=Role.ASSISTANT, text=text)


class ConversationStore:
    """Owns one ordered message log per mode and the active mode selector."""

    def __init__(self, *, active_mode: Mode = Mode.GENERAL) -> None:
        self._lock = threading.RLock()
        self._active_mode = active_mode
        self._logs: dict[Mode, tuple[Message, ...]] = {mode: () for mode in Mode}

    @property
    def active_mode(self) -> Mode:
        return self._active_mode

    def select(self, mode: Mode) -> None:
        with self._lock:
            self._active_mode = Mode(mode)

    def append(self, mode: Mode, message: Message) -> None:
        with self._lock:
            self._logs[mode] = (*self._logs[mode], message)

    def set_reaction(self, mode: Mode, index: int, reaction: Reaction) -> Message:
        with self._lock:
            log = self._logs[mode]
            if index < 0 or index >= len(log):
                message = f"No message at index {index} in {mode.value} log (size {len(log)})"
                raise IndexError(message)
            current = log[index]
            if current.role is not Role.ASSISTANT:
                message = "Reactions can only be attached to assistant messages"
                raise InvalidOperationError(message)
            updated = replace(current, reaction=current.reaction.toggle(reaction))
            self._logs[mode] = (*log[:index], updated, *log[index + 1 :])
            return updated

    def clear(self, mode: Mode) -> None:
        with self._lock:
            dropped = len(self._logs[mode])
            self._logs[mode] = ()
        LOGGER.info("Cleared %d message(s) from %s log", dropped, mode.value)

    def log(self, mode: Mode) -> tuple[Message, ...]:
        with self._lock:
            return self._logs[mode]

    def active_log(self) -> tuple[Message, ...]:
        with self._lock:
            return self._logs[self._active_mode]

    def message(self, mode: Mode, index: int) -> Message:
        log = self.log(mode)
        if index < 0 or index >= len(log):
            message = f"No message at index {index} in {mode.value} log (size {len(log)})"
            raise IndexError(message)
        return log[index]


def message_text(store: ConversationStore, mode: Mode, index: int) -> str:
    """Return the raw text of a message for clipboard or export use."""
    return store.message(mode, index).text
