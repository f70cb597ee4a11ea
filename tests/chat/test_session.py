from __future__ import annotations

import threading

import pytest

from cudious_workspace.chat.composer import GenerationRequest, RequestComposer
from cudious_workspace.chat.conversation import ConversationStore, Message, Reaction, Role
from cudious_workspace.chat.modes import Mode
from cudious_workspace.chat.session import (
    FALLBACK_MESSAGE,
    SessionBusyError,
    ValidationError,
    WorkspaceSession,
)


class ScriptedClient:
    model = "scripted"

    def __init__(self, responses: list[object]) -> None:
        self.responses = responses
        self.requests: list[GenerationRequest] = []

    def complete(self, request: GenerationRequest) -> str | None:
        self.requests.append(request)
        response = self.responses[min(len(self.requests) - 1, len(self.responses) - 1)]
        if isinstance(response, Exception):
            raise response
        return response  # type: ignore[return-value]


def build_session(responses: list[object], **kwargs: bool) -> tuple[WorkspaceSession, ScriptedClient]:
    client = ScriptedClient(responses)
    session = WorkspaceSession(ConversationStore(), RequestComposer(client), **kwargs)
    return session, client


def test_submit_appends_user_and_reply_to_active_mode() -> None:
    session, client = build_session(["Here is the code."])
    session.select(Mode.CODE)

    result = session.submit("Write a calculator")

    assert not result.failed
    log = session.store.log(Mode.CODE)
    assert [(m.role, m.text) for m in log] == [
        (Role.USER, "Write a calculator"),
        (Role.ASSISTANT, "Here is the code."),
    ]
    assert session.store.log(Mode.GENERAL) == ()
    assert len(client.requests[0].turns) == 1


def test_history_is_sent_without_duplicating_new_prompt() -> None:
    session, client = build_session(["one", "two"])
    session.submit("first")
    session.submit("second")

    turns = client.requests[1].turns
    assert [turn.text for turn in turns] == ["first", "one", "second"]


def test_failure_appends_fixed_fallback_message() -> None:
    session, _ = build_session([ConnectionError("network down")])
    session.select(Mode.SPECS)

    result = session.submit("Specs for a weather app")

    assert result.failed
    assert result.reply is not None
    assert session.store.log(Mode.SPECS)[-1] == Message.assistant(FALLBACK_MESSAGE)
    assert session.store.log(Mode.SPECS)[-1].text == FALLBACK_MESSAGE
    assert not session.busy


@pytest.mark.parametrize("text", ["", "   ", "\n\t"])
def test_blank_submission_is_rejected_before_request(text: str) -> None:
    session, client = build_session(["unused"])
    with pytest.raises(ValidationError):
        session.submit(text)
    assert client.requests == []
    assert session.store.active_log() == ()


def test_empty_reply_is_suppressed_by_default() -> None:
    session, _ = build_session([""])
    result = session.submit("hello")
    assert result.reply is None
    assert [m.role for m in session.store.active_log()] == [Role.USER]


def test_empty_reply_can_be_recorded() -> None:
    session, _ = build_session([None], append_empty_replies=True)
    result = session.submit("hello")
    assert result.reply == Message.assistant("")
    assert session.store.active_log()[-1].text == ""


def test_reply_lands_in_mode_active_at_submission() -> None:
    started = threading.Event()
    release = threading.Event()

    class SlowClient:
        model = "slow"

        def complete(self, request: GenerationRequest) -> str:
            started.set()
            release.wait(timeout=5)
            return "architecture reply"

    session = WorkspaceSession(ConversationStore(), RequestComposer(SlowClient()))
    session.select(Mode.ARCHITECTURE)
    worker = threading.Thread(target=session.submit, args=("design it",))
    worker.start()
    assert started.wait(timeout=5)

    assert session.busy
    with pytest.raises(SessionBusyError):
        session.submit("another one")
    session.select(Mode.GENERAL)
    release.set()
    worker.join(timeout=5)

    assert not session.busy
    assert [m.text for m in session.store.log(Mode.ARCHITECTURE)] == ["design it", "architecture reply"]
    assert session.store.log(Mode.GENERAL) == ()


def test_react_and_clear_target_active_mode() -> None:
    session, _ = build_session(["answer"])
    session.select(Mode.DEPLOYMENT)
    session.submit("Dockerfile please")

    assert session.react(1, Reaction.APPROVE).reaction is Reaction.APPROVE
    assert session.react(1, Reaction.APPROVE).reaction is Reaction.NONE

    session.clear()
    assert session.store.log(Mode.DEPLOYMENT) == ()
