from __future__ import annotations

import pytest
import requests

from cudious_workspace.chat.composer import GenerationError, GenerationRequest, RequestComposer, Turn
from cudious_workspace.chat.conversation import Message, Reaction, Role
from cudious_workspace.chat.modes import Mode, get_system_instruction


class RecordingClient:
    model = "test-model"

    def __init__(self, reply: object = "Reply text") -> None:
        self.reply = reply
        self.requests: list[GenerationRequest] = []

    def complete(self, request: GenerationRequest) -> object:
        self.requests.append(request)
        return self.reply


class FailingClient:
    model = "test-model"

    def __init__(self, exc: Exception) -> None:
        self.exc = exc
        self.calls = 0

    def complete(self, request: GenerationRequest) -> str:
        self.calls += 1
        raise self.exc


def test_single_prompt_builds_one_user_turn() -> None:
    client = RecordingClient()
    composer = RequestComposer(client)

    outcome = composer.generate(Mode.CODE, [], "hello")

    assert outcome.ok
    assert outcome.text == "Reply text"
    request = client.requests[0]
    assert request.turns == (Turn(role=Role.USER, text="hello"),)
    assert request.system_instruction == get_system_instruction(Mode.CODE)
    assert request.model == "test-model"
    assert all(turn.text != request.system_instruction for turn in request.turns)


def test_prior_log_is_replayed_in_order() -> None:
    client = RecordingClient()
    composer = RequestComposer(client)
    prior = [
        Message.user("first"),
        Message(role=Role.ASSISTANT, text="second", reaction=Reaction.APPROVE),
        Message.user("third"),
    ]

    composer.generate(Mode.SPECS, prior, "next")

    turns = client.requests[0].turns
    assert len(turns) == 4
    assert [turn.text for turn in turns] == ["first", "second", "third", "next"]
    assert [turn.role for turn in turns] == [Role.USER, Role.ASSISTANT, Role.USER, Role.USER]
    assert all(not hasattr(turn, "reaction") for turn in turns)


def test_build_request_matches_generate_payload() -> None:
    client = RecordingClient()
    composer = RequestComposer(client, model="override-model")
    prior = [Message.user("a"), Message.assistant("b")]

    expected = composer.build_request(Mode.ARCHITECTURE, prior, "c")
    composer.generate(Mode.ARCHITECTURE, prior, "c")

    assert client.requests == [expected]
    assert expected.model == "override-model"


@pytest.mark.parametrize("reply", [None, ""])
def test_empty_reply_is_success_with_empty_text(reply: object) -> None:
    composer = RequestComposer(RecordingClient(reply=reply))
    outcome = composer.generate(Mode.GENERAL, [], "hello")
    assert outcome.ok
    assert outcome.text == ""


@pytest.mark.parametrize(
    "exc",
    [
        requests.exceptions.ConnectionError("connection refused"),
        PermissionError("invalid API key"),
        ValueError("malformed payload"),
    ],
)
def test_failures_are_returned_not_raised(exc: Exception) -> None:
    client = FailingClient(exc)
    composer = RequestComposer(client)

    outcome = composer.generate(Mode.DEPLOYMENT, [Message.user("earlier")], "deploy it")

    assert not outcome.ok
    assert outcome.text is None
    assert isinstance(outcome.error, GenerationError)
    assert outcome.error.__cause__ is exc
    assert client.calls == 1


def test_non_text_reply_is_reported_as_failure() -> None:
    composer = RequestComposer(RecordingClient(reply={"candidates": []}))
    outcome = composer.generate(Mode.GENERAL, [], "hello")
    assert isinstance(outcome.error, GenerationError)
    assert "dict" in str(outcome.error)


def test_failure_is_carried_on_outcome_with_cause() -> None:
    cause = TimeoutError("deadline exceeded")
    outcome = RequestComposer(FailingClient(cause)).generate(Mode.CODE, [], "hello")
    assert outcome.error is not None
    assert outcome.error.__cause__ is cause
    assert "deadline exceeded" in str(outcome.error)
