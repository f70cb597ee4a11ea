from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from cudious_workspace import llm as llm_module
from cudious_workspace.chat.composer import GenerationRequest, Turn
from cudious_workspace.chat.conversation import Role
from cudious_workspace.llm import LangChainLLMAdapter, extract_text, resolve_api_key, to_langchain_messages


def _request() -> GenerationRequest:
    return GenerationRequest(
        model="gemini-3.1-pro-preview",
        system_instruction="Be brief.",
        turns=(
            Turn(role=Role.USER, text="hi"),
            Turn(role=Role.ASSISTANT, text="hello"),
            Turn(role=Role.USER, text="next"),
        ),
    )


def test_request_maps_to_chat_messages() -> None:
    messages = to_langchain_messages(_request())
    assert [type(message) for message in messages] == [SystemMessage, HumanMessage, AIMessage, HumanMessage]
    assert [message.content for message in messages] == ["Be brief.", "hi", "hello", "next"]


def test_adapter_invokes_chat_model_once() -> None:
    chat_model = MagicMock()
    chat_model.invoke.return_value = AIMessage(content="## Summary")
    adapter = LangChainLLMAdapter({"provider": "gemini", "model": "gemini-test"}, llm=chat_model)

    assert adapter.complete(_request()) == "## Summary"
    assert adapter.model == "gemini-test"
    chat_model.invoke.assert_called_once()
    sent = chat_model.invoke.call_args.args[0]
    assert isinstance(sent[0], SystemMessage)


def test_adapter_propagates_provider_errors() -> None:
    chat_model = MagicMock()
    chat_model.invoke.side_effect = RuntimeError("403 Forbidden")
    adapter = LangChainLLMAdapter({"provider": "openai"}, llm=chat_model)
    assert adapter.model == "gpt-4o-mini"
    with pytest.raises(RuntimeError):
        adapter.complete(_request())


@pytest.mark.parametrize(
    ("response", "expected"),
    [
        (None, None),
        ("plain", "plain"),
        (AIMessage(content=""), ""),
        (AIMessage(content=[{"type": "text", "text": "a"}, "b", {"type": "image_url", "image_url": "x"}]), "ab"),
    ],
)
def test_extract_text_normalizes_content(response: object, expected: str | None) -> None:
    assert extract_text(response) == expected


def test_resolve_api_key_reads_named_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CUSTOM_KEY", "secret")
    assert resolve_api_key({"api_key_env": "CUSTOM_KEY"}) == "secret"
    monkeypatch.delenv("CUSTOM_KEY")
    assert resolve_api_key({"api_key_env": "CUSTOM_KEY"}) is None
    assert resolve_api_key({}) is None


def test_unsupported_provider_raises() -> None:
    with pytest.raises(ValueError, match="Unsupported LLM provider"):
        LangChainLLMAdapter({"provider": "carrier-pigeon"})


def test_check_ollama_model(monkeypatch: pytest.MonkeyPatch) -> None:
    response = MagicMock(status_code=200)
    response.json.return_value = {"models": [{"name": "llama3.1:8b"}, {"name": "mistral:7b"}]}
    monkeypatch.setattr(llm_module.requests, "get", MagicMock(return_value=response))

    assert llm_module.check_ollama_connection("http://ollama:11434")
    installed, models = llm_module.check_ollama_model("http://ollama:11434", "llama3.1:8b")
    assert installed
    assert models == ["llama3.1:8b", "mistral:7b"]


def test_check_ollama_connection_handles_refusal(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        llm_module.requests, "get", MagicMock(side_effect=requests.exceptions.ConnectionError("refused"))
    )
    assert not llm_module.check_ollama_connection()
    assert llm_module.check_ollama_model("http://localhost:11434", "llama3.1:8b") == (False, [])
