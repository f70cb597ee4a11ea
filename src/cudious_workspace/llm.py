"""LLM provider helpers."""

from __future__ import annotations

import logging
import os
from typing import Any

import requests
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from cudious_workspace.chat.composer import GenerationRequest
from cudious_workspace.chat.conversation import Role

LOGGER = logging.getLogger(__name__)

DEFAULT_MODELS = {
    "gemini": "gemini-3.1-pro-preview",
    "openai": "gpt-4o-mini",
    "ollama": "llama3.1:8b",
}


def check_ollama_connection(base_url: str = "http://localhost:11434", timeout: int = 2) -> bool:
    """Check if Ollama is running and accessible."""
    try:
        response = requests.get(f"{base_url}/api/tags", timeout=timeout)
        return response.status_code == 200
    except (OSError, requests.exceptions.ConnectionError, requests.exceptions.Timeout):
        return False


def check_ollama_model(base_url: str, model_name: str, timeout: int = 2) -> tuple[bool, list[str]]:
    """Check if a specific Ollama model is installed. Returns (is_installed, available_models)."""
    try:
        response = requests.get(f"{base_url}/api/tags", timeout=timeout)
        data = response.json()
    except (OSError, requests.exceptions.ConnectionError, requests.exceptions.Timeout, ValueError):
        return False, []
    if response.status_code != 200:
        return False, []

    models = [model.get("name", "") for model in data.get("models", [])]
    model_installed = any(
        model_name == model or model_name.startswith(model.split(":")[0]) or model.startswith(model_name.split(":")[0])
        for model in models
    )
    return model_installed, models


def resolve_api_key(settings: dict[str, Any]) -> str | None:
    """Return the API key named by ``api_key_env``, if the provider needs one."""
    env_name = settings.get("api_key_env")
    if not env_name:
        return None
    return os.environ.get(str(env_name)) or None


def to_langchain_messages(request: GenerationRequest) -> list[BaseMessage]:
    """Map a generation request onto LangChain chat messages.

    The system instruction travels as the leading ``SystemMessage``; chat model
    integrations lift it out of the turn list (Gemini sends it as
    ``system_instruction``).
    """
    messages: list[BaseMessage] = [SystemMessage(content=request.system_instruction)]
    for turn in request.turns:
        if turn.role is Role.USER:
            messages.append(HumanMessage(content=turn.text))
        else:
            messages.append(AIMessage(content=turn.text))
    return messages


def extract_text(response: Any) -> str | None:
    if response is None or isinstance(response, str):
        return response
    content = getattr(response, "content", None)
    if content is None:
        return None
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type", "text") == "text":
                parts.append(str(part.get("text", "")))
        return "".join(parts)
    message = f"Unexpected response content of type {type(content).__name__}"
    raise TypeError(message)


class LangChainLLMAdapter:
    """Adapter that hydrates a LangChain chat model based on provider config."""

    def __init__(self, settings: dict[str, Any], *, llm: Any | None = None) -> None:
        provider = settings.get("provider", "gemini")
        self.provider = str(provider)
        self.settings = settings
        self.model = str(settings.get("model") or DEFAULT_MODELS.get(self.provider, ""))
        self.llm = llm if llm is not None else self._initialize_llm()

    def _initialize_llm(self) -> Any:  # pragma: no cover - depends on runtime environment
        timeout = self.settings.get("timeout")
        temperature = self.settings.get("temperature", 0.2)
        max_tokens = self.settings.get("max_tokens")
        if self.provider == "gemini":
            from langchain_google_genai import ChatGoogleGenerativeAI

            return ChatGoogleGenerativeAI(
                model=self.model,
                temperature=temperature,
                max_output_tokens=max_tokens,
                timeout=timeout,
                max_retries=0,
                google_api_key=resolve_api_key(self.settings),
            )
        if self.provider == "openai":
            from langchain_openai import ChatOpenAI

            return ChatOpenAI(
                model=self.model,
                temperature=temperature,
                max_tokens=max_tokens,  # type: ignore[call-arg]
                base_url=self.settings.get("base_url"),
                timeout=timeout,
                max_retries=0,
                api_key=resolve_api_key(self.settings),
            )
        if self.provider == "ollama":
            from langchain_community.chat_models import ChatOllama

            return ChatOllama(
                model=self.model,
                base_url=self.settings.get("base_url", "http://localhost:11434"),
                temperature=temperature,
                num_ctx=self.settings.get("num_ctx", 8192),
                num_predict=max_tokens,
                timeout=timeout,
            )
        message = f"Unsupported LLM provider: {self.provider}"
        raise ValueError(message)

    def complete(self, request: GenerationRequest) -> str | None:
        messages = to_langchain_messages(request)
        LOGGER.debug("Invoking %s model %s with %d message(s)", self.provider, self.model, len(messages))
        response = self.llm.invoke(messages)
        return extract_text(response)
