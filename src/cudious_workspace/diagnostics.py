"""Diagnostics utilities for the Cudious workspace."""

from __future__ import annotations

import importlib
import platform
import sys
from dataclasses import dataclass

from cudious_workspace.config import WorkspaceConfig
from cudious_workspace.llm import check_ollama_connection, check_ollama_model, resolve_api_key

PROVIDER_MODULES = {
    "gemini": ("langchain_google_genai", "Gemini integration (langchain-google-genai)"),
    "openai": ("langchain_openai", "OpenAI integration (langchain-openai)"),
    "ollama": ("langchain_community.chat_models", "Ollama integration (langchain-community)"),
}


@dataclass(slots=True)
class DiagnosticResult:
    status: str
    details: str

    def as_dict(self) -> dict[str, str]:
        return {"status": self.status, "details": self.details}


def _check_python_version() -> DiagnosticResult:
    if sys.version_info >= (3, 10):
        return DiagnosticResult("ok", f"Python {platform.python_version()} detected.")
    return DiagnosticResult("warn", f"Python {platform.python_version()} detected; project requires 3.10+.")


def _check_optional_dependency(module_name: str, friendly_name: str) -> DiagnosticResult:
    try:
        importlib.import_module(module_name)
        return DiagnosticResult("ok", f"{friendly_name} available.")
    except ImportError as exc:
        return DiagnosticResult("warn", f"{friendly_name} missing: {exc}")


def _check_credentials(config: WorkspaceConfig) -> DiagnosticResult:
    llm_settings = config.llm_settings()
    env_name = llm_settings.get("api_key_env")
    if not env_name:
        return DiagnosticResult("not_applicable", f"Provider '{llm_settings['provider']}' needs no API key.")
    if resolve_api_key(llm_settings):
        return DiagnosticResult("ok", f"{env_name} is set.")
    return DiagnosticResult("error", f"{env_name} is not set; requests will fail.")


def _check_ollama(config: WorkspaceConfig) -> DiagnosticResult:
    llm_settings = config.llm_settings()
    if llm_settings.get("provider") != "ollama":
        return DiagnosticResult("not_applicable", "LLM provider is not Ollama.")
    base_url = llm_settings.get("base_url", "http://localhost:11434")
    if not check_ollama_connection(base_url):
        return DiagnosticResult("error", f"Ollama not reachable at {base_url}.")
    model_name = str(llm_settings.get("model", "llama3.1:8b"))
    installed, models = check_ollama_model(base_url, model_name)
    if not installed:
        available = ", ".join(models) if models else "none"
        return DiagnosticResult("warn", f"Model '{model_name}' missing. Available: {available}.")
    return DiagnosticResult("ok", f"Ollama reachable and model '{model_name}' installed.")


def _check_timeout(config: WorkspaceConfig) -> DiagnosticResult:
    timeout = config.llm_settings().get("timeout")
    if timeout is None:
        return DiagnosticResult("warn", "No request timeout configured; a hung request blocks the session.")
    return DiagnosticResult("ok", f"Requests time out after {timeout}s.")


def run_diagnostics(config: WorkspaceConfig) -> dict[str, dict[str, str]]:
    """Run a suite of health checks and return structured results."""
    results: dict[str, dict[str, str]] = {}
    results["python"] = _check_python_version().as_dict()
    results["credentials"] = _check_credentials(config).as_dict()
    results["ollama"] = _check_ollama(config).as_dict()
    results["timeout"] = _check_timeout(config).as_dict()

    provider = str(config.llm_settings()["provider"])
    module_name, friendly = PROVIDER_MODULES.get(provider, (provider, provider))
    results[f"dep:{module_name}"] = _check_optional_dependency(module_name, friendly).as_dict()
    results["dep:streamlit"] = _check_optional_dependency("streamlit", "Streamlit UI").as_dict()

    return results


__all__ = ["DiagnosticResult", "run_diagnostics"]
