"""Configuration helpers for the Cudious workspace."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal

import yaml

from cudious_workspace.chat.modes import Mode, parse_mode

LLMProvider = Literal["gemini", "openai", "ollama"]

DEFAULT_PROVIDERS: dict[str, dict[str, Any]] = {
    "gemini": {"model": "gemini-3.1-pro-preview", "api_key_env": "GEMINI_API_KEY"},
    "openai": {"model": "gpt-4o-mini", "api_key_env": "OPENAI_API_KEY"},
    "ollama": {"model": "llama3.1:8b", "base_url": "http://localhost:11434"},
}


class ConfigError(ValueError):
    """Raised when the workspace configuration is malformed."""


def _ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


@dataclass(slots=True)
class OutputsConfig:
    logs: Path

    def ensure_all(self) -> None:
        _ensure_dir(self.logs)


@dataclass(slots=True)
class WorkspaceConfig:
    source: Path | None
    raw: dict[str, Any]
    outputs: OutputsConfig

    @classmethod
    def from_file(cls, path: Path) -> WorkspaceConfig:
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        if not isinstance(raw, dict):
            message = f"Config file {path} must contain a mapping at the top level."
            raise ConfigError(message)
        return cls.from_dict(raw, source=path)

    @classmethod
    def from_dict(cls, raw: dict[str, Any], *, source: Path | None = None) -> WorkspaceConfig:
        outputs = raw.get("outputs", {}) or {}
        logs = Path(outputs.get("logs", "outputs/logs"))
        instance = cls(source=source, raw=raw, outputs=OutputsConfig(logs=logs))
        instance.validate()
        return instance

    def validate(self) -> None:
        """Validate the config and materialize directories it declares."""
        self.outputs.ensure_all()
        self.llm_settings()
        self.default_mode()

    def llm_settings(self, provider: LLMProvider | None = None) -> dict[str, Any]:
        llm_cfg = self.raw.get("llm", {}) or {}
        provider_name: str = provider or llm_cfg.get("provider", "gemini")
        providers = {**DEFAULT_PROVIDERS, **(llm_cfg.get("providers", {}) or {})}
        provider_settings = providers.get(provider_name)
        if provider_settings is None:
            available = ", ".join(sorted(providers.keys()))
            message = f"Unsupported LLM provider '{provider_name}'. Available: {available or 'none'}."
            raise ConfigError(message)
        merged = dict(provider_settings)
        merged["provider"] = provider_name
        # Global keys apply unless the provider overrides them
        for key, value in llm_cfg.items():
            if key not in {"provider", "providers"} and key not in merged:
                merged[key] = value
        merged.setdefault("timeout", None)
        return merged

    def default_mode(self) -> Mode:
        cfg = self.raw.get("conversation", {}) or {}
        try:
            return parse_mode(str(cfg.get("default_mode", Mode.GENERAL.value)))
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc

    def append_empty_replies(self) -> bool:
        cfg = self.raw.get("conversation", {}) or {}
        return bool(cfg.get("append_empty_replies", False))

    def logging_settings(self) -> dict[str, Any]:
        cfg = self.raw.get("logging", {}) or {}
        return {
            "level": str(cfg.get("level", "WARNING")).upper(),
            "file": self.outputs.logs / str(cfg.get("file", "workspace.log")),
        }

    def ui_cli_settings(self) -> dict[str, Any]:
        defaults = {
            "boxed_answers": True,
            "box_style": "rounded",
        }
        ui_cfg = self.raw.get("ui", {}) or {}
        cli_cfg = ui_cfg.get("cli", {})
        resolved = dict(defaults)
        if isinstance(cli_cfg, dict):
            resolved.update(cli_cfg)
        return resolved


def load_config(path: Path | None) -> WorkspaceConfig:
    """Load ``path`` when it exists, otherwise fall back to built-in defaults."""
    if path is not None and path.exists():
        return WorkspaceConfig.from_file(path)
    return WorkspaceConfig.from_dict({})
