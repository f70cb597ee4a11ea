"""Runtime bootstrap helpers for the CLI and UI front-ends."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from cudious_workspace.chat import ConversationStore, Mode, RequestComposer, WorkspaceSession
from cudious_workspace.chat.composer import GenerationClient
from cudious_workspace.config import WorkspaceConfig, load_config
from cudious_workspace.llm import LangChainLLMAdapter

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class RuntimeComponents:
    """Bundled runtime components for reuse across entry points."""

    config: WorkspaceConfig
    llm_settings: dict[str, Any]
    store: ConversationStore
    composer: RequestComposer
    session: WorkspaceSession
    ui_settings: dict[str, Any]


def build_runtime_components(
    config: WorkspaceConfig,
    *,
    client: GenerationClient | None = None,
    mode: Mode | None = None,
) -> RuntimeComponents:
    llm_settings = config.llm_settings()
    llm_client = client if client is not None else LangChainLLMAdapter(llm_settings)
    LOGGER.info(
        "Using %s provider with model %s (timeout=%s)",
        llm_settings.get("provider"),
        getattr(llm_client, "model", "unknown"),
        llm_settings.get("timeout"),
    )
    store = ConversationStore(active_mode=mode or config.default_mode())
    composer = RequestComposer(llm_client)
    session = WorkspaceSession(store, composer, append_empty_replies=config.append_empty_replies())
    return RuntimeComponents(
        config=config,
        llm_settings=llm_settings,
        store=store,
        composer=composer,
        session=session,
        ui_settings=config.ui_cli_settings(),
    )


def load_runtime_from_path(config_path: Path | None, *, mode: Mode | None = None) -> RuntimeComponents:
    """Load configuration and bootstrap all runtime services."""
    workspace_config = load_config(config_path)
    return build_runtime_components(workspace_config, mode=mode)
