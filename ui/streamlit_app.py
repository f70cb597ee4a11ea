"""Streamlit front-end for the Cudious workspace."""

from __future__ import annotations

from pathlib import Path

import streamlit as st

from cudious_workspace.app.bootstrap import RuntimeComponents, build_runtime_components
from cudious_workspace.chat import MODE_REGISTRY, Mode, Reaction, Role, ValidationError
from cudious_workspace.config import load_config
from cudious_workspace.utils.log_setup import configure_logging

CONFIG_PATH = Path("configs/workspace_config.yaml")

st.set_page_config(page_title="Cudious AI Workspace", layout="wide")


def _runtime() -> RuntimeComponents:
    if "runtime" not in st.session_state:
        config = load_config(CONFIG_PATH)
        logging_settings = config.logging_settings()
        configure_logging(logging_settings["level"], logging_settings["file"])
        st.session_state.runtime = build_runtime_components(config)
    return st.session_state.runtime


runtime = _runtime()
session = runtime.session
store = session.store

with st.sidebar:
    st.title("CUDIOUS AI")
    modes = list(MODE_REGISTRY)
    selected = st.radio(
        "Mode",
        modes,
        index=modes.index(store.active_mode),
        format_func=lambda mode: MODE_REGISTRY[mode].title,
    )
    if selected is not store.active_mode:
        session.select(Mode(selected))
        st.rerun()
    st.caption(f"Connected to {runtime.composer.model}.")
    if st.button(f"Clear {MODE_REGISTRY[store.active_mode].title}"):
        session.clear()
        st.rerun()

settings = MODE_REGISTRY[store.active_mode]
st.subheader(settings.title)

pending = st.session_state.pop("pending_prompt", None)

if not store.active_log() and pending is None:
    st.markdown(f"### {settings.tagline}")
    st.write(settings.description)
    columns = st.columns(2)
    for idx, suggestion in enumerate(settings.suggestions):
        if columns[idx % 2].button(suggestion, key=f"suggest-{store.active_mode.value}-{idx}"):
            st.session_state.pending_prompt = suggestion
            st.rerun()

for idx, message in enumerate(store.active_log()):
    with st.chat_message("user" if message.role is Role.USER else "assistant"):
        st.markdown(message.text)
        if message.role is Role.ASSISTANT:
            like_col, dislike_col, _ = st.columns([1, 1, 10])
            like_label = "👍" if message.reaction is not Reaction.APPROVE else "✅"
            dislike_label = "👎" if message.reaction is not Reaction.REJECT else "❌"
            if like_col.button(like_label, key=f"like-{store.active_mode.value}-{idx}"):
                session.react(idx, Reaction.APPROVE)
                st.rerun()
            if dislike_col.button(dislike_label, key=f"dislike-{store.active_mode.value}-{idx}"):
                session.react(idx, Reaction.REJECT)
                st.rerun()
            with st.expander("Copy"):
                st.code(message.text, language=None)

# Each rerun submits at most one prompt and blocks until it resolves, so input never overlaps.
prompt = st.chat_input(f"Ask {settings.title} anything...") or pending
if prompt:
    with st.chat_message("user"):
        st.markdown(prompt)
    try:
        with st.spinner("Generating..."):
            session.submit(prompt)
    except ValidationError as exc:
        st.warning(str(exc))
    else:
        st.rerun()
