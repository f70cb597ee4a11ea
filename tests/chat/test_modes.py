from __future__ import annotations

import pytest

from cudious_workspace.chat.modes import (
    BASE_INSTRUCTIONS,
    MODE_REGISTRY,
    SYSTEM_INSTRUCTIONS,
    Mode,
    get_mode_settings,
    get_system_instruction,
    parse_mode,
)


def test_every_mode_has_settings_and_instruction() -> None:
    assert set(MODE_REGISTRY) == set(Mode)
    assert set(SYSTEM_INSTRUCTIONS) == set(Mode)
    for mode in Mode:
        settings = get_mode_settings(mode)
        assert settings.title
        assert settings.tagline.endswith("?")
        assert len(settings.suggestions) == 4


def test_instructions_share_base_and_append_focus() -> None:
    assert get_system_instruction(Mode.GENERAL) == BASE_INSTRUCTIONS
    assert get_system_instruction(Mode.ARCHITECTURE) == f"{BASE_INSTRUCTIONS}\n\nFocus: Architecture and Flow."
    assert get_system_instruction(Mode.CODE).endswith("Focus: Code and Implementation.")
    assert get_system_instruction(Mode.SPECS).endswith("Focus: Specs and Requirements.")
    assert get_system_instruction(Mode.DEPLOYMENT).endswith("Focus: Deployment and Documentation.")


def test_base_instruction_covers_formatting_rules() -> None:
    assert '"Summary"' in BASE_INSTRUCTIONS
    assert "100 words or less" in BASE_INSTRUCTIONS
    assert "bullet points" in BASE_INSTRUCTIONS
    assert "clarifying question" in BASE_INSTRUCTIONS


def test_instruction_table_is_read_only() -> None:
    with pytest.raises(TypeError):
        SYSTEM_INSTRUCTIONS[Mode.CODE] = "overridden"  # type: ignore[index]


def test_parse_mode_accepts_values_and_names() -> None:
    assert parse_mode("chat") is Mode.GENERAL
    assert parse_mode("General") is Mode.GENERAL
    assert parse_mode(" code ") is Mode.CODE
    with pytest.raises(ValueError, match="Available"):
        parse_mode("poetry")
