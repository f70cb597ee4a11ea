"""Workspace mode definitions and their system instructions."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType


class Mode(str, Enum):
    GENERAL = "chat"
    ARCHITECTURE = "architecture"
    CODE = "code"
    SPECS = "specs"
    DEPLOYMENT = "deployment"


BASE_INSTRUCTIONS = """You are an AI assistant that provides exactly what the user asks for — nothing more, nothing less. Avoid adding extra terms, features, or assumptions that the user has not explicitly requested.

When responding, you must:
1. Only generate content the user asks for. Do not include extra suggestions, features, or terminology. Avoid technical jargon unless the user asks for it.
2. Organize your response into clear labeled subsections. Each subsection should have a short explanation describing what it contains and how it should be used.
3. Use bullet points for every point or piece of information.
4. Ensure there is significant vertical spacing between each bullet point (approximately 0.5cm or 20px).
5. Use clear paragraphs for all text content. Avoid clumping information together; use line breaks to separate distinct ideas.
6. Include a final section labeled "Summary" that highlights the most important point of the response in 100 words or less.
7. Subsection guidelines:
   - Specs / Requirements: Contains only the project requirements or user-requested specifications. Explain in simple language what these requirements mean.
   - Architecture / Flow (optional if requested): If included, show only the requested diagram or structure. Explain briefly what each part does.
   - Code / Implementation: Provide only the code requested. Explain what each major block or function does.
   - UI / UX / Frontend (if requested): Only show what the user asks for — for example, a button, layout, or animation. Explain how the element works and how to integrate it.
   - Tests (if requested): Only include tests the user specifically asks for. Explain what each test validates.
   - Documentation / Explanation: Only explain what the user requested. Include simple, clear guidance for understanding or using the output.
8. Interaction Rules:
   - If the user input is unclear, ask a clarifying question instead of making assumptions.
   - Keep language simple and easy to understand.
   - Avoid providing optional or extra recommendations unless the user explicitly asks."""


@dataclass(slots=True, frozen=True)
class ModeSettings:
    """Display metadata and instruction focus for a mode."""

    title: str
    tagline: str
    description: str
    suggestions: tuple[str, ...]
    focus: str | None = None


MODE_REGISTRY: dict[Mode, ModeSettings] = {
    Mode.GENERAL: ModeSettings(
        title="Workspace",
        tagline="What do you want me to generate today?",
        description=(
            "Please be specific about the sections (Specs, Code, UI, Tests, etc.) you want, "
            "and I will provide only those with explanations."
        ),
        suggestions=(
            "Generate Specs for a Todo app",
            "Write Code for a Python calculator",
            "Create UI for a login button",
            "Write Tests for a sorting function",
        ),
    ),
    Mode.ARCHITECTURE: ModeSettings(
        title="Architecture",
        tagline="What architecture do you want me to design?",
        description="Specify the system or flow you need, and I will provide the structure with explanations.",
        suggestions=(
            "Flow for a user registration system",
            "Architecture for a microservices app",
            "Diagram for a database schema",
            "Structure for a serverless API",
        ),
        focus="Architecture and Flow",
    ),
    Mode.CODE: ModeSettings(
        title="Code",
        tagline="What code do you want me to write?",
        description="Provide the logic or function you need, and I will provide the implementation with explanations.",
        suggestions=(
            "React hook for local storage",
            "Express middleware for logging",
            "Python script for web scraping",
            "Java class for a bank account",
        ),
        focus="Code and Implementation",
    ),
    Mode.SPECS: ModeSettings(
        title="Specs",
        tagline="What specifications do you want me to generate?",
        description="Describe your project idea, and I will provide the requirements and user stories.",
        suggestions=(
            "Specs for a weather app",
            "Requirements for a chat platform",
            "User stories for a blog site",
            "Functional specs for a task manager",
        ),
        focus="Specs and Requirements",
    ),
    Mode.DEPLOYMENT: ModeSettings(
        title="Deployment",
        tagline="What deployment configuration do you need?",
        description="Specify the platform or tool, and I will provide the setup instructions and templates.",
        suggestions=(
            "Dockerfile for a Vite app",
            "GitHub Actions for testing",
            "Terraform for an AWS bucket",
            "Vercel deployment guide",
        ),
        focus="Deployment and Documentation",
    ),
}


def _compose_instruction(settings: ModeSettings) -> str:
    if not settings.focus:
        return BASE_INSTRUCTIONS
    return f"{BASE_INSTRUCTIONS}\n\nFocus: {settings.focus}."


SYSTEM_INSTRUCTIONS: Mapping[Mode, str] = MappingProxyType(
    {mode: _compose_instruction(settings) for mode, settings in MODE_REGISTRY.items()}
)


def get_mode_settings(mode: Mode) -> ModeSettings:
    """Return the display settings for the requested mode."""
    return MODE_REGISTRY[mode]


def get_system_instruction(mode: Mode) -> str:
    """Return the system instruction sent alongside every request in ``mode``."""
    return SYSTEM_INSTRUCTIONS[mode]


def parse_mode(value: str) -> Mode:
    """Resolve a mode from its value or name, e.g. ``"code"`` or ``"general"``."""
    cleaned = value.strip().lower()
    for mode in Mode:
        if cleaned in {mode.value, mode.name.lower()}:
            return mode
    available = ", ".join(mode.value for mode in Mode)
    message = f"Unknown mode '{value}'. Available: {available}."
    raise ValueError(message)
