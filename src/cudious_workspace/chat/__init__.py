"""Chat interfaces for the Cudious workspace."""

from .composer import GenerationError, GenerationOutcome, GenerationRequest, RequestComposer, Turn
from .conversation import ConversationStore, InvalidOperationError, Message, Reaction, Role, message_text
from .modes import MODE_REGISTRY, SYSTEM_INSTRUCTIONS, Mode, get_mode_settings, get_system_instruction, parse_mode
from .session import FALLBACK_MESSAGE, SessionBusyError, SubmissionResult, ValidationError, WorkspaceSession

__all__ = [
    "FALLBACK_MESSAGE",
    "MODE_REGISTRY",
    "SYSTEM_INSTRUCTIONS",
    "ConversationStore",
    "GenerationError",
    "GenerationOutcome",
    "GenerationRequest",
    "InvalidOperationError",
    "Message",
    "Mode",
    "Reaction",
    "RequestComposer",
    "Role",
    "SessionBusyError",
    "SubmissionResult",
    "Turn",
    "ValidationError",
    "WorkspaceSession",
    "get_mode_settings",
    "get_system_instruction",
    "message_text",
    "parse_mode",
]
