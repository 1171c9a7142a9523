"""Conversion helpers between API chat turns and provider-specific formats."""

import logging
from typing import Any

from .constants import HistorySystemPolicy
from .schemas import ChatTurn

logger = logging.getLogger(__name__)

TRANSCRIPT_SPEAKERS = {"user": "Student", "assistant": "Tutor", "system": "System"}


def build_chat_turns(
    system_prompt: str,
    history: list[ChatTurn],
    message: str,
    history_system_turns: HistorySystemPolicy = "allow",
) -> list[ChatTurn]:
    """Build the outbound turn sequence: system prompt, history, then the live message.

    The configured system prompt always comes first. Caller-supplied system
    turns follow it unless the policy strips them; rejection happens earlier,
    during request handling.
    """
    turns = [ChatTurn(role="system", content=system_prompt)]
    for turn in history:
        if turn.role == "system" and history_system_turns == "strip":
            logger.info("Dropping caller-supplied system turn from history")
            continue
        turns.append(turn)
    turns.append(ChatTurn(role="user", content=message))
    return turns


def build_chat_completion_messages(turns: list[ChatTurn]) -> list[dict[str, Any]]:
    """Build the chat-completions `messages` array used by Groq and OpenAI."""
    return [{"role": turn.role, "content": turn.content} for turn in turns]


def build_transcript_prompt(turns: list[ChatTurn]) -> str:
    """Flatten turns into a single Student/Tutor transcript prompt.

    The leading system turn becomes the preamble and the transcript ends with
    an open `Tutor:` cue for the model to complete.
    """
    if not turns:
        return "Tutor:"

    preamble, *rest = turns
    lines = [f"{preamble.content}\n"]
    for turn in rest:
        lines.append(f"{TRANSCRIPT_SPEAKERS[turn.role]}: {turn.content}")
    lines.append("Tutor:")
    return "\n".join(lines)
