"""Chat-completions request shape shared by Groq and OpenAI."""

from typing import TYPE_CHECKING, Any

from tutor_api.message_mappers import build_chat_completion_messages
from tutor_api.schemas import ChatTurn

if TYPE_CHECKING:
    from .base import ProviderConfig


def build_chat_completions_payload(
    turns: list[ChatTurn], model: str, config: "ProviderConfig"
) -> dict[str, Any]:
    return {
        "model": model,
        "messages": build_chat_completion_messages(turns),
        "temperature": config.temperature,
        "max_tokens": config.max_output_tokens,
        **config.extra_params,
        "stream": False,
    }


def extract_chat_completions_reply(body: Any) -> str | None:
    if not isinstance(body, dict):
        return None
    choices = body.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return None
    message = choices[0].get("message")
    if not isinstance(message, dict):
        return None
    content = message.get("content")
    return content if isinstance(content, str) else None


def extract_chat_completions_model(body: Any) -> str | None:
    model = body.get("model") if isinstance(body, dict) else None
    return model if isinstance(model, str) else None


def extract_chat_completions_usage(body: Any) -> dict[str, Any] | None:
    usage = body.get("usage") if isinstance(body, dict) else None
    return usage if isinstance(usage, dict) else None
