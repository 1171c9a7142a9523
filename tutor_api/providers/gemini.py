"""Gemini generateContent request shape."""

from typing import TYPE_CHECKING, Any

from tutor_api.message_mappers import build_transcript_prompt
from tutor_api.schemas import ChatTurn

if TYPE_CHECKING:
    from .base import ProviderConfig


def build_generate_content_payload(
    turns: list[ChatTurn], model: str, config: "ProviderConfig"
) -> dict[str, Any]:
    # The model is part of the endpoint path, not the body.
    return {
        "contents": [{"parts": [{"text": build_transcript_prompt(turns)}]}],
        "generationConfig": {
            "temperature": config.temperature,
            "maxOutputTokens": config.max_output_tokens,
            **config.extra_params,
        },
    }


def extract_generate_content_reply(body: Any) -> str | None:
    if not isinstance(body, dict):
        return None
    candidates = body.get("candidates")
    if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], dict):
        return None
    content = candidates[0].get("content")
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list):
        return None

    texts = [
        part["text"]
        for part in parts
        if isinstance(part, dict) and isinstance(part.get("text"), str)
    ]
    return "".join(texts) if texts else None


def extract_generate_content_model(body: Any) -> str | None:
    model = body.get("modelVersion") if isinstance(body, dict) else None
    return model if isinstance(model, str) else None


def extract_generate_content_usage(body: Any) -> dict[str, Any] | None:
    usage = body.get("usageMetadata") if isinstance(body, dict) else None
    return usage if isinstance(usage, dict) else None
