"""Pydantic schemas and request parsing for the tutor API."""

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictStr, TypeAdapter, ValidationError

from .constants import (
    EMPTY_MESSAGE_ERROR,
    INVALID_HISTORY_ENTRY_ERROR,
    INVALID_HISTORY_ERROR,
    INVALID_JSON_ERROR,
    INVALID_MESSAGE_ERROR,
    INVALID_TEXT_ERROR,
    MAX_MESSAGE_LENGTH,
    MESSAGE_TOO_LONG_ERROR,
    Role,
)
from .errors import BadRequestError


class ChatTurn(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    role: Role
    content: StrictStr


class ChatRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str
    history: list[ChatTurn] = Field(default_factory=list)


class ChatResponse(BaseModel):
    reply: str
    model: str | None = None
    usage: dict[str, Any] | None = None

    def to_body(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


_HISTORY_ADAPTER = TypeAdapter(list[ChatTurn])


def _is_utf8_encodable(text: str) -> bool:
    # JSON "\ud83d" escapes decode to lone surrogates, which cannot be sent upstream.
    try:
        text.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def parse_chat_request(body: bytes) -> ChatRequest:
    """Validate a raw request body, failing on the first violation.

    Checks run in a fixed order (JSON, message type, emptiness, length,
    text encoding, history shape, history text, history entries) so the
    same input always yields the same error message.
    """
    try:
        payload = json.loads(body) if body.strip() else {}
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise BadRequestError(INVALID_JSON_ERROR) from e

    if not isinstance(payload, dict):
        raise BadRequestError(INVALID_MESSAGE_ERROR)

    message = payload.get("message")
    if not isinstance(message, str):
        raise BadRequestError(INVALID_MESSAGE_ERROR)
    if not message.strip():
        raise BadRequestError(EMPTY_MESSAGE_ERROR)
    if len(message) > MAX_MESSAGE_LENGTH:
        raise BadRequestError(MESSAGE_TOO_LONG_ERROR)
    if not _is_utf8_encodable(message):
        raise BadRequestError(INVALID_TEXT_ERROR)

    history = payload.get("history")
    if history is None:
        history = []
    if not isinstance(history, list):
        raise BadRequestError(INVALID_HISTORY_ERROR)

    for entry in history:
        content = entry.get("content") if isinstance(entry, dict) else None
        if isinstance(content, str) and not _is_utf8_encodable(content):
            raise BadRequestError(INVALID_TEXT_ERROR)

    try:
        turns = _HISTORY_ADAPTER.validate_python(history)
    except ValidationError as e:
        raise BadRequestError(INVALID_HISTORY_ENTRY_ERROR) from e

    return ChatRequest(message=message, history=turns)
