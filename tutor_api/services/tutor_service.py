"""Application service for tutor chat requests."""

import json
import logging
from typing import Any

from tutor_api.config import TutorConfig
from tutor_api.constants import CONFIGURATION_ERROR, SYSTEM_HISTORY_REJECTED_ERROR
from tutor_api.errors import (
    BadRequestError,
    ConfigurationError,
    UpstreamContractError,
    UpstreamError,
)
from tutor_api.message_mappers import build_chat_turns
from tutor_api.providers.base import UpstreamResult, UpstreamTransport, extract_error_detail
from tutor_api.schemas import ChatRequest, ChatResponse

logger = logging.getLogger(__name__)


class TutorChatService:
    def __init__(self, config: TutorConfig, send: UpstreamTransport) -> None:
        self._config = config
        self._send = send

    def handle_chat(self, request: ChatRequest) -> ChatResponse:
        config = self._config
        provider = config.provider
        logger.info(
            "Chat request received",
            extra={
                "provider": provider.name,
                "history_length": len(request.history),
                "message_length": len(request.message),
            },
        )

        if config.history_system_turns == "reject" and any(
            turn.role == "system" for turn in request.history
        ):
            raise BadRequestError(SYSTEM_HISTORY_REJECTED_ERROR)

        if not config.api_key:
            logger.error(
                "Provider API key not configured",
                extra={"provider": provider.name, "env_var": provider.api_key_env_var},
            )
            raise ConfigurationError(CONFIGURATION_ERROR)

        turns = build_chat_turns(
            config.system_prompt,
            request.history,
            request.message,
            config.history_system_turns,
        )
        result = self._send(provider.build_request(config.api_key, config.model, turns))

        if not result.is_success:
            body = _decode_error_body(result)
            details = extract_error_detail(body)
            logger.error(
                "Upstream provider error",
                extra={
                    "provider": provider.name,
                    "status_code": result.status_code,
                    "upstream_error": details,
                },
            )
            raise UpstreamError(result.status_code, details=details)

        body = result.json()
        reply = provider.extract_reply(body)
        if not reply or not reply.strip():
            logger.error(
                "No reply in upstream response",
                extra={"provider": provider.name, "response_body": body},
            )
            raise UpstreamContractError(f"{provider.name} response contained no reply text")

        response = ChatResponse(
            reply=reply.strip(),
            model=provider.extract_model(body),
            usage=provider.extract_usage(body),
        )
        logger.info(
            "Chat response generated",
            extra={
                "provider": provider.name,
                "upstream_duration_seconds": result.duration_seconds,
                "model": response.model,
                "usage": response.usage,
                "response_length": len(response.reply),
            },
        )
        return response


def _decode_error_body(result: UpstreamResult) -> Any:
    try:
        return result.json()
    except json.JSONDecodeError:
        return None
