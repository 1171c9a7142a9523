"""Provider configuration and upstream request/result models."""

import json
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from tutor_api.constants import (
    DEFAULT_MAX_OUTPUT_TOKENS,
    DEFAULT_TEMPERATURE,
    AuthScheme,
    ProviderName,
)
from tutor_api.schemas import ChatTurn


@dataclass(frozen=True)
class UpstreamRequest:
    provider: str
    url: str
    payload: dict[str, Any]
    headers: Mapping[str, str] = field(default_factory=dict, repr=False)
    params: Mapping[str, str] = field(default_factory=dict, repr=False)


@dataclass(frozen=True)
class UpstreamResult:
    status_code: int
    body: str
    duration_seconds: float = 0.0

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        return json.loads(self.body)


UpstreamTransport = Callable[[UpstreamRequest], UpstreamResult]
PayloadBuilder = Callable[[list[ChatTurn], str, "ProviderConfig"], dict[str, Any]]
ReplyExtractor = Callable[[Any], str | None]
ModelExtractor = Callable[[Any], str | None]
UsageExtractor = Callable[[Any], dict[str, Any] | None]


@dataclass(frozen=True)
class ProviderConfig:
    name: ProviderName
    endpoint: str
    default_model: str
    api_key_env_var: str
    auth_scheme: AuthScheme
    auth_param: str
    build_payload: PayloadBuilder
    extract_reply: ReplyExtractor
    extract_model: ModelExtractor
    extract_usage: UsageExtractor
    temperature: float = DEFAULT_TEMPERATURE
    max_output_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS
    extra_params: Mapping[str, Any] = field(default_factory=dict)

    def build_request(self, api_key: str, model: str, turns: list[ChatTurn]) -> UpstreamRequest:
        headers = {"Content-Type": "application/json"}
        params: dict[str, str] = {}
        if self.auth_scheme == "bearer":
            headers[self.auth_param] = f"Bearer {api_key}"
        else:
            params[self.auth_param] = api_key

        return UpstreamRequest(
            provider=self.name,
            url=self.endpoint.format(model=model),
            payload=self.build_payload(turns, model, self),
            headers=headers,
            params=params,
        )


def extract_error_detail(body: Any) -> str | None:
    """Pull `error.message` out of a provider error body, if there is one."""
    if not isinstance(body, dict):
        return None
    error = body.get("error")
    if isinstance(error, dict):
        message = error.get("message")
        return message if isinstance(message, str) else None
    if isinstance(error, str):
        return error
    return None
