"""Runtime infrastructure helpers for credentials, tracing, and the upstream transport."""

import logging
import os
import time
from functools import lru_cache
from typing import Any

import boto3
import httpx
from langsmith import traceable
from langsmith.run_trees import get_cached_client

from tutor_api.config import Settings, TutorConfig, build_tutor_config, get_settings
from tutor_api.provider_registry import PROVIDER_CONFIGS
from tutor_api.providers.base import UpstreamRequest, UpstreamResult

logger = logging.getLogger(__name__)

# httpx logs full request URLs at INFO, which would include query-string keys.
logging.getLogger("httpx").setLevel(logging.WARNING)


def _get_secure_parameter(ssm_client: Any, parameter_name: str) -> str:
    result = ssm_client.get_parameter(Name=parameter_name, WithDecryption=True)
    value = result["Parameter"].get("Value")
    if not value:
        raise RuntimeError(f"SSM parameter {parameter_name} has no value")
    return value


def _get_optional_secure_parameter(ssm_client: Any, parameter_name: str) -> str | None:
    try:
        return _get_secure_parameter(ssm_client, parameter_name)
    except Exception:
        logger.warning(
            "Optional SSM parameter is unavailable; provider key stays unset",
            extra={"parameter_name": parameter_name},
            exc_info=True,
        )
        return None


def resolve_api_key(settings: Settings) -> str | None:
    """Return the selected provider's key from the environment, else from SSM."""
    provider = PROVIDER_CONFIGS[settings.tutor_provider]
    api_key = settings.api_key_for(provider)
    if api_key or not settings.tutor_api_key_parameter_name:
        return api_key

    ssm_client = boto3.client("ssm", region_name=settings.aws_region)
    return _get_optional_secure_parameter(ssm_client, settings.tutor_api_key_parameter_name)


@lru_cache(maxsize=1)
def get_tutor_config() -> TutorConfig:
    settings = get_settings()
    config = build_tutor_config(settings, api_key=resolve_api_key(settings))
    if not config.api_key:
        logger.warning(
            "Provider API key not configured; chat requests will fail",
            extra={"provider": config.provider.name, "env_var": config.provider.api_key_env_var},
        )
    logger.info(
        "Tutor configuration loaded",
        extra={"provider": config.provider.name, "model": config.model},
    )
    return config


def _configure_langsmith(langsmith_api_key: str | None, langsmith_project: str) -> None:
    if not langsmith_api_key:
        os.environ.pop("LANGSMITH_TRACING", None)
        logger.info("LangSmith tracing disabled because API key is unavailable")
        return

    os.environ["LANGSMITH_TRACING"] = "true"
    os.environ["LANGSMITH_API_KEY"] = langsmith_api_key
    os.environ.setdefault("LANGSMITH_PROJECT", langsmith_project)


@lru_cache(maxsize=1)
def ensure_langsmith_configured() -> None:
    """Configure LangSmith environment variables (called once via lru_cache)."""
    settings = get_settings()
    _configure_langsmith(settings.langsmith_api_key, settings.langsmith_project)


def flush_langsmith_traces() -> None:
    if os.environ.get("LANGSMITH_TRACING", "").lower() != "true":
        return
    if not os.environ.get("LANGSMITH_API_KEY"):
        return
    try:
        get_cached_client().flush()
    except Exception:
        logger.warning("Failed to flush LangSmith traces", exc_info=True)


@lru_cache(maxsize=1)
def get_http_client() -> httpx.Client:
    """Create the shared upstream HTTP client.

    No timeout unless one is configured; the Lambda's own deadline applies.
    """
    timeout = get_settings().tutor_upstream_timeout_seconds
    return httpx.Client(timeout=timeout)


def _hide_request_secrets(inputs: dict[str, Any]) -> dict[str, Any]:
    request = inputs.get("request")
    if isinstance(request, UpstreamRequest):
        return {"provider": request.provider, "url": request.url, "payload": request.payload}
    return {}


@traceable(run_type="llm", name="tutor.upstream.generate", process_inputs=_hide_request_secrets)
def send_upstream_request(request: UpstreamRequest) -> UpstreamResult:
    """POST one request to the provider and capture its status and raw body."""
    start = time.time()
    response = get_http_client().post(
        request.url,
        json=request.payload,
        headers=dict(request.headers),
        params=dict(request.params),
    )
    return UpstreamResult(
        status_code=response.status_code,
        body=response.text,
        duration_seconds=round(time.time() - start, 2),
    )
