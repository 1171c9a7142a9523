"""SmartSpeak tutor chat API using FastAPI + Mangum for AWS Lambda."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any

from fastapi import APIRouter, FastAPI, Request, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from mangum import Mangum
from starlette.exceptions import HTTPException as StarletteHTTPException

from tutor_api.constants import (
    ALLOWED_METHODS,
    CONFIGURATION_ERROR,
    CORS_HEADERS,
    EMPTY_REPLY_ERROR,
    METHOD_NOT_ALLOWED_ERROR,
    RATE_LIMITED_ERROR,
    UNEXPECTED_ERROR,
    UPSTREAM_AUTH_ERROR,
    UPSTREAM_UNAVAILABLE_ERROR,
)
from tutor_api.errors import (
    BadRequestError,
    ConfigurationError,
    UpstreamContractError,
    UpstreamError,
)
from tutor_api.infra.runtime import (
    ensure_langsmith_configured,
    flush_langsmith_traces,
    get_tutor_config,
    send_upstream_request,
)
from tutor_api.schemas import parse_chat_request
from tutor_api.services.tutor_service import TutorChatService

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

UPSTREAM_ERROR_MESSAGES = {
    429: RATE_LIMITED_ERROR,
    401: UPSTREAM_AUTH_ERROR,
}


@lru_cache(maxsize=1)
def get_tutor_service() -> TutorChatService:
    return TutorChatService(config=get_tutor_config(), send=send_upstream_request)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    # Load and validate configuration on cold start rather than on first request.
    get_tutor_service()
    yield


app = FastAPI(lifespan=lifespan)
router = APIRouter(prefix="/api")


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _error_response(status_code: int, error: str, **fields: Any) -> JSONResponse:
    body: dict[str, Any] = {"error": error}
    body.update({key: value for key, value in fields.items() if value is not None})
    return JSONResponse(body, status_code=status_code)


def _upstream_status(status_code: int) -> int:
    return status_code if 400 <= status_code < 600 else 502


@app.middleware("http")
async def add_cors_headers(request: Request, call_next: Any) -> Response:
    response = await call_next(request)
    response.headers.update(CORS_HEADERS)
    return response


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 405:
        allow = (exc.headers or {}).get("Allow")
        allowed = allow.split(", ") if allow else ALLOWED_METHODS
        return JSONResponse(
            {"error": METHOD_NOT_ALLOWED_ERROR, "allowed": allowed},
            status_code=405,
            headers={"Allow": ", ".join(allowed)},
        )
    return JSONResponse({"error": str(exc.detail)}, status_code=exc.status_code, headers=exc.headers)


@router.post("/ask-ai")
async def ask_ai(request: Request) -> JSONResponse:
    """Forward a chat turn to the configured provider and return the tutor's reply."""
    try:
        ensure_langsmith_configured()
        chat_request = parse_chat_request(await request.body())
        response = await run_in_threadpool(get_tutor_service().handle_chat, chat_request)
        return JSONResponse(response.to_body())
    except BadRequestError as e:
        logger.info("Chat request rejected", extra={"reason": str(e)})
        return _error_response(400, str(e))
    except ConfigurationError:
        return _error_response(500, CONFIGURATION_ERROR)
    except UpstreamError as e:
        return _error_response(
            _upstream_status(e.status_code),
            UPSTREAM_ERROR_MESSAGES.get(e.status_code, UPSTREAM_UNAVAILABLE_ERROR),
            details=e.details,
        )
    except UpstreamContractError:
        return _error_response(500, EMPTY_REPLY_ERROR)
    except Exception:
        timestamp = _utc_timestamp()
        logger.exception("Chat request failed unexpectedly", extra={"timestamp": timestamp})
        return _error_response(500, UNEXPECTED_ERROR, timestamp=timestamp)
    finally:
        flush_langsmith_traces()


@router.options("/ask-ai")
def ask_ai_preflight() -> Response:
    """CORS pre-flight; headers are added by the middleware."""
    return Response(status_code=200)


@router.get("/health")
def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok"}


app.include_router(router)


handler = Mangum(app)
