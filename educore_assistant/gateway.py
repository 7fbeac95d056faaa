"""
Signup assistant gateway.

HTTP endpoint that the chat panel posts to. It prepends the system prompt,
forwards the conversation to the hosted language-model gateway with
streaming enabled and relays the event stream back unchanged. Upstream
failures are turned into ``{"error": ...}`` JSON responses.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, Literal

import httpx
import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel
from starlette.background import BackgroundTask

from educore_assistant.config import Configuration
from educore_assistant.logging_utils import AssistantErrorHandler, operation_context
from educore_assistant.prompts import build_system_prompt

logger = structlog.get_logger(__name__)

ASSISTANT_PATH = "/functions/v1/signup-assistant"

RATE_LIMIT_MESSAGE = "Limite de requisições excedido. Tente novamente em alguns segundos."
CREDITS_MESSAGE = "Créditos insuficientes. Entre em contato com o suporte."
UPSTREAM_FAILURE_MESSAGE = "Erro ao conectar com o assistente de IA"


class AssistantMessage(BaseModel):
    role: Literal["user", "assistant", "system"]
    content: str


class AssistantRequest(BaseModel):
    messages: list[AssistantMessage]
    context: str | None = None


def build_upstream_payload(
    request: AssistantRequest, model: str
) -> dict[str, Any]:
    """Chat-completions payload: system prompt, then the caller's messages."""
    return {
        "model": model,
        "messages": [
            {"role": "system", "content": build_system_prompt(request.context)},
            *(message.model_dump() for message in request.messages),
        ],
        "stream": True,
    }


async def upstream_error_response(response: httpx.Response) -> JSONResponse:
    """Map a non-2xx upstream response to the JSON error returned to the panel."""
    if response.status_code == 429:
        retry_after = response.headers.get("retry-after")
        return JSONResponse(
            status_code=429,
            content={"error": RATE_LIMIT_MESSAGE},
            headers={"Retry-After": retry_after} if retry_after else None,
        )
    if response.status_code == 402:
        return JSONResponse(status_code=402, content={"error": CREDITS_MESSAGE})

    error_text = (await response.aread()).decode("utf-8", errors="replace")
    logger.error(
        "AI gateway error",
        status_code=response.status_code,
        error_text=error_text,
    )
    return JSONResponse(status_code=500, content={"error": UPSTREAM_FAILURE_MESSAGE})


def create_app(
    configuration: Configuration,
    upstream: httpx.AsyncClient | None = None,
) -> FastAPI:
    """
    Build the gateway application.

    Args:
        configuration: Loaded configuration; the gateway section is validated here
        upstream: HTTP client for the language-model gateway. When omitted a
            client is created and closed with the application.
    """
    gateway_config = configuration.get_gateway_config()
    owns_upstream = upstream is None
    if upstream is None:
        upstream = httpx.AsyncClient(timeout=gateway_config["timeout"])

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        if owns_upstream:
            await upstream.aclose()

    app = FastAPI(title="EduCore Signup Assistant", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def invalid_request_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.warning("Invalid assistant request", errors=exc.errors())
        return JSONResponse(status_code=400, content={"error": "Invalid request body"})

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post(ASSISTANT_PATH)
    async def signup_assistant(body: AssistantRequest):
        api_key = configuration.gateway_api_key
        if not api_key:
            message = f"{gateway_config['api_key_env']} is not configured"
            logger.error("Signup assistant error", error_message=message)
            return JSONResponse(status_code=500, content={"error": message})

        payload = build_upstream_payload(body, gateway_config["model"])

        try:
            async with operation_context(
                "gateway.upstream_request",
                context={"model": gateway_config["model"], "messages": len(body.messages)},
            ):
                request = upstream.build_request(
                    "POST",
                    gateway_config["upstream_url"],
                    headers={"Authorization": f"Bearer {api_key}"},
                    json=payload,
                )
                response = await upstream.send(request, stream=True)
        except Exception as e:
            status_code, content = AssistantErrorHandler.error_payload(
                e, "signup_assistant"
            )
            return JSONResponse(status_code=status_code, content=content)

        if not response.is_success:
            try:
                return await upstream_error_response(response)
            except Exception as e:
                status_code, content = AssistantErrorHandler.error_payload(
                    e, "signup_assistant", {"upstream_status": response.status_code}
                )
                return JSONResponse(status_code=status_code, content=content)
            finally:
                await response.aclose()

        return StreamingResponse(
            response.aiter_bytes(),
            media_type="text/event-stream",
            background=BackgroundTask(response.aclose),
        )

    return app
