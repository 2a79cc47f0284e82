"""Voice gateway: forwards audio transcription and chat questions to OpenAI."""

from __future__ import annotations

import time
from contextlib import asynccontextmanager
from typing import Any, Optional, Union

from fastapi import APIRouter, FastAPI, File, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from openai import AsyncOpenAI
from pydantic import ValidationError
from starlette.datastructures import UploadFile as StarletteUploadFile

from voice_gateway import logging_utils as logging_utils_module
from voice_gateway import metrics as metrics_module
from voice_gateway import upstream as upstream_module
from voice_gateway.config import GatewayConfig
from voice_gateway.models import (
    ANSWER_FAILED,
    NO_AUDIO,
    NO_QUESTION,
    ORIGIN_NOT_ALLOWED,
    STT_FAILED,
    AnswerResponse,
    ErrorResponse,
    QuestionRequest,
    TranscriptionResponse,
)

router = APIRouter()

_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def _request_id(request: Request) -> str | None:
    """Read x-request-id from headers; default None."""
    return request.headers.get("x-request-id") or None


def _finish(route: str, request: Request, t0: float, outcome: str) -> None:
    latency_ms = (time.perf_counter() - t0) * 1000
    metrics_module.record_request(route, latency_ms=latency_ms, outcome=outcome)
    logging_utils_module.log_request(
        route=route,
        latency_ms=latency_ms,
        request_id=_request_id(request),
        error=outcome != metrics_module.OK,
    )


def _client_error(message: str) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": message})


def _upstream_error(message: str, details: Any) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": message, "details": details})


@router.get("/health")
def health() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}


@router.get("/metrics")
def metrics() -> dict:
    """Lightweight JSON metrics (in-memory since process start)."""
    return metrics_module.get_metrics()


@router.post(
    "/api/stt", response_model=TranscriptionResponse, responses=_ERROR_RESPONSES
)
async def transcribe_endpoint(
    request: Request, audio: Union[UploadFile, str, None] = File(default=None)
) -> Any:
    """Transcribe an uploaded audio file via the OpenAI transcription API."""
    route = "/api/stt"
    t0 = time.perf_counter()

    # a text value under "audio" is not a file upload
    if not isinstance(audio, StarletteUploadFile):
        _finish(route, request, t0, outcome=metrics_module.CLIENT_ERROR)
        return _client_error(NO_AUDIO)

    config: GatewayConfig = request.app.state.config
    data = await audio.read()

    logging_utils_module.log_event(
        "stt_dispatch", bytes=len(data), content_type=audio.content_type
    )
    try:
        text = await upstream_module.transcribe_audio(
            request.app.state.upstream, config.stt_model, data, audio.content_type
        )
    except upstream_module.UpstreamError as e:
        logging_utils_module.log_event("stt_error", level="error", details=e.details)
        _finish(route, request, t0, outcome=metrics_module.UPSTREAM_ERROR)
        return _upstream_error(STT_FAILED, e.details)

    logging_utils_module.log_event("stt_success", chars=len(text))
    _finish(route, request, t0, outcome=metrics_module.OK)
    return TranscriptionResponse(transcription=text)


@router.post(
    "/api/openai", response_model=AnswerResponse, responses=_ERROR_RESPONSES
)
async def answer_endpoint(request: Request) -> Any:
    """Answer a single question via the OpenAI chat-completion API."""
    route = "/api/openai"
    t0 = time.perf_counter()

    try:
        body = await request.json()
    except ValueError:
        body = None
    try:
        payload = QuestionRequest.model_validate(body if isinstance(body, dict) else {})
    except ValidationError:
        payload = QuestionRequest()

    if not payload.question:
        _finish(route, request, t0, outcome=metrics_module.CLIENT_ERROR)
        return _client_error(NO_QUESTION)

    config: GatewayConfig = request.app.state.config
    logging_utils_module.log_event(
        "answer_dispatch",
        question_hash=logging_utils_module.text_hash(payload.question),
    )
    try:
        answer = await upstream_module.answer_question(
            request.app.state.upstream, config.chat_model, payload.question
        )
    except upstream_module.UpstreamError as e:
        logging_utils_module.log_event("answer_error", level="error", details=e.details)
        _finish(route, request, t0, outcome=metrics_module.UPSTREAM_ERROR)
        return _upstream_error(ANSWER_FAILED, e.details)

    logging_utils_module.log_event("answer_success")
    _finish(route, request, t0, outcome=metrics_module.OK)
    return AnswerResponse(answer=answer)


def create_app(
    config: Optional[GatewayConfig] = None, client: Optional[AsyncOpenAI] = None
) -> FastAPI:
    """Build the gateway app; config and upstream client are injected or built from env."""
    config = config or GatewayConfig.from_env()
    if not config.has_credential:
        logging_utils_module.log_event(
            "missing_credential",
            level="error",
            message="OPENAI_API_KEY is not set in environment variables.",
        )
    upstream_client = client or upstream_module.make_client(config)

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        yield
        await upstream_client.close()

    app = FastAPI(title="voice-gateway", version="0.1.0", lifespan=lifespan)
    app.state.config = config
    app.state.upstream = upstream_client

    @app.middleware("http")
    async def origin_guard(request: Request, call_next):
        """Reject cross-origin requests from anywhere but the allowed origin."""
        origin = request.headers.get("origin")
        if origin and origin != config.allowed_origin:
            return JSONResponse(status_code=403, content={"error": ORIGIN_NOT_ALLOWED})
        return await call_next(request)

    # outermost middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[config.allowed_origin],
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type"],
    )

    app.include_router(router)
    return app


app = create_app()


def main() -> None:
    import uvicorn

    config: GatewayConfig = app.state.config
    logging_utils_module.log_event(
        "startup", url=f"http://localhost:{config.port}"
    )
    uvicorn.run(app, host="0.0.0.0", port=config.port)


if __name__ == "__main__":
    main()
