"""Call the OpenAI transcription and chat-completion APIs with the server credential."""

from __future__ import annotations

from typing import Any, Optional

import httpx
import openai
from openai import AsyncOpenAI

from voice_gateway.config import GatewayConfig

UPLOAD_FILENAME = "audio.webm"
DEFAULT_CONTENT_TYPE = "application/octet-stream"
CHAT_TEMPERATURE = 0.7
CHAT_MAX_TOKENS = 250
# the SDK refuses an empty key; the upstream rejects this one with a 401
MISSING_KEY_PLACEHOLDER = "missing-api-key"


class UpstreamError(Exception):
    """An upstream call failed; details carry the upstream body or local message."""

    def __init__(self, message: str, details: Any = None) -> None:
        super().__init__(message)
        self.details = details if details is not None else message


def make_client(
    config: GatewayConfig, http_client: Optional[httpx.AsyncClient] = None
) -> AsyncOpenAI:
    """Return an AsyncOpenAI client bound to the server credential; no retries."""
    return AsyncOpenAI(
        api_key=config.openai_api_key or MISSING_KEY_PLACEHOLDER,
        base_url=config.openai_base_url,
        timeout=config.upstream_timeout_s,
        max_retries=0,
        http_client=http_client,
    )


def _status_details(err: openai.APIStatusError) -> Any:
    """Upstream error body: parsed JSON when possible, else raw text."""
    try:
        return err.response.json()
    except ValueError:
        return err.response.text or err.message


def _to_upstream_error(err: openai.APIError) -> UpstreamError:
    if isinstance(err, openai.APIStatusError):
        return UpstreamError(err.message, _status_details(err))
    return UpstreamError(err.message)


async def transcribe_audio(
    client: AsyncOpenAI,
    model: str,
    audio: bytes,
    content_type: Optional[str] = None,
) -> str:
    """
    Send audio as multipart (file=audio.webm, model) to /audio/transcriptions.
    Returns the transcript text; raises UpstreamError on any failure.
    """
    try:
        resp = await client.audio.transcriptions.create(
            file=(UPLOAD_FILENAME, audio, content_type or DEFAULT_CONTENT_TYPE),
            model=model,
        )
    except openai.APIError as e:
        raise _to_upstream_error(e) from e

    text = getattr(resp, "text", None)
    if not isinstance(text, str):
        raise UpstreamError("Transcription response has no text.")
    return text


async def answer_question(
    client: AsyncOpenAI, model: str, question: str
) -> Optional[str]:
    """
    Ask the chat model a single user-role question.
    Returns the first choice's message content; raises UpstreamError on any failure.
    """
    try:
        completion = await client.chat.completions.create(
            model=model,
            messages=[{"role": "user", "content": question}],
            temperature=CHAT_TEMPERATURE,
            max_tokens=CHAT_MAX_TOKENS,
        )
    except openai.APIError as e:
        raise _to_upstream_error(e) from e

    if not completion.choices:
        raise UpstreamError("Chat completion returned no choices.")
    content = completion.choices[0].message.content
    if content is not None and not isinstance(content, str):
        raise UpstreamError("Chat completion content is not text.")
    return content
