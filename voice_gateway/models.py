"""Request/response models for the gateway's client-facing routes."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field

NO_AUDIO = "No audio file provided."
NO_QUESTION = "No question provided."
STT_FAILED = "Failed to transcribe audio."
ANSWER_FAILED = "Failed to get answer from AI."
ORIGIN_NOT_ALLOWED = "Origin not allowed."


class TranscriptionResponse(BaseModel):
    """Body of a successful POST /api/stt."""

    transcription: str = Field(description="Text returned by the transcription upstream")


class QuestionRequest(BaseModel):
    """Body of POST /api/openai."""

    question: Optional[str] = Field(default=None, description="User question for the chat model")


class AnswerResponse(BaseModel):
    """Body of a successful POST /api/openai."""

    answer: Optional[str] = Field(description="Content of the first returned choice")


class ErrorResponse(BaseModel):
    """Client error (error only) or upstream failure (error + details)."""

    error: str
    details: Optional[Any] = Field(
        default=None, description="Upstream error body or local error message"
    )
