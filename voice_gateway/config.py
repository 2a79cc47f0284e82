"""Gateway configuration, read once from the environment at startup."""

from __future__ import annotations

import os
from dataclasses import dataclass


def _env(name: str, default: str) -> str:
    """Stripped env value; empty or unset falls back to default."""
    return (os.environ.get(name) or "").strip() or default


@dataclass(frozen=True)
class GatewayConfig:
    port: int = 3001
    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1"
    allowed_origin: str = "https://voice-ai-frontend-q3c3.onrender.com"
    stt_model: str = "whisper-1"
    chat_model: str = "gpt-3.5-turbo"
    upstream_timeout_s: float = 60.0

    @classmethod
    def from_env(cls) -> "GatewayConfig":
        return cls(
            port=int(_env("PORT", str(cls.port))),
            openai_api_key=_env("OPENAI_API_KEY", cls.openai_api_key),
            openai_base_url=_env("OPENAI_BASE_URL", cls.openai_base_url),
            allowed_origin=_env("ALLOWED_ORIGIN", cls.allowed_origin),
            stt_model=_env("STT_MODEL", cls.stt_model),
            chat_model=_env("CHAT_MODEL", cls.chat_model),
            upstream_timeout_s=float(
                _env("UPSTREAM_TIMEOUT_S", str(cls.upstream_timeout_s))
            ),
        )

    @property
    def has_credential(self) -> bool:
        return bool(self.openai_api_key)
