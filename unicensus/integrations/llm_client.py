# unicensus/integrations/llm_client.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from ..config import settings


@dataclass(frozen=True)
class LLMConfig:
    """
    OpenAI-compatible chat completions endpoint. LM Studio serves one at
      http://localhost:1234/v1/chat/completions
    and hosted providers use the same shape with a bearer key.
    """

    base_url: str = "http://localhost:1234"
    api_path: str = "/v1"
    model: str = "local-model"
    api_key: Optional[str] = None
    timeout_seconds: float = 20.0

    @classmethod
    def from_settings(cls) -> "LLMConfig":
        return cls(
            base_url=settings.draft_base_url or "http://localhost:1234",
            api_path=settings.draft_api_path,
            model=settings.draft_model,
            api_key=settings.draft_api_key,
            timeout_seconds=settings.draft_timeout_seconds,
        )

    @property
    def completions_url(self) -> str:
        path = "/" + self.api_path.strip("/") if self.api_path.strip("/") else ""
        return f"{self.base_url.rstrip('/')}{path}/chat/completions"


class LLMClient:
    """Async chat-completions client. Raises httpx errors; callers decide how to recover."""

    def __init__(self, cfg: Optional[LLMConfig] = None, *, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.cfg = cfg or LLMConfig.from_settings()
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.cfg.api_key:
            headers["Authorization"] = f"Bearer {self.cfg.api_key}"
        return headers

    async def chat_complete(
        self,
        *,
        system: str,
        user: str,
        temperature: float = 0.2,
        json_mode: bool = False,
    ) -> Dict[str, Any]:
        payload: dict[str, Any] = {
            "model": self.cfg.model,
            "temperature": temperature,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
        }
        if json_mode:
            payload["response_format"] = {"type": "json_object"}

        async with httpx.AsyncClient(timeout=self.cfg.timeout_seconds, transport=self._transport) as client:
            r = await client.post(self.cfg.completions_url, json=payload, headers=self._headers())
            r.raise_for_status()
            return r.json()

    @staticmethod
    def first_message(data: Dict[str, Any]) -> str:
        try:
            return str(data["choices"][0]["message"]["content"] or "")
        except (KeyError, IndexError, TypeError):
            return ""
