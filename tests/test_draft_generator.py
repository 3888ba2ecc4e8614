# tests/test_draft_generator.py
from __future__ import annotations

import asyncio
import json
from datetime import datetime

import httpx
import pytest

from unicensus.domain.entities import Inspection, InspectionRecord
from unicensus.domain.errors import GenerationError
from unicensus.integrations.draft_generator import LLMDraftGenerator, build_prompt
from unicensus.integrations.llm_client import LLMClient, LLMConfig


def _inspection() -> Inspection:
    return Inspection(
        id="i1",
        bathroom_id="b1",
        date=datetime(2026, 5, 2),
        records=(
            InspectionRecord("sink", "Critical", "water on floor"),
            InspectionRecord("door", "OK"),
        ),
    )


def _generator(handler) -> LLMDraftGenerator:
    cfg = LLMConfig(base_url="http://llm.test", api_path="/v1", model="m", api_key="k")
    return LLMDraftGenerator(LLMClient(cfg, transport=httpx.MockTransport(handler)), temperature=0.0)


def _reply(content: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def test_generates_draft_from_chat_completion():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers.get("Authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json=_reply('```json\n{"title": "Leaking sink WC-1", "description": "Replace trap", "priority": "high"}\n```'),
        )

    draft = asyncio.run(_generator(handler).generate(_inspection(), "WC-1", "Science Hub"))

    assert draft.title == "Leaking sink WC-1"
    assert draft.priority == "High"
    assert seen["url"] == "http://llm.test/v1/chat/completions"
    assert seen["auth"] == "Bearer k"
    prompt = seen["body"]["messages"][1]["content"]
    assert "Science Hub" in prompt and "WC-1" in prompt and "water on floor" in prompt


def test_blank_fields_fall_back():
    def handler(request):
        return httpx.Response(200, json=_reply('{"title": "Sink", "description": "", "priority": "urgent"}'))

    draft = asyncio.run(_generator(handler).generate(_inspection(), "WC-1", "Science Hub"))
    assert draft.title == "Sink"
    assert draft.priority == "Medium"
    assert "1 issue" in draft.description


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, json={"error": "boom"}),
        httpx.Response(200, text="not json"),
        httpx.Response(200, json=_reply("no object here")),
        httpx.Response(200, json=_reply('{"description": "missing title"}')),
        httpx.Response(200, json={"choices": []}),
    ],
)
def test_failures_raise_generation_error(response):
    with pytest.raises(GenerationError):
        asyncio.run(_generator(lambda request: response).generate(_inspection(), "WC-1", "Science Hub"))


def test_prompt_lists_only_failing_items():
    prompt = build_prompt(_inspection(), "WC-1", "Science Hub")
    assert "Sink (tap, drain)" in prompt
    assert "Door / handle" not in prompt
