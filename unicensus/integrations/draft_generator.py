# unicensus/integrations/draft_generator.py
from __future__ import annotations

import json
import logging
from typing import Any, Optional

import httpx

from ..config import settings
from ..domain.checklist import item_label
from ..domain.entities import Inspection
from ..domain.errors import GenerationError
from ..domain.lifecycle import TicketDraft, failing_records, normalize_draft
from .llm_client import LLMClient, LLMConfig

log = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You write maintenance tickets for a university facilities team. "
    'Reply with a single JSON object: {"title": str, "description": str, "priority": "Low"|"Medium"|"High"}.'
)


class DraftGenerator:
    """
    Generator interface. Called only for inspections with Warning/Critical
    findings; every failure surfaces as GenerationError.
    """

    source = "generator"

    async def generate(self, inspection: Inspection, bathroom_code: str, campus_name: str) -> TicketDraft:
        raise NotImplementedError


def build_prompt(inspection: Inspection, bathroom_code: str, campus_name: str) -> str:
    issues = failing_records(inspection)
    lines = [
        "Analyse the issues found while inspecting a university restroom.",
        f"Site: {campus_name}",
        f"Restroom: {bathroom_code}",
        f"Date: {inspection.date.date().isoformat()}",
        "",
        "Issues found:",
    ]
    for r in issues:
        note = f" Notes: {r.note}" if r.note else ""
        lines.append(f"- {item_label(r.item_id)}: status {r.status}.{note}")
    lines += [
        "",
        "Write a concise ticket title and a professional technical description for the maintenance crew.",
        "Assign a priority (Low, Medium, High) from severity: Critical means High; "
        "structural or plumbing problems are High or Medium.",
    ]
    return "\n".join(lines)


def _parse_json_object(text: str) -> dict[str, Any]:
    s = text.strip()
    if s.startswith("```"):
        s = s.strip("`")
        if s.lower().startswith("json"):
            s = s[4:]
    start, end = s.find("{"), s.rfind("}")
    if start < 0 or end <= start:
        raise GenerationError("generator reply had no JSON object")
    try:
        data = json.loads(s[start : end + 1])
    except json.JSONDecodeError as e:
        raise GenerationError(f"generator reply was not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise GenerationError("generator reply was not a JSON object")
    return data


class LLMDraftGenerator(DraftGenerator):
    source = "llm"

    def __init__(self, client: Optional[LLMClient] = None, *, temperature: Optional[float] = None) -> None:
        self.client = client or LLMClient(LLMConfig.from_settings())
        self.temperature = settings.draft_temperature if temperature is None else temperature

    async def generate(self, inspection: Inspection, bathroom_code: str, campus_name: str) -> TicketDraft:
        prompt = build_prompt(inspection, bathroom_code, campus_name)
        try:
            data = await self.client.chat_complete(
                system=SYSTEM_PROMPT,
                user=prompt,
                temperature=self.temperature,
                json_mode=True,
            )
        except httpx.HTTPError as e:
            raise GenerationError(f"generator request failed: {e.__class__.__name__}") from e
        except ValueError as e:
            # non-JSON HTTP body
            raise GenerationError("generator response body was not JSON") from e

        text = LLMClient.first_message(data)
        if not text:
            raise GenerationError("generator reply was empty")

        obj = _parse_json_object(text)
        if not str(obj.get("title") or "").strip():
            raise GenerationError("generator reply had no title")

        return normalize_draft(
            obj.get("title"),
            obj.get("description"),
            obj.get("priority"),
            bathroom_code=bathroom_code,
            failing_count=len(failing_records(inspection)),
        )


def generator_from_settings() -> Optional[DraftGenerator]:
    if not settings.draft_generator_enabled:
        log.info("draft generator disabled; fallback drafts only")
        return None
    return LLMDraftGenerator()
