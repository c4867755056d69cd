"""LLM client that turns a composed prompt into validated daily tasks.

``TaskGenerationClient.generate`` is total: transport errors, non-success
statuses and malformed payloads all resolve to the fixed fallback response, so
one upstream outage never fails a user's nightly run.
"""
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from time import perf_counter
from typing import Any, Dict, List, Literal, Optional

import openai
from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.config import settings
from app.observability.metrics import log_metric
from app.observability.tracing import trace
from app.services.prompt_composer import MAX_TASKS, MIN_TASKS, TASK_CATEGORIES, TASK_PRIORITIES

logger = logging.getLogger(__name__)

TaskCategory = Literal["learning", "health", "productivity", "wellness", "creativity", "social", "financial", "personal"]
TaskPriority = Literal["high", "medium", "low"]

_JSON_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?```", re.DOTALL)


class GeneratedTask(BaseModel):
    """One task as returned by the model."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., min_length=1)
    description: str = ""
    category: TaskCategory = "personal"
    time_estimate: str = Field(default="15 minutes", alias="timeEstimate")
    priority: TaskPriority = "medium"
    related_goal_id: Optional[str] = Field(default=None, alias="relatedGoalId")

    @field_validator("category", mode="before")
    @classmethod
    def _coerce_category(cls, value: Any) -> str:
        normalized = str(value or "").strip().lower()
        return normalized if normalized in TASK_CATEGORIES else "personal"

    @field_validator("priority", mode="before")
    @classmethod
    def _coerce_priority(cls, value: Any) -> str:
        normalized = str(value or "").strip().lower()
        return normalized if normalized in TASK_PRIORITIES else "medium"

    @field_validator("time_estimate", mode="before")
    @classmethod
    def _coerce_time_estimate(cls, value: Any) -> str:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return f"{int(value)} minutes"
        return str(value).strip() if value else "15 minutes"

    @field_validator("related_goal_id", mode="before")
    @classmethod
    def _blank_goal_id(cls, value: Any) -> Optional[str]:
        if value in (None, "", "null"):
            return None
        return str(value)


class AITaskResponse(BaseModel):
    """Structured payload: tasks plus the day's quote and focus area."""

    model_config = ConfigDict(populate_by_name=True)

    tasks: List[GeneratedTask]
    daily_quote: str = Field(..., min_length=1, alias="dailyQuote")
    focus_area: str = Field(..., min_length=1, alias="focusArea")


@dataclass
class GenerationOutcome:
    response: AITaskResponse
    fallback_used: bool = False
    failure_reason: Optional[str] = None


FALLBACK_QUOTE = "Progress, not perfection, is the goal. Every small step counts."
FALLBACK_FOCUS_AREA = "Personal Growth"
FALLBACK_TASKS: List[Dict[str, str]] = [
    {
        "title": "Write in your journal",
        "description": "Reflect on today's experiences and thoughts",
        "category": "wellness",
        "timeEstimate": "10 minutes",
        "priority": "high",
    },
    {
        "title": "Take a 20-minute walk",
        "description": "Get some fresh air and light exercise",
        "category": "health",
        "timeEstimate": "20 minutes",
        "priority": "medium",
    },
    {
        "title": "Read for 15 minutes",
        "description": "Continue learning with a book or article",
        "category": "learning",
        "timeEstimate": "15 minutes",
        "priority": "medium",
    },
    {
        "title": "Organize your workspace",
        "description": "Clear your desk and organize your materials",
        "category": "productivity",
        "timeEstimate": "15 minutes",
        "priority": "low",
    },
]


def fallback_response() -> AITaskResponse:
    """Fresh copy of the fixed fallback payload."""
    return AITaskResponse.model_validate(
        {"tasks": FALLBACK_TASKS, "dailyQuote": FALLBACK_QUOTE, "focusArea": FALLBACK_FOCUS_AREA}
    )


def strip_json_fences(text: str) -> str:
    """Strip markdown code fences and surrounding chatter from model output."""
    text = text.strip()
    match = _JSON_FENCE_RE.search(text)
    if match:
        return match.group(1).strip()
    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end > start:
        return text[start : end + 1]
    return text


def parse_task_response(content: Optional[str]) -> AITaskResponse:
    """Parse and validate model output; raises ValueError when unusable."""
    if not content or not content.strip():
        raise ValueError("Empty completion content")
    payload = json.loads(strip_json_fences(content))
    if not isinstance(payload, dict):
        raise ValueError("Completion is not a JSON object")
    tasks = payload.get("tasks")
    if isinstance(tasks, list) and len(tasks) > MAX_TASKS:
        payload["tasks"] = tasks[:MAX_TASKS]
    response = AITaskResponse.model_validate(payload)
    if len(response.tasks) < MIN_TASKS:
        raise ValueError(f"Expected at least {MIN_TASKS} tasks, got {len(response.tasks)}")
    return response


class TaskGenerationClient:
    """Wraps an OpenAI-compatible chat-completions client."""

    def __init__(
        self,
        client: Any = None,
        *,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> None:
        self._client = client
        self.model = model or settings.ai_model
        self.max_tokens = max_tokens or settings.ai_max_tokens
        self.temperature = settings.ai_temperature if temperature is None else temperature

    @property
    def configured(self) -> bool:
        return self._client is not None

    def generate(self, prompt: str, *, trace_metadata: Optional[Dict[str, Any]] = None) -> GenerationOutcome:
        if self._client is None:
            logger.warning("AI API key missing; using fallback tasks.")
            return self._fallback("missing_api_key")

        metadata = dict(trace_metadata or {})
        metadata.update({"model": self.model, "llm_input_text": prompt[:500]})
        start = perf_counter()
        try:
            with trace("tasks.generate", metadata=metadata):
                completion = self._client.chat.completions.create(
                    model=self.model,
                    messages=[{"role": "user", "content": prompt}],
                    max_tokens=self.max_tokens,
                    temperature=self.temperature,
                )
            content = completion.choices[0].message.content
        except openai.APIStatusError as exc:
            logger.warning("AI API request failed with status %s", exc.status_code)
            return self._fallback(f"status_{exc.status_code}")
        except openai.APIError as exc:
            logger.warning("AI API transport error: %s", exc)
            return self._fallback("transport_error")
        except Exception:  # pragma: no cover - defensive
            logger.exception("Unexpected AI client failure")
            return self._fallback("unexpected_error")

        log_metric("generation.latency_ms", (perf_counter() - start) * 1000, metadata={"model": self.model})

        try:
            response = parse_task_response(content)
        except ValueError as exc:
            logger.warning("Failed to parse AI response: %s", exc)
            logger.debug("Unparseable AI response: %r", content)
            return self._fallback("invalid_payload")

        log_metric("generation.tasks_returned", len(response.tasks), metadata={"model": self.model})
        return GenerationOutcome(response=response)

    def _fallback(self, reason: str) -> GenerationOutcome:
        log_metric("generation.fallback.used", 1, metadata={"reason": reason})
        return GenerationOutcome(response=fallback_response(), fallback_used=True, failure_reason=reason)


def build_openai_client() -> Optional[openai.OpenAI]:
    """Create the SDK client, or None when no API key is configured."""
    if not settings.ai_api_key:
        return None
    return openai.OpenAI(
        api_key=settings.ai_api_key,
        base_url=settings.ai_base_url,
        timeout=settings.ai_timeout_seconds,
        max_retries=1,
    )


@lru_cache
def get_generation_client() -> TaskGenerationClient:
    """Process-wide generation client built from settings."""
    return TaskGenerationClient(build_openai_client())
