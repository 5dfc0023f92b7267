#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ZenHabit - AI Insight Service
Motivational tips for the current week's habits

Version: 1.0.0
"""

import asyncio
import json
import re
import time
from dataclasses import dataclass, asdict, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional
import logging

import openai
from openai import AsyncOpenAI

from core.models import Habit

logger = logging.getLogger(__name__)

# ===== EXCEPTIONS =====

class AIServiceError(Exception):
    """Base class for insight service errors"""
    pass

class AIProviderError(AIServiceError):
    """The AI provider failed or returned something unusable"""
    pass

class AIRateLimitError(AIServiceError):
    """Provider quota exceeded"""
    pass

# ===== ENUMS =====

class AIProvider(Enum):
    OPENAI = "openai"
    FALLBACK = "fallback"

# ===== DATA CLASSES =====

NEVER = "Never"
MAX_TIPS = 3
MIN_TIP_LENGTH = 6

FALLBACK_TIPS = (
    "Keep consistent! Tracking is the first step to improvement.",
    "Try to perform your most difficult habits earlier in the day.",
    "Review your progress weekly to stay on track.",
)

@dataclass
class HabitSummary:
    """Compact per-habit data sent to the model"""
    title: str
    category: str
    total_completions: int
    last_completed: str = NEVER

    @classmethod
    def from_habit(cls, habit: Habit) -> "HabitSummary":
        return cls(
            title=habit.title,
            category=habit.category.value,
            total_completions=len(habit.completed_dates),
            last_completed=habit.last_completed or NEVER,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "category": self.category,
            "totalCompletions": self.total_completions,
            "lastCompleted": self.last_completed,
        }

@dataclass
class InsightStats:
    """Insight service statistics"""
    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    fallback_responses: int = 0
    total_tokens_used: int = 0
    provider_usage: Dict[str, int] = field(default_factory=dict)

    @property
    def success_rate(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return (self.successful_requests / self.total_requests) * 100

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['success_rate'] = round(self.success_rate, 2)
        return data

# ===== PROMPTS =====

SYSTEM_PROMPT = """You are an encouraging and analytical habit coach.
Analyze the user's habit data.
Provide 3 concise, bulleted insights or motivational tips based on their performance.
Focus on patterns, streaks, and categories.
Keep the tone positive but constructive.
Do not use markdown formatting like **bold** or *italics*, just plain text.
Max 50 words per bullet point."""

def build_user_prompt(summaries: Iterable[HabitSummary]) -> str:
    payload = json.dumps([s.to_dict() for s in summaries], ensure_ascii=False)
    return f"Here is my habit data: {payload}. Give me {MAX_TIPS} insights."

# ===== RESPONSE PARSING =====

_BULLET_RE = re.compile(r"^[•\-\*]\s*")

def parse_tips(text: str, limit: int = MAX_TIPS) -> List[str]:
    """Strip bullet markers, drop short lines, keep the first ``limit``"""
    tips = []
    for line in (text or "").split("\n"):
        line = _BULLET_RE.sub("", line.strip()).strip()
        if len(line) >= MIN_TIP_LENGTH:
            tips.append(line)
    return tips[:limit]

def fallback_tips() -> List[str]:
    return list(FALLBACK_TIPS)

# ===== MAIN AI SERVICE =====

class InsightService:
    """Insight generator backed by the OpenAI chat completions API"""

    def __init__(self, client: Optional[Any] = None, model: str = "gpt-4o-mini",
                 max_tokens: int = 300, temperature: float = 0.7,
                 max_retries: int = 2, retry_delay: float = 1.0):
        self.client = client
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.max_retries = max(1, max_retries)
        self.retry_delay = retry_delay
        self.stats = InsightStats()

    @property
    def enabled(self) -> bool:
        return self.client is not None

    @classmethod
    def from_config(cls, app_config) -> "InsightService":
        ai = app_config.ai
        client = None
        if ai.enabled and ai.openai_api_key:
            try:
                client = AsyncOpenAI(api_key=ai.openai_api_key, timeout=ai.request_timeout)
                logger.info("OpenAI client initialized successfully")
            except openai.OpenAIError as e:
                logger.error(f"Failed to initialize OpenAI client: {e}")
        else:
            logger.warning("OpenAI API key not configured - insights use fallback tips")

        return cls(
            client=client,
            model=ai.openai_model,
            max_tokens=ai.openai_max_tokens,
            temperature=ai.temperature,
        )

    async def analyze(self, summaries: List[HabitSummary]) -> List[str]:
        """Up to 3 tips; the fallback tips on any failure"""
        start_time = time.time()
        self.stats.total_requests += 1

        try:
            if not self.enabled:
                raise AIProviderError("AI client is not configured")

            tips = await self._request_tips(summaries)

            self.stats.successful_requests += 1
            self._count_provider(AIProvider.OPENAI)
            logger.info(f"Generated {len(tips)} insights in {int((time.time() - start_time) * 1000)}ms")
            return tips

        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning(f"Insight generation failed, using fallback tips: {e}")
            self.stats.failed_requests += 1
            self.stats.fallback_responses += 1
            self._count_provider(AIProvider.FALLBACK)
            return fallback_tips()

    async def _request_tips(self, summaries: List[HabitSummary]) -> List[str]:
        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": build_user_prompt(summaries)}
        ]

        for attempt in range(self.max_retries):
            try:
                response = await self.client.chat.completions.create(
                    model=self.model,
                    messages=messages,
                    max_tokens=self.max_tokens,
                    temperature=self.temperature,
                )
                break

            except openai.RateLimitError:
                logger.warning(f"OpenAI rate limit hit, attempt {attempt + 1}")
                if attempt < self.max_retries - 1:
                    await asyncio.sleep(self.retry_delay * (2 ** attempt))
                else:
                    raise AIRateLimitError("OpenAI rate limit exceeded")

            except openai.APITimeoutError:
                logger.warning(f"OpenAI timeout, attempt {attempt + 1}")
                if attempt < self.max_retries - 1:
                    await asyncio.sleep(self.retry_delay)
                else:
                    raise AIProviderError("OpenAI request timeout")

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as e:
            raise AIProviderError(f"Malformed response: {e}")

        usage = getattr(response, "usage", None)
        if usage is not None:
            self.stats.total_tokens_used += getattr(usage, "total_tokens", 0) or 0

        return parse_tips(content or "")

    def _count_provider(self, provider: AIProvider) -> None:
        key = provider.value
        self.stats.provider_usage[key] = self.stats.provider_usage.get(key, 0) + 1

    def get_stats(self) -> Dict[str, Any]:
        stats = self.stats.to_dict()
        stats['enabled'] = self.enabled
        stats['model'] = self.model
        return stats

# ===== LATEST-REQUEST-WINS COORDINATOR =====

class InsightCoordinator:
    """Runs insight requests as tasks; a newer request supersedes the older one.

    Tips from a superseded request are never published.
    """

    def __init__(self, service: InsightService):
        self.service = service
        self.tips: List[str] = []
        self.generation = 0
        self.updated_at: Optional[float] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def loading(self) -> bool:
        return self._task is not None and not self._task.done()

    def request(self, summaries: List[HabitSummary]) -> asyncio.Task:
        """Start a refresh; must be called from a running event loop"""
        if self.loading:
            logger.info("Cancelling superseded insight request")
            self._task.cancel()

        self.generation += 1
        self._task = asyncio.get_running_loop().create_task(
            self._run(self.generation, list(summaries))
        )
        return self._task

    async def _run(self, generation: int, summaries: List[HabitSummary]) -> List[str]:
        tips = await self.service.analyze(summaries)
        if generation == self.generation:
            self.tips = tips
            self.updated_at = time.time()
        else:
            logger.debug(f"Dropping stale insights from request {generation}")
        return tips

    async def wait(self) -> List[str]:
        """Wait for the latest request (following any that supersede it)"""
        while self._task is not None:
            task = self._task
            try:
                await asyncio.shield(task)
            except asyncio.CancelledError:
                if not task.cancelled():
                    raise
            if task is self._task:
                break
        return list(self.tips)

    def cancel(self) -> None:
        if self.loading:
            self._task.cancel()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "loading": self.loading,
            "tips": list(self.tips),
            "generation": self.generation,
            "updatedAt": self.updated_at,
        }
