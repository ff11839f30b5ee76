"""
Content providers: interchangeable text-generation backends.

Both providers produce the same GeneratedContent: one SEO product
description and one social media post for the gaming store.

- OpenAIContentProvider: two chat completion calls (one per piece)
- ClaudeContentProvider: one Anthropic messages call returning both
  pieces separated by "---"

Which provider serves a given Content agent run is decided by a selector
function (see random_selector), so tests can pin either branch.

Usage:
    from anthropic import AsyncAnthropic
    from openai import AsyncOpenAI

    providers = [
        OpenAIContentProvider(AsyncOpenAI(api_key=...)),
        ClaudeContentProvider(AsyncAnthropic(api_key=...)),
    ]
    select = random_selector(providers, rng)
    content = await select().generate()
"""

from __future__ import annotations

import logging
import random
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

import anthropic
import openai

from gaming_dashboard.exceptions import DependencyError

logger = logging.getLogger(__name__)

PRODUCT_PROMPT = (
    "Write an SEO-optimised description for a professional gaming product "
    "(mouse, keyboard, headset, etc.). Include technical features, benefits "
    "and keywords. Maximum 150 words."
)
SOCIAL_PROMPT = (
    "Write a viral Instagram/TikTok post about professional gaming. Include "
    "emojis, hashtags and a call to action. Maximum 100 words."
)
COMBINED_PROMPT = (
    "Generate 2 pieces of content for Gaming Professional: "
    "1) A gaming product description (150 words) "
    "2) A viral social media post (100 words). "
    "Separate them with '---'"
)
SECTION_SEPARATOR = "---"


@dataclass
class GeneratedContent:
    """One product description plus one social post."""

    product_description: str
    social_post: str
    provider: str
    model: str
    latency_ms: float = 0.0


ContentSelector = Callable[[], "ContentProvider"]


class ContentProvider(ABC):
    """A text-generation backend able to produce a GeneratedContent."""

    name: str = ""

    @abstractmethod
    async def generate(self) -> GeneratedContent:
        """Generate one product description and one social post."""
        ...

    async def aclose(self) -> None:
        return None


class OpenAIContentProvider(ContentProvider):
    """Provider A: OpenAI chat completions, one call per content piece."""

    name = "openai"

    def __init__(
        self,
        client: Any,
        *,
        model: str = "gpt-4",
        product_max_tokens: int = 200,
        social_max_tokens: int = 150,
    ):
        self._client = client
        self.model = model
        self.product_max_tokens = product_max_tokens
        self.social_max_tokens = social_max_tokens

    async def _complete(self, prompt: str, max_tokens: int) -> str:
        try:
            response = await self._client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=max_tokens,
            )
        except openai.OpenAIError as e:
            raise DependencyError(
                f"OpenAI completion failed: {e}",
                service="openai",
                status_code=getattr(e, "status_code", None),
            ) from e

        choice = response.choices[0] if response.choices else None
        text = choice.message.content if choice and choice.message else ""
        return text or ""

    async def generate(self) -> GeneratedContent:
        start = time.monotonic()
        product = await self._complete(PRODUCT_PROMPT, self.product_max_tokens)
        social = await self._complete(SOCIAL_PROMPT, self.social_max_tokens)
        return GeneratedContent(
            product_description=product.strip(),
            social_post=social.strip(),
            provider=self.name,
            model=self.model,
            latency_ms=(time.monotonic() - start) * 1000,
        )

    async def aclose(self) -> None:
        close = getattr(self._client, "close", None)
        if close is not None:
            await close()


class ClaudeContentProvider(ContentProvider):
    """Provider B: one Anthropic messages call producing both pieces."""

    name = "claude"

    def __init__(
        self,
        client: Any,
        *,
        model: str = "claude-3-sonnet-20240229",
        max_tokens: int = 300,
    ):
        self._client = client
        self.model = model
        self.max_tokens = max_tokens

    async def generate(self) -> GeneratedContent:
        start = time.monotonic()
        try:
            response = await self._client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                messages=[{"role": "user", "content": COMBINED_PROMPT}],
            )
        except anthropic.AnthropicError as e:
            raise DependencyError(
                f"Claude message failed: {e}",
                service="claude",
                status_code=getattr(e, "status_code", None),
            ) from e

        if not response.content:
            raise DependencyError("Claude returned no content", service="claude")

        product, social = split_sections(response.content[0].text)
        return GeneratedContent(
            product_description=product,
            social_post=social,
            provider=self.name,
            model=self.model,
            latency_ms=(time.monotonic() - start) * 1000,
        )

    async def aclose(self) -> None:
        close = getattr(self._client, "close", None)
        if close is not None:
            await close()


def split_sections(text: str) -> tuple[str, str]:
    """Split a combined response into (product, social); social may be empty."""
    product, _, social = (text or "").partition(SECTION_SEPARATOR)
    return product.strip(), social.strip()


def random_selector(
    providers: Sequence[ContentProvider],
    rng: Optional[random.Random] = None,
) -> ContentSelector:
    """
    Build a selector picking one provider uniformly per call.

    With the usual two providers this is the 50/50 coin flip: a draw
    above 0.5 picks the first provider.
    """
    if not providers:
        raise ValueError("random_selector needs at least one provider")
    rng = rng or random.Random()
    pool = list(providers)

    def select() -> ContentProvider:
        if len(pool) == 2:
            return pool[0] if rng.random() > 0.5 else pool[1]
        return pool[int(rng.random() * len(pool))]

    return select


def build_content_providers(settings: Any) -> list[ContentProvider]:
    """Instantiate both providers from DashboardSettings."""
    openai_client = openai.AsyncOpenAI(
        api_key=settings.openai.api_key or "missing",
        timeout=settings.openai.timeout,
        max_retries=0,
    )
    claude_client = anthropic.AsyncAnthropic(
        api_key=settings.claude.api_key or "missing",
        timeout=settings.claude.timeout,
        max_retries=0,
    )
    if not settings.openai.api_key:
        logger.warning("openai_not_configured: OpenAI content runs will fail")
    if not settings.claude.api_key:
        logger.warning("claude_not_configured: Claude content runs will fail")
    return [
        OpenAIContentProvider(openai_client, model=settings.openai.model),
        ClaudeContentProvider(claude_client, model=settings.claude.model),
    ]
