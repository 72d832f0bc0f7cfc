"""Anthropic client used as the generative cadence planner."""

import os
from typing import Optional

import anthropic
import structlog

from leadcadence.core.config import PlannerConfig

log = structlog.get_logger()


class AnthropicPlannerClient:
    """Sends a prompt to Claude and returns the text answer."""

    def __init__(self, config: Optional[PlannerConfig] = None, api_key: Optional[str] = None):
        self.config = config or PlannerConfig()
        self.client = anthropic.AsyncAnthropic(
            api_key=api_key or os.getenv("ANTHROPIC_API_KEY"),
            timeout=self.config.timeout_seconds,
        )

    async def complete(self, prompt: str) -> str:
        """Return the first text block of the reply, or "" if there is none."""
        message = await self.client.messages.create(
            model=self.config.model,
            max_tokens=self.config.max_tokens,
            messages=[{"role": "user", "content": prompt}],
        )

        for block in message.content:
            if getattr(block, "type", None) == "text":
                return block.text

        log.warning("planner_no_text_block", model=self.config.model)
        return ""
