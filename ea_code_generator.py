"""
Expert Advisor generator.

Hands a compiled strategy prompt to the configured AI provider as a single
message and returns the model's answer together with the MQL5 source it
contains.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, Optional

from ai_providers import AIProvider
from ea_prompts import SYSTEM_INSTRUCTION
from strategy_builder import StrategyBuilder
from strategy_prompt_compiler import RiskParameters, StrategyMetadata

logger = logging.getLogger(__name__)

_FENCED_BLOCK = re.compile(r"^```([^\n`]*)\n(.*?)^```[ \t\r]*$", re.DOTALL | re.MULTILINE)
_FALLBACK_TAGS = ("", "mql", "cpp")


def extract_mql5_code(response_text: str) -> Optional[str]:
    """Return the first fenced code block of the response, preferring ```mql5 fences."""
    blocks = [(tag.strip().lower(), body) for tag, body in _FENCED_BLOCK.findall(response_text)]
    tagged = [body for tag, body in blocks if tag == "mql5"]
    fallback = [body for tag, body in blocks if tag in _FALLBACK_TAGS]
    candidates = tagged or fallback
    if not candidates:
        return None
    return candidates[0].strip() or None


class EACodeGenerator:
    """Submits compiled strategy specifications to the configured AI provider."""

    def __init__(self, ai_provider: AIProvider, system_instruction: str = SYSTEM_INSTRUCTION):
        self.ai_provider = ai_provider
        self.system_instruction = system_instruction

    async def submit_specification(self, text: str) -> Dict[str, Any]:
        if not text.strip():
            raise ValueError("Cannot submit an empty strategy specification")

        logger.info("Submitting strategy specification (%d chars)", len(text))
        response_text = await self.ai_provider.generate(
            system_prompt=self.system_instruction,
            user_prompt=text,
        )

        if not response_text or not response_text.strip():
            raise ValueError("AI provider returned an empty response")

        code = extract_mql5_code(response_text)
        if code is None:
            logger.warning("Response contained no MQL5 code block")

        return {
            "response": response_text,
            "mql5_code": code,
        }

    async def generate_from_builder(
        self,
        builder: StrategyBuilder,
        metadata: StrategyMetadata,
        risk: RiskParameters,
    ) -> Dict[str, Any]:
        prompt = builder.compile(metadata, risk)
        result = await self.submit_specification(prompt)
        result["prompt"] = prompt
        return result
