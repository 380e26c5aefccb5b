"""AI chat-completion gateway.

This module wraps the OpenAI-compatible gateway used for lesson plans and
document extraction. It caches one chat model per temperature and turns
gateway failures into the portal's error types. Nothing here retries.
"""

import logging
from typing import Any, Dict, List, Optional

import openai
from langchain_core.messages import BaseMessage
from langchain_openai import ChatOpenAI

from config import AI_GATEWAY_API_KEY, AI_GATEWAY_BASE_URL, AI_MAX_TOKENS, AI_MODEL
from core.exceptions import (
    AICreditsExhaustedError,
    AIRateLimitError,
    AIServiceError,
    ConfigurationError,
)

logger = logging.getLogger(__name__)

_ai_gateway_instance: Optional["AIGateway"] = None


def get_ai_gateway() -> "AIGateway":
    """Return a singleton AIGateway instance."""
    global _ai_gateway_instance
    if _ai_gateway_instance is None:
        _ai_gateway_instance = AIGateway()
    return _ai_gateway_instance


class AIGateway:
    """Forwards chat messages to the completion gateway."""

    def __init__(
        self,
        llm: Any = None,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
    ) -> None:
        """Initialize AIGateway.

        Args:
            llm: Pre-built chat model; used for every call when given.
            api_key: Bearer token for the gateway. Defaults to config.
            base_url: Gateway endpoint. Defaults to config.
            model: Model name. Defaults to config.
        """
        self.llm = llm
        self.api_key = api_key if api_key is not None else AI_GATEWAY_API_KEY
        self.base_url = base_url or AI_GATEWAY_BASE_URL
        self.model = model or AI_MODEL
        self.active_llms: Dict[str, ChatOpenAI] = {}

    def get_llm(self, temperature: float, max_tokens: int = AI_MAX_TOKENS) -> Any:
        if self.llm is not None:
            return self.llm
        if not self.api_key:
            logger.error("AI_GATEWAY_API_KEY is not configured")
            raise ConfigurationError("AI service not configured")

        cache_key = f"{temperature}:{max_tokens}"
        cached = self.active_llms.get(cache_key)
        if cached:
            return cached

        llm = ChatOpenAI(
            model=self.model,
            api_key=self.api_key,
            base_url=self.base_url,
            temperature=temperature,
            max_tokens=max_tokens,
            max_retries=0,
        )
        self.active_llms[cache_key] = llm
        return llm

    def complete(
        self,
        messages: List[BaseMessage],
        temperature: float,
        max_tokens: int = AI_MAX_TOKENS,
    ) -> str:
        """Send messages and return the text of the first choice.

        Raises:
            AIRateLimitError: On HTTP 429.
            AICreditsExhaustedError: On HTTP 402.
            AIServiceError: On any other failure or an empty completion.
            ConfigurationError: If no API key is configured.
        """
        llm = self.get_llm(temperature, max_tokens)
        try:
            response = llm.invoke(messages)
        except openai.APIStatusError as e:
            logger.error("AI gateway error: %s %s", e.status_code, e.message)
            if e.status_code == 429:
                raise AIRateLimitError() from e
            if e.status_code == 402:
                raise AICreditsExhaustedError() from e
            raise AIServiceError(f"AI service error: {e.status_code}") from e
        except openai.APIConnectionError as e:
            logger.error("AI gateway unreachable: %s", e)
            raise AIServiceError("AI service error: connection failed") from e

        content = getattr(response, "content", None)
        if isinstance(content, list):
            content = "".join(
                part.get("text", "") if isinstance(part, dict) else str(part)
                for part in content
            )
        if not content:
            logger.error("No content in AI response: %r", response)
            raise AIServiceError("No content generated")
        return content
