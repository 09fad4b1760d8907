"""Reply generation collaborators"""

from abc import ABC, abstractmethod
from typing import Optional

from loguru import logger

from engagement.core.config import settings


class ReplyGenerator(ABC):
    """
    Black-box text generation used for assistant turns.

    Implementations return the reply text. They may raise, or return an
    empty string; the caller treats both as a failed turn.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self.call_count = 0
        logger.info(f"{name} initialized")

    @abstractmethod
    async def generate(self, system_prompt: str, history: list[dict[str, str]]) -> str:
        """
        Produce the next assistant message.

        Args:
            system_prompt: Companion instructions
            history: Ordered {"role", "content"} dicts ending with the new user message
        """
        pass

    def get_stats(self) -> dict:
        return {"name": self.name, "calls": self.call_count}


class AnthropicReplyGenerator(ReplyGenerator):
    """Replies from a hosted Claude model via the Messages API"""

    def __init__(
        self,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        api_key: Optional[str] = None,
    ) -> None:
        import anthropic

        super().__init__("AnthropicReplyGenerator")
        self.model = model or settings.REPLY_MODEL
        self.max_tokens = max_tokens if max_tokens is not None else settings.REPLY_MAX_TOKENS
        self.client = anthropic.AsyncAnthropic(api_key=api_key or settings.ANTHROPIC_API_KEY or None)

    async def generate(self, system_prompt: str, history: list[dict[str, str]]) -> str:
        self.call_count += 1

        # Messages API conversations must open with a user turn
        messages = list(history)
        while messages and messages[0]["role"] != "user":
            messages.pop(0)

        message = await self.client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            system=system_prompt,
            messages=messages,
        )

        return "".join(
            block.text for block in message.content if getattr(block, "type", "") == "text"
        )
