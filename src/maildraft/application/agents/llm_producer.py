"""Draft producer that calls the chat model directly."""

from __future__ import annotations

from typing import Optional

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage
from loguru import logger

from maildraft.application.agents.prompt import SYSTEM_PROMPT, build_prompt
from maildraft.application.ports.draft_producer import DraftRequest, DraftResult
from maildraft.domain.errors import DraftProducerError


def message_text(message: BaseMessage) -> str:
    """Flatten a chat response to plain text."""
    content = message.content
    if isinstance(content, str):
        return content
    parts = []
    for part in content or []:
        if isinstance(part, str):
            parts.append(part)
        elif isinstance(part, dict) and part.get("type") == "text":
            parts.append(str(part.get("text", "")))
    return "".join(parts)


class LlmDraftProducer:
    """One system + user prompt round trip through LangChain."""

    name = "llm"

    def __init__(self, llm: BaseChatModel):
        self.llm = llm

    async def generate(self, request: DraftRequest) -> Optional[DraftResult]:
        messages = [
            SystemMessage(content=SYSTEM_PROMPT),
            HumanMessage(content=build_prompt(request)),
        ]

        try:
            response = await self.llm.ainvoke(messages)
        except Exception as e:
            raise DraftProducerError(f"LLM request failed for thread {request.thread_id}: {e}") from e

        content = message_text(response).strip()
        if not content:
            logger.warning(f"LLM returned an empty draft for thread {request.thread_id}")
            return None

        return DraftResult(content=content, model=request.model, producer=self.name)
