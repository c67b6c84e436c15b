"""Draft producer backed by a small LangGraph state graph."""

from __future__ import annotations

import re
from typing import Any, Callable, Optional, TypedDict

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage
from langgraph.graph import END, StateGraph
from loguru import logger

from maildraft.application.agents.llm_producer import message_text
from maildraft.application.agents.prompt import AGENT_SYSTEM_PROMPT, build_agent_prompt
from maildraft.application.ports.draft_producer import DraftRequest, DraftResult
from maildraft.domain.errors import DraftProducerError

_FENCE_RE = re.compile(r"^```[\w-]*\s*\n?|\n?```\s*$")
_SUBJECT_RE = re.compile(r"^\s*subject:.*(?:\n|$)", re.IGNORECASE)


class DraftState(TypedDict):
    """State passed through the draft graph."""

    request: DraftRequest
    memory: list[str]
    draft: str


def finalise_text(text: str) -> str:
    """Strip code fences and a leading subject line from model output."""
    text = _FENCE_RE.sub("", text.strip())
    text = _SUBJECT_RE.sub("", text, count=1)
    return text.strip()


class GraphDraftProducer:
    """compose -> finalise over the configured chat model.

    ``long_term_memory`` is read once per draft and injected into the prompt.
    """

    name = "agent"

    def __init__(self, llm: BaseChatModel, long_term_memory: Callable[[], list[str]] | None = None):
        self.llm = llm
        self.long_term_memory = long_term_memory
        self._graph = None

    @property
    def graph(self):
        """Lazily build and return the compiled graph."""
        if self._graph is None:
            self._graph = self._build_graph()
        return self._graph

    def _build_graph(self):
        graph = StateGraph(DraftState)

        graph.add_node("compose", self._compose)
        graph.add_node("finalise", self._finalise)

        graph.set_entry_point("compose")
        graph.add_edge("compose", "finalise")
        graph.add_edge("finalise", END)

        return graph.compile()

    async def _compose(self, state: DraftState) -> dict[str, Any]:
        request = state["request"]
        messages = [
            SystemMessage(content=AGENT_SYSTEM_PROMPT),
            HumanMessage(content=build_agent_prompt(request, state["memory"])),
        ]
        response = await self.llm.ainvoke(messages)
        return {"draft": message_text(response)}

    async def _finalise(self, state: DraftState) -> dict[str, Any]:
        return {"draft": finalise_text(state["draft"])}

    async def generate(self, request: DraftRequest) -> Optional[DraftResult]:
        memory = self.long_term_memory() if self.long_term_memory else []

        try:
            result = await self.graph.ainvoke({"request": request, "memory": memory, "draft": ""})
        except Exception as e:
            raise DraftProducerError(f"Draft graph failed for thread {request.thread_id}: {e}") from e

        content = (result.get("draft") or "").strip()
        if not content:
            logger.warning(f"Draft graph returned no text for thread {request.thread_id}")
            return None

        logger.debug(f"Graph draft for {request.thread_id}: {content[:100]}...")
        return DraftResult(content=content, model=request.model, producer=self.name)
