"""Draft producers."""

from maildraft.application.agents.graph_producer import GraphDraftProducer
from maildraft.application.agents.llm_producer import LlmDraftProducer
from maildraft.application.agents.registry import CachedRuntime, ProducerRegistry

__all__ = [
    "CachedRuntime",
    "GraphDraftProducer",
    "LlmDraftProducer",
    "ProducerRegistry",
]
