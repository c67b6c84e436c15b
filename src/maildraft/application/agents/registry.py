"""Static registry of draft producers."""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass
from typing import Callable

from langchain_core.language_models.chat_models import BaseChatModel
from loguru import logger

from maildraft.application.agents.graph_producer import GraphDraftProducer
from maildraft.application.agents.llm_producer import LlmDraftProducer
from maildraft.application.ports.draft_producer import DraftProducer
from maildraft.domain.errors import ConfigurationError
from maildraft.infrastructure.config.schema import MailDraftConfig
from maildraft.infrastructure.llm import create_llm
from maildraft.infrastructure.settings import Settings

LlmFactory = Callable[[Settings, str, float], BaseChatModel]


@dataclass
class CachedRuntime:
    """A built producer and the configuration signature it was built for."""

    signature_hash: str
    instance: DraftProducer


class ProducerRegistry:
    """
    Resolves the configured draft producer by name.

    Only producers listed in ``PRODUCERS`` exist; nothing is loaded from disk.
    The resolved producer is cached until the configuration signature changes.
    """

    PRODUCERS = ("llm", "agent")

    def __init__(
        self,
        settings: Settings,
        llm_factory: LlmFactory = create_llm,
        long_term_memory: Callable[[], list[str]] | None = None,
    ):
        self.settings = settings
        self.llm_factory = llm_factory
        self.long_term_memory = long_term_memory
        self._runtime: CachedRuntime | None = None

    def signature(self, config: MailDraftConfig) -> str:
        payload = {
            "provider": self.settings.llm_provider,
            "model": config.llm.model,
            "temperature": config.llm.temperature,
            "agent": config.agent.model_dump(),
        }
        return hashlib.sha256(json.dumps(payload, sort_keys=True).encode("utf-8")).hexdigest()

    def build(self, name: str, config: MailDraftConfig) -> DraftProducer:
        if name not in self.PRODUCERS:
            raise ConfigurationError(f"Unknown draft producer: {name}")

        llm = self.llm_factory(self.settings, config.llm.model, config.llm.temperature)
        if name == "agent":
            return GraphDraftProducer(llm, long_term_memory=self.long_term_memory)
        return LlmDraftProducer(llm)

    def resolve(self, config: MailDraftConfig) -> DraftProducer:
        """Producer for ``config``, degrading to the fallback if the primary cannot be built."""
        primary = config.agent.producer if config.agent.enabled else config.agent.fallback
        for name in (config.agent.producer, config.agent.fallback):
            if name not in self.PRODUCERS:
                raise ConfigurationError(f"Unknown draft producer: {name}")

        signature = self.signature(config)
        if self._runtime and self._runtime.signature_hash == signature:
            return self._runtime.instance

        try:
            producer = self.build(primary, config)
        except Exception as e:
            if primary == config.agent.fallback:
                raise
            logger.warning(f"Draft producer {primary} failed to build ({e}); using {config.agent.fallback}")
            return self.build(config.agent.fallback, config)

        logger.info(f"Using draft producer {producer.name} with model {config.llm.model}")
        self._runtime = CachedRuntime(signature_hash=signature, instance=producer)
        return producer

    def reset(self) -> None:
        self._runtime = None
