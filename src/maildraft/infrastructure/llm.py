"""Chat model factory for the configured LLM provider."""

from __future__ import annotations

from langchain_core.language_models.chat_models import BaseChatModel
from loguru import logger

from maildraft.domain.errors import ConfigurationError
from maildraft.infrastructure.settings import Settings

MAX_TOKENS = 1024


def create_llm(settings: Settings, model: str, temperature: float = 0.3) -> BaseChatModel:
    """Create the chat model for ``model`` on the provider chosen in settings.

    The local provider ignores ``model`` and uses the served vLLM model.
    """
    provider = settings.llm_provider

    if provider == "local":
        from langchain_openai import ChatOpenAI

        logger.info(f"Initializing local vLLM at {settings.vllm_base_url} with model {settings.vllm_model_name}")
        return ChatOpenAI(
            base_url=settings.vllm_base_url,
            api_key="not-needed",
            model_name=settings.vllm_model_name,
            temperature=temperature,
            max_tokens=MAX_TOKENS,
        )

    elif provider == "groq":
        from langchain_groq import ChatGroq

        if not settings.groq_api_key:
            raise ConfigurationError("GROQ_API_KEY is required when llm_provider=groq")

        logger.info(f"Initializing Groq LLM with model {model}")
        return ChatGroq(
            api_key=settings.groq_api_key.get_secret_value(),
            model_name=model,
            temperature=temperature,
            max_tokens=MAX_TOKENS,
        )

    elif provider == "openai":
        from langchain_openai import ChatOpenAI

        if not settings.openai_api_key:
            raise ConfigurationError("OPENAI_API_KEY is required when llm_provider=openai")

        logger.info(f"Initializing OpenAI LLM with model {model}")
        return ChatOpenAI(
            api_key=settings.openai_api_key.get_secret_value(),
            model_name=model,
            temperature=temperature,
            max_tokens=MAX_TOKENS,
        )

    elif provider == "anthropic":
        from langchain_anthropic import ChatAnthropic

        if not settings.anthropic_api_key:
            raise ConfigurationError("ANTHROPIC_API_KEY is required when llm_provider=anthropic")

        logger.info(f"Initializing Anthropic LLM with model {model}")
        return ChatAnthropic(
            api_key=settings.anthropic_api_key.get_secret_value(),
            model_name=model,
            temperature=temperature,
            max_tokens=MAX_TOKENS,
        )

    else:
        raise ConfigurationError(f"Unknown LLM provider: {provider}")
