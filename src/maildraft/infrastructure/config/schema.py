"""Mailbox configuration document models."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, model_validator

CONFIG_VERSION = 2


class ConfigModel(BaseModel):
    """Base for config sections. ``null`` in YAML means "use the default"."""

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


class ImapConfig(ConfigModel):
    host: str = Field(min_length=1)
    port: int = Field(default=993, gt=0)
    secure: bool = True
    username: str = Field(min_length=1)
    auth: Literal["password", "oauth2"] = "password"
    password_env: str | None = None


class AccountConfig(ConfigModel):
    id: str = Field(min_length=1)
    email: str = Field(min_length=3, pattern=r"^[^@\s]+@[^@\s]+$")
    provider: Literal["gmail", "generic"] = "generic"
    imap: ImapConfig


class StyleRule(ConfigModel):
    match: str = Field(min_length=1)
    vibe: str = Field(min_length=1)


class PollConfig(ConfigModel):
    interval_seconds: int = Field(default=300, ge=30, le=86400)


class LlmConfig(ConfigModel):
    model: str = Field(default="gpt-4o-mini", min_length=1)
    temperature: float = Field(default=0.3, ge=0.0, le=2.0)


class AgentConfig(ConfigModel):
    enabled: bool = True
    producer: str = "agent"
    fallback: str = "llm"


class RulesConfig(ConfigModel):
    ignore_senders: list[str] = Field(default_factory=list)
    ignore_domains: list[str] = Field(default_factory=list)
    global_vibe: str = "brief, technical, direct"
    styles: list[StyleRule] = Field(default_factory=list)


class SyncConfig(ConfigModel):
    bootstrap_message_window: int = Field(default=200, ge=0)
    bootstrap_thread_limit: int = Field(default=20, ge=0)


class MailDraftConfig(ConfigModel):
    """Root of the YAML document."""

    version: int = CONFIG_VERSION
    default_account_id: str | None = None
    poll: PollConfig = Field(default_factory=PollConfig)
    llm: LlmConfig = Field(default_factory=LlmConfig)
    agent: AgentConfig = Field(default_factory=AgentConfig)
    rules: RulesConfig = Field(default_factory=RulesConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)
    accounts: list[AccountConfig] = Field(default_factory=list)
