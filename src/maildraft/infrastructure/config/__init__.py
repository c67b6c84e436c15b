"""YAML mailbox configuration."""

from maildraft.infrastructure.config.loader import (
    DEFAULT_CONFIG_TEXT,
    ensure_config_exists,
    load_config,
    migrate_config,
    resolve_passwords,
    save_config,
    select_accounts,
    to_account,
)
from maildraft.infrastructure.config.schema import (
    CONFIG_VERSION,
    AccountConfig,
    AgentConfig,
    ImapConfig,
    LlmConfig,
    MailDraftConfig,
    PollConfig,
    RulesConfig,
    StyleRule,
    SyncConfig,
)

__all__ = [
    "CONFIG_VERSION",
    "DEFAULT_CONFIG_TEXT",
    "AccountConfig",
    "AgentConfig",
    "ImapConfig",
    "LlmConfig",
    "MailDraftConfig",
    "PollConfig",
    "RulesConfig",
    "StyleRule",
    "SyncConfig",
    "ensure_config_exists",
    "load_config",
    "migrate_config",
    "resolve_passwords",
    "save_config",
    "select_accounts",
    "to_account",
]
