"""Load, migrate and save the YAML mailbox configuration."""

from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Any, Optional

import yaml
from loguru import logger
from pydantic import ValidationError

from maildraft.domain.errors import ConfigurationError
from maildraft.domain.models import Account
from maildraft.infrastructure.config.schema import CONFIG_VERSION, AccountConfig, MailDraftConfig

DEFAULT_CONFIG_TEXT = f"""version: {CONFIG_VERSION}
poll:
  interval_seconds: 300
llm:
  model: gpt-4o-mini
  temperature: 0.3
agent:
  enabled: true
  producer: agent
  fallback: llm
rules:
  ignore_senders: []
  ignore_domains: []
  global_vibe: brief, technical, direct
  styles: []
sync:
  bootstrap_message_window: 200
  bootstrap_thread_limit: 20
accounts: []
"""


def migrate_config(raw: dict[str, Any]) -> dict[str, Any]:
    """
    Bring a parsed document up to the current version.

    Pure: the input is not modified. Version 1 documents kept the agent switch
    under ``llm.use_deep_agents``; it moves to ``agent.enabled`` unless that is
    already set explicitly.
    """
    doc = copy.deepcopy(raw) if raw else {}
    version = doc.get("version") or 1

    if version < 2:
        llm = doc.get("llm") or {}
        legacy = llm.pop("use_deep_agents", None)
        if legacy is not None:
            agent = doc.get("agent") or {}
            if agent.get("enabled") is None:
                agent["enabled"] = bool(legacy)
            doc["agent"] = agent
        if llm:
            doc["llm"] = llm
        else:
            doc.pop("llm", None)

    doc["version"] = CONFIG_VERSION
    return doc


def ensure_config_exists(path: Path, force: bool = False) -> bool:
    """Write the default document when ``path`` is missing. Returns True if written."""
    path = Path(path)
    if path.exists() and not force:
        return False

    path.parent.mkdir(parents=True, exist_ok=True)
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        f.write(DEFAULT_CONFIG_TEXT)
    logger.info(f"Wrote default configuration to {path}")
    return True


def load_config(path: Path) -> MailDraftConfig:
    """Read, migrate and validate the configuration at ``path``."""
    path = Path(path)
    ensure_config_exists(path)

    try:
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

    if raw is not None and not isinstance(raw, dict):
        raise ConfigurationError(f"Configuration root in {path} must be a mapping")

    try:
        return MailDraftConfig.model_validate(migrate_config(raw or {}))
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration in {path}: {e}") from e


def save_config(path: Path, config: MailDraftConfig) -> None:
    """Write ``config`` back to ``path`` with owner-only permissions."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = config.model_dump(mode="json", exclude_none=True)

    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)


def select_accounts(config: MailDraftConfig, account_id: Optional[str] = None) -> list[AccountConfig]:
    """Accounts a cycle should visit, in configuration order."""
    if not config.accounts:
        raise ConfigurationError("No accounts configured")

    if account_id is None:
        return list(config.accounts)

    for account in config.accounts:
        if account.id == account_id:
            return [account]
    raise ConfigurationError(f"Unknown account id: {account_id}")


def to_account(config: AccountConfig) -> Account:
    return Account(
        id=config.id,
        email=config.email.lower(),
        provider=config.provider,
        host=config.imap.host,
        port=config.imap.port,
        secure=config.imap.secure,
        username=config.imap.username,
        auth=config.imap.auth,
    )


def resolve_passwords(config: MailDraftConfig) -> dict[str, str]:
    """Map account id to the IMAP password read from its ``password_env`` variable."""
    passwords: dict[str, str] = {}
    for account in config.accounts:
        env_name = account.imap.password_env or f"MAILDRAFT_{account.id.upper().replace('-', '_')}_PASSWORD"
        value = os.getenv(env_name)
        if value:
            passwords[account.id] = value
        else:
            logger.warning(f"No password in ${env_name} for account {account.id}")
    return passwords
