import os
import stat

import pytest
import yaml

from maildraft.domain.errors import ConfigurationError
from maildraft.infrastructure.config import (
    CONFIG_VERSION,
    ensure_config_exists,
    load_config,
    migrate_config,
    resolve_passwords,
    save_config,
    select_accounts,
    to_account,
)
from conftest import config_with


def _write(path, data):
    path.write_text(yaml.safe_dump(data), encoding="utf-8")


def test_missing_file_gets_default_document(tmp_path):
    path = tmp_path / "conf" / "maildraft.yaml"
    config = load_config(path)

    assert path.exists()
    assert stat.S_IMODE(os.stat(path).st_mode) == 0o600
    assert config.version == CONFIG_VERSION
    assert config.poll.interval_seconds == 300
    assert config.llm.model == "gpt-4o-mini"
    assert config.rules.global_vibe == "brief, technical, direct"
    assert config.sync.bootstrap_message_window == 200
    assert config.sync.bootstrap_thread_limit == 20
    assert config.accounts == []


def test_ensure_config_does_not_overwrite(tmp_path):
    path = tmp_path / "maildraft.yaml"
    path.write_text("version: 2\n", encoding="utf-8")
    assert ensure_config_exists(path) is False
    assert path.read_text(encoding="utf-8") == "version: 2\n"


def test_nulls_mean_defaults(tmp_path):
    path = tmp_path / "maildraft.yaml"
    _write(path, {"version": 2, "default_account_id": None, "poll": None, "rules": {"global_vibe": None}})
    config = load_config(path)
    assert config.default_account_id is None
    assert config.poll.interval_seconds == 300
    assert config.rules.global_vibe == "brief, technical, direct"


def test_poll_interval_bounds(tmp_path):
    path = tmp_path / "maildraft.yaml"
    _write(path, {"poll": {"interval_seconds": 5}})
    with pytest.raises(ConfigurationError):
        load_config(path)


def test_invalid_yaml_is_configuration_error(tmp_path):
    path = tmp_path / "maildraft.yaml"
    path.write_text("accounts: [unclosed", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_config(path)


def test_migrate_promotes_legacy_agent_switch():
    raw = {"version": 1, "llm": {"model": "m", "use_deep_agents": False}}
    migrated = migrate_config(raw)

    assert migrated["agent"]["enabled"] is False
    assert "use_deep_agents" not in migrated["llm"]
    assert migrated["version"] == CONFIG_VERSION
    assert raw["llm"]["use_deep_agents"] is False


def test_migrate_explicit_agent_setting_wins():
    migrated = migrate_config({"llm": {"use_deep_agents": False}, "agent": {"enabled": True}})
    assert migrated["agent"]["enabled"] is True
    assert "llm" not in migrated


def test_migrate_current_version_untouched():
    raw = {"version": CONFIG_VERSION, "llm": {"model": "m"}}
    assert migrate_config(raw) == raw


def test_save_and_reload_round_trip(tmp_path):
    path = tmp_path / "maildraft.yaml"
    config = config_with(rules={"ignore_domains": ["spam.io"]})
    save_config(path, config)

    assert stat.S_IMODE(os.stat(path).st_mode) == 0o600
    assert load_config(path) == config


def test_select_accounts():
    config = config_with()
    assert [a.id for a in select_accounts(config)] == ["work"]
    assert [a.id for a in select_accounts(config, "work")] == ["work"]

    with pytest.raises(ConfigurationError, match="Unknown account"):
        select_accounts(config, "nope")
    with pytest.raises(ConfigurationError, match="No accounts"):
        select_accounts(config_with(accounts=[]))


def test_to_account_and_passwords(monkeypatch):
    config = config_with()
    account = to_account(config.accounts[0])
    assert (account.host, account.port, account.secure) == ("imap.example.com", 993, True)

    monkeypatch.setenv("MAILDRAFT_WORK_PASSWORD", "s3cret")
    assert resolve_passwords(config) == {"work": "s3cret"}
