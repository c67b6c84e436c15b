from maildraft.application.rule_engine import resolve_vibe, should_ignore
from maildraft.domain.models import RuleKind, RuleRecord
from maildraft.infrastructure.config import RulesConfig


def _rule(rule_id, kind, pattern, value="", enabled=True):
    return RuleRecord(id=rule_id, kind=kind, pattern=pattern, value=value, enabled=enabled)


def test_config_sender_exact_match():
    rules = RulesConfig(ignore_senders=["Bot@Ci.io"])
    decision = should_ignore(" bot@ci.io ", rules, [])
    assert decision.ignore
    assert "bot@ci.io" in decision.reason

    assert not should_ignore("bot@ci.io.evil", rules, []).ignore


def test_config_domain_exact_match():
    rules = RulesConfig(ignore_domains=["spam.io"])
    assert should_ignore("x@spam.io", rules, []).ignore
    assert not should_ignore("x@notspam.io.com", rules, []).ignore


def test_db_rules_match_substrings_in_order():
    rules = RulesConfig()
    db = [
        _rule("r0", RuleKind.IGNORE_SENDER, "noreply", enabled=False),
        _rule("r1", RuleKind.IGNORE_DOMAIN, "vendor"),
        _rule("r2", RuleKind.IGNORE_SENDER, "alerts"),
    ]
    assert should_ignore("alerts@vendor.com", rules, db).reason == "rule r1 matched domain"
    assert should_ignore("alerts@corp.com", rules, db).reason == "rule r2 matched sender"
    assert not should_ignore("noreply@corp.com", rules, db).ignore


def test_blank_patterns_never_match():
    db = [_rule("r1", RuleKind.IGNORE_DOMAIN, ""), _rule("r2", RuleKind.IGNORE_SENDER, "  ")]
    assert not should_ignore("localuser", RulesConfig(), db).ignore
    assert not should_ignore("a@b.io", RulesConfig(), db).ignore


def test_vibe_resolution_order():
    rules = RulesConfig(global_vibe="plain", styles=[{"match": "@boss.com", "vibe": "formal"}])
    db = [_rule("s1", RuleKind.STYLE, "friend", value="casual")]

    assert resolve_vibe("ceo@BOSS.com", rules, db) == "formal"
    assert resolve_vibe("friend@home.net", rules, db) == "casual"
    assert resolve_vibe("someone@else.org", rules, db) == "plain"
