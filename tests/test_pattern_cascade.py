import re

from models.pattern_cascade import CascadeRule, first_validated, first_validated_rule, regex_matcher


def _upper_if_long(candidate):
    return candidate.upper() if len(candidate) >= 4 else None


def test_first_rule_that_validates_wins():
    rules = [
        CascadeRule("short", lambda text: "ab", _upper_if_long),
        CascadeRule("miss", lambda text: None, _upper_if_long),
        CascadeRule("long", lambda text: "abcd", _upper_if_long),
        CascadeRule("later", lambda text: "efgh", _upper_if_long),
    ]
    rule, value = first_validated_rule(rules, "anything")
    assert rule.name == "long"
    assert value == "ABCD"


def test_no_rule_validates():
    rules = [CascadeRule("short", lambda text: "ab", _upper_if_long)]
    assert first_validated(rules, "anything") is None
    assert first_validated([], "anything") is None


def test_regex_matcher_returns_group_or_whole_match():
    by_group = regex_matcher(r"id:\s*(\w+)", flags=re.I)
    whole = regex_matcher(r"[A-Z]{3}\d{3}")
    assert by_group("ID: abc123") == "abc123"
    assert whole("xx ABC123 yy") == "ABC123"
    assert whole("nothing") is None


def test_regex_matcher_only_considers_first_match():
    rules = [CascadeRule("num", regex_matcher(r"(\d+)"), lambda c: c if len(c) > 2 else None)]
    assert first_validated(rules, "7 then 1234") is None
