"""First-validated-match-wins cascade over prioritised (matcher, validator) rules.

Field extraction keeps its priority lists as plain data built from these
helpers, so the ordering can be inspected and tested without any parsing.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Generic, Iterable, Optional, TypeVar, Union

T = TypeVar("T")

Matcher = Callable[[str], Optional[str]]
Validator = Callable[[str], Optional[T]]


@dataclass(frozen=True)
class CascadeRule(Generic[T]):
    name: str
    matcher: Matcher
    validator: Validator


def regex_matcher(pattern: Union[str, re.Pattern], group: int = 1, flags: int = 0) -> Matcher:
    """Build a matcher returning the first match's ``group`` (or the whole match)."""
    compiled = re.compile(pattern, flags) if isinstance(pattern, str) else pattern

    def _match(text: str) -> Optional[str]:
        m = compiled.search(text)
        if not m:
            return None
        if group and group <= (compiled.groups or 0) and m.group(group):
            return m.group(group)
        return m.group(0)

    _match.pattern = compiled  # type: ignore[attr-defined]
    return _match


def first_validated(rules: Iterable[CascadeRule[T]], text: str) -> Optional[T]:
    winner = first_validated_rule(rules, text)
    return winner[1] if winner else None


def first_validated_rule(rules: Iterable[CascadeRule[T]], text: str):
    """Return ``(rule, value)`` for the first rule whose candidate validates."""
    for rule in rules:
        candidate = rule.matcher(text)
        if candidate is None:
            continue
        value = rule.validator(candidate)
        if value is not None:
            return rule, value
    return None
