"""Name matchers and filter rules."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass

_MATCH_EVERYTHING = "(?s)^.*$"

_UNSUPPORTED_GROUPS = ("(?<=", "(?<!", "(?P=", "(?=", "(?!", "(?(", "(?>", "(?#")


class PatternError(ValueError):
    """A regular expression pattern could not be compiled."""


class Matcher(ABC):
    """Matches a name against a pattern."""

    @abstractmethod
    def match_string(self, name: str) -> bool:
        """Whether the name matches."""

    @abstractmethod
    def match_all_strings(self) -> bool:
        """Whether every name is known to match."""

    @abstractmethod
    def to_lower(self) -> Matcher:
        """A matcher for lower-cased names."""


@dataclass(frozen=True)
class StringMatcher(Matcher):
    """Matches one literal name."""

    value: str

    def match_string(self, name: str) -> bool:
        return self.value == name

    def match_all_strings(self) -> bool:
        return False

    def to_lower(self) -> Matcher:
        return StringMatcher(self.value.lower())


@dataclass(frozen=True)
class TrueMatcher(Matcher):
    """Matches every name: the ``*`` pattern."""

    def match_string(self, name: str) -> bool:
        return True

    def match_all_strings(self) -> bool:
        return True

    def to_lower(self) -> Matcher:
        return self


class RegexpMatcher(Matcher):
    """Matches names in which a regular expression is found."""

    def __init__(self, pattern: re.Pattern[str]) -> None:
        self.pattern = pattern

    def __repr__(self) -> str:
        return f"RegexpMatcher({self.pattern.pattern!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RegexpMatcher):
            return NotImplemented
        return (self.pattern.pattern, self.pattern.flags) == (
            other.pattern.pattern,
            other.pattern.flags,
        )

    def __hash__(self) -> int:
        return hash((self.pattern.pattern, self.pattern.flags))

    def match_string(self, name: str) -> bool:
        return self.pattern.search(name) is not None

    def match_all_strings(self) -> bool:
        return False

    def to_lower(self) -> Matcher:
        return RegexpMatcher(re.compile(self.pattern.pattern, self.pattern.flags | re.IGNORECASE))


@dataclass(frozen=True)
class Rule:
    """A schema and table pattern that accepts (positive) or rejects matching tables."""

    schema: Matcher
    table: Matcher
    positive: bool


def _check_supported(pattern: str) -> None:
    """Reject constructs outside the linear-time regular expression syntax."""
    i = 0
    in_class = False
    while i < len(pattern):
        c = pattern[i]
        if c == "\\":
            nxt = pattern[i + 1 : i + 2]
            if not in_class and nxt.isdigit() and nxt != "0":
                raise PatternError(f"error parsing regexp: invalid escape sequence: `\\{nxt}`")
            i += 2
            continue
        if in_class:
            if c == "]":
                in_class = False
            i += 1
            continue
        if c == "[":
            in_class = True
            i += 1
            if pattern[i : i + 1] == "^":
                i += 1
            if pattern[i : i + 1] == "]":
                i += 1
            continue
        if c == "(" and pattern.startswith("(?", i):
            for prefix in _UNSUPPORTED_GROUPS:
                if pattern.startswith(prefix, i):
                    raise PatternError(
                        f"error parsing regexp: invalid or unsupported Perl syntax: `{prefix[:3]}`"
                    )
        i += 1


def _describe(err: re.error, pattern: str) -> str:
    fragment = pattern[err.pos :] if err.pos is not None else pattern
    msg = err.msg
    if msg.startswith("unterminated character set"):
        return f"missing closing ]: `{fragment}`"
    if msg.startswith("missing ), unterminated subpattern"):
        return f"missing closing ): `{fragment}`"
    if msg.startswith("unbalanced parenthesis"):
        return f"unexpected ): `{pattern}`"
    return f"{msg}: `{pattern}`"


def new_regexp_matcher(pattern: str) -> Matcher:
    """Build a matcher from a regular expression; ``(?s)^.*$`` matches everything."""
    if pattern == _MATCH_EVERYTHING:
        return TrueMatcher()
    _check_supported(pattern)
    try:
        compiled = re.compile(pattern)
    except re.error as err:
        raise PatternError(f"error parsing regexp: {_describe(err, pattern)}") from err
    return RegexpMatcher(compiled)