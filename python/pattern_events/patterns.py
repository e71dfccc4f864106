"""Event name patterns.

A pattern is either a literal event name or a compiled regular
expression. Both variants expose the same two things:

- ``key``: the canonical string identity used by the registry. A literal's
  key is the name itself; a regex's key is ``/<source>/<flags>``.
- ``matches(event)``: an ``EventMatch`` when the pattern matches the event
  name, ``None`` otherwise.

Example:
    >>> to_pattern("user.created").key
    'user.created'
    >>> pattern = to_pattern(re.compile("^user.(created|deleted)$", re.I))
    >>> pattern.key
    '/^user.(created|deleted)$/i'
    >>> pattern.matches("USER.deleted").parameters
    ['deleted']
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, TypeAlias

from .exceptions import InvalidPatternError
from .types import EventMatch

# Inline-flag letters in the order Python itself renders them: (?aiLmsux)
_FLAG_LETTERS: tuple[tuple[re.RegexFlag, str], ...] = (
    (re.ASCII, "a"),
    (re.IGNORECASE, "i"),
    (re.LOCALE, "L"),
    (re.MULTILINE, "m"),
    (re.DOTALL, "s"),
    (re.VERBOSE, "x"),
)


@dataclass(frozen=True)
class LiteralPattern:
    """Matches one event name exactly."""

    name: str

    @property
    def key(self) -> str:
        return self.name

    @property
    def source(self) -> str:
        return self.name

    def matches(self, event: str) -> EventMatch | None:
        if event != self.name:
            return None
        return EventMatch(pattern=self.key, parameters=[])


@dataclass(frozen=True)
class RegexPattern:
    """Matches event names the compiled expression finds a match in.

    Parameters are capture groups 1..n of the first match; groups that did
    not take part in the match are kept as ``None`` so positions line up
    with the expression's group numbers.
    """

    regex: re.Pattern[str]

    @property
    def key(self) -> str:
        return f"/{self.regex.pattern}/{regex_flags(self.regex)}"

    @property
    def source(self) -> re.Pattern[str]:
        return self.regex

    def matches(self, event: str) -> EventMatch | None:
        found = self.regex.search(event)
        if found is None:
            return None
        return EventMatch(pattern=self.key, parameters=list(found.groups()))


EventPattern: TypeAlias = LiteralPattern | RegexPattern
PatternLike: TypeAlias = str | re.Pattern[str] | LiteralPattern | RegexPattern


def regex_flags(regex: re.Pattern[str]) -> str:
    """Render the explicit flags of a compiled pattern as inline-flag letters.

    ``re.UNICODE`` is implied for every ``str`` pattern and is not rendered.
    """
    return "".join(letter for flag, letter in _FLAG_LETTERS if regex.flags & flag)


def to_pattern(pattern: Any) -> EventPattern:
    """Normalize a user-supplied pattern into a pattern variant.

    Args:
        pattern: An event name, a compiled ``str`` regex, or an existing
            pattern variant.

    Returns:
        The matching ``LiteralPattern`` or ``RegexPattern``.

    Raises:
        InvalidPatternError: For any other input, including ``bytes`` regexes.
    """
    if isinstance(pattern, (LiteralPattern, RegexPattern)):
        return pattern
    if isinstance(pattern, str):
        return LiteralPattern(pattern)
    if isinstance(pattern, re.Pattern) and isinstance(pattern.pattern, str):
        return RegexPattern(pattern)
    raise InvalidPatternError(pattern)


def pattern_key(pattern: Any) -> str:
    """Return the canonical registry key for a pattern."""
    return to_pattern(pattern).key


__all__ = [
    "EventPattern",
    "LiteralPattern",
    "PatternLike",
    "RegexPattern",
    "pattern_key",
    "regex_flags",
    "to_pattern",
]
