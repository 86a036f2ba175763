"""Parser for table filter rules such as ``db*.tbl`` or ``!/^x/.*``."""

from __future__ import annotations

import re

from dbtoolkit.tablefilter.matchers import (
    Matcher,
    PatternError,
    Rule,
    StringMatcher,
    new_regexp_matcher,
)

_REGEXP_RE = re.compile(r"^/(?:\\.|[^/])+/")
_DOUBLE_QUOTED_RE = re.compile(r'^"(?:""|[^"])+"')
_BACKQUOTED_RE = re.compile(r"^`(?:``|[^`])+`")
_WILDCARD_RANGE_RE = re.compile(r"^\[!?(?:\\[^0-9a-zA-Z]|[^\\\]])+\]")


class FilterParseError(ValueError):
    """A filter rule could not be parsed."""


def _is_ascii_alnum(c: str) -> bool:
    return c.isascii() and c.isalnum()


def _strip_eol(raw: str) -> str:
    if raw.endswith("\n"):
        raw = raw[:-1]
    if raw.endswith("\r"):
        raw = raw[:-1]
    return raw


class RuleParser:
    """Accumulates rules parsed from lines and imported files."""

    def __init__(self, file_name: str = "<cmdline>", line_num: int = 1) -> None:
        self.rules: list[Rule] = []
        self.file_name = file_name
        self.line_num = line_num

    def _error(self, message: str) -> FilterParseError:
        return FilterParseError(f"at {self.file_name}:{self.line_num}: {message}")

    def parse(self, line: str, can_import: bool) -> None:
        """Parse one line, appending its rule; blank lines and comments are ignored."""
        line = line.strip(" \t")
        if not line:
            return

        positive = True
        first = line[0]
        if first == "#":
            return
        if first == "!":
            positive = False
            line = line[1:]
        elif first == "@":
            if not can_import:
                raise self._error("importing filter files recursively is not allowed")
            self._import_file(line[1:])
            return

        schema, line = self.parse_pattern(line)
        if not line:
            raise self._error("missing table pattern")
        if line[0] != ".":
            raise self._error("syntax error: missing '.' between schema and table patterns")

        table, line = self.parse_pattern(line[1:])
        if line:
            raise self._error("syntax error: stray characters after table pattern")

        self.rules.append(Rule(schema=schema, table=table, positive=positive))

    def _import_file(self, file_name: str) -> None:
        try:
            handle = open(file_name, encoding="utf-8", newline="")
        except OSError as exc:
            raise self._error(
                f"cannot open filter file: open {file_name}: {exc.strerror}"
            ) from exc

        old = (self.file_name, self.line_num)
        self.file_name, self.line_num = file_name, 1
        try:
            with handle:
                for raw in handle:
                    self.parse(_strip_eol(raw), False)
                    self.line_num += 1
        except (OSError, UnicodeDecodeError) as exc:
            self.file_name, self.line_num = old
            raise self._error(f"cannot read filter file: {exc}") from exc
        self.file_name, self.line_num = old

    def _regexp_matcher(self, pattern: str) -> Matcher:
        try:
            return new_regexp_matcher(pattern)
        except PatternError as exc:
            raise self._error(f"invalid pattern: {exc}") from exc

    def parse_pattern(self, line: str) -> tuple[Matcher, str]:
        """Parse a leading pattern; return its matcher and the rest of the line."""
        if not line:
            raise self._error("syntax error: missing pattern")

        first = line[0]
        if first == "/":
            m = _REGEXP_RE.match(line)
            if m is None:
                raise self._error("syntax error: incomplete regexp")
            end = m.end()
            return self._regexp_matcher(line[1 : end - 1]), line[end:]
        if first == '"':
            m = _DOUBLE_QUOTED_RE.match(line)
            if m is None:
                raise self._error("syntax error: incomplete quoted identifier")
            end = m.end()
            return StringMatcher(line[1 : end - 1].replace('""', '"')), line[end:]
        if first == "`":
            m = _BACKQUOTED_RE.match(line)
            if m is None:
                raise self._error("syntax error: incomplete quoted identifier")
            end = m.end()
            return StringMatcher(line[1 : end - 1].replace("``", "`")), line[end:]
        return self._parse_wildcard_pattern(line)

    def _parse_wildcard_pattern(self, line: str) -> tuple[Matcher, str]:
        literal: list[str] = []
        pattern: list[str] = ["(?s)^"]
        is_literal = True
        i = 0
        while i < len(line):
            c = line[i]
            if c == "\\":
                if i == len(line) - 1:
                    raise self._error("syntax error: cannot place \\ at end of line")
                esc = line[i + 1]
                if _is_ascii_alnum(esc):
                    raise self._error(
                        f"cannot escape a letter or number (\\{esc}), "
                        "it is reserved for future extension"
                    )
                if is_literal:
                    literal.append(esc)
                if ord(esc) < 0x80:
                    pattern.append("\\")
                pattern.append(esc)
                i += 2
            elif c == ".":
                break
            elif c == "*":
                is_literal = False
                pattern.append(".*")
                i += 1
            elif c == "?":
                is_literal = False
                pattern.append(".")
                i += 1
            elif c == "[":
                is_literal = False
                m = _WILDCARD_RANGE_RE.match(line[i:])
                if m is None:
                    raise self._error("syntax error: failed to parse character class")
                end = i + m.end()
                marker = line[i + 1]
                if marker == "!":
                    pattern.append("[^" + line[i + 2 : end])
                elif marker == "^":
                    pattern.append("[\\^" + line[i + 2 : end])
                else:
                    pattern.append(line[i:end])
                i = end
            elif c in "$_" or _is_ascii_alnum(c) or ord(c) >= 0x80:
                literal.append(c)
                pattern.append(c)
                i += 1
            else:
                raise self._error(f"unexpected special character '{c}'")

        rest = line[i:]
        if is_literal:
            return StringMatcher("".join(literal)), rest
        pattern.append("$")
        return self._regexp_matcher("".join(pattern)), rest