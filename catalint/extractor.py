"""Section extractor for version-catalog documents.

Splits raw catalog text into ``(section, key, value)`` entries. Only the
subset of TOML that version catalogs use is recognized:

- ``[name]`` section headers
- scalar assignments (all four quoting styles, plus bare numbers/booleans)
- inline tables, possibly spanning lines and possibly nested
  (``version = { strictly = "1.0" }`` is flattened to ``version.strictly``)
- arrays of strings, possibly spanning lines

Anything that breaks this structure raises TomlSyntaxError; no partial
result is produced for a broken document.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Union

from catalint.errors import DuplicateSectionError, TomlSyntaxError

logger = logging.getLogger(__name__)

_BARE_SCALAR_PATTERN = re.compile(r"^[A-Za-z0-9_.:+-]+$")
_SCALAR_TERMINATORS = frozenset(",}]#\n\r")
_INLINE_WHITESPACE = frozenset(" \t")

_ESCAPES = {
    "b": "\b",
    "t": "\t",
    "n": "\n",
    "f": "\f",
    "r": "\r",
    '"': '"',
    "\\": "\\",
}


@dataclass(frozen=True)
class InlineTable:
    """An inline table, with fields kept in source order.

    Duplicate field names are preserved so the model builder can report them.
    """

    fields: tuple[tuple[str, Value], ...] = ()

    def get(self, name: str) -> Value | None:
        """Return the first value bound to ``name``, or None."""
        for key, value in self.fields:
            if key == name:
                return value
        return None

    def keys(self) -> list[str]:
        """Field names in source order, duplicates included."""
        return [key for key, _ in self.fields]

    def duplicate_fields(self) -> list[str]:
        """Field names that appear more than once (one entry per extra occurrence)."""
        seen: set[str] = set()
        duplicates: list[str] = []
        for key in self.keys():
            if key in seen:
                duplicates.append(key)
            seen.add(key)
        return duplicates


Value = Union[str, InlineTable, tuple[str, ...]]


@dataclass(frozen=True)
class RawEntry:
    """A single key assignment as it appears in the document.

    Attributes:
        section: Name of the enclosing section ("" before the first header).
        key: The assigned key, dotted parts joined with ".".
        value: Normalized string, InlineTable or tuple of strings.
        line: 1-based line number of the key.
    """

    section: str
    key: str
    value: Value
    line: int


@dataclass(frozen=True)
class ExtractedDocument:
    """Sections and entries extracted from a catalog document."""

    sections: tuple[str, ...] = ()
    entries: tuple[RawEntry, ...] = field(default_factory=tuple)


class _Scanner:
    """Character cursor over the document with line tracking."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0
        self.line = 1

    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def peek(self) -> str:
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def startswith(self, token: str) -> bool:
        return self.text.startswith(token, self.pos)

    def advance(self, count: int = 1) -> str:
        chunk = self.text[self.pos : self.pos + count]
        self.line += chunk.count("\n")
        self.pos += len(chunk)
        return chunk

    def skip_inline_whitespace(self) -> None:
        while self.peek() in _INLINE_WHITESPACE and not self.at_end():
            self.pos += 1

    def skip_comment(self) -> None:
        if self.peek() == "#":
            end = self.text.find("\n", self.pos)
            self.pos = len(self.text) if end == -1 else end

    def skip_blank(self) -> None:
        """Skip whitespace, newlines and comments."""
        while not self.at_end():
            char = self.peek()
            if char in _INLINE_WHITESPACE or char == "\r":
                self.pos += 1
            elif char == "\n":
                self.advance()
            elif char == "#":
                self.skip_comment()
            else:
                return

    def expect_line_end(self, what: str) -> None:
        self.skip_inline_whitespace()
        self.skip_comment()
        if self.peek() == "\r":
            self.pos += 1
        if self.at_end():
            return
        if self.peek() != "\n":
            raise self.error(f"Unexpected text after {what}")
        self.advance()

    def error(self, reason: str, line: int | None = None) -> TomlSyntaxError:
        return TomlSyntaxError(reason, line=self.line if line is None else line)


def extract_entries(text: str) -> ExtractedDocument:
    """Split catalog text into sections and key/value entries.

    Args:
        text: Full catalog document.

    Returns:
        ExtractedDocument with headers in order and every assignment.

    Raises:
        TomlSyntaxError: If the structure cannot be parsed unambiguously.
        DuplicateSectionError: If a section header is declared twice.
    """
    if text.startswith("\ufeff"):
        text = text[1:]

    scanner = _Scanner(text)
    sections: list[str] = []
    entries: list[RawEntry] = []
    current = ""

    while True:
        scanner.skip_blank()
        if scanner.at_end():
            break

        if scanner.peek() == "[":
            header_line = scanner.line
            current = _parse_header(scanner)
            if current in sections:
                raise DuplicateSectionError(current, line=header_line)
            sections.append(current)
            continue

        key_line = scanner.line
        key = _parse_key(scanner)
        scanner.skip_inline_whitespace()
        if scanner.peek() != "=":
            raise scanner.error(f"Expected '=' after key '{key}'")
        scanner.advance()
        scanner.skip_inline_whitespace()
        value = _parse_value(scanner)
        scanner.expect_line_end(f"value of '{key}'")
        entries.append(RawEntry(section=current, key=key, value=value, line=key_line))

    logger.debug("Extracted %d entries from %d sections", len(entries), len(sections))
    return ExtractedDocument(sections=tuple(sections), entries=tuple(entries))


def _parse_header(scanner: _Scanner) -> str:
    scanner.advance()  # [
    if scanner.peek() == "[":
        raise scanner.error("Arrays of tables are not supported in version catalogs")
    end = scanner.text.find("]", scanner.pos)
    newline = scanner.text.find("\n", scanner.pos)
    if end == -1 or (newline != -1 and newline < end):
        stop = len(scanner.text) if newline == -1 else newline
        fragment = scanner.text[scanner.pos : stop].strip()
        raise scanner.error(f"Unterminated section header: [{fragment}")
    name = scanner.text[scanner.pos : end].strip()
    if not name:
        raise scanner.error("Empty section header: []")
    scanner.advance(end + 1 - scanner.pos)
    scanner.expect_line_end(f"section header [{name}]")
    return name


def _parse_key(scanner: _Scanner) -> str:
    parts = [_parse_simple_key(scanner)]
    while True:
        scanner.skip_inline_whitespace()
        if scanner.peek() != ".":
            break
        scanner.advance()
        scanner.skip_inline_whitespace()
        parts.append(_parse_simple_key(scanner))
    return ".".join(parts)


def _parse_simple_key(scanner: _Scanner) -> str:
    char = scanner.peek()
    if char == '"':
        return _parse_basic_string(scanner)
    if char == "'":
        return _parse_literal_string(scanner)
    start = scanner.pos
    while not scanner.at_end() and (scanner.peek().isalnum() or scanner.peek() in "_-"):
        scanner.pos += 1
    if scanner.pos == start:
        found = scanner.peek() or "end of file"
        raise scanner.error(f"Expected a key but found '{found}'")
    return scanner.text[start : scanner.pos]


def _parse_value(scanner: _Scanner) -> Value:
    if scanner.startswith('"""'):
        return _parse_multiline_string(scanner, '"""')
    if scanner.startswith("'''"):
        return _parse_multiline_string(scanner, "'''")
    char = scanner.peek()
    if char == '"':
        return _parse_basic_string(scanner)
    if char == "'":
        return _parse_literal_string(scanner)
    if char == "{":
        return _parse_inline_table(scanner)
    if char == "[":
        return _parse_array(scanner)
    return _parse_bare_scalar(scanner)


def _parse_bare_scalar(scanner: _Scanner) -> str:
    start = scanner.pos
    while not scanner.at_end() and scanner.peek() not in _SCALAR_TERMINATORS:
        scanner.pos += 1
    token = scanner.text[start : scanner.pos].strip()
    if not token:
        raise scanner.error("Missing value")
    if not _BARE_SCALAR_PATTERN.match(token):
        raise scanner.error(f"Invalid value: {token}")
    return token


def _parse_basic_string(scanner: _Scanner) -> str:
    start_line = scanner.line
    scanner.advance()  # "
    chars: list[str] = []
    while True:
        if scanner.at_end() or scanner.peek() == "\n":
            raise scanner.error("Unterminated string", line=start_line)
        char = scanner.advance()
        if char == '"':
            return "".join(chars)
        if char == "\\":
            chars.append(_parse_escape(scanner))
        else:
            chars.append(char)


def _parse_escape(scanner: _Scanner) -> str:
    code = scanner.advance()
    if code in _ESCAPES:
        return _ESCAPES[code]
    if code in ("u", "U"):
        width = 4 if code == "u" else 8
        digits = scanner.advance(width)
        try:
            codepoint = int(digits, 16)
        except ValueError:
            raise scanner.error(f"Invalid unicode escape: \\{code}{digits}") from None
        # Only Unicode scalar values; surrogates cannot be encoded as UTF-8
        if not 0 <= codepoint <= 0x10FFFF or 0xD800 <= codepoint <= 0xDFFF:
            raise scanner.error(f"Invalid unicode escape: \\{code}{digits}")
        return chr(codepoint)
    # Unknown escapes are kept literally
    return "\\" + code


def _parse_literal_string(scanner: _Scanner) -> str:
    start_line = scanner.line
    scanner.advance()  # '
    start = scanner.pos
    end = scanner.text.find("'", start)
    newline = scanner.text.find("\n", start)
    if end == -1 or (newline != -1 and newline < end):
        raise scanner.error("Unterminated string", line=start_line)
    scanner.advance(end + 1 - start)
    return scanner.text[start:end]


def _parse_multiline_string(scanner: _Scanner, delimiter: str) -> str:
    start_line = scanner.line
    scanner.advance(len(delimiter))
    end = scanner.text.find(delimiter, scanner.pos)
    if end == -1:
        raise scanner.error("Unterminated multi-line string", line=start_line)
    raw = scanner.text[scanner.pos : end]
    scanner.advance(end + len(delimiter) - scanner.pos)
    if delimiter == '"""':
        raw = _unescape(raw)
    # Surrounding whitespace (including the newline after the opening quotes)
    # is not part of a catalog value
    return raw.strip()


def _unescape(raw: str) -> str:
    inner = _Scanner(raw)
    chars: list[str] = []
    while not inner.at_end():
        char = inner.advance()
        chars.append(_parse_escape(inner) if char == "\\" else char)
    return "".join(chars)


def _parse_inline_table(scanner: _Scanner) -> InlineTable:
    start_line = scanner.line
    scanner.advance()  # {
    fields: list[tuple[str, Value]] = []
    scanner.skip_blank()
    if scanner.peek() == "}":
        scanner.advance()
        return InlineTable()

    while True:
        if scanner.at_end():
            raise scanner.error("Unterminated inline table", line=start_line)
        name = _parse_key(scanner)
        scanner.skip_inline_whitespace()
        if scanner.peek() != "=":
            raise scanner.error(f"Expected '=' after field '{name}' in inline table")
        scanner.advance()
        scanner.skip_inline_whitespace()
        value = _parse_value(scanner)
        if isinstance(value, InlineTable):
            fields.extend((f"{name}.{inner}", inner_value) for inner, inner_value in value.fields)
        else:
            fields.append((name, value))

        scanner.skip_blank()
        char = scanner.peek()
        if char == ",":
            scanner.advance()
            scanner.skip_blank()
            if scanner.peek() == "}":
                scanner.advance()
                break
            continue
        if char == "}":
            scanner.advance()
            break
        if scanner.at_end():
            raise scanner.error("Unterminated inline table", line=start_line)
        raise scanner.error(f"Expected ',' or '}}' after field '{name}' in inline table")

    return InlineTable(fields=tuple(fields))


def _parse_array(scanner: _Scanner) -> tuple[str, ...]:
    start_line = scanner.line
    scanner.advance()  # [
    items: list[str] = []
    while True:
        scanner.skip_blank()
        if scanner.at_end():
            raise scanner.error("Unterminated array", line=start_line)
        if scanner.peek() == "]":
            scanner.advance()
            break
        if scanner.peek() in "{[":
            raise scanner.error("Only arrays of strings are supported")
        items.append(_parse_value(scanner))  # type: ignore[arg-type]

        scanner.skip_blank()
        char = scanner.peek()
        if char == ",":
            scanner.advance()
            continue
        if char == "]":
            scanner.advance()
            break
        if scanner.at_end():
            raise scanner.error("Unterminated array", line=start_line)
        raise scanner.error("Expected ',' or ']' in array")

    return tuple(items)
