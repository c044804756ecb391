"""Catalog model and .po text codec.

Parsing is lenient: lines that are neither blank, comments, ``msgid``/``msgstr``
keywords nor quoted continuations are skipped without raising.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

COMMENT_MARKER = '#'
MSGID_KEYWORD = 'msgid '
MSGSTR_KEYWORD = 'msgstr '


@dataclass
class CatalogEntry:
    """One translatable unit of a catalog."""
    source_id: str
    translation: str = ''
    comments: List[str] = field(default_factory=list)
    line: Optional[int] = None

    @property
    def is_pending(self) -> bool:
        """True while the entry has no real translation yet."""
        return not self.translation or self.translation == self.source_id


@dataclass
class Catalog:
    """Header metadata plus the ordered entries of one localization file."""
    header: Dict[str, str] = field(default_factory=dict)
    entries: List[CatalogEntry] = field(default_factory=list)
    header_comments: List[str] = field(default_factory=list)

    def pending_entries(self) -> List[CatalogEntry]:
        """Entries that need translation, in catalog order."""
        return [e for e in self.entries if e.source_id and e.is_pending]


def decode_string(value: str) -> str:
    """Strip surrounding quotes and unescape \\n, \\t, \\" and \\\\ (in that order).

    Because \\n is handled first, a literal backslash followed by "n"
    comes back as a backslash and a newline.
    """
    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
        return (
            value[1:-1]
            .replace('\\n', '\n')
            .replace('\\t', '\t')
            .replace('\\"', '"')
            .replace('\\\\', '\\')
        )
    return value


def escape_string(value: str) -> str:
    """Reverse of decode_string for the four recognized escape classes."""
    return (
        value
        .replace('\\', '\\\\')
        .replace('"', '\\"')
        .replace('\n', '\\n')
        .replace('\t', '\\t')
    )


def parse_header(text: str) -> Dict[str, str]:
    """Parse a newline-delimited ``key: value`` block."""
    header = {}
    for line in text.split('\n'):
        if ': ' in line:
            key, value = line.split(': ', 1)
            header[key] = value
    return header


class _CatalogParser:
    """Line-oriented accumulator used by parse_catalog."""

    def __init__(self):
        self.catalog = Catalog()
        self.comments: List[str] = []
        self.seen_msgid = False
        self.skipped_lines = 0
        self._reset_entry()

    def _reset_entry(self):
        self.source_id: Optional[str] = None
        self.translation: Optional[str] = None
        self.line: Optional[int] = None
        self.is_header = False
        self.in_msgid = False
        self.in_msgstr = False

    def _has_content(self) -> bool:
        return bool(self.source_id or self.translation or self.is_header)

    def finish_entry(self):
        if self.is_header:
            self.catalog.header = parse_header(self.translation or '')
            self.catalog.header_comments = self.comments
        elif self.source_id:
            self.catalog.entries.append(CatalogEntry(
                source_id=self.source_id,
                translation=self.translation or '',
                comments=self.comments,
                line=self.line,
            ))
        self.comments = []
        self._reset_entry()

    def feed(self, line_no: int, raw_line: str):
        line = raw_line.strip()

        if not line:
            if self._has_content():
                self.finish_entry()
            return

        if line.startswith(COMMENT_MARKER):
            self.comments.append(line)
            return

        if line.startswith(MSGID_KEYWORD):
            # Entry not separated by a blank line from the previous one
            if self.translation is not None:
                self.finish_entry()
            self.source_id = decode_string(line[len(MSGID_KEYWORD):].strip())
            self.line = line_no
            self.in_msgid, self.in_msgstr = True, False
            if not self.seen_msgid and self.source_id == '':
                self.is_header = True
            self.seen_msgid = True
            return

        if line.startswith(MSGSTR_KEYWORD):
            self.translation = decode_string(line[len(MSGSTR_KEYWORD):].strip())
            self.in_msgid, self.in_msgstr = False, True
            return

        if len(line) >= 2 and line.startswith('"') and line.endswith('"'):
            text = decode_string(line)
            if self.in_msgid:
                self.source_id = (self.source_id or '') + text
                if self.is_header and self.source_id:
                    # Multi-line msgid starting with "" is a real entry
                    self.is_header = False
            elif self.in_msgstr:
                self.translation = (self.translation or '') + text
            else:
                self.skipped_lines += 1
            return

        # msgctxt, msgid_plural, msgstr[n], garbage: skipped, and their
        # continuation lines must not leak into the previous field
        self.in_msgid = self.in_msgstr = False
        self.skipped_lines += 1

    def close(self) -> Catalog:
        if self._has_content():
            self.finish_entry()
        if self.skipped_lines:
            logger.debug(f"Skipped {self.skipped_lines} unrecognized catalog lines")
        return self.catalog


def parse_catalog(text: str) -> Catalog:
    """Parse .po catalog text into a Catalog. Never raises on malformed lines."""
    parser = _CatalogParser()
    for line_no, line in enumerate(text.split('\n'), start=1):
        parser.feed(line_no, line)
    return parser.close()


def serialize_catalog(catalog: Catalog) -> str:
    """Render the whole catalog back to .po text, preserving entry order."""
    lines = list(catalog.header_comments)
    lines.append('msgid ""')
    lines.append('msgstr ""')
    for key, value in catalog.header.items():
        lines.append(f'"{escape_string(f"{key}: {value}")}\\n"')
    lines.append('')

    for entry in catalog.entries:
        lines.extend(entry.comments)
        lines.append(f'msgid "{escape_string(entry.source_id)}"')
        lines.append(f'msgstr "{escape_string(entry.translation)}"')
        lines.append('')

    return '\n'.join(lines) + '\n'
