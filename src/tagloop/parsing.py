"""Extraction of action invocations from raw model output.

The model is asked to call actions using a tag notation:

    <name attr="value" ...>payload</name>

This is not a markup parser. The scan is a single left-to-right pass that
never raises, skips anything it cannot make sense of, and always moves
forward, so any input (empty, truncated, unbalanced) terminates.

Known limitation: tags are not nested. When a matched tag's body starts
with '<', the payload is dropped and the scan resumes after the closing
tag, so inner tags in that span are not recovered.

Attribute keys are runs of non-whitespace characters, so keys with internal
spaces are not supported: `<a my key="v">` reads as `key="v"`. An unquoted
sibling such as `x=1` in `<a x=1 y="2">` is dropped on its own without
swallowing the next key.

Tag names never contain '<': in `<x<y>` the scan abandons `<x` and retries
from `<y>`. Together with a one-time index of closing tags this keeps the
scan near-linear on floods of unmatched openings.
"""

import logging
import re
from bisect import bisect_left
from typing import Optional

from tagloop.constants import (
    ATTRIBUTE_PATTERN,
    CLOSE_TAG_PATTERN,
    NAME_TERMINATOR_PATTERN,
)
from tagloop.types import Invocation

logger = logging.getLogger(__name__)

ATTRIBUTE_RE = re.compile(ATTRIBUTE_PATTERN)
NAME_TERMINATOR_RE = re.compile(NAME_TERMINATOR_PATTERN)
CLOSE_TAG_RE = re.compile(CLOSE_TAG_PATTERN)


# =============================================================================
# Scan steps
# =============================================================================


def find_tag_open(text: str, pos: int) -> Optional[int]:
    """Return the index of the next '<' at or after pos, or None."""
    idx = text.find("<", pos)
    return idx if idx != -1 else None


def find_name_terminator(text: str, open_idx: int) -> Optional[int]:
    """Return the index of the first '>', ' ' or '<' after the '<' at open_idx."""
    match = NAME_TERMINATOR_RE.search(text, open_idx + 1)
    return match.start() if match else None


def find_tag_end(text: str, open_idx: int) -> Optional[int]:
    """Return the index of the '>' closing the opening tag at open_idx."""
    idx = text.find(">", open_idx + 1)
    return idx if idx != -1 else None


def index_closing_tags(text: str) -> dict[str, list[int]]:
    """Map each closing tag name to the ascending indexes where it occurs."""
    index: dict[str, list[int]] = {}
    for match in CLOSE_TAG_RE.finditer(text):
        index.setdefault(match.group("name"), []).append(match.start())
    return index


def find_matching_close(
    text: str,
    name: str,
    pos: int,
    index: Optional[dict[str, list[int]]] = None,
) -> Optional[int]:
    """Return the index of the literal '</name>' at or after pos, or None.

    With an index from index_closing_tags the lookup is a binary search
    instead of a scan of the remaining text.
    """
    if index is None:
        idx = text.find(f"</{name}>", pos)
        return idx if idx != -1 else None

    positions = index.get(name)
    if not positions:
        return None
    i = bisect_left(positions, pos)
    return positions[i] if i < len(positions) else None


def parse_attributes(attr_text: str) -> Optional[dict[str, str]]:
    """Parse repeated key="value" pairs.

    Fragments that do not match are dropped. Later duplicates win.

    Returns:
        The attributes, or None if none could be parsed.
    """
    attributes = {}
    for match in ATTRIBUTE_RE.finditer(attr_text):
        attributes[match.group("key")] = match.group("value").strip()
    return attributes or None


def extract_payload(body: str) -> Optional[str]:
    """Trim a tag body, returning None if it is empty or starts with '<'."""
    payload = body.strip()
    if not payload or payload.startswith("<"):
        return None
    return payload


# =============================================================================
# Scanner
# =============================================================================


class _Scanner:
    """Cursor over model output that yields invocations one at a time."""

    def __init__(self, text: str):
        self.text = text
        self.pos = 0
        self.skipped = 0
        self._closing_tags = index_closing_tags(text)
        # first '>' at or after the last lookup, reused while still ahead
        self._next_tag_end: Optional[int] = None

    def next_invocation(self) -> Optional[Invocation]:
        """Advance to and return the next invocation, or None at end of text."""
        while True:
            open_idx = find_tag_open(self.text, self.pos)
            if open_idx is None:
                self.pos = len(self.text)
                return None

            invocation = self._match_at(open_idx)
            if invocation is not None:
                return invocation
            if self.pos == len(self.text):
                return None

            # abandon this '<' and move on by one character
            self.skipped += 1
            self.pos = open_idx + 1

    def _exhaust(self) -> None:
        self.skipped += 1
        self.pos = len(self.text)

    def _find_tag_end(self, open_idx: int) -> Optional[int]:
        if self._next_tag_end is None or self._next_tag_end <= open_idx:
            self._next_tag_end = find_tag_end(self.text, open_idx)
        return self._next_tag_end

    def _match_at(self, open_idx: int) -> Optional[Invocation]:
        text = self.text

        # No terminator or no '>' after this '<' means none after any later
        # '<' either, so nothing further can match.
        name_end = find_name_terminator(text, open_idx)
        if name_end is None:
            self._exhaust()
            return None
        if text[name_end] == "<":
            return None
        name = text[open_idx + 1:name_end]
        if not name:
            return None

        tag_end = self._find_tag_end(open_idx)
        if tag_end is None:
            self._exhaust()
            return None

        close_idx = find_matching_close(text, name, tag_end + 1, self._closing_tags)
        if close_idx is None:
            return None

        attributes = None
        if text[name_end] == " ":
            attributes = parse_attributes(text[name_end + 1:tag_end])

        payload = extract_payload(text[tag_end + 1:close_idx])

        self.pos = close_idx + len(name) + 3
        return Invocation(action=name, attributes=attributes, payload=payload)


# =============================================================================
# Public API
# =============================================================================


def parse_model_response(text: str) -> list[Invocation]:
    """Extract every well-formed invocation from model output.

    Args:
        text: Raw model output.

    Returns:
        Invocations in order of appearance. Never raises on malformed
        input; unparsable fragments are skipped.
    """
    invocations = []
    if not text:
        return invocations

    scanner = _Scanner(text)
    while True:
        invocation = scanner.next_invocation()
        if invocation is None:
            break
        invocations.append(invocation)

    logger.debug(
        "parsed %d invocation(s), skipped %d unmatched '<'",
        len(invocations),
        scanner.skipped,
    )
    return invocations
