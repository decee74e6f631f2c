"""Ordered literal substitution over file contents.

Two rule classes exist:

* ``SubstitutionRule`` -- literal find/replace, optionally case-insensitive.
  The replacement text is inserted verbatim.
* ``MarkerBlockRule`` -- finds ``start_mark ... end_mark`` regions and either
  excises them (markers included) or strips just the markers.

Rules are applied one after another to the evolving buffer, so a later rule
sees text introduced by an earlier one.  Rule order is part of the contract.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Union

from crudgen.errors import UnbalancedMarkerError


@dataclass(frozen=True)
class SubstitutionRule:
    """Replace every occurrence of ``match_text`` with ``replacement_text``."""

    match_text: str
    replacement_text: str
    case_sensitive: bool = True

    def __post_init__(self) -> None:
        if not self.match_text:
            raise ValueError("SubstitutionRule.match_text must not be empty")

    def apply(self, content: str, path: str = "") -> str:
        if self.case_sensitive:
            return content.replace(self.match_text, self.replacement_text)
        pattern = re.compile(re.escape(self.match_text), re.IGNORECASE)
        return pattern.sub(lambda _m: self.replacement_text, content)


@dataclass(frozen=True)
class Segment:
    """A piece of scanned content; ``marked`` segments include their markers."""

    text: str
    marked: bool = False


@dataclass(frozen=True)
class MarkerBlockRule:
    """Delete (or unwrap) every ``start_mark ... end_mark`` block."""

    start_mark: str
    end_mark: str
    keep_content: bool = False

    def __post_init__(self) -> None:
        if not self.start_mark or not self.end_mark:
            raise ValueError("MarkerBlockRule markers must not be empty")

    def apply(self, content: str, path: str = "") -> str:
        out: list[str] = []
        for seg in scan_marker_blocks(content, self.start_mark, self.end_mark, path):
            if not seg.marked:
                out.append(seg.text)
            elif self.keep_content:
                out.append(seg.text[len(self.start_mark) : len(seg.text) - len(self.end_mark)])
        return "".join(out)


Rule = Union[SubstitutionRule, MarkerBlockRule]


def scan_marker_blocks(
    content: str, start_mark: str, end_mark: str, path: str = ""
) -> list[Segment]:
    """Tokenize *content* into literal and marked segments.

    Each marked segment runs from an occurrence of *start_mark* through the
    next occurrence of *end_mark*, both included.  Concatenating all segment
    texts yields *content* unchanged.

    Raises:
        UnbalancedMarkerError: A start mark has no following end mark, or an
            end mark appears outside any block.
    """
    segments: list[Segment] = []
    pos = 0
    while True:
        start = content.find(start_mark, pos)
        literal_end = len(content) if start == -1 else start
        literal = content[pos:literal_end]
        if end_mark in literal:
            raise UnbalancedMarkerError(end_mark, path)
        if literal:
            segments.append(Segment(literal))
        if start == -1:
            return segments

        end = content.find(end_mark, start + len(start_mark))
        if end == -1:
            raise UnbalancedMarkerError(start_mark, path)
        block_end = end + len(end_mark)
        segments.append(Segment(content[start:block_end], marked=True))
        pos = block_end


def transform(content: str, rules: Sequence[Rule], path: str = "") -> str:
    """Apply *rules* in order to *content*.

    Args:
        content: Original file content.
        rules: Ordered substitution and marker rules.
        path: Relative path of the file, used in error messages.
    """
    for rule in rules:
        content = rule.apply(content, path)
    return content


def transform_path(path: str, rules: Sequence[Rule]) -> str:
    """Apply the literal rules of *rules* to a relative file path.

    Marker rules only concern file contents and are skipped.
    """
    for rule in rules:
        if isinstance(rule, SubstitutionRule):
            path = rule.apply(path)
    return path
