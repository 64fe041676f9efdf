"""Merge translated values into a `.lang` template without touching its layout.

A `.lang` file is a list of `key = value` entries. A value may continue on the
following physical lines while each line ends with a backslash. Comments start
with `#`. Only entries whose key is present in the replacement mapping are
rewritten; comments, blank lines, unknown lines and untouched entries (with
their continuation lines) are emitted exactly as they were read.

Replaced values are written as `key = first line` followed by the remaining
value lines as bare lines. Input continuations use backslashes, output
continuations do not; game clients read both.
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Literal

LINE_BREAK_RE = re.compile(r"\r?\n")
ENTRY_RE = re.compile(r"^\S+\s*=")
COMMENT_PREFIX = "#"
CONTINUATION_MARK = "\\"

UnitKind = Literal["blank", "entry", "other"]


@dataclass(frozen=True)
class TemplateUnit:
    kind: UnitKind
    lines: list[str]
    key: str | None = None


@dataclass
class MergeResult:
    text: str
    replaced: list[str] = field(default_factory=list)
    kept: list[str] = field(default_factory=list)
    unused: list[str] = field(default_factory=list)


def split_template_lines(text: str) -> list[str]:
    return LINE_BREAK_RE.split(text)


def is_blank_or_comment(line: str) -> bool:
    stripped = line.strip()
    return not stripped or stripped.startswith(COMMENT_PREFIX)


def entry_key(line: str) -> str | None:
    """Return the key of an entry line, or None for any other line."""
    if not ENTRY_RE.match(line):
        return None
    key, _, _ = line.partition("=")
    return key.strip()


def continues(line: str) -> bool:
    return line.strip().endswith(CONTINUATION_MARK)


def iter_units(lines: list[str]) -> Iterator[TemplateUnit]:
    """Walk physical lines forward, grouping each entry with its continuations.

    A backslash on the last line ends the block at end of input; the line is
    kept as written.
    """
    pos = 0
    total = len(lines)
    while pos < total:
        line = lines[pos]

        if is_blank_or_comment(line):
            yield TemplateUnit(kind="blank", lines=[line])
            pos += 1
            continue

        key = entry_key(line)
        if key is None:
            yield TemplateUnit(kind="other", lines=[line])
            pos += 1
            continue

        block = [line]
        pos += 1
        while continues(block[-1]) and pos < total:
            block.append(lines[pos])
            pos += 1
        yield TemplateUnit(kind="entry", lines=block, key=key)


def render_replacement(key: str, value: str) -> list[str]:
    value_lines = value.split("\n")
    return [f"{key} = {value_lines[0]}", *value_lines[1:]]


def merge_with_report(
    template: str,
    replacements: Mapping[str, str],
) -> MergeResult:
    output: list[str] = []
    replaced: list[str] = []
    kept: list[str] = []
    seen: set[str] = set()

    for unit in iter_units(split_template_lines(template)):
        if unit.kind != "entry" or unit.key is None:
            output.extend(unit.lines)
            continue

        seen.add(unit.key)
        if unit.key in replacements:
            output.extend(render_replacement(unit.key, replacements[unit.key]))
            replaced.append(unit.key)
        else:
            output.extend(unit.lines)
            kept.append(unit.key)

    unused = [key for key in replacements if key not in seen]
    return MergeResult(
        text="\n".join(output),
        replaced=replaced,
        kept=kept,
        unused=unused,
    )


def merge(template: str, replacements: Mapping[str, str]) -> str:
    """Return `template` with every entry found in `replacements` rewritten.

    Pure function: the same inputs always give the same text. Keys are
    matched exactly (case-sensitive, no trimming of mapping keys). Keys in
    `replacements` that the template never defines are ignored. Line breaks
    in the result are always `\\n`.
    """
    return merge_with_report(template, replacements).text
