"""Tag grammar — recognise directive tags and structural keywords per line.

Parses one line at a time using **regex only**:
  - ``@background(FLAG)`` — conditional Background block
  - ``@include(feature:PATH, scenario:NAME[, params:[k:v, ...]])`` — scenario splice
  - any other ``@tag`` line

Keyword matching is case-insensitive; scenario names and paths keep their case.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from featurespec.errors import MalformedTag

ParamSet = List[Tuple[str, str]]

BACKGROUND = "background"
INCLUDE = "include"
OTHER = "other"


# ═══════════════════════════════════════════════════════════════════
# Data classes
# ═══════════════════════════════════════════════════════════════════

@dataclass
class Tag:
    """A directive found on a single line of a feature document."""

    kind: str  # "background", "include", "other"
    line_no: int
    raw: str
    flag: Optional[str] = None
    feature: Optional[str] = None
    scenario: Optional[str] = None
    params: Optional[ParamSet] = None


# ═══════════════════════════════════════════════════════════════════
# Regex patterns
# ═══════════════════════════════════════════════════════════════════

_BACKGROUND_TAG = re.compile(r"^\s*@background\s*\((.*)\)\s*$", re.IGNORECASE)
_INCLUDE_TAG = re.compile(r"^\s*@include\s*\((.*)\)\s*$", re.IGNORECASE)
_INCLUDE_PREFIX = re.compile(r"^\s*@include(?![\w-])", re.IGNORECASE)
_BACKGROUND_PREFIX = re.compile(r"^\s*@background(?![\w-])", re.IGNORECASE)
_PARAMS_FIELD = re.compile(r",\s*params\s*:", re.IGNORECASE)
_INCLUDE_FIELDS = re.compile(
    r"^\s*feature\s*:\s*(?P<feature>[^,]*?)\s*,\s*scenario\s*:\s*(?P<scenario>.*?)\s*,?\s*$",
    re.IGNORECASE,
)

_FEATURE_LINE = re.compile(r"^\s*feature\s*:", re.IGNORECASE)
_BACKGROUND_LINE = re.compile(r"^\s*background\s*:", re.IGNORECASE)
_SCENARIO_LINE = re.compile(r"^\s*scenario(?:\s+(?:outline|template))?\s*:", re.IGNORECASE)
_OUTLINE_LINE = re.compile(r"^\s*scenario\s+(?:outline|template)\s*:", re.IGNORECASE)
_EXAMPLES_LINE = re.compile(r"^\s*(?:examples|scenarios)\s*:", re.IGNORECASE)
_BACKGROUND_END = re.compile(r"/background", re.IGNORECASE)


# ═══════════════════════════════════════════════════════════════════
# Tokenizer
# ═══════════════════════════════════════════════════════════════════

def parse_tag(line: str, line_no: int = 0) -> Optional[Tag]:
    """Classify *line* as a directive tag, or return ``None`` for non-tag lines.

    Raises:
        MalformedTag: if the line is a ``@background``/``@include`` tag whose
            arguments cannot be parsed.
    """
    if not is_tag_line(line):
        return None

    if _BACKGROUND_PREFIX.match(line):
        m = _BACKGROUND_TAG.match(line)
        if not m:
            raise MalformedTag("@background flag must be enclosed in parentheses", line, line_no)
        flag = _unquote(m.group(1).strip())
        if not flag:
            raise MalformedTag("@background needs a flag name", line, line_no)
        return Tag(kind=BACKGROUND, line_no=line_no, raw=line, flag=flag)

    if _INCLUDE_PREFIX.match(line):
        m = _INCLUDE_TAG.match(line)
        if not m:
            raise MalformedTag("@include arguments must be enclosed in parentheses", line, line_no)
        feature, scenario, params = _parse_include_args(m.group(1), line, line_no)
        return Tag(
            kind=INCLUDE,
            line_no=line_no,
            raw=line,
            feature=feature,
            scenario=scenario,
            params=params,
        )

    return Tag(kind=OTHER, line_no=line_no, raw=line)


def parse_params(text: str, raw: str = "", line_no: Optional[int] = None) -> ParamSet:
    """Parse ``k1:v1, k2:v2`` into an ordered list of ``(key, value)`` pairs."""
    if not text.strip():
        return []
    params: ParamSet = []
    for item in text.split(","):
        key, sep, value = item.partition(":")
        key = key.strip()
        if not sep or not key:
            raise MalformedTag(f"params entry {item.strip()!r} is not a key:value pair", raw or text, line_no)
        params.append((key, value.strip()))
    return params


def is_include_tag(line: str) -> bool:
    return bool(_INCLUDE_PREFIX.match(line))


def is_background_tag(line: str) -> bool:
    return bool(_BACKGROUND_PREFIX.match(line))


def include_group(lines: Sequence[str], start: int) -> int:
    """Return the index just past the run of consecutive ``@include`` lines at *start*."""
    end = start
    while end < len(lines) and is_include_tag(lines[end]):
        end += 1
    return end


# ═══════════════════════════════════════════════════════════════════
# Keyword predicates
# ═══════════════════════════════════════════════════════════════════

def is_tag_line(line: str) -> bool:
    return line.lstrip().startswith("@")


def is_feature_line(line: str) -> bool:
    return bool(_FEATURE_LINE.match(line))


def is_background_line(line: str) -> bool:
    return bool(_BACKGROUND_LINE.match(line))


def is_scenario_line(line: str) -> bool:
    """Scenario, Scenario Outline or Scenario Template header."""
    return bool(_SCENARIO_LINE.match(line))


def is_outline_line(line: str) -> bool:
    return bool(_OUTLINE_LINE.match(line))


def is_examples_line(line: str) -> bool:
    return bool(_EXAMPLES_LINE.match(line))


def is_background_end(line: str) -> bool:
    """Closing marker of a conditional block: any line containing ``/BACKGROUND``."""
    return bool(_BACKGROUND_END.search(line))


def is_blank_or_comment(line: str) -> bool:
    stripped = line.strip()
    return not stripped or stripped.startswith("#")


def keyword_title(line: str) -> str:
    """Text after the first ``:`` of a keyword line."""
    return line.partition(":")[2].strip()


def indent_of(line: str) -> str:
    return line[: len(line) - len(line.lstrip())]


# ═══════════════════════════════════════════════════════════════════
# Helpers
# ═══════════════════════════════════════════════════════════════════

def _parse_include_args(inner: str, raw: str, line_no: int) -> Tuple[str, str, Optional[ParamSet]]:
    params: Optional[ParamSet] = None
    head = inner
    m = _PARAMS_FIELD.search(inner)
    if m:
        head = inner[: m.start()]
        tail = inner[m.end():].strip()
        if not (tail.startswith("[") and tail.endswith("]")):
            raise MalformedTag("params must be a bracketed list", raw, line_no)
        params = parse_params(tail[1:-1], raw, line_no)

    fields = _INCLUDE_FIELDS.match(head)
    if not fields:
        raise MalformedTag("@include needs feature: and scenario: fields", raw, line_no)
    feature = _unquote(fields.group("feature"))
    scenario = _unquote(fields.group("scenario"))
    if not feature or not scenario:
        raise MalformedTag("@include feature and scenario must not be empty", raw, line_no)
    return feature, scenario, params


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1].strip()
    return value
