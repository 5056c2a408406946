"""Feature scanner — extract directive metadata from a .feature file.

Parses the document using **regex only** (nothing is resolved or read) to
discover:
  - ``Feature:`` title and scenario names
  - ``@background(FLAG)`` flags
  - ``@include(...)`` targets
  - ``@runOnEnv`` / ``@skipOnEnv`` flags

Malformed directives are collected as errors instead of raised, so a
catalog of many files can be built in one go.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional

from featurespec.directives.tags import (
    BACKGROUND,
    INCLUDE,
    is_feature_line,
    is_scenario_line,
    keyword_title,
    parse_tag,
)
from featurespec.errors import MalformedTag


# ═══════════════════════════════════════════════════════════════════
# Data classes
# ═══════════════════════════════════════════════════════════════════

@dataclass
class IncludeRef:
    """One ``@include`` target found in a feature."""

    feature: str
    scenario: str
    params: List[str] = field(default_factory=list)
    line_no: int = 0


@dataclass
class FeatureMetadata:
    """Structured metadata extracted from a .feature file."""

    title: str = ""
    scenarios: List[str] = field(default_factory=list)
    background_flags: List[str] = field(default_factory=list)
    includes: List[IncludeRef] = field(default_factory=list)
    run_on_flags: List[str] = field(default_factory=list)
    skip_on_flags: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def flags(self) -> List[str]:
        """Every flag name the document depends on, in first-seen order."""
        return list(dict.fromkeys(self.background_flags + self.run_on_flags + self.skip_on_flags))

    @property
    def has_directives(self) -> bool:
        return bool(self.background_flags or self.includes or self.run_on_flags or self.skip_on_flags)


# ═══════════════════════════════════════════════════════════════════
# Regex patterns
# ═══════════════════════════════════════════════════════════════════

_RUN_ON_ENV = re.compile(r"@runOnEnv\(([^)]*)\)", re.IGNORECASE)
_SKIP_ON_ENV = re.compile(r"@skipOnEnv\(([^)]*)\)", re.IGNORECASE)


# ═══════════════════════════════════════════════════════════════════
# Scanner
# ═══════════════════════════════════════════════════════════════════

def scan_feature(text: str) -> FeatureMetadata:
    """Scan a feature document and extract its directive metadata."""
    meta = FeatureMetadata()

    for line_no, line in enumerate(text.splitlines()):
        if is_feature_line(line):
            if not meta.title:
                meta.title = keyword_title(line)
            continue
        if is_scenario_line(line):
            meta.scenarios.append(keyword_title(line))
            continue

        try:
            tag = parse_tag(line, line_no)
        except MalformedTag as exc:
            meta.errors.append(str(exc))
            continue
        if tag is None:
            continue

        if tag.kind == BACKGROUND:
            _add_unique(meta.background_flags, [tag.flag])
        elif tag.kind == INCLUDE:
            meta.includes.append(IncludeRef(
                feature=tag.feature,
                scenario=tag.scenario,
                params=[key for key, _ in (tag.params or [])],
                line_no=line_no,
            ))
        else:
            for m in _RUN_ON_ENV.finditer(line):
                _add_unique(meta.run_on_flags, _split_flags(m.group(1)))
            for m in _SKIP_ON_ENV.finditer(line):
                _add_unique(meta.skip_on_flags, _split_flags(m.group(1)))

    return meta


# ═══════════════════════════════════════════════════════════════════
# Helpers
# ═══════════════════════════════════════════════════════════════════

def _split_flags(args: str) -> List[str]:
    return [a.strip() for a in args.split(",") if a.strip()]


def _add_unique(target: List[str], names: List[Optional[str]]) -> None:
    for name in names:
        if name and name not in target:
            target.append(name)
