"""Include resolution — splice scenarios from other features into a document.

An ``@include`` anchored above the ``Feature:`` line feeds the feature's
Background (synthesized when missing). An ``@include`` anchored above a
scenario is inserted directly above that scenario's tag block, so the
scenario's own tags still immediately precede it.

The output is assembled from index-keyed insertions over the input lines;
the input sequence itself is never edited.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Set

from featurespec.directives.extractor import ExtractedBlock, extract, resolve_feature_path
from featurespec.directives.tags import (
    Tag,
    include_group,
    indent_of,
    is_background_line,
    is_feature_line,
    is_include_tag,
    is_scenario_line,
    is_tag_line,
    parse_tag,
)
from featurespec.errors import IncludeError, MalformedTag

logger = logging.getLogger(__name__)

OnIncluded = Callable[[Tag, ExtractedBlock], None]


def resolve_includes(
    lines: Sequence[str],
    base_dir: Path,
    on_resolved: Optional[OnIncluded] = None,
    encoding: str = "utf-8",
) -> List[str]:
    """Resolve every ``@include`` anchor in *lines*.

    Relative include targets are looked up under *base_dir*. Included text
    is inserted verbatim, so ``@include`` tags inside it are left for a
    later call.

    Raises:
        IncludeError: any extraction failure; no partial document is returned.
        MalformedTag: unparsable tag, or an anchor with no Feature/Scenario below it.
    """
    removed: Set[int] = set()
    before: Dict[int, List[str]] = defaultdict(list)
    after: Dict[int, List[str]] = defaultdict(list)
    background_slot: Optional[int] = None

    i = 0
    n = len(lines)
    while i < n:
        if not is_include_tag(lines[i]):
            i += 1
            continue

        end = include_group(lines, i)
        pending: List[str] = []
        for line_no in range(i, end):
            tag = parse_tag(lines[line_no], line_no)
            block = _extract(tag, base_dir, encoding)
            if on_resolved:
                on_resolved(tag, block)
            pending.extend(block.lines)
            removed.add(line_no)

        target = _find_target(lines, end)
        if target is None:
            raise MalformedTag("@include is not followed by a Feature or Scenario", lines[i], i)

        # Inserted lines take the CRLF ending of the line they attach to.
        eol = "\r" if lines[target].endswith("\r") else ""
        pending = [line + eol for line in pending]

        if is_feature_line(lines[target]):
            if background_slot is None:
                header = _find_background(lines, target + 1)
                if header is None:
                    after[target].append(f"{indent_of(lines[target])}  Background:{eol}")
                    background_slot = target
                else:
                    background_slot = header
            after[background_slot].extend(pending)
        else:
            before[_tag_block_start(lines, target)].extend(pending)
        i = end

    if not removed:
        return list(lines)

    out: List[str] = []
    for idx, line in enumerate(lines):
        out.extend(before.get(idx, ()))
        if idx not in removed:
            out.append(line)
        out.extend(after.get(idx, ()))
    return out


def _extract(tag: Tag, base_dir: Path, encoding: str) -> ExtractedBlock:
    path = resolve_feature_path(base_dir, tag.feature)
    logger.debug("Including %r from %s (line %d)", tag.scenario, path, tag.line_no + 1)
    try:
        return extract(path, tag.scenario, tag.params, encoding=encoding)
    except IncludeError as exc:
        logger.warning("Cannot resolve %s: %s", tag.raw.strip(), exc)
        raise


def _find_target(lines: Sequence[str], start: int) -> Optional[int]:
    for k in range(start, len(lines)):
        if is_feature_line(lines[k]) or is_scenario_line(lines[k]):
            return k
    return None


def _find_background(lines: Sequence[str], start: int) -> Optional[int]:
    for k in range(start, len(lines)):
        if is_scenario_line(lines[k]) or is_feature_line(lines[k]):
            return None
        if is_background_line(lines[k]):
            return k
    return None


def _tag_block_start(lines: Sequence[str], scenario: int) -> int:
    """First line of the run of tag lines directly above *scenario*."""
    start = scenario
    while start > 0 and is_tag_line(lines[start - 1]):
        start -= 1
    return start
