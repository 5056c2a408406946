"""Conditional Background resolution.

A block such as::

    @background(WITH_SETUP)
    Background:
      Given a prepared cluster
    @/background

is kept (without the tag and closing marker) when the flag store knows
``WITH_SETUP``, and dropped entirely otherwise.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence

from featurespec.directives.tags import (
    is_background_end,
    is_background_line,
    is_background_tag,
    is_blank_or_comment,
    is_feature_line,
    is_scenario_line,
    is_tag_line,
    parse_tag,
)
from featurespec.flags import FlagStore

logger = logging.getLogger(__name__)

OnResolved = Callable[[str, bool], None]


def resolve_backgrounds(
    lines: Sequence[str],
    flags: FlagStore,
    on_resolved: Optional[OnResolved] = None,
) -> List[str]:
    """Resolve every ``@background(FLAG)`` block in *lines*.

    Single left-to-right pass. *on_resolved* is called with
    ``(flag, kept)`` for each tag.
    """
    out: List[str] = []
    dropped = False
    i = 0
    n = len(lines)
    while i < n:
        if not is_background_tag(lines[i]):
            out.append(lines[i])
            i += 1
            continue

        tag = parse_tag(lines[i], i)
        kept = flags.get(tag.flag) is not None
        logger.debug("@background(%s) at line %d: %s", tag.flag, i + 1, "kept" if kept else "dropped")
        if on_resolved:
            on_resolved(tag.flag, kept)
        i += 1

        if kept:
            # A second @background inside the block starts a new occurrence.
            while i < n and not (is_background_end(lines[i]) or is_background_tag(lines[i])):
                out.append(lines[i])
                i += 1
            if i < n and is_background_end(lines[i]):
                i += 1
            elif i == n:
                logger.warning("@background(%s) has no closing @/background marker", tag.flag)
        else:
            while i < n and not (
                is_background_end(lines[i]) or is_scenario_line(lines[i]) or is_tag_line(lines[i])
            ):
                i += 1
            if i < n and is_background_end(lines[i]):
                i += 1
            dropped = True

    if dropped:
        out = _drop_empty_backgrounds(out)
    return out


def _drop_empty_backgrounds(lines: List[str]) -> List[str]:
    """Remove ``Background:`` headers whose block has no steps left."""
    out: List[str] = []
    for i, line in enumerate(lines):
        if is_background_line(line) and _block_is_empty(lines, i + 1):
            logger.debug("Removing empty Background header at line %d", i + 1)
            continue
        out.append(line)
    return out


def _block_is_empty(lines: Sequence[str], start: int) -> bool:
    for line in lines[start:]:
        if is_scenario_line(line) or is_tag_line(line) or is_feature_line(line):
            return True
        if not is_blank_or_comment(line):
            return False
    return True
