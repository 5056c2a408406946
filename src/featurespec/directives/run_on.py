"""``@runOnEnv`` / ``@skipOnEnv`` — mark scenarios to be ignored by the runner.

* ``@runOnEnv(A,B)``: the scenario runs only if every listed flag is defined.
* ``@skipOnEnv(A,B)``: the scenario is skipped if every listed flag is defined.
  Several ``@skipOnEnv`` tags skip it as soon as one of them matches.

A flag is defined when the store returns a non-empty value. Skipped
scenarios get the ignore tag appended to their last tag line.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, List, Optional, Sequence

from featurespec.directives.tags import is_scenario_line, is_tag_line, keyword_title
from featurespec.errors import MalformedTag
from featurespec.flags import FlagStore, is_defined

logger = logging.getLogger(__name__)

DEFAULT_IGNORE_TAG = "@ignore"

_TAG_TOKEN = re.compile(r"@(?P<name>[^\s@(]+)(?:\((?P<args>[^)]*)\))?")
_RUN_ON_ENV = "runonenv"
_SKIP_ON_ENV = "skiponenv"


def resolve_run_on(
    lines: Sequence[str],
    flags: FlagStore,
    ignore_tag: str = DEFAULT_IGNORE_TAG,
    on_ignored: Optional[Callable[[str], None]] = None,
) -> List[str]:
    """Append *ignore_tag* to scenarios whose run-on conditions are not met."""
    out = list(lines)
    n = len(out)
    i = 0
    while i < n:
        if not is_tag_line(out[i]):
            i += 1
            continue
        start = i
        while i < n and is_tag_line(out[i]):
            i += 1
        if i == n or not is_scenario_line(out[i]):
            continue
        if not should_ignore(out[start:i], flags, start):
            continue

        scenario = keyword_title(out[i])
        logger.debug("Ignoring scenario %r (line %d)", scenario, i + 1)
        if on_ignored:
            on_ignored(scenario)
        if not any(ignore_tag in line.split() for line in out[start:i]):
            out[i - 1] = f"{out[i - 1].rstrip()} {ignore_tag}"
    return out


def should_ignore(tag_lines: Sequence[str], flags: FlagStore, first_line_no: int = 0) -> bool:
    """Evaluate the run-on tags of one scenario; the first deciding tag wins."""
    for offset, line in enumerate(tag_lines):
        for m in _TAG_TOKEN.finditer(line):
            name = m.group("name").lower()
            if name not in (_RUN_ON_ENV, _SKIP_ON_ENV):
                continue
            names = _flag_names(m.group("args"))
            if not names:
                raise MalformedTag(
                    f"@{m.group('name')} needs at least one flag name",
                    line,
                    first_line_no + offset,
                )
            all_defined = all(is_defined(flags, flag) for flag in names)
            if name == _RUN_ON_ENV and not all_defined:
                return True
            if name == _SKIP_ON_ENV and all_defined:
                return True
    return False


def _flag_names(args: Optional[str]) -> List[str]:
    if args is None:
        return []
    return [a.strip() for a in args.split(",") if a.strip()]
