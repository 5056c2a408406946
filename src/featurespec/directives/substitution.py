"""Parameter substitution for included scenario bodies.

``<key>`` placeholders are replaced in the order the params were declared.
Replacement is literal ``str.replace``: a value such as ``$5`` or ``\\1`` is
never treated as a back-reference.
"""

from __future__ import annotations

import re
from typing import List, Sequence, Tuple

from featurespec.errors import UnresolvedPlaceholder

_PLACEHOLDER = re.compile(r"<[^<>\s](?:[^<>\n]*[^<>\s])?>")


def placeholder(key: str) -> str:
    return f"<{key}>"


def find_placeholders(text: str) -> List[str]:
    """Return the distinct ``<...>`` placeholders in *text*, in order of appearance."""
    return list(dict.fromkeys(_PLACEHOLDER.findall(text)))


def substitute(text: str, params: Sequence[Tuple[str, str]]) -> str:
    """Replace every ``<key>`` in *text* with its value.

    Raises:
        UnresolvedPlaceholder: if any placeholder survives substitution.
    """
    for key, value in params:
        text = text.replace(placeholder(key), value)
    leftovers = find_placeholders(text)
    if leftovers:
        raise UnresolvedPlaceholder(leftovers)
    return text
