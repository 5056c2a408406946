"""Directive passes applied to a feature document, in order.

1. :func:`resolve_backgrounds` — ``@background(FLAG)`` blocks
2. :func:`resolve_includes` — ``@include(feature:..., scenario:...)`` anchors
3. :func:`resolve_run_on` — ``@runOnEnv`` / ``@skipOnEnv`` scenario tags
"""

from .background import resolve_backgrounds
from .extractor import ExtractedBlock, extract, resolve_feature_path
from .includes import resolve_includes
from .run_on import DEFAULT_IGNORE_TAG, resolve_run_on, should_ignore
from .substitution import find_placeholders, substitute
from .tags import ParamSet, Tag, parse_params, parse_tag

__all__ = [
    "DEFAULT_IGNORE_TAG",
    "ExtractedBlock",
    "ParamSet",
    "Tag",
    "extract",
    "find_placeholders",
    "parse_params",
    "parse_tag",
    "resolve_backgrounds",
    "resolve_feature_path",
    "resolve_includes",
    "resolve_run_on",
    "should_ignore",
    "substitute",
]
