"""Error taxonomy for feature preprocessing.

Every error aborts the preprocessing call for the document being rewritten;
none of them is recovered inside the engine.
"""

from __future__ import annotations

from typing import List, Optional


class FeatureSpecError(Exception):
    """Base class for all preprocessing failures."""


class MalformedTag(FeatureSpecError):
    """A directive tag is present but cannot be parsed or placed."""

    def __init__(self, message: str, tag: str = "", line_no: Optional[int] = None) -> None:
        self.tag = tag.strip()
        self.line_no = line_no
        where = f" (line {line_no + 1})" if line_no is not None else ""
        detail = f": {self.tag}" if self.tag else ""
        super().__init__(f"{message}{where}{detail}")


class IncludeError(FeatureSpecError):
    """Base class for failures while resolving an ``@include`` tag."""

    def __init__(self, message: str, feature: str = "", scenario: str = "") -> None:
        self.feature = feature
        self.scenario = scenario
        super().__init__(message)


class FeatureFileNotFound(IncludeError):
    def __init__(self, feature: str, scenario: str = "") -> None:
        super().__init__(f"Feature file was not found: {feature}", feature, scenario)


class ScenarioNotFound(IncludeError):
    def __init__(self, feature: str, scenario: str) -> None:
        super().__init__(
            f"Scenario not present at the given feature: {scenario!r} in {feature}",
            feature,
            scenario,
        )


class MissingParams(IncludeError):
    def __init__(self, feature: str, scenario: str) -> None:
        super().__init__(
            f"Parameters were not given for scenario outline {scenario!r} in {feature}",
            feature,
            scenario,
        )


class ParamCountMismatch(IncludeError):
    def __init__(self, feature: str, scenario: str, expected: int, found: int, row: str = "") -> None:
        self.expected = expected
        self.found = found
        self.row = row.strip()
        super().__init__(
            f"Wrong number of parameters for {scenario!r} in {feature}: "
            f"examples row has {found} column(s), {expected} param(s) given",
            feature,
            scenario,
        )


class UnresolvedPlaceholder(IncludeError):
    def __init__(self, placeholders: List[str], feature: str = "", scenario: str = "") -> None:
        self.placeholders = placeholders
        super().__init__(
            "At least one key was not replaced, check your params: "
            + ", ".join(placeholders),
            feature,
            scenario,
        )


class IncludeIOError(IncludeError):
    """Read failure distinct from a missing file (permissions, decoding)."""

    def __init__(self, feature: str, scenario: str, reason: str) -> None:
        self.reason = reason
        super().__init__(f"An I/O error appeared reading {feature}: {reason}", feature, scenario)
