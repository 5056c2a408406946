"""Scenario extractor — pull the body of a named scenario out of another feature."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Union

from featurespec.directives.substitution import substitute
from featurespec.directives.tags import (
    ParamSet,
    is_examples_line,
    is_outline_line,
    is_scenario_line,
    is_tag_line,
    keyword_title,
)
from featurespec.errors import (
    FeatureFileNotFound,
    IncludeIOError,
    MissingParams,
    ParamCountMismatch,
    ScenarioNotFound,
    UnresolvedPlaceholder,
)

logger = logging.getLogger(__name__)

CELL_DELIMITER = "|"


@dataclass
class ExtractedBlock:
    """Lines copied out of an included scenario, ready to splice."""

    feature_path: Path
    scenario: str
    outline: bool = False
    lines: List[str] = field(default_factory=list)


def resolve_feature_path(base_dir: Path, feature: str) -> Path:
    """Resolve an include target relative to the including document's directory."""
    path = Path(feature).expanduser()
    if path.is_absolute():
        return path
    return base_dir / path


def extract(
    path: Union[str, Path],
    scenario_name: str,
    params: Optional[ParamSet] = None,
    encoding: str = "utf-8",
) -> ExtractedBlock:
    """Extract the body of *scenario_name* from the feature file at *path*.

    Scenario outlines require *params*; their Examples rows are checked
    against the number of params and then dropped, since substitution
    supplies the concrete values.

    Raises:
        FeatureFileNotFound: *path* does not exist.
        IncludeIOError: *path* exists but cannot be read or decoded.
        ScenarioNotFound: no scenario header mentions *scenario_name*.
        MissingParams: the match is an outline and no params were given.
        ParamCountMismatch: an Examples row disagrees with the params.
        UnresolvedPlaceholder: a ``<key>`` survives substitution.
    """
    path = Path(path)
    feature = str(path)
    if not path.is_file():
        logger.warning("Feature file was not found: %s", feature)
        raise FeatureFileNotFound(feature, scenario_name)

    try:
        with path.open(encoding=encoding) as fh:
            block = _scan(fh, path, scenario_name, params)
    except FileNotFoundError as exc:
        raise FeatureFileNotFound(feature, scenario_name) from exc
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("An I/O error appeared reading %s: %s", feature, exc)
        raise IncludeIOError(feature, scenario_name, str(exc)) from exc

    if block is None:
        logger.warning("Scenario not present at the given feature: %s (%s)", scenario_name, feature)
        raise ScenarioNotFound(feature, scenario_name)

    if params:
        text = "\n".join(block.lines)
        try:
            text = substitute(text, params)
        except UnresolvedPlaceholder as exc:
            raise UnresolvedPlaceholder(exc.placeholders, feature, scenario_name) from exc
        block.lines = text.split("\n")

    logger.debug(
        "Extracted %d line(s) from %r in %s", len(block.lines), scenario_name, feature,
    )
    return block


def check_params(row: str, params: ParamSet) -> bool:
    """True when an Examples *row* has one column per param."""
    return row.count(CELL_DELIMITER) - 1 == len(params)


def _scan(
    lines: Iterable[str],
    path: Path,
    scenario_name: str,
    params: Optional[ParamSet],
) -> Optional[ExtractedBlock]:
    stream = (line.rstrip("\r\n") for line in lines)
    for line in stream:
        if not is_scenario_line(line) or scenario_name not in keyword_title(line):
            continue
        if is_outline_line(line):
            if not params:
                logger.warning("Parameters were not given for scenario outline %r", scenario_name)
                raise MissingParams(str(path), scenario_name)
            body = _outline_body(stream, path, scenario_name, params)
            return ExtractedBlock(feature_path=path, scenario=scenario_name, outline=True, lines=body)
        return ExtractedBlock(
            feature_path=path, scenario=scenario_name, lines=_scenario_body(stream),
        )
    return None


def _scenario_body(stream: Iterable[str]) -> List[str]:
    body: List[str] = []
    for line in stream:
        if is_scenario_line(line) or is_examples_line(line) or is_tag_line(line):
            break
        body.append(line)
    return body


def _outline_body(
    stream: Iterable[str],
    path: Path,
    scenario_name: str,
    params: ParamSet,
) -> List[str]:
    body: List[str] = []
    in_examples = False
    for line in stream:
        if is_scenario_line(line):
            break
        if is_examples_line(line):
            in_examples = True
            continue
        if is_tag_line(line):
            continue
        # Step data tables above Examples are copied; only example rows are checked.
        if in_examples and CELL_DELIMITER in line:
            if not check_params(line, params):
                logger.warning("Wrong number of parameters for %r: %s", scenario_name, line.strip())
                raise ParamCountMismatch(
                    str(path),
                    scenario_name,
                    expected=len(params),
                    found=line.count(CELL_DELIMITER) - 1,
                    row=line,
                )
            continue
        body.append(line)
    return body
