"""FeatureSpec controller — orchestrates the directive passes over one document."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from featurespec.directives import (
    DEFAULT_IGNORE_TAG,
    ExtractedBlock,
    Tag,
    resolve_backgrounds,
    resolve_includes,
    resolve_run_on,
)
from featurespec.flags import EnvFlagStore, FlagStore, MappingFlagStore

logger = logging.getLogger(__name__)

OnEvent = Callable[[str, Dict[str, Any]], None]


@dataclass
class PreprocessResult:
    """Result of preprocessing one feature document."""

    text: str
    source_path: Optional[Path] = None
    backgrounds: List[Dict[str, Any]] = field(default_factory=list)
    includes: List[Dict[str, Any]] = field(default_factory=list)
    ignored: List[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.backgrounds or self.includes or self.ignored)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source_path": str(self.source_path) if self.source_path else None,
            "text": self.text,
            "backgrounds": self.backgrounds,
            "includes": self.includes,
            "ignored": self.ignored,
        }


@dataclass
class PreprocessorConfig:
    """Configuration for the feature preprocessor."""

    encoding: str = "utf-8"
    resolve_backgrounds: bool = True
    resolve_includes: bool = True
    resolve_run_on: bool = True
    ignore_tag: str = DEFAULT_IGNORE_TAG


class FeaturePreprocessor:
    """Rewrites a feature document before the test runner parses it.

    Runs the Background pass, then the Include pass, then the run-on pass.
    Each call works on its own copy of the lines; the flag store is only
    read, so one instance can serve many documents.
    """

    def __init__(
        self,
        config: Optional[PreprocessorConfig] = None,
        *,
        flags: Optional[FlagStore] = None,
    ) -> None:
        self.config = config or PreprocessorConfig()
        self.flags = flags if flags is not None else EnvFlagStore()

    def preprocess(
        self,
        text: str,
        source_path: Optional[Union[str, Path]] = None,
        base_dir: Optional[Path] = None,
        on_event: Optional[OnEvent] = None,
    ) -> PreprocessResult:
        """Resolve every directive in *text*.

        Args:
            text: The raw feature document.
            source_path: Where *text* was read from. Include targets are
                resolved against its directory.
            base_dir: Directory for include targets when there is no
                *source_path* (stdin). Defaults to the current directory.
            on_event: Optional callback ``(event_type, data)`` for UI updates.
                Event types: ``"background"``, ``"include"``, ``"ignore"``,
                ``"done"``.

        Returns:
            A :class:`PreprocessResult`; on any error an exception is raised
            and nothing is returned.
        """
        source = Path(source_path) if source_path else None
        if source is not None:
            base_dir = source.parent
        base_dir = Path(base_dir) if base_dir else Path.cwd()

        result = PreprocessResult(text=text, source_path=source)

        def _emit(event: str, data: Dict[str, Any]) -> None:
            if on_event:
                on_event(event, data)

        def _on_background(flag: str, kept: bool) -> None:
            entry = {"flag": flag, "kept": kept}
            result.backgrounds.append(entry)
            _emit("background", entry)

        def _on_include(tag: Tag, block: ExtractedBlock) -> None:
            entry = {
                "feature": tag.feature,
                "scenario": tag.scenario,
                "outline": block.outline,
                "lines": len(block.lines),
            }
            result.includes.append(entry)
            _emit("include", entry)

        def _on_ignored(scenario: str) -> None:
            result.ignored.append(scenario)
            _emit("ignore", {"scenario": scenario})

        lines = text.split("\n")
        if self.config.resolve_backgrounds:
            lines = resolve_backgrounds(lines, self.flags, on_resolved=_on_background)
        if self.config.resolve_includes:
            lines = resolve_includes(
                lines, base_dir, on_resolved=_on_include, encoding=self.config.encoding,
            )
        if self.config.resolve_run_on:
            lines = resolve_run_on(
                lines, self.flags, ignore_tag=self.config.ignore_tag, on_ignored=_on_ignored,
            )

        result.text = "\n".join(lines)
        logger.debug(
            "Preprocessed %s: %d background(s), %d include(s), %d ignored",
            source or "<text>",
            len(result.backgrounds),
            len(result.includes),
            len(result.ignored),
        )
        _emit("done", {
            "source_path": str(source) if source else None,
            "backgrounds": len(result.backgrounds),
            "includes": len(result.includes),
            "ignored": len(result.ignored),
        })
        return result

    def preprocess_file(
        self,
        path: Union[str, Path],
        on_event: Optional[OnEvent] = None,
    ) -> PreprocessResult:
        """Read the feature at *path* and preprocess it."""
        path = Path(path)
        text = path.read_text(encoding=self.config.encoding)
        return self.preprocess(text, source_path=path, on_event=on_event)


def preprocess(
    text: str,
    source_path: Optional[Union[str, Path]] = None,
    flags: Optional[Union[FlagStore, Dict[str, Any]]] = None,
) -> str:
    """Rewrite *text* with every directive resolved and return the new text.

    *flags* may be a flag store or a plain mapping; ``None`` reads the
    process environment.

    The run-on pass is on by default, so a document whose only directive is
    an unmet ``@runOnEnv`` still changes on the first call (the ignore tag is
    appended). A second call returns the same text.
    """
    if isinstance(flags, dict):
        flags = MappingFlagStore(flags)
    return FeaturePreprocessor(flags=flags).preprocess(text, source_path).text
