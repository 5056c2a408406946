"""Feature catalog — scans directories and indexes .feature files.

Each file is represented as a ``FeatureEntry`` with the metadata the
scanner finds (title, directives, flags) and a content hash, so batch
runs can report what each document depends on before resolving it.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from featurespec.discovery.scanner import FeatureMetadata, scan_feature

logger = logging.getLogger(__name__)

FEATURE_GLOB = "*.feature"


@dataclass
class FeatureEntry:
    """Metadata for a single .feature file."""

    path: Path
    title: str
    content_hash: str
    base_dir: Optional[Path] = None
    metadata: FeatureMetadata = field(default_factory=FeatureMetadata)

    @property
    def filename(self) -> str:
        return self.path.name

    @property
    def relative_path(self) -> Path:
        """Path relative to the directory it was found under."""
        if self.base_dir is None:
            return Path(self.path.name)
        return self.path.relative_to(self.base_dir)


def _content_hash(text: str) -> str:
    """SHA-256 hex digest of the feature content."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def index_feature(path: Path, base_dir: Optional[Path] = None) -> FeatureEntry:
    """Build a FeatureEntry from a single feature file."""
    text = path.read_text(encoding="utf-8")
    meta = scan_feature(text)
    return FeatureEntry(
        path=path.resolve(),
        title=meta.title or path.stem,
        content_hash=_content_hash(text),
        base_dir=base_dir.resolve() if base_dir else None,
        metadata=meta,
    )


def scan_directories(dirs: List[Path]) -> List[FeatureEntry]:
    """Recursively scan directories for .feature files and index them.

    Skips files that cannot be read.
    """
    entries: List[FeatureEntry] = []
    seen: set[Path] = set()

    for base_dir in dirs:
        if not base_dir.is_dir():
            continue
        for path in sorted(base_dir.rglob(FEATURE_GLOB)):
            resolved = path.resolve()
            if resolved in seen:
                continue
            seen.add(resolved)
            try:
                entries.append(index_feature(path, base_dir))
            except (OSError, UnicodeDecodeError) as exc:
                logger.warning("Skipping unreadable feature %s: %s", path, exc)

    return entries
