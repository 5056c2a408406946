"""Two-tier configuration system for featurespec.

Resolution order (later overrides earlier):
  1. Built-in defaults
  2. Global user config:  ~/.featurespec/config.json
  3. Project config:      .featurespec.config.json (searched cwd → parents)
  4. CLI flags (--flag, --flags-file, --features-dir, etc.)

Flag lookups consult CLI flags first, then the environment, then the
``flags`` object of the config files.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from featurespec.directives.run_on import DEFAULT_IGNORE_TAG
from featurespec.flags import ChainFlagStore, EnvFlagStore, FlagStore, MappingFlagStore

logger = logging.getLogger(__name__)

GLOBAL_DIR = Path.home() / ".featurespec"
GLOBAL_CONFIG = GLOBAL_DIR / "config.json"
PROJECT_CONFIG_NAME = ".featurespec.config.json"


@dataclass
class FeatureSpecEnvConfig:
    """Resolved configuration for featurespec."""

    flags: Dict[str, str] = field(default_factory=dict)
    features_dirs: List[Path] = field(default_factory=list)
    ignore_tag: str = DEFAULT_IGNORE_TAG
    run_on_env: bool = True
    use_env: bool = True

    # Provenance tracking (which files contributed)
    _global_path: Optional[Path] = field(default=None, repr=False)
    _project_path: Optional[Path] = field(default=None, repr=False)

    def effective_features_dirs(self, cwd: Optional[Path] = None) -> List[Path]:
        """Return features dirs with the default ./features/ prepended if cwd has one."""
        dirs = list(self.features_dirs)
        if cwd is None:
            cwd = Path.cwd()
        default_features = cwd / "features"
        if default_features.is_dir() and default_features not in dirs:
            dirs.insert(0, default_features)
        return dirs

    def flag_store(self, cli_flags: Optional[Mapping[str, str]] = None) -> FlagStore:
        """Build the flag store for this configuration."""
        stores: List[FlagStore] = [MappingFlagStore(cli_flags or {})]
        if self.use_env:
            stores.append(EnvFlagStore())
        stores.append(MappingFlagStore(self.flags))
        return ChainFlagStore(*stores)


def _find_project_config(start: Optional[Path] = None) -> Optional[Path]:
    """Walk from *start* up to the filesystem root looking for project config."""
    current = (start or Path.cwd()).resolve()
    for _ in range(50):  # safety limit
        candidate = current / PROJECT_CONFIG_NAME
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent
    return None


def _load_json(path: Path) -> Dict[str, Any]:
    """Load a JSON config file, returning {} when it cannot be used."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable config file %s: %s", path, exc)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring config file %s: expected a JSON object", path)
        return {}
    return data


def _normalize_flags(raw: Mapping[str, Any]) -> Dict[str, str]:
    """Stringify flag values; ``false`` unsets a flag, ``null`` sets it empty."""
    flags: Dict[str, str] = {}
    for name, value in raw.items():
        if value is False:
            continue
        if value is True:
            value = "true"
        flags[str(name)] = "" if value is None else str(value)
    return flags


def _apply_dict(config: FeatureSpecEnvConfig, data: Dict[str, Any], base_dir: Path) -> None:
    """Merge a raw JSON dict into a config object."""
    if isinstance(data.get("flags"), dict):
        config.flags.update(_normalize_flags(data["flags"]))
    if "features_dirs" in data:
        raw = data["features_dirs"]
        if isinstance(raw, list):
            for d in raw:
                p = Path(d).expanduser()
                if not p.is_absolute():
                    p = (base_dir / p).resolve()
                if p not in config.features_dirs:
                    config.features_dirs.append(p)
    if "ignore_tag" in data:
        config.ignore_tag = str(data["ignore_tag"])
    if "run_on_env" in data:
        config.run_on_env = bool(data["run_on_env"])
    if "use_env" in data:
        config.use_env = bool(data["use_env"])


def load_flags_file(path: Path) -> Dict[str, str]:
    """Load flags from a YAML or JSON file.

    The file holds either a mapping of flag names to values, or a mapping
    with a ``flags`` key holding one.
    """
    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (yaml.YAMLError, ValueError) as exc:
        raise ValueError(f"Invalid flags file: {path}") from exc
    if not isinstance(data, dict):
        return {}
    if isinstance(data.get("flags"), dict):
        data = data["flags"]
    return _normalize_flags(data)


def load_config(
    project_dir: Optional[Path] = None,
    extra_features_dirs: Optional[List[Path]] = None,
) -> FeatureSpecEnvConfig:
    """Load and merge the two-tier configuration.

    Parameters
    ----------
    project_dir : Path, optional
        Starting directory for project config search (defaults to cwd).
    extra_features_dirs : list of Path, optional
        Additional --features-dir values from CLI flags.
    """
    config = FeatureSpecEnvConfig()

    # 1. Global
    if GLOBAL_CONFIG.is_file():
        data = _load_json(GLOBAL_CONFIG)
        _apply_dict(config, data, GLOBAL_DIR)
        config._global_path = GLOBAL_CONFIG

    # 2. Project (overrides global)
    proj = _find_project_config(project_dir)
    if proj:
        data = _load_json(proj)
        _apply_dict(config, data, proj.parent)
        config._project_path = proj

    # 3. CLI extras
    if extra_features_dirs:
        for d in extra_features_dirs:
            p = d.expanduser().resolve()
            if p not in config.features_dirs:
                config.features_dirs.append(p)

    return config


def print_env(config: FeatureSpecEnvConfig, cwd: Optional[Path] = None) -> str:
    """Return a formatted string describing the resolved environment."""
    if cwd is None:
        cwd = Path.cwd()
    lines = []
    lines.append("featurespec Environment")
    lines.append("=" * 50)
    lines.append("")
    lines.append(f"  Global config:   {config._global_path or '(not found)'}")
    lines.append(f"  Project config:  {config._project_path or '(not found)'}")
    lines.append(f"  Ignore tag:      {config.ignore_tag}")
    lines.append(f"  Run-on tags:     {'on' if config.run_on_env else 'off'}")
    lines.append(f"  Env flags:       {'on' if config.use_env else 'off'}")
    lines.append("")
    lines.append("  Flags:")
    for name, value in sorted(config.flags.items()):
        lines.append(f"    {name} = {value!r}")
    if not config.flags:
        lines.append("    (none)")
    lines.append("")
    lines.append("  Feature directories:")
    for d in config.effective_features_dirs(cwd):
        exists = "✓" if d.is_dir() else "✗"
        lines.append(f"    {exists} {d}")
    if not config.effective_features_dirs(cwd):
        lines.append("    (none)")
    lines.append("")
    return "\n".join(lines)
