"""featurespec — CLI entry point.

Resolves @background / @include / @runOnEnv directives in feature files.

Usage:
    featurespec login.feature                           # resolved text to stdout
    featurespec login.feature --flag WITH_SSO -o out.feature
    featurespec a.feature b.feature --out-dir build/features
    featurespec --features-dir features --out-dir build/features
    featurespec --all --check                           # CI: fail on broken includes
    featurespec login.feature --scan                    # directive metadata as JSON
    cat login.feature | featurespec --stdin
"""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys
import time
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from rich.logging import RichHandler

from featurespec.controller import FeaturePreprocessor, PreprocessorConfig, PreprocessResult
from featurespec.discovery.catalog import scan_directories
from featurespec.discovery.config import FeatureSpecEnvConfig, load_config, load_flags_file, print_env
from featurespec.discovery.scanner import scan_feature
from featurespec.errors import FeatureSpecError
from featurespec.ui import FeatureSpecPrinter

# (path, path relative to the output directory)
Target = Tuple[Path, Path]


# ------------------------------------------------------------------
# Argument parsing
# ------------------------------------------------------------------

def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="featurespec",
        description="Resolve @background and @include directives in Gherkin feature files.",
    )

    # Input
    parser.add_argument(
        "feature_files",
        nargs="*",
        type=Path,
        help="Feature files to preprocess",
    )
    parser.add_argument(
        "--stdin",
        action="store_true",
        help="Read one feature document from stdin (includes resolve against the cwd)",
    )
    parser.add_argument(
        "--features-dir",
        action="append",
        type=Path,
        metavar="DIR",
        help="Preprocess every .feature file under DIR (repeatable)",
    )
    parser.add_argument(
        "--all",
        action="store_true",
        help="Preprocess every .feature file under the configured feature directories",
    )

    # Flags
    parser.add_argument(
        "--flag",
        action="append",
        metavar="NAME[=VALUE]",
        help="Set a flag (repeatable). Example: --flag WITH_SSO or --flag ENV=staging",
    )
    parser.add_argument(
        "--flags-file",
        type=Path,
        help="Path to a YAML or JSON file of flag values",
    )
    parser.add_argument(
        "--no-env",
        action="store_true",
        help="Do not read flags from environment variables",
    )

    # Output
    parser.add_argument(
        "-o", "--output",
        type=Path,
        help="Write the resolved document to a file instead of stdout",
    )
    parser.add_argument(
        "--out-dir",
        type=Path,
        help="Write every resolved document under this directory",
    )

    # Mode
    parser.add_argument(
        "--check",
        action="store_true",
        help="Resolve without writing anything; exit 1 if any document fails",
    )
    parser.add_argument(
        "--scan",
        action="store_true",
        help="Output directive metadata as JSON instead of resolving",
    )
    parser.add_argument(
        "--env",
        action="store_true",
        help="Print resolved configuration and environment, then exit",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show each resolved directive and debug logging",
    )

    return parser


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------

def _configure_logging(printer: FeatureSpecPrinter, verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=printer.console, show_path=False)],
    )


def _parse_flags(printer: FeatureSpecPrinter, args: argparse.Namespace) -> Dict[str, str]:
    """Merge flags from --flags-file and --flag (--flag wins)."""
    flags: Dict[str, str] = {}

    if args.flags_file:
        flags.update(load_flags_file(args.flags_file))

    for item in args.flag or []:
        name, _, value = item.partition("=")
        name = name.strip()
        if not name:
            printer.warning(f"Ignoring malformed --flag '{item}' (expected NAME[=VALUE])")
            continue
        flags[name] = value

    return flags


def _collect_targets(
    printer: FeatureSpecPrinter,
    args: argparse.Namespace,
    env_config: FeatureSpecEnvConfig,
) -> Optional[List[Target]]:
    """Explicit files first, then catalog entries; ``None`` on a missing file."""
    targets: List[Target] = []
    seen: set[Path] = set()

    for path in args.feature_files:
        if not path.is_file():
            printer.error(f"Feature file '{path}' not found.")
            return None
        resolved = path.resolve()
        if resolved not in seen:
            seen.add(resolved)
            targets.append((resolved, _relative_destination(resolved)))

    dirs: List[Path] = list(args.features_dir or [])
    if args.all:
        dirs.extend(env_config.effective_features_dirs(Path.cwd()))
    for entry in scan_directories(dirs):
        if entry.path not in seen:
            seen.add(entry.path)
            targets.append((entry.path, entry.relative_path))

    return targets


def _relative_destination(path: Path) -> Path:
    """Output path for an explicit file: relative to the cwd when under it."""
    try:
        return path.relative_to(Path.cwd().resolve())
    except ValueError:
        return Path(path.name)


def _duplicate_destinations(targets: List[Target]) -> List[Path]:
    seen: set[Path] = set()
    clashes: List[Path] = []
    for _, relative in targets:
        if relative in seen and relative not in clashes:
            clashes.append(relative)
        seen.add(relative)
    return clashes


def _scan_data(path: Optional[Path], text: str) -> dict:
    meta = scan_feature(text)
    data = dataclasses.asdict(meta)
    data["path"] = str(path) if path else None
    data["flags"] = meta.flags
    return data


# ------------------------------------------------------------------
# Modes
# ------------------------------------------------------------------

def run_scan(printer: FeatureSpecPrinter, targets: List[Target]) -> int:
    """Print directive metadata as JSON."""
    items: List[dict] = []
    for path, _ in targets:
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            printer.error(f"{path}: {exc}")
            return 1
        items.append(_scan_data(path, text))
    payload = items[0] if len(items) == 1 else items
    print(json.dumps(payload, indent=2, ensure_ascii=False))
    return 0


def run_batch(
    printer: FeatureSpecPrinter,
    preprocessor: FeaturePreprocessor,
    targets: List[Target],
    args: argparse.Namespace,
) -> int:
    """Resolve every target; write to --out-dir, --output or stdout."""
    if len(targets) > 1 and not (args.out_dir or args.check):
        printer.error("Several feature files need --out-dir (or --check).")
        return 1
    if args.out_dir and not args.check:
        clashes = _duplicate_destinations(targets)
        if clashes:
            names = ", ".join(str(p) for p in clashes)
            printer.error(f"Several inputs would be written to the same output file: {names}")
            return 1

    ok = 0
    failed = 0
    t0 = time.perf_counter()
    for path, relative in targets:
        try:
            result = preprocessor.preprocess_file(path, on_event=printer.event)
        except (FeatureSpecError, OSError, UnicodeDecodeError) as exc:
            failed += 1
            printer.error(f"{path}: {exc}")
            if not args.check:
                return 1
            continue
        ok += 1
        if not args.check:
            _write_result(printer, result, args, relative)

    if args.check or args.verbose:
        printer.summary(ok, failed, time.perf_counter() - t0)
    return 1 if failed else 0


def _write_result(
    printer: FeatureSpecPrinter,
    result: PreprocessResult,
    args: argparse.Namespace,
    relative: Path,
) -> None:
    if args.out_dir:
        dest = args.out_dir / relative
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_text(result.text, encoding="utf-8")
        printer.file_written(dest)
    elif args.output:
        args.output.write_text(result.text, encoding="utf-8")
        printer.file_written(args.output)
    else:
        sys.stdout.write(result.text)
        if not result.text.endswith("\n"):
            sys.stdout.write("\n")


def run_stdin(
    printer: FeatureSpecPrinter,
    preprocessor: FeaturePreprocessor,
    args: argparse.Namespace,
) -> int:
    text = sys.stdin.read()
    if args.scan:
        print(json.dumps(_scan_data(None, text), indent=2, ensure_ascii=False))
        return 0
    try:
        result = preprocessor.preprocess(text, base_dir=Path.cwd(), on_event=printer.event)
    except FeatureSpecError as exc:
        printer.error(str(exc))
        return 1
    if not args.check:
        _write_result(printer, result, args, Path("stdin.feature"))
    return 0


# ------------------------------------------------------------------
# Entry point
# ------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)

    printer = FeatureSpecPrinter(verbose=args.verbose)
    _configure_logging(printer, args.verbose)

    env_config = load_config(project_dir=Path.cwd())

    if args.no_env:
        env_config.use_env = False

    # --env: print environment and exit
    if args.env:
        printer.console.print(print_env(env_config), highlight=False)
        return 0

    try:
        cli_flags = _parse_flags(printer, args)
    except (OSError, ValueError) as exc:
        printer.error(f"Cannot read flags file '{args.flags_file}': {exc}")
        return 1

    preprocessor = FeaturePreprocessor(
        PreprocessorConfig(
            resolve_run_on=env_config.run_on_env,
            ignore_tag=env_config.ignore_tag,
        ),
        flags=env_config.flag_store(cli_flags),
    )

    if args.stdin:
        return run_stdin(printer, preprocessor, args)

    if not (args.feature_files or args.features_dir or args.all):
        parser.print_help()
        return 1

    targets = _collect_targets(printer, args, env_config)
    if targets is None:
        return 1
    if not targets:
        printer.warning("No feature files found.")
        return 0

    if args.scan:
        return run_scan(printer, targets)

    if args.verbose:
        printer.header({
            "Features": len(targets),
            "Flags": ", ".join(sorted(cli_flags)) or "(none)",
            "Mode": "check" if args.check else "resolve",
        })
    return run_batch(printer, preprocessor, targets, args)


def cli() -> None:
    """Main entry point for the featurespec command."""
    try:
        exit_code = main()
    except KeyboardInterrupt:
        exit_code = 130
    sys.exit(exit_code)


if __name__ == "__main__":
    cli()
