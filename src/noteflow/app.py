"""Command line entry point for the noteflow tools."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, TextIO, get_args, get_origin, get_type_hints

from .core.errors import SuggestionTransportError
from .editor.export import export_page, write_export
from .editor.pages import Page
from .services.settings import Settings, SettingsStore
from .suggestions.client import SuggestionClient
from .utils import logging as logging_utils

_TRUE_VALUES = {"1", "true", "yes", "on", "debug"}
_LOGGER = logging.getLogger(__name__)
_FALSE_VALUES = {"0", "false", "no", "off", "disabled"}


def configure_logging(debug: bool = False, *, force: bool = False) -> None:
    level = logging_utils.level_for(debug)
    logging_utils.setup_logging(level, force=force)
    _LOGGER.debug("Logging configured (level=%s)", logging.getLevelName(level))


def load_settings(
    path: Optional[Path] = None,
    *,
    store: SettingsStore | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> Settings:
    """Load persisted settings or fall back to defaults."""

    active_store = store or SettingsStore(path)
    try:
        settings = active_store.load(overrides=overrides)
    except OSError as exc:
        _LOGGER.warning("Failed to load settings from %s: %s", active_store.path, exc)
        settings = Settings()
    return settings


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point invoked by the ``noteflow`` console script."""

    parser = _build_parser()
    args = parser.parse_args(argv)

    debug = _env_flag("NOTEFLOW_DEBUG", default=False)
    configure_logging(debug)

    settings_path = args.settings_path or os.environ.get("NOTEFLOW_SETTINGS_PATH")
    resolved_path = Path(settings_path).expanduser() if settings_path else None
    settings_store = SettingsStore(resolved_path)
    try:
        cli_overrides = _coerce_cli_overrides(args.overrides or [])
    except ValueError as exc:
        print(f"Invalid --set override: {exc}", file=sys.stderr)
        raise SystemExit(2) from exc

    settings = load_settings(resolved_path, store=settings_store, overrides=cli_overrides or None)

    if args.dump_settings:
        _dump_settings(settings, settings_store, overrides=cli_overrides)
        return 0

    if settings.debug_logging and not debug:
        configure_logging(True, force=True)

    if args.command == "suggest":
        return _run_suggest(settings, args.word)
    if args.command == "export":
        return _run_export(settings, Path(args.file), page_number=args.page, out_dir=args.out)
    parser.print_help()
    return 1


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="noteflow",
        description="Query word suggestions, export note pages, or inspect configuration.",
    )
    parser.add_argument(
        "--dump-settings",
        action="store_true",
        help="Print the effective settings payload and exit.",
    )
    parser.add_argument(
        "--settings-path",
        metavar="PATH",
        help="Override the default ~/.noteflow/settings.json path.",
    )
    parser.add_argument(
        "--set",
        dest="overrides",
        metavar="KEY=VALUE",
        action="append",
        default=[],
        help="Override persisted settings for this run (repeatable).",
    )
    subcommands = parser.add_subparsers(dest="command")

    suggest = subcommands.add_parser("suggest", help="Look up completions for a word prefix.")
    suggest.add_argument("word")

    export = subcommands.add_parser("export", help="Export an HTML note page as plain text.")
    export.add_argument("file", metavar="FILE.html")
    export.add_argument("--page", type=int, default=1, help="1-based page number used in the filename.")
    export.add_argument("--out", metavar="DIR", help="Directory to write into (defaults to export_dir).")
    return parser


def _run_suggest(settings: Settings, word: str) -> int:
    try:
        suggestions = asyncio.run(_fetch_suggestions(settings, word))
    except SuggestionTransportError as exc:
        print(f"Suggestion lookup failed: {exc}", file=sys.stderr)
        return 1
    for suggestion in suggestions:
        print(suggestion)
    return 0


async def _fetch_suggestions(settings: Settings, word: str) -> List[str]:
    client = SuggestionClient(settings.client_settings())
    try:
        return await client.fetch(word)
    finally:
        await client.aclose()


def _run_export(settings: Settings, source: Path, *, page_number: int, out_dir: str | None) -> int:
    try:
        markup = source.read_text(encoding="utf-8")
    except OSError as exc:
        print(f"Unable to read {source}: {exc}", file=sys.stderr)
        return 1
    if page_number < 1:
        print("--page must be 1 or greater", file=sys.stderr)
        return 2
    exported = export_page(Page(id=page_number, content=markup), page_number)
    path = write_export(exported, out_dir or settings.export_dir)
    print(path)
    return 0


def _env_flag(name: str, *, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


def _coerce_cli_overrides(items: Sequence[str]) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    if not items:
        return overrides

    fields = Settings.__dataclass_fields__  # type: ignore[attr-defined]
    type_hints = get_type_hints(Settings)
    for entry in items:
        if "=" not in entry:
            raise ValueError(f"Override '{entry}' must use KEY=VALUE syntax.")
        key, raw_value = entry.split("=", 1)
        key = key.strip()
        if not key:
            raise ValueError("Override is missing a field name.")
        if key not in fields:
            raise ValueError(f"Unknown setting '{key}'.")
        annotation = type_hints.get(key, fields[key].type)
        overrides[key] = _coerce_value(annotation, raw_value.strip())
    return overrides


def _coerce_value(annotation: Any, raw_value: str) -> Any:
    target = _resolve_annotation(annotation)
    normalized = raw_value.strip()

    if target is str or target is Any:
        return normalized
    if target is bool:
        return _parse_bool(normalized)
    if target is int:
        return int(normalized, 10)
    if target is float:
        return float(normalized)
    return normalized


def _resolve_annotation(annotation: Any) -> Any:
    origin = get_origin(annotation)
    if origin is None:
        return annotation
    args = [arg for arg in get_args(annotation) if arg is not type(None)]
    if not args:
        return origin
    return args[0]


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"Cannot coerce '{value}' to a boolean.")


def _dump_settings(
    settings: Settings,
    store: SettingsStore,
    *,
    overrides: Mapping[str, Any],
    stream: TextIO | None = None,
) -> None:
    destination = stream or sys.stdout
    metadata = {
        "path": str(store.path),
        "cli_overrides": sorted(overrides.keys()),
        "environment_variables": _active_env_overrides(),
    }
    output = {"settings": asdict(settings), "meta": metadata}
    json.dump(output, destination, indent=2)
    destination.write("\n")


def _active_env_overrides() -> list[str]:
    return sorted(name for name in os.environ if name.startswith("NOTEFLOW_"))


if __name__ == "__main__":  # pragma: no cover - manual invocation
    raise SystemExit(main())
