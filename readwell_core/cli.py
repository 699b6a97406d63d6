#!/usr/bin/env python3
import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import List, Optional

from .config import config
from .dom.soup import parse_document, to_html
from .enhancer import EnhancerContext, ReadingEnhancer
from .errors import ReadwellError
from .lazyload import ViewportWatcher, VisibilityRegion, attribute_geometry
from .log_config import LogConfig, setup_logging
from .settings import PRESETS
from .storage import JsonSettingsStore, MemorySettingsStore
from .style import SoupStyleSink, synthesize


def _store(args: argparse.Namespace) -> JsonSettingsStore:
    return JsonSettingsStore(args.settings or config.settings_path)


def _load_source(source: str, viewport_height: int) -> str:
    if source.startswith(("http://", "https://")):
        from .browser import capture_page
        return asyncio.run(capture_page(source, viewport_height=viewport_height)).html
    return Path(source).read_text(encoding="utf-8")


def cmd_enhance(args: argparse.Namespace) -> int:
    viewport_height = args.viewport_height or config.viewport_height
    try:
        html = _load_source(args.source, viewport_height)
    except (OSError, ReadwellError) as e:
        print(f"Cannot read {args.source}: {e}", file=sys.stderr)
        return 1

    settings = _store(args).get()
    if args.preset:
        settings = settings.with_preset(args.preset)

    root = parse_document(html)
    ctx = EnhancerContext(
        store=MemorySettingsStore(settings),
        sink=SoupStyleSink(root),
        watcher=ViewportWatcher(VisibilityRegion(0, viewport_height), geometry=attribute_geometry),
    )
    enhancer = ReadingEnhancer(ctx)
    summary = enhancer.start(root)
    enhancer.teardown()

    output = to_html(root)
    if args.output:
        Path(args.output).write_text(output, encoding="utf-8")
        summary["output"] = args.output
        print(json.dumps(summary, indent=2, ensure_ascii=False))
    else:
        sys.stdout.write(output)
    return 0


def cmd_settings(args: argparse.Namespace) -> int:
    store = _store(args)
    if args.action == "show":
        print(json.dumps(store.get().to_dict(), indent=2, ensure_ascii=False))
        return 0
    if args.action == "reset":
        settings = MemorySettingsStore().get()
    else:
        if not args.name:
            print("preset name required", file=sys.stderr)
            return 1
        settings = store.get().with_preset(args.name)
    if not store.set(settings):
        print(f"Could not save settings to {store.path}", file=sys.stderr)
        return 1
    print(json.dumps(settings.to_dict(), indent=2, ensure_ascii=False))
    return 0


def cmd_css(args: argparse.Namespace) -> int:
    sys.stdout.write(synthesize(_store(args).get()).css)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="readwell", description="Readability enhancer for HTML documents")
    parser.add_argument("--settings", help="Settings JSON file (default: $READWELL_SETTINGS_PATH)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_enh = sub.add_parser("enhance", help="Enhance an HTML file or URL")
    p_enh.add_argument("source", help="HTML file path or http(s) URL")
    p_enh.add_argument("-o", "--output", help="Write enhanced HTML here instead of stdout")
    p_enh.add_argument("--preset", choices=sorted(PRESETS), help="Apply a theme preset for this run")
    p_enh.add_argument("--viewport-height", type=int, help="Visible region height in pixels")
    p_enh.set_defaults(func=cmd_enhance)

    p_set = sub.add_parser("settings", help="Show or change stored settings")
    p_set.add_argument("action", choices=["show", "reset", "preset"])
    p_set.add_argument("name", nargs="?", choices=sorted(PRESETS))
    p_set.set_defaults(func=cmd_settings)

    p_css = sub.add_parser("css", help="Print the synthesized stylesheet")
    p_css.set_defaults(func=cmd_css)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    log_config = LogConfig.from_env()
    if args.verbose or config.enable_debug:
        log_config.log_level = "DEBUG"
    setup_logging(log_config)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
