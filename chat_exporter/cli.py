# -*- coding: utf-8 -*-
"""Command-line front-end: one sub-command per export."""

import argparse
import sys
from pathlib import Path
from typing import Optional

from . import __version__
from .browser import BrowserHost, PlaywrightError
from .config import load_config
from .errors import ContainerNotFound, ExportError
from .exporter import (
    NO_HISTORY,
    ExportContext,
    export_html,
    export_markdown,
    export_pdf,
    export_png,
    load_snapshot,
    toggle_latex,
)
from .image import DEFAULT_LOCK_PATH, ExportCoordinator
from .log import alert, log_debug, log_error, set_debug
from .preferences import PreferenceStore
from .profiles import load_profiles, pick_profile
from .sources import read_clipboard, read_file


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chat-exporter",
        description="Export a DeepSeek chat to Markdown, HTML, PDF or PNG.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--debug", action="store_true", help="Show debug information.")
    parser.add_argument("--config", type=Path, help="Path to a config.yaml to use.")
    parser.add_argument("--preferences", type=Path, help="Path to the preferences file.")

    source = argparse.ArgumentParser(add_help=False)
    group = source.add_mutually_exclusive_group()
    group.add_argument("--file", type=Path, help="Saved HTML page to export.")
    group.add_argument("--clipboard", action="store_true", help="Read the page HTML from the clipboard (default).")
    group.add_argument("--url", help="Open the chat in a browser and export the live page.")
    source.add_argument("--profile", help="Locator profile to use (name or name@version).")
    source.add_argument("--out-dir", type=Path, help="Directory for the exported file.")
    source.add_argument("--no-state", action="store_true",
                        help="Ignore captured page state and rebuild Markdown from the rendered HTML.")
    source.add_argument("--save-snapshot", type=Path, help="Also save the page HTML that was exported.")
    latex = source.add_mutually_exclusive_group()
    latex.add_argument("--latex", dest="latex", action="store_true", default=None,
                       help="Convert \\( \\) and \\[ \\] math delimiters for this run.")
    latex.add_argument("--no-latex", dest="latex", action="store_false",
                       help="Keep math delimiters as they are for this run.")

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("markdown", aliases=["md"], parents=[source], help="Export as a Markdown file.")
    sub.add_parser("html", parents=[source], help="Export the print view as an HTML file.")
    sub.add_parser("pdf", parents=[source], help="Print the export view to PDF.")
    sub.add_parser("png", parents=[source], help="Export the conversation as an image.")
    sub.add_parser("toggle-latex", help="Toggle LaTeX delimiter conversion.")
    return parser


def _run_export(command: str, snapshot, ctx: ExportContext, host: Optional[BrowserHost] = None,
                container_html: Optional[str] = None):
    if command == "markdown":
        return export_markdown(snapshot, ctx)
    if command == "html":
        return export_html(snapshot, ctx)
    if command == "pdf":
        return export_pdf(snapshot, ctx, host.printer())
    if command == "png":
        coordinator = ExportCoordinator(lock_path=DEFAULT_LOCK_PATH)
        return export_png(snapshot, ctx, host.rasterizer(), container_html=container_html, coordinator=coordinator)
    raise ValueError(f"Unknown command: {command}")


def _save_snapshot(html: str, path: Optional[Path]):
    if not path: return
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(html, encoding="utf-8")
    print(f"Snapshot saved to: {path}")


def _browser_host(config: dict) -> BrowserHost:
    settings = config["browser"]
    return BrowserHost(settings["engine"], settings["headless"], settings.get("user_data_dir"))


def run_live(args, config: dict, ctx: ExportContext):
    profile = pick_profile(load_profiles(), config.get("profile"))
    with _browser_host(config) as host:
        live = host.open_live(args.url, profile)
        live.wait_for_container(config["browser"]["wait_timeout"])
        html = live.snapshot()
        _save_snapshot(html, args.save_snapshot)
        snapshot = load_snapshot(html, config, profile=profile, use_state=not args.no_state,
                                 head_html=live.head_html())
        container_html = live.container_html() if args.command == "png" else None
        return _run_export(args.command, snapshot, ctx, host, container_html)


def run_offline(args, config: dict, ctx: ExportContext):
    html = read_file(args.file) if args.file else read_clipboard()
    _save_snapshot(html, args.save_snapshot)
    snapshot = load_snapshot(html, config, use_state=not args.no_state)
    if args.command in ("pdf", "png"):
        with _browser_host(config) as host:
            return _run_export(args.command, snapshot, ctx, host)
    return _run_export(args.command, snapshot, ctx)


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    set_debug(args.debug)

    # Fix Windows console encoding
    if sys.platform == "win32":
        try:
            sys.stdout.reconfigure(encoding="utf-8")
        except AttributeError:
            pass

    config = load_config(args.config)
    preferences = PreferenceStore(args.preferences)

    if args.command == "toggle-latex":
        toggle_latex(preferences)
        return 0

    command = "markdown" if args.command == "md" else args.command
    args.command = command
    if args.profile:
        config["profile"] = args.profile
    ctx = ExportContext(config, preferences, out_dir=args.out_dir, convert_latex=args.latex)
    log_debug(f"Command {command}, latex conversion {'on' if ctx.latex_enabled() else 'off'}")

    try:
        result = run_live(args, config, ctx) if args.url else run_offline(args, config, ctx)
    except ContainerNotFound as e:
        log_error(str(e))
        alert(NO_HISTORY)
        return 1
    except ExportError as e:
        log_error(str(e))
        return 1
    except PlaywrightError as e:
        log_error(f"Browser error: {e}")
        log_error("If the browser is missing, run: playwright install " + config["browser"]["engine"])
        return 1
    return 0 if result else 1
