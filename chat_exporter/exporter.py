# -*- coding: utf-8 -*-
"""User-facing export commands.

Each command re-reads the snapshot from scratch, so running one twice is
always safe. Only the PNG export is guarded against concurrent runs.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from bs4 import BeautifulSoup

from . import image
from .canonical import canonicalize
from .errors import ContainerNotFound, Diagnostics
from .log import alert, log_debug, log_error
from .model import ConversationDocument
from .preferences import PreferenceStore
from .profiles import Profile, detect_profile, load_profiles
from .sequencer import extract_document, find_container
from .serializers import build_filename, to_markdown_bytes, to_print_html
from .sources import copy_to_clipboard
from .state import CapturedStateProvider, NullStateProvider, StructuredContentProvider

NO_HISTORY = "No chat history found!"


@dataclass
class Snapshot:
    """One parsed copy of the chat page."""
    soup: BeautifulSoup
    profile: Profile
    provider: StructuredContentProvider = field(default_factory=CapturedStateProvider)
    head_html: str = ""

    @property
    def container_html(self) -> Optional[str]:
        container = find_container(self.soup, self.profile)
        return str(container) if container is not None else None


def load_snapshot(html: str, config: dict, profile: Optional[Profile] = None,
                  use_state: bool = True, head_html: Optional[str] = None) -> Snapshot:
    soup = BeautifulSoup(html, "html.parser")
    if profile is None:
        profile = detect_profile(soup, load_profiles(), forced=config.get("profile"))
    log_debug(f"Using profile {profile.label}")
    if head_html is None:
        head = soup.head
        head_html = "\n".join(str(el) for el in head.select('link[rel="stylesheet"], style')) if head else ""
    provider = CapturedStateProvider() if use_state else NullStateProvider()
    return Snapshot(soup=soup, profile=profile, provider=provider, head_html=head_html)


@dataclass
class ExportContext:
    config: dict
    preferences: PreferenceStore
    out_dir: Optional[Path] = None
    convert_latex: Optional[bool] = None  # overrides the stored preference for one run

    @property
    def output_dir(self) -> Path:
        return Path(self.out_dir or self.config["export"]["dir"])

    def latex_enabled(self) -> bool:
        if self.convert_latex is not None:
            return self.convert_latex
        return self.preferences.convert_latex

    def filename(self, extension: str, title: Optional[str]) -> str:
        export = self.config["export"]
        return build_filename(export["prefix"], extension, title, export.get("title_max_length", 30))


def build_document(snapshot: Snapshot, ctx: ExportContext, diagnostics: Diagnostics) -> ConversationDocument:
    return extract_document(
        snapshot.soup, snapshot.profile, snapshot.provider, diagnostics,
        thoughts_header=ctx.config["headers"]["thoughts"],
    )


def generate_md_content(snapshot: Snapshot, ctx: ExportContext,
                        diagnostics: Optional[Diagnostics] = None) -> tuple[ConversationDocument, str]:
    """Canonical Markdown for the snapshot ("" when there is nothing to export)."""
    diagnostics = diagnostics if diagnostics is not None else Diagnostics()
    document = build_document(snapshot, ctx, diagnostics)
    if document.is_empty():
        return document, ""
    headers = ctx.config["headers"]
    content = canonicalize(
        document.turns,
        title=document.title,
        convert_latex=ctx.latex_enabled(),
        display_style=ctx.config["math"]["display_style"],
        user_header=headers["user"],
        assistant_header=headers["assistant"],
    )
    return document, content


def _report_missing(diagnostics: Diagnostics):
    missing = diagnostics.first(ContainerNotFound)
    if missing is not None:
        log_error(str(missing))


def export_markdown(snapshot: Snapshot, ctx: ExportContext) -> Optional[Path]:
    diagnostics = Diagnostics()
    document, content = generate_md_content(snapshot, ctx, diagnostics)
    if not content:
        _report_missing(diagnostics)
        alert(NO_HISTORY)
        return None

    out_dir = ctx.output_dir
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / ctx.filename("md", document.title)
    path.write_bytes(to_markdown_bytes(content))
    print(f"Success! Extracted {len(document)} turns.")
    print(f"Saved to: {path}")

    if ctx.config["clip"]["enabled"]:
        copy_to_clipboard(content)
        print("Markdown result has been copied to clipboard.")
    return path


def render_print_view(snapshot: Snapshot, ctx: ExportContext) -> tuple[ConversationDocument, str]:
    """Print-ready HTML ("" when there is nothing to export)."""
    diagnostics = Diagnostics()
    document, content = generate_md_content(snapshot, ctx, diagnostics)
    if not content:
        _report_missing(diagnostics)
        return document, ""
    headers = ctx.config["headers"]
    prefix = ctx.config["export"]["prefix"]
    return document, to_print_html(
        content,
        user_header=headers["user"],
        assistant_header=headers["assistant"],
        thoughts_header=headers["thoughts"],
        page_title=f"{prefix} Chat Export",
    )


def export_html(snapshot: Snapshot, ctx: ExportContext) -> Optional[Path]:
    document, html_doc = render_print_view(snapshot, ctx)
    if not html_doc:
        return None
    out_dir = ctx.output_dir
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / ctx.filename("html", document.title)
    path.write_text(html_doc, encoding="utf-8")
    print(f"Saved to: {path}")
    return path


def export_pdf(snapshot: Snapshot, ctx: ExportContext, printer) -> Optional[Path]:
    document, html_doc = render_print_view(snapshot, ctx)
    if not html_doc:
        return None
    out_dir = ctx.output_dir
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / ctx.filename("pdf", document.title)
    printer.print_pdf(html_doc, path, settle_ms=ctx.config["print"]["settle_ms"])
    print(f"Saved to: {path}")
    return path


def export_png(snapshot: Snapshot, ctx: ExportContext, rasterizer,
               container_html: Optional[str] = None,
               coordinator: Optional[image.ExportCoordinator] = None) -> Optional[Path]:
    """PNG of the conversation; the live page's own container HTML wins when given."""
    settings = ctx.config["image"]
    return image.export_png(
        container_html or snapshot.container_html,
        snapshot.profile,
        rasterizer,
        ctx.output_dir,
        prefix=ctx.config["export"]["prefix"],
        head_html=snapshot.head_html,
        width=settings["width"],
        scale=settings["scale"],
        settle_ms=settings["settle_ms"],
        coordinator=coordinator or image.coordinator,
    )


def toggle_latex(preferences: PreferenceStore) -> bool:
    enabled = preferences.toggle_convert_latex()
    alert(f"LaTeX delimiter conversion is now {'enabled' if enabled else 'disabled'}")
    return enabled
