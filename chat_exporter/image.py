# -*- coding: utf-8 -*-
"""PNG export of the rendered conversation.

Unlike Markdown and PDF this does not start from the canonical document:
it takes a copy of the container's HTML, strips the interactive chrome,
and rasterizes that copy off-screen.
"""

import os
import re
import tempfile
import threading
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from bs4 import BeautifulSoup, Tag

from .errors import ContainerNotFound, RasterizationFailure
from .log import alert, log_debug, log_error
from .profiles import Profile
from .serializers import get_formatted_timestamp

PNG_MIME = "image/png"

# --- Busy flag ---

LOCK_MAX_AGE = 300  # seconds before a lock file is considered stale (crash recovery)


class ExportCoordinator:
    """At most one image export at a time.

    ``busy()`` yields True when the caller got the slot and False when an
    export is already running. The slot is released on every exit path.
    With ``lock_path`` the slot is also held across processes, so two
    command-line invocations cannot rasterize at once.
    """

    def __init__(self, lock_path: Optional[Path] = None, max_age: float = LOCK_MAX_AGE):
        self._lock = threading.Lock()
        self.lock_path = Path(lock_path) if lock_path else None
        self.max_age = max_age

    @property
    def in_flight(self) -> bool:
        return self._lock.locked()

    def _acquire_file(self) -> bool:
        if self.lock_path is None: return True
        self.lock_path.parent.mkdir(parents=True, exist_ok=True)
        if self.lock_path.exists():
            age = time.time() - self.lock_path.stat().st_mtime
            if age < self.max_age:
                return False  # Active lock held by another process
            self.lock_path.unlink(missing_ok=True)  # Stale lock (e.g. previous crash)
        self.lock_path.write_text(str(os.getpid()), encoding="utf-8")
        return True

    def _release_file(self):
        if self.lock_path is not None:
            self.lock_path.unlink(missing_ok=True)

    @contextmanager
    def busy(self) -> Iterator[bool]:
        acquired = self._lock.acquire(blocking=False)
        if acquired and not self._acquire_file():
            self._lock.release()
            acquired = False
        try:
            yield acquired
        finally:
            if acquired:
                self._release_file()
                self._lock.release()


DEFAULT_LOCK_PATH = Path(tempfile.gettempdir()) / "chat_exporter" / "png_export.lock"

# Shared by every PNG export in this process.
coordinator = ExportCoordinator()


# --- Clone preparation ---

ROOT_STYLE = (
    "width: {width}px !important; transform: none !important; overflow: visible !important; "
    "position: static !important; background: white !important; max-height: none !important; "
    "padding: 20px !important; margin: 0 !important; box-sizing: border-box !important;"
)

# Declarations that pin the live layout to the viewport.
_LAYOUT_DECL_RE = re.compile(r"(?:^|;)\s*(?:width|max-height|transform|position)\s*:[^;]*", re.I)


def _strip_layout_styles(style: str) -> str:
    cleaned = _LAYOUT_DECL_RE.sub("", style)
    return "; ".join(d.strip() for d in cleaned.split(";") if d.strip())


def prepare_clone(container_html: str, profile: Profile, width: int = 800) -> str:
    """Static, printable copy of the conversation container.

    Works on its own parse of the HTML, never on the caller's tree.
    """
    soup = BeautifulSoup(container_html, "html.parser")
    root = next((c for c in soup.children if isinstance(c, Tag)), None)
    if root is None:
        raise ContainerNotFound("Empty container snapshot")

    for selector in profile.locators.chrome:
        for el in root.select(selector):
            el.decompose()

    for el in root.find_all(style=True):
        style = _strip_layout_styles(el["style"])
        if style:
            el["style"] = style
        else:
            del el["style"]

    # Display math is positioned with transforms on the live page.
    for math_el in root.select(profile.locators.display_math):
        math_el["style"] = "transform: none !important; position: relative !important;"

    root["style"] = ROOT_STYLE.format(width=width)
    return str(root)


def build_render_page(clone_html: str, head_html: str = "") -> str:
    return f"""<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
{head_html}
<style>html, body {{ background: white; margin: 0; }}</style>
</head>
<body>
<div id="export-root">{clone_html}</div>
</body>
</html>
"""


# --- Export ---

class Rasterizer:
    """Renders a full HTML page off-screen and returns PNG bytes."""

    def render(self, page_html: str, width: int, scale: float, settle_ms: int) -> bytes:
        raise NotImplementedError


def png_filename(prefix: str) -> str:
    return f"{prefix}_{get_formatted_timestamp()}.png"


def export_png(
    container_html: Optional[str],
    profile: Profile,
    rasterizer: Rasterizer,
    out_dir: Path,
    prefix: str = "DeepSeek",
    head_html: str = "",
    width: int = 800,
    scale: float = 2,
    settle_ms: int = 300,
    coordinator: ExportCoordinator = coordinator,
) -> Optional[Path]:
    """Rasterize the conversation and write ``<prefix>_<timestamp>.png``.

    Returns the written path, or None when another export is running or
    the export failed (the failure has already been reported).
    """
    with coordinator.busy() as acquired:
        if not acquired:
            log_debug("Image export already in progress; ignoring request")
            return None

        try:
            clone_html = prepare_clone(container_html or "", profile, width)
        except ContainerNotFound as e:
            log_error(f"Chat container not found: {e}")
            alert("Chat container not found!")
            return None

        try:
            page_html = build_render_page(clone_html, head_html)
            png = rasterizer.render(page_html, width=width, scale=scale, settle_ms=settle_ms)
            if not png:
                raise RasterizationFailure("Renderer returned no image data")
            out_dir.mkdir(parents=True, exist_ok=True)
            path = out_dir / png_filename(prefix)
            path.write_bytes(png)
        except Exception as e:
            # Any step (layout, fonts, screenshot, encode, write) lands here.
            failure = e if isinstance(e, RasterizationFailure) else RasterizationFailure(str(e))
            log_error(f"Screenshot failed: {failure}")
            alert(f"Export failed: {failure}")
            return None

        print(f"Saved to: {path}")
        return path
