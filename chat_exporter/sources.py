# -*- coding: utf-8 -*-
"""Where a page snapshot comes from: a saved HTML file or the clipboard.

A live browser page is handled by ``browser.LivePage``.
"""

import re
from pathlib import Path

import pyperclip

from .errors import SourceError
from .log import log_debug

_FRAGMENT_RE = re.compile(r"<!--StartFragment-->(.*)<!--EndFragment-->", re.DOTALL)


def try_repair_mojibake(text: str) -> str:
    """Repair strings where UTF-8 bytes were misinterpreted as Latin-1 or CP1252."""
    # Text that already holds real high-code characters (e.g. CJK) is left alone
    if any(ord(c) > 0x1000 for c in text):
        return text

    for enc in ("latin-1", "cp1252"):
        try:
            repaired_text = text.encode(enc).decode("utf-8")
        except (UnicodeEncodeError, UnicodeDecodeError):
            continue
        # Heuristic: if repaired text has CJK characters, it's probably correct
        if any(ord(c) >= 0x3000 for c in repaired_text):
            return repaired_text
    return text


def unwrap_cf_html(content: str) -> str:
    """Strip the Windows CF_HTML header, keeping only the copied fragment."""
    if "StartFragment:" in content:
        match = _FRAGMENT_RE.search(content)
        if match: return match.group(1)
    return content


def read_file(path) -> str:
    path = Path(path)
    if not path.exists():
        raise SourceError(f"File not found: {path}")
    content = path.read_text(encoding="utf-8", errors="replace")
    if not content.strip():
        raise SourceError(f"File is empty: {path}")
    log_debug(f"Read {len(content)} characters from {path}")
    return unwrap_cf_html(content)


def read_clipboard() -> str:
    content = pyperclip.paste() or ""
    if not content.strip():
        raise SourceError("Clipboard is empty")
    return unwrap_cf_html(try_repair_mojibake(content))


def copy_to_clipboard(text: str) -> None:
    pyperclip.copy(text)
