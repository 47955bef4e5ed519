"""Thinking-trace and status-hint extraction for assistant turns."""

from typing import Optional

from bs4 import Tag

from .errors import ContentNodeMissing, Diagnostics, StructuredStateUnavailable
from .profiles import Profile
from .rich_content import math_source
from .state import NullStateProvider, StructuredContentProvider


def extract_status_hint(node: Tag, profile: Profile) -> Optional[str]:
    """Bold status line such as "Thought for 12 seconds", or None."""
    hint_el = node.select_one(profile.locators.status_hint)
    if hint_el is None: return None
    text = hint_el.get_text().strip()
    return f"**{text}**" if text else None


def quote(text: str) -> str:
    """Prefix every line with a blockquote marker."""
    return "\n".join(f"> {line}" for line in text.split("\n"))


def _unwrap(el: Tag, profile: Profile) -> Tag:
    """Descend through single-child wrapper divs to the paragraph list."""
    loc = profile.locators
    while True:
        tags = [c for c in el.children if isinstance(c, Tag)]
        if len(tags) != 1: return el
        only = tags[0]
        if only.css.match(loc.thinking_paragraph) or only.css.match(loc.display_math):
            return el
        el = only


def _quoted_paragraphs(chain_el: Tag, profile: Profile, provider: StructuredContentProvider) -> list[str]:
    loc = profile.locators
    lines: list[str] = []
    for child in _unwrap(chain_el, profile).children:
        if not isinstance(child, Tag):
            continue
        display = child if child.css.match(loc.display_math) else child.select_one(loc.display_math)
        if display is not None:
            tex = math_source(display, profile)
            if tex: lines.append(f"> $${tex}$$")
        elif child.css.match(loc.thinking_paragraph):
            text = provider.lookup(child, profile.state.paragraph, profile.state.paragraph_from) or child.get_text()
            if text.strip(): lines.append(f"> {text.strip()}")
    return lines


def extract_thinking(
    node: Tag,
    profile: Profile,
    provider: Optional[StructuredContentProvider] = None,
    diagnostics: Optional[Diagnostics] = None,
    header: str = "Thought Process",
) -> Optional[str]:
    """Thinking trace under ``node`` as a headed blockquote, or None."""
    provider = provider or NullStateProvider()
    diagnostics = diagnostics if diagnostics is not None else Diagnostics()

    chain_el = node.select_one(profile.locators.thinking_chain)
    if chain_el is None:
        diagnostics.record(ContentNodeMissing("No thinking chain"))
        return None

    content = provider.lookup(chain_el, profile.state.thinking, profile.state.thinking_from)
    if content:
        body = quote(content)
    else:
        diagnostics.record(StructuredStateUnavailable("Thinking content not in structured state; using rendered paragraphs"))
        lines = _quoted_paragraphs(chain_el, profile, provider)
        if not lines:
            return None
        body = "\n>\n".join(lines)

    return f"### {header}\n\n{body}"
