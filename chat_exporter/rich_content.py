# -*- coding: utf-8 -*-
"""Final-answer extraction.

Two strategies, first success wins:

1. structured state: the raw Markdown the answer was rendered from,
   read through a ``StructuredContentProvider``;
2. text pattern: rebuild Markdown from the rendered HTML blocks.
"""

import re
from typing import Optional

from bs4 import NavigableString, Tag
from bs4.element import PreformattedString

from .errors import ContentNodeMissing, Diagnostics, StructuredStateUnavailable
from .profiles import Profile
from .state import NullStateProvider, StructuredContentProvider

_HEADING_RE = re.compile(r"^h[1-6]$")


def math_source(el: Tag, profile: Profile) -> Optional[str]:
    """TeX source of a KaTeX-rendered element, from its annotation."""
    annotation = el.select_one(profile.locators.math_annotation)
    if annotation is None: return None
    return annotation.get_text().strip()


def _matches(el: Tag, selector: str) -> bool:
    return el.css.match(selector)


def render_inline(el, profile: Profile) -> str:
    """Markdown for the inline content of a paragraph-like element."""
    if isinstance(el, PreformattedString):
        return ""  # comments, CDATA, doctypes
    if isinstance(el, NavigableString):
        return str(el)
    if not isinstance(el, Tag):
        return ""

    parts: list[str] = []
    for child in el.children:
        if isinstance(child, PreformattedString):
            continue
        if isinstance(child, NavigableString):
            parts.append(str(child))
            continue
        if not isinstance(child, Tag):
            continue
        if _matches(child, profile.locators.inline_math):
            tex = math_source(child, profile)
            parts.append(f"${tex}$" if tex else child.get_text())
            continue
        if child.name in ("ul", "ol"):
            continue  # rendered by _render_list

        content = render_inline(child, profile)
        if child.name in ("b", "strong"):
            parts.append(f"**{content.strip()}**" if content.strip() else "")
        elif child.name in ("i", "em"):
            parts.append(f"*{content.strip()}*" if content.strip() else "")
        elif child.name == "a":
            href = child.get("href")
            parts.append(f"[{content.strip()}]({href})" if href else content)
        elif child.name == "code":
            parts.append(f"`{child.get_text()}`")
        elif child.name == "br":
            parts.append("\n")
        elif child.name in ("p", "span", "sup", "sub", "mark", "u", "s", "del"):
            parts.append(content)
        else:
            parts.append(child.get_text())
    return "".join(parts)


def _render_code(el: Tag) -> str:
    code_tag = el.find("code") or el
    lang = ""
    for cls in code_tag.get("class") or []:
        if cls.startswith("language-"): lang = cls[len("language-"):]
    return f"```{lang}\n{code_tag.get_text().rstrip()}\n```\n\n"


def _render_list(el: Tag, profile: Profile, depth: int = 0) -> str:
    lines = []
    indent = "   " * depth
    for idx, li in enumerate(el.find_all("li", recursive=False), 1):
        nested = li.find_all(["ul", "ol"], recursive=False)
        text = " ".join(render_inline(li, profile).split())
        prefix = f"{idx}." if el.name == "ol" else "-"
        lines.append(f"{indent}{prefix} {text}")
        for sub in nested:
            lines.append(_render_list(sub, profile, depth + 1).rstrip("\n"))
    return "\n".join(lines) + "\n\n"


def _render_table(el: Tag, profile: Profile) -> str:
    rows = []
    for tr in el.find_all("tr"):
        cols = [" ".join(render_inline(td, profile).split()).replace("|", "\\|")
                for td in tr.find_all(["td", "th"], recursive=False)]
        if cols: rows.append(cols)
    if not rows: return ""
    # The first row is the header, even when the page marks it up with td.
    rows.insert(1, ["---"] * len(rows[0]))
    return "\n".join("| " + " | ".join(cols) + " |" for cols in rows) + "\n\n"


def render_block(el, profile: Profile) -> str:
    """Markdown for one block child of the answer container ("" if unrecognized)."""
    if not isinstance(el, Tag):
        return ""
    loc = profile.locators

    # Display math can be wrapped in a paragraph, so test it first.
    display = el if _matches(el, loc.display_math) else el.select_one(loc.display_math)
    if display is not None and not _has_text_outside(el, display):
        tex = math_source(display, profile)
        return f"$${tex}$$\n\n" if tex else ""

    if el.name == "p" or _matches(el, loc.paragraph):
        return f"{render_inline(el, profile).strip()}\n\n"
    if _HEADING_RE.match(el.name):
        return f"### {render_inline(el, profile).strip()}\n\n"
    if el.name == "hr":
        return "---\n\n"
    if el.name == "pre":
        return _render_code(el)
    if el.name in ("ul", "ol"):
        return _render_list(el, profile)
    if el.name == "table":
        return _render_table(el, profile)
    if el.name == "blockquote":
        inner = "".join(render_block(c, profile) for c in el.children).strip()
        if not inner:
            inner = el.get_text().strip()
        return "\n".join(f"> {line}" if line else ">" for line in inner.split("\n")) + "\n\n"
    # Code blocks and tables are wrapped in a div on the site.
    if el.name == "div":
        pre = el.find("pre")
        if pre is not None:
            return _render_code(pre)
        table = el.find("table")
        if table is not None:
            return _render_table(table, profile)
    return ""


def _has_text_outside(el: Tag, inner: Tag) -> bool:
    if el is inner: return False
    for text in el.find_all(string=True):
        if isinstance(text, PreformattedString):
            continue
        if text.strip() and not any(p is inner for p in text.parents):
            return True
    return False


def extract_from_blocks(answer_el: Tag, profile: Profile) -> str:
    return "".join(render_block(child, profile) for child in answer_el.children)


def extract_final_answer(
    node: Tag,
    profile: Profile,
    provider: Optional[StructuredContentProvider] = None,
    diagnostics: Optional[Diagnostics] = None,
) -> Optional[str]:
    """Markdown of the assistant's final answer in ``node``, or None."""
    provider = provider or NullStateProvider()
    diagnostics = diagnostics if diagnostics is not None else Diagnostics()

    answer_el = node.select_one(profile.locators.final_answer)
    if answer_el is None:
        diagnostics.record(ContentNodeMissing("No answer node found"))
        return None

    markdown = provider.lookup(answer_el, profile.state.answer, profile.state.answer_from)
    if markdown:
        return markdown

    diagnostics.record(StructuredStateUnavailable("Answer markdown not in structured state; using rendered blocks"))
    return extract_from_blocks(answer_el, profile)
