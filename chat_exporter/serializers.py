# -*- coding: utf-8 -*-
"""Markdown and print-HTML projections of the canonical document."""

import datetime as dt
import html
import re
from typing import Optional

from .canonical import TURN_SEPARATOR

# --- File names ---

def make_filename_safe(text: Optional[str], max_length: int = 50) -> str:
    if not text: return ""
    text = re.sub(r"[^a-zA-Z0-9\-_\s]", "", text)
    text = re.sub(r"\s+", "_", text)
    return text[:max_length].rstrip("_").strip()


def get_formatted_timestamp(now: Optional[dt.datetime] = None) -> str:
    """Sortable UTC timestamp: YYYY-MM-DD_HH_MM_SS."""
    now = now or dt.datetime.now(dt.timezone.utc)
    return now.strftime("%Y-%m-%d_%H_%M_%S")


def build_filename(prefix: str, extension: str, title: Optional[str] = None,
                   title_max_length: int = 30, now: Optional[dt.datetime] = None) -> str:
    safe_title = make_filename_safe(title, title_max_length)
    title_part = f"_{safe_title}" if safe_title else ""
    return f"{prefix}{title_part}_{get_formatted_timestamp(now)}.{extension}"


# --- Markdown ---

MARKDOWN_MIME = "text/markdown"

def to_markdown_bytes(canonical: str) -> bytes:
    return canonical.encode("utf-8")


# --- Print HTML ---

PRINT_STYLE = """
body { font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, sans-serif; line-height: 1.6; padding: 20px; max-width: 800px; margin: 0 auto; }
h2 { color: #2c3e50; border-bottom: 1px solid #eee; padding-bottom: 0.3em; }
h3 { color: #555; margin-top: 15px; }
.ai-answer { color: #1a7f37; margin: 15px 0; }
.ai-chain { color: #666; font-style: italic; margin: 10px 0; padding-left: 15px; border-left: 3px solid #ddd; }
hr { border: 0; border-top: 1px solid #eee; margin: 25px 0; }
blockquote { border-left: 3px solid #ddd; margin: 0 0 20px; padding-left: 15px; color: #666; font-style: italic; }
""".strip()

_QUOTE_RE = re.compile(r"^> ?")


def _split_turns(canonical: str, headers: tuple[str, ...]) -> list[str]:
    # Only a separator followed by a role header ends a turn; a "---" rule
    # inside an answer stays part of it.
    lookahead = "|".join(re.escape(f"## {h}\n") for h in headers)
    return re.split(rf"{re.escape(TURN_SEPARATOR)}(?={lookahead})", canonical)


def _render_turn_html(chunk: str, user_header: str, assistant_header: str, thoughts_header: str) -> str:
    lines = chunk.split("\n")
    out: list[str] = []
    open_div = in_chain = False
    pending_break = False
    at_start = True  # blank lines right after a header are dropped

    def emit(text):
        nonlocal pending_break, at_start
        if pending_break: out.append("<br>")
        out.append(text)
        pending_break, at_start = True, False

    for line in lines:
        if line == f"## {user_header}" or line == f"## {assistant_header}":
            css = "user-question" if line == f"## {user_header}" else "ai-answer"
            out.append(f"<h2>{html.escape(line[3:])}</h2><div class=\"{css}\">")
            open_div, pending_break, at_start = True, False, True
            continue
        if line.startswith("# ") and not open_div:
            out.append(f"<h1>{html.escape(line[2:])}</h1>")
            pending_break, at_start = False, True
            continue
        if line == f"### {thoughts_header}":
            out.append(f"<h3>{html.escape(thoughts_header)}</h3><blockquote class=\"ai-chain\">")
            in_chain, pending_break, at_start = True, False, True
            continue
        if in_chain and line and not line.startswith(">"):
            out.append("</blockquote>")
            in_chain, pending_break = False, False
        if not line and (at_start or in_chain):
            continue
        emit(html.escape(_QUOTE_RE.sub("", line)))

    if in_chain: out.append("</blockquote>")
    if open_div: out.append("</div>")
    return "".join(out)


def to_print_html(
    canonical: str,
    user_header: str = "User",
    assistant_header: str = "Assistant",
    thoughts_header: str = "Thought Process",
    page_title: str = "DeepSeek Chat Export",
) -> str:
    """Styled, print-ready HTML page for the canonical document."""
    chunks = _split_turns(canonical, (user_header, assistant_header))
    body = "<hr>".join(_render_turn_html(c, user_header, assistant_header, thoughts_header) for c in chunks)
    return f"""<html>
<head>
<meta charset="utf-8">
<title>{html.escape(page_title)}</title>
<style>
{PRINT_STYLE}
</style>
</head>
<body>
{body}
</body>
</html>
"""
