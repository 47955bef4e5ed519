"""Canonical Markdown document and the math-delimiter notation fix."""

import re
from typing import Iterable, Optional

from .model import Role, Turn

TURN_SEPARATOR = "\n\n---\n\n"

_INLINE_MATH_RE = re.compile(r"\\\(\s*(.*?)\s*\\\)")
_DISPLAY_MATH_RE = re.compile(r"\\\[\s*(.*?)\s*\\\]", re.S)


def _fix_once(content: str, display_style: str) -> str:
    content = _INLINE_MATH_RE.sub(lambda m: f"${m.group(1)}$", content)
    if display_style == "block":
        return _DISPLAY_MATH_RE.sub(lambda m: f"$$\n{m.group(1)}\n$$", content)
    return _DISPLAY_MATH_RE.sub(lambda m: f"$${m.group(1)}$$", content)


def fix_math_delimiters(content: str, display_style: str = "inline") -> str:
    r"""Convert ``\( x \)`` to ``$x$`` and ``\[ x \]`` to ``$$x$$``.

    Runs until the text stops changing, so nested delimiters are fully
    converted and calling it again is a no-op. Every substitution removes
    two backslashes, which bounds the loop.
    """
    while True:
        fixed = _fix_once(content, display_style)
        if fixed == content:
            return fixed
        content = fixed


def render_turn(turn: Turn, user_header: str = "User", assistant_header: str = "Assistant") -> str:
    header = user_header if turn.role == Role.USER else assistant_header
    return f"## {header}\n\n{turn.body()}"


def canonicalize(
    turns: Iterable[Turn],
    title: Optional[str] = None,
    convert_latex: bool = True,
    display_style: str = "inline",
    user_header: str = "User",
    assistant_header: str = "Assistant",
) -> str:
    blocks = [render_turn(t, user_header, assistant_header) for t in turns if not t.is_empty()]
    content = f"# {title}\n\n" if title else ""
    content += TURN_SEPARATOR.join(blocks)

    if convert_latex:
        content = fix_math_delimiters(content, display_style)
    return content
