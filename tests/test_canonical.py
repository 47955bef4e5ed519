"""Tests for the canonical document and the math notation fix."""

import pytest

from chat_exporter.canonical import TURN_SEPARATOR, canonicalize, fix_math_delimiters
from chat_exporter.model import Role, Turn

SAMPLES = [
    "",
    "plain text",
    r"inline \( x^2 \) and display \[ x^2 \]",
    r"\(\( nested \)\)",
    r"\[ \( mixed \) \]",
    "\\[\n  a \\\\ b\n\\]",
    r"unbalanced \( open",
    r"escaped \\( not math \\)",
    "Use \\( for groups.\n\nThen close with \\) later.",
    "$already$ and $$done$$",
]


def _user(text, ordinal=0):
    return Turn(role=Role.USER, ordinal=ordinal, text=text)


def _assistant(answer=None, ordinal=1, hint=None, trace=None):
    return Turn(role=Role.ASSISTANT, ordinal=ordinal, final_answer=answer, status_hint=hint, thinking_trace=trace)


class TestMathDelimiters:

    def test_inline(self):
        assert fix_math_delimiters(r"value \( x^2 \) here") == "value $x^2$ here"

    def test_display(self):
        assert fix_math_delimiters(r"\[ x^2 \]") == "$$x^2$$"

    def test_display_block_style(self):
        assert fix_math_delimiters(r"\[ x^2 \]", display_style="block") == "$$\nx^2\n$$"

    def test_multiline_display(self):
        assert fix_math_delimiters("\\[\n  a + b\n\\]") == "$$a + b$$"

    def test_non_greedy(self):
        assert fix_math_delimiters(r"\(a\) and \(b\)") == "$a$ and $b$"

    def test_inline_stays_on_one_line(self):
        text = "Use \\( for groups.\n\nThen close with \\) later."
        assert fix_math_delimiters(text) == text
        assert fix_math_delimiters("a \\( x \\) b\nc \\(y\\)") == "a $x$ b\nc $y$"

    @pytest.mark.parametrize("style", ["inline", "block"])
    @pytest.mark.parametrize("sample", SAMPLES)
    def test_idempotent(self, sample, style):
        once = fix_math_delimiters(sample, style)
        assert fix_math_delimiters(once, style) == once


class TestCanonicalize:

    def test_separator_and_headers(self):
        content = canonicalize([_user("Hello"), _assistant("Hi there\n\n")])
        assert content == "## User\n\nHello" + TURN_SEPARATOR + "## Assistant\n\nHi there"

    def test_title(self):
        assert canonicalize([_user("Q")], title="Chat").startswith("# Chat\n\n## User\n\nQ")

    def test_conversion_toggle(self):
        turns = [_assistant(r"see \( y \)")]
        assert canonicalize(turns, convert_latex=True).endswith("see $y$")
        assert canonicalize(turns, convert_latex=False).endswith(r"see \( y \)")

    def test_empty_assistant_never_rendered(self):
        content = canonicalize([_user("Q"), _assistant(None), _assistant("   ")])
        assert content == "## User\n\nQ"

    def test_assistant_piece_order(self):
        turn = _assistant("answer", hint="**Thought for 2s**", trace="### Thought Process\n\n> t")
        assert canonicalize([turn]) == "## Assistant\n\n**Thought for 2s**\n\n### Thought Process\n\n> t\n\nanswer"

    def test_custom_headers(self):
        content = canonicalize([_user("Q"), _assistant("A")], user_header="Me", assistant_header="Bot")
        assert content == "## Me\n\nQ" + TURN_SEPARATOR + "## Bot\n\nA"

    @pytest.mark.parametrize("sample", SAMPLES)
    def test_canonical_form_is_fixed_point(self, sample):
        content = canonicalize([_user(sample or "x"), _assistant(sample or "y")])
        assert fix_math_delimiters(content) == content
