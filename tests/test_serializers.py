"""Tests for file names and the print-HTML view."""

import datetime as dt

from chat_exporter.serializers import (
    build_filename,
    get_formatted_timestamp,
    make_filename_safe,
    to_markdown_bytes,
    to_print_html,
)

NOW = dt.datetime(2025, 3, 4, 5, 6, 7, tzinfo=dt.timezone.utc)


class TestFilenames:

    def test_make_filename_safe(self):
        assert make_filename_safe("Hello, World! (v2)") == "Hello_World_v2"
        assert make_filename_safe("  many   spaces  ") == "_many_spaces"
        assert make_filename_safe(None) == ""
        assert make_filename_safe("数学") == ""

    def test_length_cap_trims_trailing_underscores(self):
        assert make_filename_safe("abcd efgh", max_length=5) == "abcd"

    def test_timestamp(self):
        assert get_formatted_timestamp(NOW) == "2025-03-04_05_06_07"

    def test_build_filename(self):
        assert build_filename("DeepSeek", "md", "Quick question", now=NOW) == "DeepSeek_Quick_question_2025-03-04_05_06_07.md"
        assert build_filename("DeepSeek", "md", None, now=NOW) == "DeepSeek_2025-03-04_05_06_07.md"
        assert build_filename("DeepSeek", "pdf", "!!!", now=NOW) == "DeepSeek_2025-03-04_05_06_07.pdf"

    def test_markdown_bytes_are_utf8(self):
        assert to_markdown_bytes("## User\n\n你好") == "## User\n\n你好".encode("utf-8")


class TestPrintHtml:

    def _body(self, canonical):
        doc = to_print_html(canonical)
        return doc.split("<body>\n", 1)[1].split("\n</body>", 1)[0]

    def test_turns(self):
        body = self._body("## User\n\nHello\n\n---\n\n## Assistant\n\nHi there")
        assert body == (
            '<h2>User</h2><div class="user-question">Hello</div>'
            '<hr>'
            '<h2>Assistant</h2><div class="ai-answer">Hi there</div>'
        )

    def test_title_and_line_breaks(self):
        body = self._body("# My chat\n\n## User\n\nline one\nline two")
        assert body == '<h1>My chat</h1><h2>User</h2><div class="user-question">line one<br>line two</div>'

    def test_thinking_blockquote(self):
        canonical = (
            "## Assistant\n\n**Thought for 2s**\n\n### Thought Process\n\n"
            "> step one\n>\n> step two\n\nFinal answer"
        )
        body = self._body(canonical)
        assert '<h3>Thought Process</h3><blockquote class="ai-chain">step one<br><br>step two</blockquote>' in body
        assert body.endswith("</blockquote>Final answer</div>")
        assert "&gt;" not in body

    def test_rule_inside_answer_is_not_a_separator(self):
        body = self._body("## Assistant\n\nabove\n\n---\n\nbelow")
        assert "<hr>" not in body
        assert "above<br><br>---<br><br>below" in body

    def test_content_is_escaped(self):
        body = self._body("## User\n\n<script>alert(1)</script> & co")
        assert "<script>" not in body
        assert "&lt;script&gt;alert(1)&lt;/script&gt; &amp; co" in body

    def test_tags_balanced(self):
        canonical = (
            "# T\n\n## User\n\nq\n\n---\n\n## Assistant\n\n### Thought Process\n\n> t"
            "\n\n---\n\n## User\n\nq2"
        )
        body = self._body(canonical)
        for tag in ("div", "blockquote", "h2", "h3"):
            assert body.count(f"<{tag}") == body.count(f"</{tag}>")
        assert body.count("<hr>") == 2

    def test_document_shell(self):
        doc = to_print_html("## User\n\nq", page_title="DeepSeek Chat Export")
        assert doc.startswith("<html>")
        assert "<title>DeepSeek Chat Export</title>" in doc
        assert ".ai-chain" in doc
