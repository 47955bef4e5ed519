"""Tests for turn sequencing and document extraction."""

from bs4 import BeautifulSoup

from chat_exporter.canonical import canonicalize
from chat_exporter.errors import ContainerNotFound
from chat_exporter.model import Role
from chat_exporter.sequencer import extract_document, sequence_turns
from chat_exporter.state import CapturedStateProvider
from tests.pages import (
    answer,
    assistant_node,
    hint,
    page,
    paragraph,
    state_attr,
    thinking,
    user_node,
)


def _soup(markup):
    return BeautifulSoup(markup, "html.parser")


class TestSequenceTurns:
    """Turns come out in document order, empty ones dropped."""

    def test_hello_scenario(self, profile):
        soup = _soup(page(user_node("Hello"), assistant_node(answer(paragraph("Hi there")))))
        turns = sequence_turns(soup, profile)
        assert canonicalize(turns) == "## User\n\nHello\n\n---\n\n## Assistant\n\nHi there"

    def test_order_and_ordinals(self, profile):
        children = []
        for i in range(3):
            children.append(user_node(f"q{i}"))
            children.append(assistant_node(answer(paragraph(f"a{i}"))))
        turns = sequence_turns(_soup(page(*children)), profile)
        assert [t.role for t in turns] == [Role.USER, Role.ASSISTANT] * 3
        assert [t.text or t.final_answer.strip() for t in turns] == ["q0", "a0", "q1", "a1", "q2", "a2"]
        assert [t.ordinal for t in turns] == sorted(t.ordinal for t in turns)

    def test_empty_turns_dropped(self, profile):
        children = [
            user_node("kept"),
            assistant_node('<div class="spinner"></div>'),
            user_node("   "),
            '<div class="date-divider">Today</div>',
            assistant_node(answer(paragraph("also kept"))),
        ]
        turns = sequence_turns(_soup(page(*children)), profile)
        assert len(turns) == 2
        assert len(turns) <= len(children)
        assert [t.body() for t in turns] == ["kept", "also kept"]

    def test_assistant_body_order(self, profile):
        node = assistant_node(
            hint("Thought for 3 seconds"),
            thinking(paragraph("pondering")),
            answer(paragraph("Answer.")),
        )
        (turn,) = sequence_turns(_soup(page(node)), profile)
        assert turn.body() == (
            "**Thought for 3 seconds**\n\n"
            "### Thought Process\n\n> pondering\n\n"
            "Answer."
        )

    def test_reply_container_scopes_trace(self, profile):
        node = (
            '<div class="_4f9bf79">' + hint("decoy outside reply")
            + '<div class="_43c05b5">' + hint("Thinking stopped") + thinking(paragraph("inner")) + "</div>"
            + answer(paragraph("outer")) + "</div>"
        )
        (turn,) = sequence_turns(_soup(page(node)), profile)
        assert turn.status_hint == "**Thinking stopped**"
        assert "> inner" in turn.thinking_trace
        assert turn.final_answer.strip() == "outer"

    def test_structured_state(self, profile):
        node = assistant_node(
            thinking("", state_attr(down=[{"content": "raw thought"}])),
            answer(paragraph("flat"), state_attr(up=[{"markdown": "Raw \\(x\\) answer"}])),
        )
        (turn,) = sequence_turns(_soup(page(node)), profile, CapturedStateProvider())
        assert turn.thinking_trace == "### Thought Process\n\n> raw thought"
        assert turn.final_answer == "Raw \\(x\\) answer"

    def test_container_missing(self, profile, diagnostics):
        soup = _soup("<html><body><div class='other'>" + user_node("lost") + "</div></body></html>")
        assert sequence_turns(soup, profile, diagnostics=diagnostics) == []
        assert diagnostics.has(ContainerNotFound)

    def test_root_is_container(self, profile):
        soup = _soup(page(user_node("direct")))
        container = soup.select_one(profile.locators.container)
        assert [t.text for t in sequence_turns(container, profile)] == ["direct"]


class TestExtractDocument:

    def test_title_and_turns(self, profile):
        doc = extract_document(_soup(page(user_node("Hi"), title="  My chat ")), profile)
        assert doc.title == "My chat"
        assert len(doc) == 1

    def test_missing_title(self, profile, diagnostics):
        doc = extract_document(_soup(page(user_node("Hi"))), profile, diagnostics=diagnostics)
        assert doc.title is None
        assert not diagnostics.has(ContainerNotFound)
