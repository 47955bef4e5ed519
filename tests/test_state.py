"""Tests for reading captured page state."""

from bs4 import BeautifulSoup

from chat_exporter.state import DOWN, UP, CapturedStateProvider, NullStateProvider
from tests.pages import state_attr


def _node(attrs=""):
    return BeautifulSoup(f"<div{attrs}></div>", "html.parser").div


class TestCapturedStateProvider:

    def test_own_props_first(self):
        node = _node(state_attr({"content": "own"}, up=[{"content": "parent"}], down=[{"content": "child"}]))
        provider = CapturedStateProvider()
        assert provider.lookup(node, "content", UP) == "own"
        assert provider.lookup(node, "content", DOWN) == "own"

    def test_only_the_requested_chain(self):
        node = _node(state_attr(up=[{"content": "parent"}], down=[{"className": "x"}, {"content": "child"}]))
        provider = CapturedStateProvider()
        assert provider.lookup(node, "content", UP) == "parent"
        assert provider.lookup(node, "content", DOWN) == "child"
        assert provider.lookup(node, "markdown", DOWN) is None

    def test_blank_values_skipped(self):
        node = _node(state_attr(up=[{"markdown": "   "}, {"markdown": "real"}]))
        assert CapturedStateProvider().lookup(node, "markdown") == "real"

    def test_unusable_attribute(self):
        provider = CapturedStateProvider()
        for attrs in ("", ' data-export-state="not json"', ' data-export-state="[1, 2]"',
                      ' data-export-state="{&quot;up&quot;: &quot;x&quot;}"'):
            assert provider.lookup(_node(attrs), "markdown") is None

    def test_null_provider(self):
        assert NullStateProvider().lookup(_node(state_attr({"markdown": "x"})), "markdown") is None
