"""Tests for snapshot sources."""

import pytest

from chat_exporter.errors import SourceError
from chat_exporter.sources import read_clipboard, read_file, try_repair_mojibake, unwrap_cf_html

CF_HTML = (
    "Version:0.9\r\nStartHTML:00000097\r\nEndHTML:00000200\r\n"
    "StartFragment:00000131\r\nEndFragment:00000164\r\n"
    "<html><body><!--StartFragment--><div class=\"dad65929\">x</div><!--EndFragment--></body></html>"
)


def test_unwrap_cf_html():
    assert unwrap_cf_html(CF_HTML) == '<div class="dad65929">x</div>'
    assert unwrap_cf_html("<div>plain</div>") == "<div>plain</div>"


def test_repair_mojibake():
    garbled = "你好".encode("utf-8").decode("latin-1")
    assert try_repair_mojibake(garbled) == "你好"
    assert try_repair_mojibake("你好") == "你好"
    assert try_repair_mojibake("plain ascii") == "plain ascii"


def test_read_file(tmp_path):
    path = tmp_path / "chat.html"
    path.write_text(CF_HTML, encoding="utf-8")
    assert read_file(path) == '<div class="dad65929">x</div>'


def test_read_file_errors(tmp_path):
    with pytest.raises(SourceError, match="not found"):
        read_file(tmp_path / "missing.html")
    empty = tmp_path / "empty.html"
    empty.write_text("  \n", encoding="utf-8")
    with pytest.raises(SourceError, match="empty"):
        read_file(empty)


def test_read_clipboard(monkeypatch):
    monkeypatch.setattr("pyperclip.paste", lambda: "<div>copied</div>")
    assert read_clipboard() == "<div>copied</div>"


def test_read_clipboard_empty(monkeypatch):
    monkeypatch.setattr("pyperclip.paste", lambda: "")
    with pytest.raises(SourceError, match="Clipboard is empty"):
        read_clipboard()
