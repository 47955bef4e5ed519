"""Decide what a child of the conversation container is."""

from typing import NamedTuple, Optional

from bs4 import NavigableString, Tag

from .model import Role
from .profiles import Locators


class Classification(NamedTuple):
    role: Role
    text: Optional[str] = None


def get_user_message(node: Tag, locators: Locators) -> Optional[str]:
    """Text of the user message content inside ``node``, or None.

    Only the content element's own first child is read; the surrounding
    node also holds edit/copy chrome that must not leak into the export.
    """
    message_el = node.select_one(locators.user_message)
    if message_el is None: return None
    first = next(iter(message_el.children), None)
    if first is None:
        return ""
    if isinstance(first, NavigableString):
        return str(first).strip()
    return first.get_text().strip()


def is_assistant_message(node: Tag, locators: Locators) -> bool:
    return locators.assistant_class in (node.get("class") or [])


def classify(node, locators: Locators) -> Classification:
    if not isinstance(node, Tag):
        return Classification(Role.OTHER)
    text = get_user_message(node, locators)
    # Empty text means the content has not hydrated yet; not a turn.
    if text:
        return Classification(Role.USER, text)
    if is_assistant_message(node, locators):
        return Classification(Role.ASSISTANT)
    return Classification(Role.OTHER)
