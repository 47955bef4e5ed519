# -*- coding: utf-8 -*-
"""Walk the conversation container and build the ordered list of turns."""

from typing import Optional

from bs4 import BeautifulSoup, Tag

from .classify import classify
from .errors import ContainerNotFound, ContentNodeMissing, Diagnostics
from .log import log_debug
from .model import ConversationDocument, Role, Turn
from .profiles import Profile
from .rich_content import extract_final_answer
from .state import NullStateProvider, StructuredContentProvider
from .thinking import extract_status_hint, extract_thinking


def find_container(root: Tag, profile: Profile) -> Optional[Tag]:
    if root is None: return None
    if not isinstance(root, BeautifulSoup) and root.css.match(profile.locators.container):
        return root
    return root.select_one(profile.locators.container)


def build_assistant_turn(
    node: Tag,
    ordinal: int,
    profile: Profile,
    provider: StructuredContentProvider,
    diagnostics: Diagnostics,
    thoughts_header: str = "Thought Process",
) -> Turn:
    # Some layouts nest the hint and the trace in a narrower reply container.
    scope = node.select_one(profile.locators.reply_container) or node
    return Turn(
        role=Role.ASSISTANT,
        ordinal=ordinal,
        status_hint=extract_status_hint(scope, profile),
        thinking_trace=extract_thinking(scope, profile, provider, diagnostics, header=thoughts_header),
        final_answer=extract_final_answer(node, profile, provider, diagnostics),
    )


def sequence_turns(
    root: Optional[Tag],
    profile: Profile,
    provider: Optional[StructuredContentProvider] = None,
    diagnostics: Optional[Diagnostics] = None,
    thoughts_header: str = "Thought Process",
) -> list[Turn]:
    """Turns of the conversation under ``root`` in document order.

    A missing container is recorded on ``diagnostics`` as ContainerNotFound
    and yields an empty list.
    """
    provider = provider or NullStateProvider()
    diagnostics = diagnostics if diagnostics is not None else Diagnostics()

    container = find_container(root, profile)
    if container is None:
        diagnostics.record(ContainerNotFound(f"Chat container not found ({profile.locators.container})"))
        return []

    turns: list[Turn] = []
    for index, node in enumerate(container.find_all(True, recursive=False)):
        role, text = classify(node, profile.locators)
        if role == Role.USER:
            turns.append(Turn(role=Role.USER, ordinal=index, text=text))
        elif role == Role.ASSISTANT:
            turn = build_assistant_turn(node, index, profile, provider, diagnostics, thoughts_header)
            if turn.is_empty():
                log_debug(f"Dropping empty assistant turn at position {index}")
                continue
            turns.append(turn)
    return turns


def extract_title(root: Optional[Tag], profile: Profile, diagnostics: Optional[Diagnostics] = None) -> Optional[str]:
    title_el = root.select_one(profile.locators.title) if root is not None else None
    title = title_el.get_text().strip() if title_el is not None else ""
    if not title:
        if diagnostics is not None:
            diagnostics.record(ContentNodeMissing("No chat title"))
        return None
    return title


def extract_document(
    soup: BeautifulSoup,
    profile: Profile,
    provider: Optional[StructuredContentProvider] = None,
    diagnostics: Optional[Diagnostics] = None,
    thoughts_header: str = "Thought Process",
) -> ConversationDocument:
    """Snapshot the whole conversation: title plus ordered turns."""
    diagnostics = diagnostics if diagnostics is not None else Diagnostics()
    turns = sequence_turns(soup, profile, provider, diagnostics, thoughts_header)
    return ConversationDocument(turns=tuple(turns), title=extract_title(soup, profile, diagnostics))
