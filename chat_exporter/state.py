# -*- coding: utf-8 -*-
"""Structured-state lookup.

The chat page is a React app. The DOM alone has lost the authored
Markdown (math, links, code), but the component props that rendered it
still hold it. ``CAPTURE_STATE_SCRIPT`` runs inside the live page before
it is snapshotted and copies those props onto the elements as JSON. The
providers here read them back out of the parsed snapshot.
"""

import json
from typing import Optional

from bs4 import Tag

STATE_ATTR = "data-export-state"

# Directions of the fiber chains recorded next to the element's own props.
UP = "up"
DOWN = "down"

# Runs in the page with a list of CSS selectors as its argument. For each
# matching element it records the string-valued memoizedProps of the
# element's fiber ("self"), its ancestors along the return chain ("up")
# and its first descendants along the child/sibling chain ("down"), each
# chain nearest first.
CAPTURE_STATE_SCRIPT = """
(selectors) => {
  const MAX_UP = 8, MAX_DOWN = 6;
  const strings = (props) => {
    const out = {};
    if (!props || typeof props !== 'object') return out;
    for (const [k, v] of Object.entries(props)) {
      if (typeof v === 'string' && v.length) out[k] = v;
    }
    return out;
  };
  const filled = (rec) => Object.keys(rec).length > 0;
  let tagged = 0;
  for (const sel of selectors) {
    for (const el of document.querySelectorAll(sel)) {
      const key = Object.keys(el).find(k => k.startsWith('__reactFiber$'));
      if (!key) continue;
      const fiber = el[key];
      const state = {self: strings(fiber.memoizedProps), up: [], down: []};
      let up = fiber.return;
      for (let i = 0; up && i < MAX_UP; i++, up = up.return) {
        const rec = strings(up.memoizedProps);
        if (filled(rec)) state.up.push(rec);
      }
      let down = fiber.child;
      for (let i = 0; down && i < MAX_DOWN; i++) {
        const rec = strings(down.memoizedProps);
        if (filled(rec)) state.down.push(rec);
        down = down.child || down.sibling;
      }
      if (filled(state.self) || state.up.length || state.down.length) {
        el.setAttribute('%s', JSON.stringify(state));
        tagged++;
      }
    }
  }
  return tagged;
}
""" % STATE_ATTR


class StructuredContentProvider:
    """Looks up a raw content string attached to a tree node.

    ``direction`` says which fiber chain holds the value: the answer's
    Markdown sits on an ancestor component, the thinking trace on a
    descendant one.
    """

    def lookup(self, node: Tag, key: str, direction: str = UP) -> Optional[str]:
        raise NotImplementedError


class NullStateProvider(StructuredContentProvider):
    """For snapshots that carry no structured state."""

    def lookup(self, node, key, direction=UP):
        return None


class CapturedStateProvider(StructuredContentProvider):
    """Reads the records written by ``CAPTURE_STATE_SCRIPT``."""

    def __init__(self, attr: str = STATE_ATTR):
        self.attr = attr

    def state(self, node: Tag) -> dict:
        if node is None: return {}
        raw = node.get(self.attr)
        if not raw: return {}
        try:
            data = json.loads(raw)
        except (TypeError, ValueError):
            return {}
        return data if isinstance(data, dict) else {}

    def records(self, node: Tag, direction: str = UP) -> list[dict]:
        """The node's own props, then the chain in ``direction``."""
        state = self.state(node)
        chain = state.get(direction)
        records = [state.get("self")] + (chain if isinstance(chain, list) else [])
        return [r for r in records if isinstance(r, dict)]

    def lookup(self, node, key, direction=UP):
        for record in self.records(node, direction):
            value = record.get(key)
            if isinstance(value, str) and value.strip():
                return value
        return None
