from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    OTHER = "other"


@dataclass(frozen=True)
class Turn:
    role: Role
    ordinal: int
    text: str = ""                       # user turns
    status_hint: Optional[str] = None    # assistant turns
    thinking_trace: Optional[str] = None
    final_answer: Optional[str] = None

    def body(self) -> str:
        """Markdown body under the role header."""
        if self.role == Role.USER:
            return self.text
        parts = [p.strip() for p in (self.status_hint, self.thinking_trace, self.final_answer) if p and p.strip()]
        return "\n\n".join(parts)

    def is_empty(self) -> bool:
        return not self.body().strip()


@dataclass(frozen=True)
class ConversationDocument:
    turns: tuple[Turn, ...] = field(default_factory=tuple)
    title: Optional[str] = None

    def __len__(self) -> int:
        return len(self.turns)

    def is_empty(self) -> bool:
        return not self.turns
