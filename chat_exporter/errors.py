"""Error taxonomy for one export invocation."""

from typing import Optional, Type

from .log import log_debug


class ExportError(Exception):
    """Base class for everything an export can report."""
    pass


class ContainerNotFound(ExportError):
    """The conversation root is not in the tree; the export is aborted."""
    pass


class ContentNodeMissing(ExportError):
    """An expected descendant (answer, thinking chain, title) is absent for one turn."""
    pass


class StructuredStateUnavailable(ExportError):
    """The preferred structured-state path is unavailable for one node."""
    pass


class RasterizationFailure(ExportError):
    """Font loading, layout, screenshot or encoding failed during image export."""
    pass


class ProfileError(ExportError):
    """No usable locator profile could be loaded."""
    pass


class SourceError(ExportError):
    """A snapshot source was empty or could not be read."""
    pass


class Diagnostics:
    """Collects conditions that are signalled rather than raised.

    Extraction never throws for a missing node. It records what it could
    not find here, and the caller decides what to surface.
    """

    def __init__(self):
        self.conditions: list[ExportError] = []

    def record(self, condition: ExportError) -> None:
        log_debug(f"{type(condition).__name__}: {condition}")
        self.conditions.append(condition)

    def has(self, kind: Type[ExportError]) -> bool:
        return any(isinstance(c, kind) for c in self.conditions)

    def first(self, kind: Type[ExportError]) -> Optional[ExportError]:
        return next((c for c in self.conditions if isinstance(c, kind)), None)

    def __len__(self):
        return len(self.conditions)
