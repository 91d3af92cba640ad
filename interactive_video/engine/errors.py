"""Exceptions raised by the playback and authoring engine.

None of these is fatal to a playback session: callers log them and carry on,
at worst in a degraded (unsaved) mode.
"""


class EngineError(Exception):
    """Base class for engine errors."""


class AlreadyResolved(EngineError):
    """Raised when an element that is already completed is resolved again."""

    def __init__(self, element_id: str):
        super().__init__(f"Element {element_id!r} is already resolved")
        self.element_id = element_id


class InvalidOption(EngineError):
    """Raised when a response does not reference a usable option."""


class CorruptProgress(EngineError):
    """Raised when a suspend-data blob cannot be decoded."""

    def __init__(self, message: str, raw: str):
        super().__init__(message)
        self.raw = raw


class PersistenceUnavailable(EngineError):
    """Raised when the key-value boundary fails to set or commit."""


class ElementNotFound(EngineError):
    """Raised when an element id is not present in the element list."""

    def __init__(self, element_id: str):
        super().__init__(f"Element {element_id!r} not found")
        self.element_id = element_id


class NoSelection(EngineError):
    """Raised by editor operations that need a selected element."""
