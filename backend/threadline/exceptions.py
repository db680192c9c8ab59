"""
Exception types raised by the conversation hierarchy engine.
"""

from typing import Iterable, List


class ThreadlineError(Exception):
    """Base exception for Threadline."""
    pass


class InvalidQueryError(ThreadlineError):
    """Malformed or out-of-range query parameter."""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


class StructuralIntegrityError(ThreadlineError):
    """Parent links between conversations form a cycle."""

    def __init__(self, conversation_ids: Iterable[str]):
        self.conversation_ids: List[str] = list(conversation_ids)
        super().__init__(
            "Cycle detected in conversation parent links: "
            + " -> ".join(self.conversation_ids)
        )


class StoreUnavailableError(ThreadlineError):
    """The conversation store could not serve the request."""
    pass
