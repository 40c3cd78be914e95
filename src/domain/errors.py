"""Exception hierarchy for the assistant core."""


class AssistantCoreError(Exception):
    """Base class for errors raised by this package."""


class StreamTurnError(AssistantCoreError):
    """A streaming turn failed: explicit `error` frame, transport failure or broken stream."""

    def __init__(self, message: str, payload: dict | None = None) -> None:
        super().__init__(message)
        self.payload = payload or {}


class TransportError(AssistantCoreError):
    """The chat backend could not be reached or answered with an error status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class MissingFileContextError(AssistantCoreError):
    """A category that requires file context was dispatched without any files."""
