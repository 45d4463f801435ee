"""Exception types shared by the image client, history and controller."""

from __future__ import annotations


class ImageStudioError(RuntimeError):
    """Base class for failures surfaced to the user as a short message."""


class ValidationError(ImageStudioError, ValueError):
    """Input rejected before any remote call was made."""


class EmptyResult(ImageStudioError):
    """The service answered but returned no images."""


class MalformedResponse(ImageStudioError):
    """The service answered but the image payload is missing."""


class ServiceError(ImageStudioError):
    """Transport or upstream failure; carries the upstream message."""


class PersistedStateCorrupt(ImageStudioError):
    """Stored history could not be deserialized."""


def upstream_message(exc: BaseException) -> str:
    """Return the message the service attached to a failure."""
    message = getattr(exc, "message", None)
    return str(message or str(exc) or type(exc).__name__)
