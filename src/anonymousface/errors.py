"""Exception hierarchy.

Every request-time error carries the HTTP status the transport answers with.
Startup errors (``ConfigurationError``, ``AssetError``) terminate the process.
"""


class AnonymousFaceError(Exception):
    """Base class for all anonymousface errors."""

    status_code = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ParseError(AnonymousFaceError):
    """Inbound event is malformed or its id/signature does not check out."""

    status_code = 400


class ValidationError(AnonymousFaceError):
    """Event is well formed but not for us (no trigger tag, no URL)."""

    status_code = 422


class FetchError(AnonymousFaceError):
    """Target image could not be retrieved."""

    status_code = 502


class DecodeError(AnonymousFaceError):
    """Fetched bytes are not a supported image."""

    status_code = 500


class PublishError(AnonymousFaceError):
    """Upload of the anonymized image failed."""

    status_code = 502


class SigningError(AnonymousFaceError):
    """Key derivation or signature computation failed."""

    status_code = 500


class ConfigurationError(AnonymousFaceError):
    """Required configuration is missing."""


class AssetError(AnonymousFaceError):
    """Cascade blob or mask raster could not be loaded."""
