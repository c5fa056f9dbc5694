"""Error taxonomy shared by services and the HTTP layer.

Services raise these; ``app.main`` maps them to responses:

- ``ValidationError`` (and ``PhotoIngestionError``) -> 400 with a stable ``code``
- ``NotFoundError`` -> 404
- ``StorageError`` -> 500 with a generic message
"""

from __future__ import annotations

PHOTO_ERROR_MESSAGE = "Falha ao processar as fotos. Envie imagens JPG, PNG, GIF ou WEBP de ate 5MB."


class PlaceServiceError(Exception):
    """Base class for every error raised by the place core."""


class ValidationError(PlaceServiceError):
    """Rejected write caused by caller input."""

    def __init__(self, code: str, message: str | None = None) -> None:
        self.code = code
        self.message = message or code
        super().__init__(self.message)


class PhotoIngestionError(ValidationError):
    """A photo in the submitted batch failed validation."""

    def __init__(self, code: str, detail: str | None = None) -> None:
        super().__init__(code, PHOTO_ERROR_MESSAGE)
        self.detail = detail or code


class NotFoundError(PlaceServiceError):
    """Requested entity does not exist."""

    def __init__(self, message: str = "Local nao encontrado.") -> None:
        self.message = message
        super().__init__(message)


class StorageError(PlaceServiceError):
    """Infrastructure failure (database, filesystem, object storage)."""
