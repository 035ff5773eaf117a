# app/services/errors.py
# Errores tipados de las acciones de contenido. Nunca cruzan la frontera de la
# acción: se convierten en ContentResult(success=False, error=..., code=...).
from __future__ import annotations


class ContentError(Exception):
    code = "error"
    status_code = 400
    default_message = "Request failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(ContentError):
    code = "unauthenticated"
    status_code = 401
    default_message = "Authentication required"


class Unauthorized(ContentError):
    code = "unauthorized"
    status_code = 403
    default_message = "Only parents can edit content"


class NotFound(ContentError):
    # Logbook inexistente y "no eres miembro" son indistinguibles a propósito
    code = "not_found"
    status_code = 404
    default_message = "Logbook not found or access denied"


class ValidationFailure(ContentError):
    code = "validation_error"
    status_code = 422
    default_message = "Invalid input"


class PayloadTooLarge(ValidationFailure):
    code = "payload_too_large"
    status_code = 413
    default_message = "Content document is too large"


class Conflict(ContentError):
    code = "conflict"
    status_code = 409
    default_message = "Content was modified concurrently, please retry"


class PersistenceFailure(ContentError):
    code = "persistence_error"
    status_code = 500
    default_message = "Failed to save changes"


UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred"
UNEXPECTED_ERROR_CODE = "unexpected_error"


def _all_error_classes(cls=ContentError):
    yield cls
    for sub in cls.__subclasses__():
        yield from _all_error_classes(sub)


_STATUS_BY_CODE = {c.code: c.status_code for c in _all_error_classes()}


def status_for_code(code: str | None) -> int:
    """Status HTTP para el `code` de un ContentResult fallido."""
    return _STATUS_BY_CODE.get(code or "", 500)
