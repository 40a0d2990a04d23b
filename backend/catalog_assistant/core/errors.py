"""
Error taxonomy shared by the chat core, the catalog sync path and the HTTP layer.

Every error carries the HTTP status the API layer answers with, so routers never
have to map exception types themselves.
"""


class CatalogAssistantError(Exception):
    """Base class for all errors raised by the catalog assistant."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(CatalogAssistantError):
    """Malformed or missing input. Raised at the HTTP boundary only."""

    status_code = 400


class NotFoundError(CatalogAssistantError):
    """A lookup by SKU or id found nothing."""

    status_code = 404


class ConflictError(CatalogAssistantError):
    """A product with the same SKU already exists."""

    status_code = 409


class UpstreamError(CatalogAssistantError):
    """The embedding provider, chat model or database could not serve the request."""

    status_code = 502


class InternalError(CatalogAssistantError):
    """Anything unexpected."""

    status_code = 500
