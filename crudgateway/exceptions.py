"""
CRUD Gateway: Custom Exception Hierarchy
=========================================

What:  Application-specific exceptions, one per failure the HTTP surface reports.
How:   Each exception carries a human-readable message and a context dict.
       Services raise them after catching the backing library's own error
       type; global handlers (registered in main.py) turn them into responses.
Who:   Raised by services and dependencies; caught by global handlers.

Exception Hierarchy:
    GatewayError (base)
    ├── NotFoundError                  → 404
    │   ├── UserNotFoundError          → 404 text
    │   └── ProductNotFoundError       → 404 {"error"}
    ├── MissingFileError               → 400 {"message"}
    ├── DocumentStoreError             → 500 text
    ├── ObjectStorageError
    │   ├── BucketListingError         → 500 {"error", "details"}
    │   └── ObjectOperationError       → 500 {"message", "error"}
    └── RelationalStoreError           → 500 {"error"}

The raw backing-store text travels in `context["details"]`; whether it
reaches the client is decided by the handler, not by the raiser.
"""

from typing import Any, Dict, Optional


class GatewayError(Exception):
    """
    Base exception for all gateway errors.

    Attributes:
        message:  Fixed, client-safe description
        context:  Debug info; `details` holds the raw backing-store error text
    """

    def __init__(
        self,
        message: str = "Ocorreu um erro interno",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)

    @property
    def details(self) -> str:
        """Raw underlying error text, or the fixed message when none was recorded."""
        return str(self.context.get("details", self.message))


class NotFoundError(GatewayError):
    """
    Raised when a lookup or mutation by identifier matched nothing.

    Backing stores report absence as None / zero affected rows, not as an
    exception; services convert that into this error.
    """

    def __init__(
        self,
        message: str,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource_id = resource_id


class UserNotFoundError(NotFoundError):
    def __init__(self, resource_id: Optional[str] = None):
        super().__init__(
            message="Usuário não encontrado",
            resource="usuario",
            resource_id=resource_id,
        )


class ProductNotFoundError(NotFoundError):
    def __init__(self, resource_id: Optional[str] = None):
        super().__init__(
            message="Produto não encontrado",
            resource="produto",
            resource_id=resource_id,
        )


class MissingFileError(GatewayError):
    """
    Raised when an upload request carries no multipart `file` field.

    The only client-error case the gateway detects itself; it is raised
    before any storage call is made.
    """

    def __init__(self, field: str = "file"):
        super().__init__(message="Nenhum arquivo enviado.", context={"field": field})
        self.field = field


class DocumentStoreError(GatewayError):
    """Raised when a MongoDB operation fails for any reason."""

    def __init__(
        self,
        message: str = "Ocorreu um erro interno",
        details: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if details is not None:
            ctx["details"] = details
        super().__init__(message=message, context=ctx)


class ObjectStorageError(GatewayError):
    """
    Base for S3 failures.

    Subclasses differ only in the JSON shape the handler emits, which
    mirrors the shape each route has always returned.
    """

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        bucket: Optional[str] = None,
        key: Optional[str] = None,
    ):
        ctx: Dict[str, Any] = {}
        if details is not None:
            ctx["details"] = details
        if bucket is not None:
            ctx["bucket"] = bucket
        if key is not None:
            ctx["key"] = key
        super().__init__(message=message, context=ctx)


class BucketListingError(ObjectStorageError):
    """Listing buckets or objects failed. Body: {"error": message, "details": raw}."""


class ObjectOperationError(ObjectStorageError):
    """Upload or delete failed. Body: {"message": message, "error": raw}."""


class RelationalStoreError(GatewayError):
    """
    Raised when a MySQL statement, checkout or commit fails.

    The response body is `{"error": <raw text>}`; there is no fixed message.
    """

    def __init__(
        self,
        details: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["details"] = details
        super().__init__(message="Ocorreu um erro interno", context=ctx)
