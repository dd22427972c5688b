"""
Domain error kinds.

Every failure that crosses a service boundary is exactly one of:

    ValidationError   - malformed caller input, never touches storage   (400)
    NotFoundError     - entity missing or not owned by the caller       (404)
    DomainRuleError   - business rule violated (no default contract...) (422)
    StorageError      - the database failed; retryable by the caller    (500)

They are Exception subclasses so they carry a message and traceback context,
but services return them inside Err(...) rather than raising them.
"""
import copy


class DomainError(Exception):
    kind = "domain_error"
    title = "Error"
    status_code = 500

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        field: str | None = None,
        operation: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.field = field
        self.operation = operation
        self.step: str | None = None

    def with_context(self, step: str, prefix: str | None = None) -> "DomainError":
        """Copy of this error (same class, same kind) noting which step failed."""
        wrapped = copy.copy(self)
        wrapped.step = step
        wrapped.message = f"{prefix or 'Failed'} ({step}): {self.message}"
        wrapped.args = (wrapped.message,)
        wrapped.__cause__ = self
        return wrapped

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, code={self.code!r})"


class ValidationError(DomainError):
    kind = "validation_error"
    title = "Validation Error"
    status_code = 400


class NotFoundError(DomainError):
    kind = "not_found"
    title = "Not Found"
    status_code = 404

    @classmethod
    def for_entity(cls, resource: str, entity_id: str, code: str | None = None) -> "NotFoundError":
        return cls(f"{resource} with id {entity_id} not found", code=code)


class DomainRuleError(DomainError):
    kind = "domain_rule"
    title = "Business Rule Violation"
    status_code = 422


class StorageError(DomainError):
    kind = "storage_error"
    title = "Database Error"
    status_code = 500


def error_response(error: Exception) -> tuple[int, dict]:
    """
    Map an error to (HTTP status, JSON body) for the request layer.

    Unknown exceptions become a generic 500 without leaking their message.
    """
    if isinstance(error, DomainError):
        body = {"error": error.title, "message": error.message}
        if error.field:
            body["field"] = error.field
        if error.code:
            body["code"] = error.code
        if error.step:
            body["step"] = error.step
        return error.status_code, body

    return 500, {"error": "Internal Server Error", "message": "An unexpected error occurred"}
