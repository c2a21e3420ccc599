"""Domain errors raised by services and rendered by the API layer."""


class StorefrontError(Exception):
    """Base class for errors surfaced to API callers."""

    code = "STOREFRONT_ERROR"
    status_code = 400

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message()
        super().__init__(self.message)

    @classmethod
    def default_message(cls) -> str:
        return cls.code.replace("_", " ").capitalize()


class NotFoundError(StorefrontError):
    """Referenced entity is absent or not owned by the caller."""

    code = "NOT_FOUND"
    status_code = 404


class ForbiddenError(StorefrontError):
    code = "FORBIDDEN"
    status_code = 403


class InvalidQuantityError(StorefrontError):
    code = "INVALID_QUANTITY"
    status_code = 422


class InvalidStatusError(StorefrontError):
    """Unknown status value or a transition the state machine rejects."""

    code = "INVALID_STATUS"
    status_code = 422


class EmptyCartError(StorefrontError):
    code = "EMPTY_CART"
    status_code = 409


class ValidationFailedError(StorefrontError):
    code = "VALIDATION_FAILED"
    status_code = 422


class TransactionFailedError(StorefrontError):
    """Order consolidation was rolled back; no partial state was kept."""

    code = "TRANSACTION_FAILED"
    status_code = 409
