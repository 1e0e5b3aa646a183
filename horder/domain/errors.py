from __future__ import annotations


class HorderError(Exception):
    """Base class for business-rule failures reported back to the caller."""

    error_code = "horder_error"


class ValidationError(HorderError, ValueError):
    error_code = "validation_error"


class OrderValidationError(ValidationError):
    pass


class InvalidOrderTransition(HorderError):
    error_code = "invalid_transition"


class EntityNotFound(HorderError, LookupError):
    error_code = "not_found"

    def __init__(self, kind: str, entity_id: str):
        super().__init__(f"{kind} not found: {entity_id}")
        self.kind = kind
        self.entity_id = entity_id


class OrderNotFound(EntityNotFound):
    def __init__(self, order_id: str):
        super().__init__("order", order_id)


class AuthenticationError(HorderError):
    error_code = "authentication_failed"


class PasswordChangeError(HorderError, ValueError):
    error_code = "password_change_rejected"


class InvalidSnapshotError(HorderError, ValueError):
    error_code = "invalid_backup"
