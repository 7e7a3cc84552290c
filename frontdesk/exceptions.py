"""
=============================================================================
FRONT DESK - exceptions.py
=============================================================================
Typed failures raised by the core operations. The handler layer maps each one
to an HTTP outcome through ``status_code``; nothing here is fatal to the
process and nothing is retried automatically.

    ValidationError  → 400  missing / malformed input, raised before any write
    NotFound         → 404  referenced record does not exist
    InvalidState     → 400  operation not allowed in the current lifecycle state
    Unauthorized     → 401  bad credentials / bad token
    AccountLocked    → 423  too many failed logins (an Unauthorized)
    Forbidden        → 403  role / permission / edit-window refusal
    AlreadyExists    → 409  duplicate username or e-mail
    StoreError       → 500  database failure
=============================================================================
"""


class FrontdeskError(Exception):
    """Base class for every error raised by the front desk core."""

    status_code = 500
    default_code = "INTERNAL_ERROR"

    def __init__(self, message, code=None, details=None):
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self):
        return {"code": self.code, "message": self.message, "details": self.details}


class ValidationError(FrontdeskError):
    status_code = 400
    default_code = "VALIDATION_ERROR"


class NotFound(FrontdeskError):
    status_code = 404
    default_code = "NOT_FOUND"

    def __init__(self, resource, identifier=None):
        details = {"resource": resource}
        if identifier is not None:
            details["id"] = str(identifier)
        super().__init__(f"{resource} not found", details=details)


class InvalidState(FrontdeskError):
    status_code = 400
    default_code = "INVALID_STATE"


class Unauthorized(FrontdeskError):
    status_code = 401
    default_code = "UNAUTHORIZED"


class AccountLocked(Unauthorized):
    """Login refused because ``lock_until`` is still in the future."""

    status_code = 423
    default_code = "ACCOUNT_LOCKED"

    def __init__(self, lock_until=None):
        details = {"lock_until": lock_until.isoformat()} if lock_until else None
        super().__init__(
            "Account is locked due to too many failed login attempts",
            details=details,
        )


class Forbidden(FrontdeskError):
    status_code = 403
    default_code = "FORBIDDEN"


class AlreadyExists(FrontdeskError):
    status_code = 409
    default_code = "ALREADY_EXISTS"


class StoreError(FrontdeskError):
    status_code = 500
    default_code = "STORE_ERROR"
