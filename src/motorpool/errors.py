"""Error taxonomy.

Learn: every failure the core can produce is one of these classes. Services
raise them, nothing in between catches them, and the handlers registered in
main.create_app() turn them into the uniform failure envelope. Each class
carries the HTTP status it maps to, so routes never build error responses
by hand.
"""

from http import HTTPStatus
from typing import Any, Optional


class MotorpoolError(Exception):
    """Base class for all domain and infrastructure errors."""

    code: str = "error"
    status: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR
    message: str = "Internal error"

    def __init__(self, message: Optional[str] = None, *, detail: Any = None):
        self.message = message or self.message
        self.detail = detail
        super().__init__(self.message)

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"error": self.code}
        if self.detail is not None:
            payload["detail"] = self.detail
        return payload


# ─── Storage ────────────────────────────────────────────


class StorageError(MotorpoolError):
    """Connection or query failure. Never retried by the core."""

    code = "storage_error"
    status = HTTPStatus.SERVICE_UNAVAILABLE
    message = "Storage failure"


class IntegrityFault(StorageError):
    """Stored data violates an invariant the schema should guarantee."""

    code = "integrity_fault"
    status = HTTPStatus.INTERNAL_SERVER_ERROR
    message = "Data integrity fault"


# ─── Input / resources ──────────────────────────────────


class ValidationError(MotorpoolError):
    code = "validation_error"
    status = HTTPStatus.UNPROCESSABLE_ENTITY
    message = "Invalid request"


class NotFound(MotorpoolError):
    code = "not_found"
    status = HTTPStatus.NOT_FOUND
    message = "Not found"


class DuplicateIdentity(MotorpoolError):
    code = "duplicate_identity"
    status = HTTPStatus.CONFLICT
    message = "Username already registered"


# ─── Authentication ─────────────────────────────────────


class Unauthorized(MotorpoolError):
    """Anything that must stop a request before protected code runs."""

    code = "unauthorized"
    status = HTTPStatus.UNAUTHORIZED
    message = "Unauthorized"


class AuthFailure(Unauthorized):
    """Unknown username or wrong password. Deliberately indistinguishable."""

    code = "auth_failure"
    message = "Invalid username or password"


class MissingCredentials(Unauthorized):
    code = "missing_credentials"
    message = "Invalid authorization, no authorization header"


class WrongScheme(Unauthorized):
    code = "wrong_scheme"
    message = "Invalid authorization, invalid authorization scheme"


class TokenError(Unauthorized):
    """Raised when token verification fails."""

    code = "invalid_token"
    message = "Invalid token"


class MalformedToken(TokenError):
    code = "malformed_token"
    message = "Malformed token"


class InvalidSignature(TokenError):
    code = "invalid_signature"
    message = "Token signature mismatch"


class ExpiredToken(TokenError):
    code = "expired_token"
    message = "Token has expired"
