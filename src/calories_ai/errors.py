"""Error kinds surfaced by the analysis pipeline and its boundaries."""

from fastapi import status


class CaloriesAIError(Exception):
    """Base error carrying a stable code and a short user-facing message."""

    code = "internal"
    rpc_status = "INTERNAL"
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self, message: str, *, code: str | None = None, details: object = None
    ) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.details = details

    def to_payload(self) -> dict[str, object]:
        """Return the JSON error body sent over the wire."""
        payload: dict[str, object] = {
            "status": self.rpc_status,
            "code": self.code,
            "message": self.message,
        }
        if self.details is not None:
            payload["details"] = self.details
        return payload


class Unauthenticated(CaloriesAIError):
    code = "unauthenticated"
    rpc_status = "UNAUTHENTICATED"
    http_status = status.HTTP_401_UNAUTHORIZED


class PermissionDenied(CaloriesAIError):
    code = "permission-denied"
    rpc_status = "PERMISSION_DENIED"
    http_status = status.HTTP_403_FORBIDDEN


class InvalidArgument(CaloriesAIError):
    code = "invalid-argument"
    rpc_status = "INVALID_ARGUMENT"
    http_status = status.HTTP_400_BAD_REQUEST


class AnalysisFailed(CaloriesAIError):
    code = "analysis-failed"


class PersistenceFailed(CaloriesAIError):
    code = "persistence-failed"


class EncodingError(CaloriesAIError):
    code = "encoding-failed"
    rpc_status = "INVALID_ARGUMENT"
    http_status = status.HTTP_400_BAD_REQUEST


class AuthenticationFailed(CaloriesAIError):
    """Identity provider rejected a sign-in, sign-up or account operation."""

    code = "operation-failed"
    rpc_status = "UNAUTHENTICATED"
    http_status = status.HTTP_401_UNAUTHORIZED


AUTH_ERROR_CODES = frozenset(
    {
        "user-not-found",
        "invalid-credentials",
        "email-already-in-use",
        "operation-failed",
        "sign-out-failed",
    }
)

_ERRORS_BY_STATUS: dict[str, type[CaloriesAIError]] = {
    Unauthenticated.rpc_status: Unauthenticated,
    PermissionDenied.rpc_status: PermissionDenied,
    InvalidArgument.rpc_status: InvalidArgument,
}


def error_from_payload(
    payload: object,
    fallback: type[CaloriesAIError],
    fallback_message: str,
) -> CaloriesAIError:
    """Rebuild a typed error from a wire error body.

    Identity errors keep their provider code, the three request-level statuses
    map to their own kinds, and everything else becomes ``fallback``.
    """
    if not isinstance(payload, dict):
        return fallback(fallback_message)
    message = payload.get("message")
    if not isinstance(message, str) or not message:
        message = fallback_message
    code = payload.get("code")
    details = payload.get("details")
    if code in AUTH_ERROR_CODES:
        return AuthenticationFailed(message, code=str(code), details=details)
    error_cls = _ERRORS_BY_STATUS.get(str(payload.get("status")))
    if error_cls is None:
        return fallback(message, details=details)
    return error_cls(message, details=details)
