# tawsila_admin/core/errors.py
"""
Errors raised by the platform API client.

The shape of a failed response is decided once, in the HTTP client, and
surfaces as one of three variants:

- ValidationError: the platform rejected the payload field by field
- MessageError: the platform (or the client) produced a single message
- NetworkError: the platform could not be reached
"""
from typing import Dict, List, Optional


class ApiError(Exception):
    """Base class for every failed platform API call"""

    default_message = "An error occurred"

    def __init__(
            self,
            message: Optional[str] = None,
            status: Optional[int] = None,
            field_errors: Optional[Dict[str, List[str]]] = None
    ):
        self.message = message or self.default_message
        self.status = status
        self.field_errors: Dict[str, List[str]] = field_errors or {}
        super().__init__(self.message)

    @property
    def is_unauthorized(self) -> bool:
        return self.status == 401

    @property
    def is_forbidden(self) -> bool:
        return self.status == 403

    @property
    def is_not_found(self) -> bool:
        return self.status == 404

    def first_errors(self) -> Dict[str, str]:
        """First message for every field that failed validation"""
        return {
            field: messages[0]
            for field, messages in self.field_errors.items()
            if messages
        }

    def formatted(self) -> Optional[str]:
        """All validation messages as one comma separated string"""
        if not self.field_errors:
            return None
        return ", ".join(
            message
            for messages in self.field_errors.values()
            for message in messages
        )

    def to_dict(self) -> Dict:
        payload = {"message": self.message}
        if self.field_errors:
            payload["errors"] = self.field_errors
        return payload

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status={self.status!r}, message={self.message!r})"


class ValidationError(ApiError):
    """The platform answered with per-field validation errors"""

    default_message = "The given data was invalid."


class MessageError(ApiError):
    """The platform answered with a plain error message"""


class NetworkError(ApiError):
    """The request never produced an HTTP response"""

    default_message = "Network error. Please check your connection."


class AccountInactiveError(MessageError):
    """Login succeeded for an account the platform marks inactive"""

    default_message = "ACCOUNT_INACTIVE"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message, status=403)


# Fallback messages for status codes that need a specific explanation
STATUS_MESSAGES = {
    401: "Session expired. Please log in again.",
    403: "You do not have permission to access this resource.",
    501: "This feature is coming soon. Stay tuned for updates!",
}


def error_from_response(status: int, payload: Dict) -> ApiError:
    """Pick the error variant for a non-2xx response body"""
    message = payload.get("message") or STATUS_MESSAGES.get(status) or ApiError.default_message
    errors = payload.get("errors")

    if isinstance(errors, dict) and errors:
        field_errors = {
            str(field): [str(m) for m in (messages if isinstance(messages, list) else [messages])]
            for field, messages in errors.items()
        }
        return ValidationError(message, status=status, field_errors=field_errors)

    return MessageError(message, status=status)
