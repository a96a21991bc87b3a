# rollover/core/errors.py
"""
Error taxonomy for the rollover client.

- PlanValidationError: client-local input problems, raised before any network call
- ApiError: a failed exchange with the school API (HTTP status or transport failure)
- SessionExclusivityError: the previous active session was deactivated but the
  follow-up create/activate call failed, leaving no active session
"""

from typing import Any, Optional

ROUTING_STATUS_CODES = (404, 405)


class RolloverError(Exception):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class PlanValidationError(RolloverError):
    pass


class ApiError(RolloverError):
    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        method: Optional[str] = None,
        path: Optional[str] = None,
        payload: Any = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.method = method
        self.path = path
        self.payload = payload

    @property
    def is_routing_failure(self) -> bool:
        return self.status_code in ROUTING_STATUS_CODES

    @classmethod
    def from_response(cls, status_code: int, method: str, path: str, payload: Any) -> "ApiError":
        return cls(
            message=server_message(payload) or f"Request failed with status code {status_code}",
            status_code=status_code,
            method=method,
            path=path,
            payload=payload,
        )

    def __repr__(self) -> str:
        return f"ApiError({self.status_code}, {self.method} {self.path}, {self.message!r})"


class SessionExclusivityError(RolloverError):
    def __init__(self, message: str, deactivated_session_id: str):
        super().__init__(message)
        self.deactivated_session_id = deactivated_session_id


def server_message(payload: Any) -> Optional[str]:
    """Pull the human-readable text out of an error body ("message", then "error")."""
    if not isinstance(payload, dict):
        return None
    for key in ("message", "error"):
        value = payload.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def error_message(exc: BaseException, fallback: str) -> str:
    if isinstance(exc, RolloverError) and exc.message.strip():
        return exc.message
    text = str(exc).strip()
    return text or fallback
