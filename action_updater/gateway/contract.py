"""Request/response contract between the orchestrator and the API gateway."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from ..models.status import ErrorKind

__all__ = [
    "GatewayError",
    "KeyValidation",
    "UpdateResponse",
    "ActionGateway",
    "MISSING_FIELDS_MESSAGE",
    "NOTES_FAILED_MESSAGE",
]

MISSING_FIELDS_MESSAGE = "Missing required fields"
NOTES_FAILED_MESSAGE = "Status updated, but failed to add notes"


class GatewayError(RuntimeError):
    """Transport-level failure: unreachable host, malformed body, gateway 5xx.

    The orchestrator reports these as "Network error" for the row and moves on.
    """

    def __init__(self, message: str, *, kind: ErrorKind = ErrorKind.NETWORK_FAILURE) -> None:
        super().__init__(message)
        self.kind = kind


@dataclass(frozen=True, slots=True)
class KeyValidation:
    valid: bool
    message: str

    @classmethod
    def from_payload(cls, payload: Any) -> KeyValidation:
        if not isinstance(payload, dict) or not isinstance(payload.get("valid"), bool):
            raise GatewayError("malformed key validation response")
        return cls(valid=payload["valid"], message=str(payload.get("message") or ""))

    def to_payload(self) -> dict[str, Any]:
        return {"valid": self.valid, "message": self.message}


@dataclass(frozen=True, slots=True)
class UpdateResponse:
    """Outcome of one update-action call as reported by the gateway.

    ``partial`` is only meaningful when ``success`` is true: the status was
    changed but attaching the notes failed.
    """

    success: bool
    message: str
    partial: bool = False
    error_kind: ErrorKind | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> UpdateResponse:
        if not isinstance(payload, dict) or not isinstance(payload.get("success"), bool):
            raise GatewayError("malformed update response")
        success = payload["success"]
        partial = bool(payload.get("partial")) and success
        message = str(payload.get("message") or "")
        if partial:
            kind: ErrorKind | None = ErrorKind.PARTIAL_NOTES_FAILURE
        elif success:
            kind = None
        else:
            kind = _kind_from_message(message)
        return cls(success=success, message=message, partial=partial, error_kind=kind)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"success": self.success, "message": self.message}
        if self.partial:
            payload["partial"] = True
        return payload


_MESSAGE_KINDS = {
    "Action not found": ErrorKind.UPSTREAM_NOT_FOUND,
    "Unauthorized - check API key": ErrorKind.UPSTREAM_UNAUTHORIZED,
    "Permission denied for this action": ErrorKind.UPSTREAM_FORBIDDEN,
}


def _kind_from_message(message: str) -> ErrorKind:
    # proxy 経由ではステータスコードが失われるのでメッセージから復元
    return _MESSAGE_KINDS.get(message, ErrorKind.UPSTREAM_OTHER)


class ActionGateway(Protocol):
    """Anything that can validate a key and update one action."""

    def validate_key(self, api_key: str) -> KeyValidation: ...

    def update_action(
        self,
        api_key: str,
        action_id: str,
        status_id: str,
        notes: str | None = None,
    ) -> UpdateResponse: ...
