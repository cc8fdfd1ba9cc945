"""Gateway that talks to the SafetyCulture API directly."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from ..models.status import ErrorKind
from .contract import (
    MISSING_FIELDS_MESSAGE,
    NOTES_FAILED_MESSAGE,
    GatewayError,
    KeyValidation,
    UpdateResponse,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.safetyculture.io"
DEFAULT_TIMEOUT = httpx.Timeout(connect=10.0, read=30.0, write=10.0, pool=30.0)

_STATUS_ERRORS: dict[int, tuple[str, ErrorKind]] = {
    404: ("Action not found", ErrorKind.UPSTREAM_NOT_FOUND),
    401: ("Unauthorized - check API key", ErrorKind.UPSTREAM_UNAUTHORIZED),
    403: ("Permission denied for this action", ErrorKind.UPSTREAM_FORBIDDEN),
}


class SafetyCultureGateway:
    """Implements the gateway contract against the upstream REST API.

    Upstream-reported failures come back as ``UpdateResponse(success=False)``;
    only transport failures on the status call raise ``GatewayError``.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        timeout: httpx.Timeout | float = DEFAULT_TIMEOUT,
        client: httpx.Client | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client if client is not None else httpx.Client(timeout=timeout)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> SafetyCultureGateway:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def validate_key(self, api_key: str) -> KeyValidation:
        if not api_key:
            return KeyValidation(valid=False, message="API key is required")

        # 権限の弱い読み取り API (groups 一覧) で疎通確認
        try:
            response = self._client.get(f"{self.base_url}/groups", headers=_headers(api_key))
        except httpx.HTTPError as exc:
            raise GatewayError(f"key validation request failed: {exc}") from exc

        if response.is_success:
            return KeyValidation(valid=True, message="API key validated successfully")
        if response.status_code == 401:
            return KeyValidation(valid=False, message="Invalid API key. Please check and try again.")
        if response.status_code == 403:
            return KeyValidation(valid=False, message="API key does not have sufficient permissions.")
        logger.error("key validation failed status=%s body=%s", response.status_code, response.text)
        return KeyValidation(valid=False, message="Failed to validate API key. Please try again.")

    def update_action(
        self,
        api_key: str,
        action_id: str,
        status_id: str,
        notes: str | None = None,
    ) -> UpdateResponse:
        """Change the status of one action, then optionally append a comment.

        Args:
            api_key: Bearer token for the upstream API
            action_id: Upstream action identifier
            status_id: External id of the target canonical status
            notes: Comment text; skipped when empty after trimming

        Returns:
            UpdateResponse describing the outcome

        Raises:
            GatewayError: If the status call fails at transport level
        """
        if not api_key or not action_id or not status_id:
            return UpdateResponse(
                success=False, message=MISSING_FIELDS_MESSAGE, error_kind=ErrorKind.UPSTREAM_OTHER
            )

        headers = _headers(api_key)
        try:
            response = self._client.put(
                f"{self.base_url}/tasks/v1/actions/{_segment(action_id)}/status",
                headers=headers,
                json={"status_id": status_id},
            )
        except httpx.HTTPError as exc:
            raise GatewayError(f"status update request failed: {exc}") from exc

        if not response.is_success:
            known = _STATUS_ERRORS.get(response.status_code)
            if known is not None:
                message, kind = known
                return UpdateResponse(success=False, message=message, error_kind=kind)
            body = _json_or_empty(response)
            logger.error("status update error status=%s body=%s", response.status_code, body)
            return UpdateResponse(
                success=False,
                message=str(body.get("message") or "Failed to update status"),
                error_kind=ErrorKind.UPSTREAM_OTHER,
            )

        text = (notes or "").strip()
        if text and not self._add_comment(action_id, text, headers):
            return UpdateResponse(
                success=True,
                message=NOTES_FAILED_MESSAGE,
                partial=True,
                error_kind=ErrorKind.PARTIAL_NOTES_FAILURE,
            )

        return UpdateResponse(success=True, message="Action updated successfully")

    def _add_comment(self, action_id: str, text: str, headers: dict[str, str]) -> bool:
        # ステータス更新は成功済み: コメント失敗は partial 扱い (例外は上げない)
        try:
            response = self._client.post(
                f"{self.base_url}/tasks/v1/actions/{_segment(action_id)}/timeline/comments",
                headers=headers,
                json={"message": [{"text": {"text": text}}]},
            )
        except httpx.HTTPError as exc:
            logger.error("comment add failed action=%s: %s", action_id, exc)
            return False
        if not response.is_success:
            logger.error("comment add error action=%s status=%s body=%s", action_id, response.status_code, response.text)
            return False
        return True


def _headers(api_key: str) -> dict[str, str]:
    return {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }


def _json_or_empty(response: httpx.Response) -> dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _segment(value: str) -> str:
    # id はパス 1 セグメントとして扱う ("/" "?" "#" もエスケープ)
    return quote(value, safe="")
