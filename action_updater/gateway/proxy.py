"""Gateway client for the two HTTP proxy endpoints (validate-key, update-action)."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..models.status import ErrorKind
from .contract import GatewayError, KeyValidation, UpdateResponse

logger = logging.getLogger(__name__)

VALIDATE_KEY_PATH = "/api/validate-key"
UPDATE_ACTION_PATH = "/api/update-action"


class ProxyGateway:
    """Consumes the proxy endpoints as a request/response contract.

    The ``valid`` / ``success`` flags in the body are authoritative; the proxy
    answers upstream errors with transport status 200 (and missing fields with
    400). A 5xx means an unexpected error inside the proxy and is raised as
    ``GatewayError`` like any other transport failure.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: httpx.Timeout | float = 30.0,
        client: httpx.Client | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client if client is not None else httpx.Client(timeout=timeout)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> ProxyGateway:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def validate_key(self, api_key: str) -> KeyValidation:
        payload = self._post(VALIDATE_KEY_PATH, {"apiKey": api_key})
        return KeyValidation.from_payload(payload)

    def update_action(
        self,
        api_key: str,
        action_id: str,
        status_id: str,
        notes: str | None = None,
    ) -> UpdateResponse:
        body: dict[str, Any] = {"apiKey": api_key, "actionId": action_id, "statusId": status_id}
        if notes:
            body["notes"] = notes
        return UpdateResponse.from_payload(self._post(UPDATE_ACTION_PATH, body))

    def _post(self, path: str, body: dict[str, Any]) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self._client.post(url, json=body)
        except httpx.HTTPError as exc:
            raise GatewayError(f"request to {path} failed: {exc}") from exc

        if response.status_code >= 500:
            logger.debug("proxy %s returned %s: %s", path, response.status_code, response.text)
            raise GatewayError(
                f"proxy {path} returned {response.status_code}",
                kind=ErrorKind.LOCAL_UNEXPECTED_ERROR,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise GatewayError(f"proxy {path} returned a non-JSON body") from exc
