from __future__ import annotations

import json
from collections.abc import Callable

import httpx
import pytest

from action_updater.gateway.contract import GatewayError
from action_updater.gateway.upstream import SafetyCultureGateway
from action_updater.models.status import CanonicalStatus, ErrorKind

BASE = "https://api.example.test"
COMPLETE_ID = CanonicalStatus.COMPLETE.status_id


def _gateway(handler: Callable[[httpx.Request], httpx.Response]) -> SafetyCultureGateway:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return SafetyCultureGateway(BASE, client=client)


@pytest.mark.parametrize(
    ("status_code", "valid", "message"),
    [
        (200, True, "API key validated successfully"),
        (401, False, "Invalid API key. Please check and try again."),
        (403, False, "API key does not have sufficient permissions."),
        (500, False, "Failed to validate API key. Please try again."),
    ],
)
def test_validate_key(status_code: int, valid: bool, message: str) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(status_code, json={})

    result = _gateway(handler).validate_key("secret")
    assert (result.valid, result.message) == (valid, message)
    assert seen[0].method == "GET"
    assert seen[0].url.path == "/groups"
    assert seen[0].headers["Authorization"] == "Bearer secret"


def test_validate_key_empty_makes_no_request() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    result = _gateway(handler).validate_key("")
    assert result.valid is False
    assert result.message == "API key is required"


def test_validate_key_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    with pytest.raises(GatewayError):
        _gateway(handler).validate_key("secret")


def test_update_status_only() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={})

    response = _gateway(handler).update_action("secret", "A1", COMPLETE_ID)
    assert response.success is True
    assert response.partial is False
    assert response.message == "Action updated successfully"
    assert len(seen) == 1
    assert seen[0].method == "PUT"
    assert seen[0].url.path == "/tasks/v1/actions/A1/status"
    assert json.loads(seen[0].content) == {"status_id": COMPLETE_ID}


def test_update_with_notes_posts_comment() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={})

    response = _gateway(handler).update_action("secret", "A1", COMPLETE_ID, "  done on site  ")
    assert response.success is True
    assert [r.method for r in seen] == ["PUT", "POST"]
    assert seen[1].url.path == "/tasks/v1/actions/A1/timeline/comments"
    assert json.loads(seen[1].content) == {"message": [{"text": {"text": "done on site"}}]}


def test_whitespace_notes_skip_comment() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={})

    _gateway(handler).update_action("secret", "A1", COMPLETE_ID, "   ")
    assert [r.method for r in seen] == ["PUT"]


@pytest.mark.parametrize(
    ("status_code", "message", "kind"),
    [
        (404, "Action not found", ErrorKind.UPSTREAM_NOT_FOUND),
        (401, "Unauthorized - check API key", ErrorKind.UPSTREAM_UNAUTHORIZED),
        (403, "Permission denied for this action", ErrorKind.UPSTREAM_FORBIDDEN),
    ],
)
def test_status_errors(status_code: int, message: str, kind: ErrorKind) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, json={"message": "ignored"})

    response = _gateway(handler).update_action("secret", "A1", COMPLETE_ID, "notes")
    assert response.success is False
    assert response.message == message
    assert response.error_kind is kind


def test_other_status_error_uses_body_message() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(422, json={"message": "status transition not allowed"})

    response = _gateway(handler).update_action("secret", "A1", COMPLETE_ID)
    assert response.success is False
    assert response.message == "status transition not allowed"
    assert response.error_kind is ErrorKind.UPSTREAM_OTHER


def test_other_status_error_without_body() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="bad gateway")

    response = _gateway(handler).update_action("secret", "A1", COMPLETE_ID)
    assert response.message == "Failed to update status"


def test_comment_failure_is_partial() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "PUT":
            return httpx.Response(200, json={})
        return httpx.Response(500, json={})

    response = _gateway(handler).update_action("secret", "A1", COMPLETE_ID, "notes")
    assert response.success is True
    assert response.partial is True
    assert response.message == "Status updated, but failed to add notes"
    assert response.error_kind is ErrorKind.PARTIAL_NOTES_FAILURE


def test_comment_transport_failure_is_partial() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "PUT":
            return httpx.Response(200, json={})
        raise httpx.ReadTimeout("timed out", request=request)

    response = _gateway(handler).update_action("secret", "A1", COMPLETE_ID, "notes")
    assert (response.success, response.partial) == (True, True)


def test_status_transport_failure_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    with pytest.raises(GatewayError) as exc_info:
        _gateway(handler).update_action("secret", "A1", COMPLETE_ID)
    assert exc_info.value.kind is ErrorKind.NETWORK_FAILURE


@pytest.mark.parametrize(
    ("api_key", "action_id", "status_id"),
    [("", "A1", COMPLETE_ID), ("secret", "", COMPLETE_ID), ("secret", "A1", "")],
)
def test_missing_fields(api_key: str, action_id: str, status_id: str) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    response = _gateway(handler).update_action(api_key, action_id, status_id)
    assert response.success is False
    assert response.message == "Missing required fields"


def test_injected_client_is_not_closed() -> None:
    client = httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
    with SafetyCultureGateway(BASE, client=client):
        pass
    assert client.is_closed is False
    client.close()


def test_action_id_is_one_path_segment() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={})

    response = _gateway(handler).update_action("secret", "a/b?c#d", COMPLETE_ID, "notes")
    assert response.success is True
    assert [r.url.raw_path for r in seen] == [
        b"/tasks/v1/actions/a%2Fb%3Fc%23d/status",
        b"/tasks/v1/actions/a%2Fb%3Fc%23d/timeline/comments",
    ]
    assert all(r.url.query == b"" for r in seen)
