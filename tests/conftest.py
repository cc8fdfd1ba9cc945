# Shared pytest fixtures
from __future__ import annotations

import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pytest

from action_updater.gateway.contract import KeyValidation, UpdateResponse
from action_updater.logging.init import reset_logging


@dataclass
class GatewayCall:
    api_key: str
    action_id: str
    status_id: str
    notes: str | None


@dataclass
class FakeGateway:
    """In-memory gateway: per-action canned responses (or exceptions to raise)."""
    responses: dict[str, Any] = field(default_factory=dict)
    key_valid: bool = True
    calls: list[GatewayCall] = field(default_factory=list)

    def validate_key(self, api_key: str) -> KeyValidation:
        if self.key_valid:
            return KeyValidation(valid=True, message="API key validated successfully")
        return KeyValidation(valid=False, message="Invalid API key. Please check and try again.")

    def update_action(self, api_key: str, action_id: str, status_id: str, notes: str | None = None) -> UpdateResponse:
        self.calls.append(GatewayCall(api_key, action_id, status_id, notes))
        result = self.responses.get(action_id, UpdateResponse(success=True, message="Action updated successfully"))
        if isinstance(result, BaseException):
            raise result
        return result


@pytest.fixture()
def fake_gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture()
def make_gateway():
    """Factory for gateways with canned responses: make_gateway({"A1": UpdateResponse(...)})."""
    def _make(responses: dict[str, Any] | None = None, *, key_valid: bool = True) -> FakeGateway:
        return FakeGateway(responses=dict(responses or {}), key_valid=key_valid)
    return _make


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    # keep a developer's real key / .env out of the tests
    monkeypatch.delenv("SAFETYCULTURE_API_KEY", raising=False)
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def sample_config_yaml() -> str:
    return """gateway:
  mode: direct
  base_url: https://api.example.test
  timeout_seconds: 5
mapping:
  record_id_column: Action_ID
  status_column: Status
  notes_column: Notes
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "updater.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def scenario_rows() -> list[dict[str, Any]]:
    """A1 valid, second row without id, A3 with an unknown status."""
    return [
        {"Action_ID": "A1", "Status": "In Progress"},
        {"Action_ID": "", "Status": "Complete"},
        {"Action_ID": "A3", "Status": "Unknown"},
    ]
