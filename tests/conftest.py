"""Pytest configuration to make the local package importable without installation."""
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest
import requests

# Ensure repository root is on sys.path for module resolution
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from salondesk.cli import main as cli_main
from salondesk.core.settings import DashboardSettings, Profile, Session


class FakeResponse:
    """Minimal stand-in for ``requests.Response``."""

    def __init__(self, payload: Any = None, status_code: int = 200, text: Optional[str] = None) -> None:
        self.payload = payload
        self.status_code = status_code
        if text is None:
            text = json.dumps(payload) if payload is not None else ""
        self.text = text

    def json(self) -> Any:
        return json.loads(self.text)

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error")


class FakeHttp:
    """Records POSTs and replays a canned response or error."""

    def __init__(self, response: Optional[FakeResponse] = None, error: Optional[Exception] = None) -> None:
        self.response = response or FakeResponse([])
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    def post(self, url: str, json: Any = None, timeout: Any = None, headers: Any = None) -> FakeResponse:
        self.calls.append({"url": url, "json": json, "timeout": timeout, "headers": headers})
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture(autouse=True)
def disable_ai(monkeypatch: pytest.MonkeyPatch) -> None:
    """Disable remote LLM calls during tests to avoid token usage."""

    monkeypatch.setenv("AI_ANALYSIS_DISABLED", "1")
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)


@pytest.fixture
def dummy_data_dir() -> Path:
    """Return the built-in dummy data directory for tests."""

    return ROOT / "dummy_data"


@pytest.fixture
def reservations_file(dummy_data_dir: Path) -> Path:
    return dummy_data_dir / "reservations.json"


@pytest.fixture
def dummy_rows(reservations_file: Path) -> List[Dict[str, Any]]:
    """Raw reservation rows: 5 valid, 3 that must be skipped."""

    return json.loads(reservations_file.read_text(encoding="utf-8"))


@pytest.fixture
def settings() -> DashboardSettings:
    return DashboardSettings(
        reservations_webhook_url="https://hooks.example.test/sheet",
        agenda_webhook_url="https://hooks.example.test/agenda",
        appointments_webhook_url="https://hooks.example.test/citas",
    )


@pytest.fixture
def admin_session() -> Session:
    return Session(Profile(id="u-1", email="admin@example.test", full_name="Admin", is_admin=True))


@pytest.fixture
def make_http():
    """Factory for fake HTTP clients with a canned response or error."""

    def _make(payload: Any = None, status_code: int = 200, text: Optional[str] = None, error: Optional[Exception] = None):
        return FakeHttp(FakeResponse(payload, status_code=status_code, text=text), error=error)

    return _make


@pytest.fixture
def run_cli():
    """Helper to invoke the CLI with custom arguments inside tests."""

    def _run(args: list[str]) -> None:
        cli_main(args)

    return _run
