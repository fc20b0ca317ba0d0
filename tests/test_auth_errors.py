from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from app import main as app_main
from app.domain.auth_errors import DEFAULT_AUTH_ERROR_MESSAGE, present_auth_error


def test_known_codes_have_distinct_messages() -> None:
    messages = [present_auth_error(code) for code in ("Configuration", "AccessDenied", "Verification")]
    assert len(set(messages)) == 3
    assert DEFAULT_AUTH_ERROR_MESSAGE not in messages


@pytest.mark.parametrize("code", [None, "", "bogus", "configuration", "ACCESSDENIED"])
def test_unknown_codes_fall_back_to_default(code: str | None) -> None:
    assert present_auth_error(code) == DEFAULT_AUTH_ERROR_MESSAGE


def test_presentation_is_stable() -> None:
    assert present_auth_error("Verification") == present_auth_error("Verification")
    assert present_auth_error("bogus") == present_auth_error(None)


def test_error_page_renders_message() -> None:
    client = TestClient(app_main.app)

    denied = client.get("/auth/error", params={"error": "AccessDenied"})
    assert denied.status_code == 200
    assert "You do not have permission to sign in." in denied.text

    unknown = client.get("/auth/error", params={"error": "<script>"})
    assert unknown.status_code == 200
    assert DEFAULT_AUTH_ERROR_MESSAGE in unknown.text
    assert "<script>" not in unknown.text

    missing = client.get("/auth/error")
    assert DEFAULT_AUTH_ERROR_MESSAGE in missing.text
