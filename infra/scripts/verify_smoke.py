from __future__ import annotations

import asyncio
import os
import time
from uuid import uuid4

import httpx

from app.infra.auth import create_access_token


def _assert_status(response: httpx.Response, expected: int | tuple[int, ...]) -> None:
    expected_codes = (expected,) if isinstance(expected, int) else expected
    if response.status_code not in expected_codes:
        raise RuntimeError(
            f"{response.request.method} {response.request.url} expected {expected_codes}, "
            f"got {response.status_code}: {response.text}"
        )


def _auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


async def _wait_ok(client: httpx.AsyncClient, path: str, timeout_seconds: float = 60.0) -> None:
    deadline = time.monotonic() + timeout_seconds
    last_status = "n/a"
    last_body = ""
    while time.monotonic() < deadline:
        try:
            response = await client.get(path)
            if response.status_code == 200:
                return
            last_status = str(response.status_code)
            last_body = response.text
        except httpx.HTTPError as exc:
            last_status = "http_error"
            last_body = str(exc)
        await asyncio.sleep(1.0)
    raise RuntimeError(f"timeout waiting for {path}, last_status={last_status}, detail={last_body}")


async def _run() -> None:
    base_url = os.getenv("APP_BASE_URL", "http://app:8000").rstrip("/")
    run_id = uuid4().hex[:8]
    # Requires SESSION_JWT_SECRET to match the running service.
    token = create_access_token(user_id=f"smoke-user-{run_id}")

    timeout = httpx.Timeout(20.0)
    async with httpx.AsyncClient(base_url=base_url, timeout=timeout) as client:
        await _wait_ok(client, "/healthz")
        await _wait_ok(client, "/readyz")

        anonymous_resp = await client.get("/api/projects")
        _assert_status(anonymous_resp, 401)

        list_resp = await client.get("/api/projects", headers=_auth_headers(token))
        _assert_status(list_resp, 200)
        if list_resp.json() != []:
            raise RuntimeError("fresh smoke user unexpectedly owns projects")

        missing_resp = await client.get(f"/api/projects/smoke-{run_id}", headers=_auth_headers(token))
        _assert_status(missing_resp, 404)

        page_resp = await client.get("/projects")
        _assert_status(page_resp, 303)
        if not page_resp.headers.get("location", "").startswith("/login?next="):
            raise RuntimeError("anonymous project list did not redirect to login")

        error_resp = await client.get("/auth/error", params={"error": "Verification"})
        _assert_status(error_resp, 200)
        if "verification token has expired" not in error_resp.text:
            raise RuntimeError("auth error page did not render the verification message")

    print("verify_smoke: healthz/readyz + project api auth gates + ui redirect + auth error page ok")


def main() -> None:
    asyncio.run(_run())


if __name__ == "__main__":
    main()
