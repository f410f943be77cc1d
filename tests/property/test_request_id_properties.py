"""Property tests for request ID assignment.

Every response carries an X-Request-ID header: the caller's own ID when one
was sent, otherwise a fresh UUID4. The ID is bound to the request context for
the duration of the request only.
"""

from __future__ import annotations

import uuid

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.testclient import TestClient
from hypothesis import given, settings
from hypothesis import strategies as st

from envelope_guard.middleware.request_id import REQUEST_ID_HEADER, RequestIdMiddleware
from envelope_guard.request_context import request_id_var


# ---------------------------------------------------------------------------
# Minimal test app with RequestIdMiddleware
# ---------------------------------------------------------------------------

def _create_test_app() -> FastAPI:
    app = FastAPI()

    @app.get("/ping")
    async def ping(request: Request) -> JSONResponse:
        return JSONResponse(
            status_code=200,
            content={
                "success": True,
                "data": {"state": request.state.request_id, "context": request_id_var.get()},
            },
        )

    app.add_middleware(RequestIdMiddleware)
    return app


_app = _create_test_app()
_client = TestClient(_app, raise_server_exceptions=False)

caller_ids = st.text(
    min_size=1,
    max_size=40,
    alphabet="abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_-",
)


# ---------------------------------------------------------------------------
# Property: generated IDs are unique UUID4s
# ---------------------------------------------------------------------------


@settings(max_examples=100)
@given(n=st.integers(min_value=2, max_value=20))
def test_request_ids_are_unique_uuids(n: int) -> None:
    collected_ids: list[str] = []

    for _ in range(n):
        resp = _client.get("/ping")
        rid = resp.headers.get(REQUEST_ID_HEADER)
        assert rid is not None, "X-Request-ID header must be present"

        parsed = uuid.UUID(rid, version=4)
        assert str(parsed) == rid

        collected_ids.append(rid)

    assert len(set(collected_ids)) == len(collected_ids), "Request IDs must be unique"


# ---------------------------------------------------------------------------
# Property: caller IDs are propagated
# ---------------------------------------------------------------------------


@settings(max_examples=100)
@given(rid=caller_ids)
def test_caller_request_id_is_propagated(rid: str) -> None:
    resp = _client.get("/ping", headers={REQUEST_ID_HEADER: rid})

    assert resp.headers[REQUEST_ID_HEADER] == rid
    assert resp.json()["data"] == {"state": rid, "context": rid}


def test_context_is_reset_after_request() -> None:
    _client.get("/ping", headers={REQUEST_ID_HEADER: "req_scoped"})

    assert request_id_var.get() is None
