"""Unit tests for the shared error handlers."""

import json

import pytest
from libs.common.errors import INTERNAL, unhandled_exception_handler
from libs.common.logging import clear_request_context, set_request_context
from starlette.requests import Request


def _request(path="/api/v1/orders"):
    return Request(
        {
            "type": "http",
            "method": "POST",
            "path": path,
            "raw_path": path.encode(),
            "root_path": "",
            "scheme": "http",
            "server": ("testserver", 80),
            "query_string": b"",
            "headers": [],
        }
    )


@pytest.fixture(autouse=True)
def _clean_request_context():
    yield
    clear_request_context()


@pytest.mark.asyncio
@pytest.mark.unit
async def test_unhandled_error_carries_request_id(caplog):
    set_request_context(request_id="req-500", path="/api/v1/orders", method="POST")

    with caplog.at_level("ERROR"):
        response = await unhandled_exception_handler(_request(), RuntimeError("boom"))

    assert response.status_code == 500
    assert response.headers["X-Request-ID"] == "req-500"
    body = json.loads(response.body)
    assert body == {"success": False, "message": "服务器内部错误", "code": INTERNAL}
    assert "request_id=req-500" in caplog.text


@pytest.mark.asyncio
@pytest.mark.unit
async def test_unhandled_error_outside_a_request():
    response = await unhandled_exception_handler(_request(), RuntimeError("boom"))

    assert response.status_code == 500
    assert "X-Request-ID" not in response.headers
