import asyncio
import json
from types import SimpleNamespace

from starlette.requests import Request

from app.core.limiter import client_key, custom_rate_limit_exceeded_handler
from tests.factories import auth_headers


def make_request(headers=None):
    raw = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    return Request(
        {
            "type": "http",
            "method": "POST",
            "path": "/quizzes/1/submit",
            "headers": raw,
            "client": ("203.0.113.7", 50000),
        }
    )


def test_signed_in_requests_are_keyed_by_user(student):
    assert client_key(make_request(auth_headers(student))) == f"user:{student.id}"


def test_anonymous_and_forged_requests_are_keyed_by_address():
    assert client_key(make_request()) == "addr:203.0.113.7"
    forged = make_request({"Authorization": "Bearer not-a-token"})
    assert client_key(forged) == "addr:203.0.113.7"


def test_rate_limited_response_shape():
    exc = SimpleNamespace(detail="20 per 1 minute")
    response = asyncio.run(custom_rate_limit_exceeded_handler(make_request(), exc))

    assert response.status_code == 429
    assert response.headers["Retry-After"] == "60"
    body = json.loads(response.body)
    assert body["type"] == "rate_limited"
    assert "20 per 1 minute" in body["error"]
