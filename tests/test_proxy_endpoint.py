"""
End-to-end tests for GET /proxy

The app is driven in-process with TestClient; the upstream is an
httpx.MockTransport, so no real network I/O happens.
"""

import base64
import logging

import httpx
import pytest
from fastapi.testclient import TestClient

from presentation.app import create_app
from tests.helpers import MockUpstream, encode_url, make_settings

CACHE_CONTROL = "public, max-age=31536000"


def assert_plain_error(response: httpx.Response, status_code: int, detail: str) -> None:
    assert response.status_code == status_code
    assert response.text == detail
    assert response.headers["content-type"].startswith("text/plain")


# ----------------------------
# Input validation (no upstream call)
# ----------------------------


def test_missing_url_parameter(client: TestClient, upstream: MockUpstream):
    response = client.get("/proxy")
    assert_plain_error(response, 400, "Failed to deserialize query string: missing field `url`")
    assert upstream.requests == []


@pytest.mark.parametrize("raw", ["not base64!", "abc", "aGVsbG8", "####", "aGVs bG8="])
def test_invalid_base64(client: TestClient, upstream: MockUpstream, raw: str):
    response = client.get("/proxy", params={"url": raw})
    assert_plain_error(response, 400, "Invalid base64 in URL")
    assert upstream.requests == []


@pytest.mark.parametrize("payload", [b"\xff\xfe\xfd", b"http://example.com/\xc3\x28", b"\x80"])
def test_invalid_utf8(client: TestClient, upstream: MockUpstream, payload: bytes):
    raw = base64.b64encode(payload).decode("ascii")
    response = client.get("/proxy", params={"url": raw})
    assert_plain_error(response, 400, "Invalid UTF-8 in URL")
    assert upstream.requests == []


@pytest.mark.parametrize(
    "text",
    [
        "just some text",
        "/relative/path.png",
        "",
        "http://999.1.1.1/image.png",
        "http://[::zz]/image.png",
        "http://exa mple.com/a.png",
        "http://ex<ample.com/",
        "http://example.com:99999/a.png",
    ],
)
def test_unparsable_url(client: TestClient, upstream: MockUpstream, text: str):
    response = client.get("/proxy", params={"url": encode_url(text)})
    assert_plain_error(response, 400, "Invalid URL")
    assert upstream.requests == []


@pytest.mark.parametrize(
    "text",
    [
        "mailto:someone@example.com",
        "http://127.0.0.1/image.png",
        "http://[::1]:8080/image.png",
        "http://2130706433/a.png",
        "http://127.1/a.png",
        "http://0x7f000001/a.png",
    ],
)
def test_missing_domain(client: TestClient, upstream: MockUpstream, text: str):
    response = client.get("/proxy", params={"url": encode_url(text)})
    assert_plain_error(response, 400, "Missing or invalid domain")
    assert upstream.requests == []


def test_bare_scheme_is_rejected_as_client_error(client: TestClient, upstream: MockUpstream):
    response = client.get("/proxy", params={"url": encode_url("http://")})
    assert response.status_code == 400
    assert response.text in ("Invalid URL", "Missing or invalid domain")
    assert upstream.requests == []


@pytest.mark.parametrize("text", ["ftp://example.com/file", "file://example.com/etc/passwd", "gopher://example.com/", "foo://1.2.3.4/"])
def test_disallowed_scheme(client: TestClient, upstream: MockUpstream, text: str):
    response = client.get("/proxy", params={"url": encode_url(text)})
    assert_plain_error(response, 400, "Only http/https allowed")
    assert upstream.requests == []


# ----------------------------
# Upstream interaction
# ----------------------------


def test_streams_media_with_cache_headers(client: TestClient, upstream: MockUpstream):
    body = b"\x89PNG\r\n\x1a\n" + bytes(range(256)) * 64
    upstream.respond(200, content=body, content_type="image/png")

    response = client.get("/proxy", params={"url": encode_url("https://cdn.example.com/a.png")})

    assert response.status_code == 200
    assert response.content == body
    assert response.headers["content-type"] == "image/png"
    assert response.headers["cache-control"] == CACHE_CONTROL
    assert len(upstream.requests) == 1
    assert upstream.requests[0].method == "GET"
    assert str(upstream.requests[0].url) == "https://cdn.example.com/a.png"


def test_query_string_of_target_is_preserved(client: TestClient, upstream: MockUpstream):
    upstream.respond(200, content=b"data", content_type="video/mp4")

    target = "https://media.example.com/v.mp4?token=a%2Bb&size=large"
    response = client.get("/proxy", params={"url": encode_url(target)})

    assert response.status_code == 200
    assert upstream.requests[0].url.params["token"] == "a+b"
    assert upstream.requests[0].url.params["size"] == "large"


def test_text_content_type_is_passed_through_verbatim(client: TestClient, upstream: MockUpstream):
    upstream.respond(200, content=b"a,b\n1,2\n", content_type="text/csv")

    response = client.get("/proxy", params={"url": encode_url("https://example.com/data.csv")})

    assert response.status_code == 200
    assert response.headers["content-type"] == "text/csv"


def test_missing_content_type_defaults_to_octet_stream(client: TestClient, upstream: MockUpstream):
    upstream.respond(200, content=b"\x00\x01\x02", content_type=None)

    response = client.get("/proxy", params={"url": encode_url("https://example.com/blob")})

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/octet-stream"
    assert response.content == b"\x00\x01\x02"


@pytest.mark.parametrize("content_type", ["text/html", "text/html; charset=utf-8"])
def test_html_is_forbidden(client: TestClient, upstream: MockUpstream, content_type: str):
    upstream.respond(200, content=b"<html>secret</html>", content_type=content_type)

    response = client.get("/proxy", params={"url": encode_url("https://example.com/")})

    assert_plain_error(response, 403, "This is a media-based proxy only!")
    assert b"secret" not in response.content
    assert "cache-control" not in response.headers


def test_html_check_is_case_sensitive(client: TestClient, upstream: MockUpstream):
    upstream.respond(200, content=b"<html></html>", content_type="TEXT/HTML")

    response = client.get("/proxy", params={"url": encode_url("https://example.com/")})

    assert response.status_code == 200
    assert response.headers["content-type"] == "TEXT/HTML"


@pytest.mark.parametrize("status_code", [404, 500, 503, 304])
def test_upstream_error_status(client: TestClient, upstream: MockUpstream, status_code: int):
    upstream.respond(status_code, content=b"upstream error page", content_type="text/plain")

    response = client.get("/proxy", params={"url": encode_url("https://example.com/missing.png")})

    assert_plain_error(response, 502, "Upstream returned error")
    assert b"upstream error page" not in response.content


def test_upstream_connection_failure(client: TestClient, upstream: MockUpstream):
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    upstream.responder = refuse

    response = client.get("/proxy", params={"url": encode_url("https://unreachable.example.com/a.png")})

    assert_plain_error(response, 502, "Failed to fetch upstream")


def test_redirects_are_followed(client: TestClient, upstream: MockUpstream):
    def redirecting(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/old.png":
            return httpx.Response(302, headers={"location": "https://example.com/new.png"})
        return httpx.Response(200, content=b"moved", headers={"content-type": "image/png"})

    upstream.responder = redirecting

    response = client.get("/proxy", params={"url": encode_url("https://example.com/old.png")})

    assert response.status_code == 200
    assert response.content == b"moved"
    assert [r.url.path for r in upstream.requests] == ["/old.png", "/new.png"]


def test_redirect_loop_is_a_fetch_failure(client: TestClient, upstream: MockUpstream):
    upstream.responder = lambda request: httpx.Response(302, headers={"location": "https://example.com/loop"})

    response = client.get("/proxy", params={"url": encode_url("https://example.com/loop")})

    assert_plain_error(response, 502, "Failed to fetch upstream")


def test_repeated_requests_are_not_cached(client: TestClient, upstream: MockUpstream):
    upstream.respond(200, content=b"same bytes", content_type="image/gif")
    params = {"url": encode_url("https://example.com/anim.gif")}

    first = client.get("/proxy", params=params)
    second = client.get("/proxy", params=params)

    assert first.status_code == second.status_code == 200
    assert first.content == second.content == b"same bytes"
    assert len(upstream.requests) == 2


# ----------------------------
# Opt-in private network policy
# ----------------------------


def test_private_network_policy_blocks_internal_hosts(upstream: MockUpstream, monkeypatch: pytest.MonkeyPatch):
    async def fake_resolve(host: str, port: int) -> list[str]:
        return ["10.0.0.7"]

    monkeypatch.setattr("use_cases.target_policies.resolve_host", fake_resolve)
    app = create_app(
        make_settings(block_private_networks=True),
        transport=httpx.MockTransport(upstream.handler),
    )
    with TestClient(app) as test_client:
        response = test_client.get("/proxy", params={"url": encode_url("http://internal.example.com/a.png")})

    assert_plain_error(response, 400, "Destination address not allowed")
    assert upstream.requests == []


def test_private_network_policy_is_off_by_default(client: TestClient, upstream: MockUpstream):
    upstream.respond(200, content=b"local", content_type="image/png")

    response = client.get("/proxy", params={"url": encode_url("http://localhost/a.png")})

    assert response.status_code == 200
    assert response.content == b"local"


# ----------------------------
# Access log middleware
# ----------------------------


def test_access_log_records_status(client: TestClient, caplog: pytest.LogCaptureFixture):
    with caplog.at_level(logging.INFO, logger="access"):
        response = client.get("/proxy", params={"url": "%%%"})

    assert response.status_code == 400
    access_records = [r for r in caplog.records if r.name == "access"]
    assert access_records
    assert "GET /proxy -> 400" in access_records[-1].getMessage()
