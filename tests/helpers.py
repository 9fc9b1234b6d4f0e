import base64
from typing import Callable, Optional

import httpx

from core.config import LoggingSettings, ProxySettings, Settings, UpstreamSettings


def encode_url(url: str) -> str:
    return base64.b64encode(url.encode("utf-8")).decode("ascii")


def make_settings(**proxy_overrides) -> Settings:
    return Settings(
        upstream=UpstreamSettings(),
        proxy=ProxySettings(**proxy_overrides),
        logging=LoggingSettings(to_files=False),
    )


class MockUpstream:
    """In-process upstream: records requests, answers with a configurable response."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.responder: Callable[[httpx.Request], httpx.Response] = lambda request: httpx.Response(
            200, content=b"", headers={"content-type": "image/png"}
        )

    def respond(
        self,
        status_code: int = 200,
        content: bytes = b"",
        content_type: Optional[str] = "image/png",
    ) -> None:
        headers = {"content-type": content_type} if content_type is not None else {}
        self.responder = lambda request: httpx.Response(status_code, content=content, headers=headers)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)
