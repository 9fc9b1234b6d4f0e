import logging
from typing import Optional

import httpx
from domain.models import ResolvedTarget, UpstreamResponse
from domain.ports.upstream_client import UpstreamClient
from domain.errors import UpstreamError
from core.config import UpstreamSettings
from core.error_logger import ErrorReporter


def _header_text(response: httpx.Response, name: bytes) -> Optional[str]:
	"""Значение заголовка, если это видимый ASCII текст, иначе None."""
	for key, value in response.headers.raw:
		if key.lower() != name:
			continue
		if all(b == 0x09 or 0x20 <= b <= 0x7E for b in value):
			return value.decode("ascii")
		return None
	return None


class HttpxUpstreamClient(UpstreamClient):
	"""Один httpx.AsyncClient на процесс, пул соединений общий для всех запросов."""

	def __init__(
		self,
		settings: UpstreamSettings,
		error_reporter: ErrorReporter,
		transport: Optional[httpx.AsyncBaseTransport] = None,
	):
		self._logger = logging.getLogger("upstream")
		self._error_reporter = error_reporter
		headers = {"User-Agent": settings.user_agent} if settings.user_agent else None
		self._client = httpx.AsyncClient(
			headers=headers,
			timeout=httpx.Timeout(settings.timeout),
			follow_redirects=settings.follow_redirects,
			max_redirects=settings.max_redirects,
			verify=settings.verify_tls,
			transport=transport,
		)
		self._logger.info(
			"Upstream client initialized timeout=%s follow_redirects=%s max_redirects=%s",
			settings.timeout,
			settings.follow_redirects,
			settings.max_redirects,
		)

	async def open(self, target: ResolvedTarget) -> UpstreamResponse:
		"""Отправляет GET и ждет только заголовки, тело читается потоком."""
		try:
			request = self._client.build_request("GET", target.url)
			response = await self._client.send(request, stream=True)
		except (httpx.HTTPError, httpx.InvalidURL) as e:
			self._logger.warning("Не удалось получить %s: %s", target.url, str(e))
			self._error_reporter.log_upstream_error(error=e, target_url=target.url)
			raise UpstreamError("Failed to fetch upstream") from e

		self._logger.debug(
			"Upstream ответил status=%s url=%s redirects=%d",
			response.status_code,
			response.url,
			len(response.history),
		)
		return UpstreamResponse(
			status_code=response.status_code,
			content_type=_header_text(response, b"content-type"),
			chunks=response.aiter_bytes,
			close=response.aclose,
		)

	async def aclose(self) -> None:
		await self._client.aclose()
