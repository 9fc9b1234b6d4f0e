from __future__ import annotations
import logging
from typing import AsyncIterator, Optional

from domain.models import ProxyRequest, ProxyResponse, ResolvedTarget, UpstreamResponse
from domain.ports import TargetPolicy, UpstreamClient
from domain.errors import ClientInputError, PolicyError, UpstreamError
from core.config import ProxySettings
from core.error_logger import ErrorReporter
from .resolve_target import decode_target_url, parse_target_url

ALLOWED_SCHEMES = ("http", "https")


class ProxyMediaUseCase:
	"""Один входящий запрос -> один потоковый ответ.

	decode -> validate -> fetch -> inspect -> stream. Состояния между
	запросами нет, кроме общего upstream клиента.
	"""

	def __init__(
		self,
		upstream: UpstreamClient,
		policy: TargetPolicy,
		proxy_settings: ProxySettings,
		error_reporter: ErrorReporter,
		logger: Optional[logging.Logger] = None,
	) -> None:
		self._upstream = upstream
		self._policy = policy
		self._settings = proxy_settings
		self._error_reporter = error_reporter
		self._logger = logger or logging.getLogger("media_proxy")

	async def execute(self, request: ProxyRequest) -> ProxyResponse:
		target = await self.resolve(request)

		self._logger.debug("Запрашиваем upstream: %s", target.url)
		upstream = await self._upstream.open(target)

		if not upstream.is_success:
			await upstream.close()
			error = UpstreamError("Upstream returned error")
			self._logger.warning("Upstream %s ответил %d", target.url, upstream.status_code)
			self._error_reporter.log_upstream_error(
				error=error, target_url=target.url, status_code=upstream.status_code
			)
			raise error

		content_type = upstream.content_type or self._settings.default_content_type
		if content_type.startswith("text/html"):
			await upstream.close()
			self._logger.info("Отклонен HTML контент от %s (%s)", target.url, content_type)
			raise PolicyError("This is a media-based proxy only!")

		return ProxyResponse(
			status_code=200,
			content_type=content_type,
			body=self._relay(target, upstream),
			headers={"Cache-Control": self._settings.cache_control},
		)

	async def resolve(self, request: ProxyRequest) -> ResolvedTarget:
		text = decode_target_url(request.url)
		target = parse_target_url(text)
		await self._policy.ensure_allowed(target)
		if target.scheme.lower() not in ALLOWED_SCHEMES:
			raise ClientInputError("Only http/https allowed")
		return target

	async def _relay(self, target: ResolvedTarget, upstream: UpstreamResponse) -> AsyncIterator[bytes]:
		# Заголовки уже отправлены клиенту: ошибку можно только залогировать
		# и оборвать поток
		bytes_sent = 0
		try:
			async for chunk in upstream.chunks():
				bytes_sent += len(chunk)
				yield chunk
			self._logger.debug("Отдано %d байт из %s", bytes_sent, target.url)
		except Exception as e:
			self._error_reporter.log_stream_error(error=e, target_url=target.url, bytes_sent=bytes_sent)
			raise
		finally:
			await upstream.close()
