class MediaProxyError(Exception):
	"""Ошибка обработки запроса, которая отдается клиенту как text/plain."""

	status_code: int = 500

	def __init__(self, detail: str):
		super().__init__(detail)
		self.detail = detail


class ClientInputError(MediaProxyError):
	"""Некорректный параметр url. Запрос к upstream не выполняется."""

	status_code = 400


class UpstreamError(MediaProxyError):
	"""Upstream недоступен или ответил не 2xx. Повторов нет."""

	status_code = 502


class PolicyError(MediaProxyError):
	"""Контент запрещен политикой прокси (HTML)."""

	status_code = 403
