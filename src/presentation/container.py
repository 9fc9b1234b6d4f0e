import logging
from typing import Optional

import httpx
from core.config import Settings
from core.error_logger import get_error_reporter
from domain.ports import TargetPolicy
from infrastructure.http_clients.upstream_client import HttpxUpstreamClient
from use_cases import ProxyMediaUseCase, DomainPresencePolicy, PrivateNetworkPolicy


# --- DI Container ---
class Container:
	def __init__(self, app_settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
		logger = logging.getLogger("media_proxy")
		error_reporter = get_error_reporter()

		self.upstream_client = HttpxUpstreamClient(
			settings=app_settings.upstream,
			error_reporter=error_reporter,
			transport=transport,
		)

		policy: TargetPolicy = DomainPresencePolicy()
		if app_settings.proxy.block_private_networks:
			policy = PrivateNetworkPolicy(inner=policy, logger=logger)
		self.target_policy = policy

		self.proxy_use_case = ProxyMediaUseCase(
			upstream=self.upstream_client,
			policy=self.target_policy,
			proxy_settings=app_settings.proxy,
			error_reporter=error_reporter,
			logger=logger,
		)

	async def aclose(self) -> None:
		await self.upstream_client.aclose()
