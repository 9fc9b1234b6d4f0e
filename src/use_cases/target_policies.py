from __future__ import annotations
import asyncio
import ipaddress
import logging
import socket
from typing import Awaitable, Callable, Optional

from domain.models import ResolvedTarget
from domain.ports.target_policy import TargetPolicy
from domain.errors import ClientInputError
from .resolve_target import SPECIAL_SCHEMES

Resolver = Callable[[str, int], Awaitable[list[str]]]

_DEFAULT_PORTS = {"http": 80, "https": 443}


def _parse_ip(host: str) -> Optional[ipaddress.IPv4Address | ipaddress.IPv6Address]:
	try:
		return ipaddress.ip_address(host.strip("[]").split("%", 1)[0])
	except ValueError:
		return None


class DomainPresencePolicy(TargetPolicy):
	"""Требует доменное имя в URL.

	Пустой хост и IP литералы отклоняются. У схем вне SPECIAL_SCHEMES хост
	непрозрачный и считается доменом. DNS не резолвится, поэтому домен,
	указывающий на приватный адрес, проходит (см. PrivateNetworkPolicy).
	"""

	async def ensure_allowed(self, target: ResolvedTarget) -> None:
		if not target.host:
			raise ClientInputError("Missing or invalid domain")
		if target.scheme.lower() in SPECIAL_SCHEMES and _parse_ip(target.host) is not None:
			raise ClientInputError("Missing or invalid domain")


async def resolve_host(host: str, port: int) -> list[str]:
	loop = asyncio.get_running_loop()
	infos = await loop.getaddrinfo(host, port, type=socket.SOCK_STREAM)
	return [info[4][0] for info in infos]


def is_blocked_address(ip: ipaddress.IPv4Address | ipaddress.IPv6Address) -> bool:
	if isinstance(ip, ipaddress.IPv6Address) and ip.ipv4_mapped is not None:
		ip = ip.ipv4_mapped
	return (
		ip.is_private
		or ip.is_loopback
		or ip.is_link_local
		or ip.is_multicast
		or ip.is_reserved
		or ip.is_unspecified
	)


class PrivateNetworkPolicy(TargetPolicy):
	"""Резолвит хост и отклоняет приватные, loopback и link-local адреса.

	Ошибка резолва не считается нарушением политики: запрос дойдет до
	upstream и завершится 502.
	"""

	def __init__(
		self,
		inner: TargetPolicy,
		resolver: Optional[Resolver] = None,
		logger: Optional[logging.Logger] = None,
	) -> None:
		self._inner = inner
		self._resolver = resolver or resolve_host
		self._logger = logger or logging.getLogger("media_proxy")

	async def ensure_allowed(self, target: ResolvedTarget) -> None:
		await self._inner.ensure_allowed(target)

		port = target.port or _DEFAULT_PORTS.get(target.scheme.lower(), 80)
		try:
			addresses = await self._resolver(target.host, port)
		except OSError as e:
			self._logger.info("Не удалось резолвить %s: %s", target.host, str(e))
			return

		for address in addresses:
			ip = _parse_ip(address)
			if ip is not None and is_blocked_address(ip):
				self._logger.warning(
					"Запрос к %s заблокирован: адрес %s во внутренней сети", target.host, address
				)
				raise ClientInputError("Destination address not allowed")
