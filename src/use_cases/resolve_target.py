import base64
import binascii
import ipaddress
import string
from typing import Optional
from urllib.parse import unquote_to_bytes

import httpx
from domain.models import ResolvedTarget
from domain.errors import ClientInputError

# Управляющие символы C0 и пробел по краям URL игнорируются
_C0_AND_SPACE = "".join(chr(c) for c in range(0x21))

# Схемы с обязательным хостом-доменом или IP (WHATWG "special schemes")
SPECIAL_SCHEMES = ("http", "https", "ftp", "ws", "wss", "file")

_FORBIDDEN_HOST_CHARS = frozenset("\x00\t\n\r #/:<>?@[\\]^|")
_FORBIDDEN_DOMAIN_CHARS = _FORBIDDEN_HOST_CHARS | frozenset(chr(c) for c in range(0x20)) | {"%", "\x7f"}

_MAX_PORT = 65535


def decode_target_url(raw: str) -> str:
	"""base64 (стандартный алфавит, строгий паддинг) -> UTF-8 строка."""
	try:
		decoded = base64.b64decode(raw, validate=True)
	except (binascii.Error, ValueError):
		raise ClientInputError("Invalid base64 in URL")

	# Лишние биты в последнем символе (QR==, QUJ=) b64decode молча отбрасывает
	if base64.b64encode(decoded) != raw.encode("ascii"):
		raise ClientInputError("Invalid base64 in URL")

	try:
		return decoded.decode("utf-8")
	except UnicodeDecodeError:
		raise ClientInputError("Invalid UTF-8 in URL")


def _parse_ipv4_number(part: str) -> Optional[int]:
	if not part:
		return None
	radix, digits = 10, string.digits
	if part[:2] in ("0x", "0X"):
		radix, digits = 16, string.hexdigits
		part = part[2:]
	elif len(part) > 1 and part[0] == "0":
		radix, digits = 8, string.octdigits
		part = part[1:]
	if not part:
		return 0
	if any(ch not in digits for ch in part):
		return None
	return int(part, radix)


def _ipv4_parts(host: str) -> list[str]:
	parts = host.split(".")
	if parts[-1] == "" and len(parts) > 1:
		parts.pop()
	return parts


def _ends_in_number(host: str) -> bool:
	last = _ipv4_parts(host)[-1]
	if last and all(ch in string.digits for ch in last):
		return True
	return _parse_ipv4_number(last) is not None


def _parse_ipv4(host: str) -> str:
	"""127.1, 2130706433, 0x7f000001, 0177.0.0.1 -> 127.0.0.1"""
	parts = _ipv4_parts(host)
	if len(parts) > 4:
		raise ClientInputError("Invalid URL")

	numbers = []
	for part in parts:
		number = _parse_ipv4_number(part)
		if number is None:
			raise ClientInputError("Invalid URL")
		numbers.append(number)

	if any(number > 255 for number in numbers[:-1]):
		raise ClientInputError("Invalid URL")
	if numbers[-1] >= 256 ** (5 - len(numbers)):
		raise ClientInputError("Invalid URL")

	value = numbers[-1]
	for index, number in enumerate(numbers[:-1]):
		value += number * 256 ** (3 - index)
	return str(ipaddress.IPv4Address(value))


def normalize_host(raw_host: str, scheme: str) -> str:
	"""Приводит хост к виду, в котором его видит сетевой стек.

	Числовые формы IPv4 раскрываются в dotted-quad, чтобы проверка домена
	видела в них IP адрес, а не имя.
	"""
	# Пустой хост и IPv6 литералы httpx уже проверил
	if not raw_host or ":" in raw_host:
		return raw_host

	try:
		host = unquote_to_bytes(raw_host).decode("utf-8")
	except UnicodeDecodeError:
		raise ClientInputError("Invalid URL")

	if scheme not in SPECIAL_SCHEMES:
		# Непрозрачный хост: сохраняем как есть
		if any(ch in _FORBIDDEN_HOST_CHARS for ch in host):
			raise ClientInputError("Invalid URL")
		return raw_host

	if not host.isascii():
		try:
			host = host.encode("idna").decode("ascii")
		except UnicodeError:
			raise ClientInputError("Invalid URL")
	host = host.lower()

	if any(ch in _FORBIDDEN_DOMAIN_CHARS for ch in host):
		raise ClientInputError("Invalid URL")

	if _ends_in_number(host):
		return _parse_ipv4(host)
	return host


def parse_target_url(text: str) -> ResolvedTarget:
	"""Разбирает абсолютный URL. Относительные ссылки считаются ошибкой."""
	try:
		url = httpx.URL(text.strip(_C0_AND_SPACE))
	except httpx.InvalidURL:
		raise ClientInputError("Invalid URL")

	if not url.scheme:
		raise ClientInputError("Invalid URL")

	if url.port is not None and url.port > _MAX_PORT:
		raise ClientInputError("Invalid URL")

	scheme = url.scheme.lower()
	raw_host = url.raw_host.decode("ascii")
	host = normalize_host(raw_host, scheme)
	if host != raw_host:
		url = url.copy_with(host=host)

	return ResolvedTarget(url=str(url), scheme=scheme, host=host, port=url.port)
