from __future__ import annotations
from dataclasses import dataclass, field
from typing import AsyncIterator, Awaitable, Callable, Optional
from pydantic import BaseModel


class ProxyRequest(BaseModel):
	# Целевой URL в base64 (стандартный алфавит, с паддингом)
	url: str


class ResolvedTarget(BaseModel):
	url: str
	scheme: str
	host: str
	port: Optional[int] = None


@dataclass
class UpstreamResponse:
	"""Открытый ответ upstream. Тело еще не прочитано."""
	status_code: int
	content_type: Optional[str]
	chunks: Callable[[], AsyncIterator[bytes]]
	close: Callable[[], Awaitable[None]]

	@property
	def is_success(self) -> bool:
		return 200 <= self.status_code <= 299


@dataclass
class ProxyResponse:
	status_code: int
	content_type: str
	body: AsyncIterator[bytes]
	headers: dict[str, str] = field(default_factory=dict)
