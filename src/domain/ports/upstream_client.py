from __future__ import annotations
from typing import Protocol
from domain.models import ResolvedTarget, UpstreamResponse


class UpstreamClient(Protocol):
	async def open(self, target: ResolvedTarget) -> UpstreamResponse: ...
