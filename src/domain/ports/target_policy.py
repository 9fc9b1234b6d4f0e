from __future__ import annotations
from typing import Protocol
from domain.models import ResolvedTarget


class TargetPolicy(Protocol):
	"""Проверка цели перед запросом (защита от SSRF).

	Отклоняет цель, выбрасывая ClientInputError.
	"""

	async def ensure_allowed(self, target: ResolvedTarget) -> None: ...
