from typing import Optional
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import StreamingResponse

from domain.models import ProxyRequest
from domain.errors import ClientInputError
from use_cases import ProxyMediaUseCase

router = APIRouter()

MISSING_URL_DETAIL = "Failed to deserialize query string: missing field `url`"


def get_proxy_use_case(request: Request) -> ProxyMediaUseCase:
	return request.app.state.container.proxy_use_case


@router.get("/proxy")
async def proxy_media(
	url: Optional[str] = Query(None, description="Base64-encoded absolute URL to fetch"),
	use_case: ProxyMediaUseCase = Depends(get_proxy_use_case),
):
	"""Streams non-HTML media from the decoded upstream URL."""
	if url is None:
		raise ClientInputError(MISSING_URL_DETAIL)

	result = await use_case.execute(ProxyRequest(url=url))

	# Content-Type передаем заголовком, а не media_type: starlette дописывает
	# charset к text/* типам
	headers = {"Content-Type": result.content_type, **result.headers}
	return StreamingResponse(result.body, status_code=result.status_code, headers=headers)
