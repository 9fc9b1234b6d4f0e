import logging
import time
from fastapi import Request

logger = logging.getLogger("access")


async def log_access_middleware(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    # Время до отправки заголовков, тело еще может стримиться
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(
        "%s %s -> %d (%.1f ms)",
        request.method,
        request.url.path,
        response.status_code,
        elapsed_ms,
    )
    return response
