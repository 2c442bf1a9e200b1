"""
Cross-cutting HTTP concerns.

* ``limiter`` -- per-client rate limiting (slowapi), keyed on remote address.
* ``log_requests`` -- one INFO line per request with status and latency.
"""

import logging
import time

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from src.config import settings

logger = logging.getLogger("src.api.access")

limiter = Limiter(key_func=get_remote_address)
RATE_LIMIT = settings.rate_limit


async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s -> %d (%.1f ms)",
        request.method,
        request.url.path,
        response.status_code,
        elapsed_ms,
    )
    return response
