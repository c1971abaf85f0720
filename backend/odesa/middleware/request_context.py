# odesa/middleware/request_context.py
import asyncio
import logging
import time

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


async def request_timing_middleware(request: Request, call_next):
    """Log API calls with their duration and cut off requests that run too long."""
    start = time.perf_counter()
    timeout = request.app.state.settings.REQUEST_TIMEOUT_SECONDS
    try:
        response = await asyncio.wait_for(call_next(request), timeout=timeout)
    except asyncio.TimeoutError:
        logger.error("%s %s timed out after %ss", request.method, request.url.path, timeout)
        return JSONResponse(status_code=504, content={"message": "Request timed out"})

    if request.url.path.startswith("/api"):
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "%s %s %s in %.0fms",
            request.method, request.url.path, response.status_code, elapsed_ms,
        )
    return response
