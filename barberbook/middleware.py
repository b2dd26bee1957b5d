import time
from uuid import uuid4

from fastapi import Request

from barberbook.logger import get_logger

logger = get_logger(__name__)


async def add_request_id_and_process_time(request: Request, call_next):
    """Tag every response with a request id and the time spent handling it"""
    request_id = request.headers.get("X-Request-ID") or uuid4().hex
    start = time.perf_counter()
    response = await call_next(request)
    elapsed = time.perf_counter() - start
    response.headers["X-Request-ID"] = request_id
    response.headers["X-Process-Time"] = f"{elapsed:.4f}"
    logger.info(
        f"[{request_id}] {request.method} {request.url.path} -> {response.status_code} in {elapsed:.4f}s"
    )
    return response
