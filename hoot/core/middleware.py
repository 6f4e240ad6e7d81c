"""HTTP middleware: request correlation and access logging.

Usage:
    app.middleware("http")(request_id_middleware)
"""

from __future__ import annotations

import logging
import time
import uuid

from fastapi import Request, Response

from hoot.core.config import settings
from hoot.core.logging import clear_request_id, hash_identifier, set_request_id
from hoot.core.rate_limit import extract_client_identifier

logger = logging.getLogger("hoot.access")


async def request_id_middleware(request: Request, call_next) -> Response:
    """Bind a request id for the duration of the request and log its outcome.

    The id is the incoming ``LOG_REQUEST_ID_HEADER`` value or a fresh UUID4.
    It is echoed on the response next to ``X-Request-Duration-ms``. The
    access line carries the hashed rate-limit key, so throttled clients can
    be traced without logging their addresses.
    """
    header_name = settings.log.request_id_header
    request_id = request.headers.get(header_name) or str(uuid.uuid4())
    set_request_id(request_id)
    started = time.perf_counter()

    try:
        response: Response = await call_next(request)
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
        logger.info(
            "http.request",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": elapsed_ms,
                "client_hash": hash_identifier(extract_client_identifier(request)),
            },
        )
    finally:
        clear_request_id()

    response.headers[header_name] = request_id
    response.headers["X-Request-Duration-ms"] = f"{elapsed_ms:.2f}"
    return response
