# src/api_client/interceptors/response_time.py

import logging

from ..core.config import get_header
from ..core.response import APIResponse
from .request_id import REQUEST_ID_HEADER

logger = logging.getLogger(__name__)


def response_time_interceptor(response: APIResponse) -> APIResponse:
    """Залогировать время ответа и request id. Ответ не меняется."""
    logger.debug(
        "Request %s completed in %.2fms",
        get_header(response.config.headers, REQUEST_ID_HEADER) or "-",
        response.elapsed_ms,
        extra={"status": response.status, "elapsed_ms": response.elapsed_ms},
    )
    return response
