# src/api_client/interceptors/__init__.py
from ..core.config import InterceptorSet
from .error_logging import error_logging_interceptor
from .request_id import REQUEST_ID_HEADER, generate_request_id, request_id_interceptor
from .response_time import response_time_interceptor


def default_interceptors() -> InterceptorSet:
    """Интерсепторы, которые получает каждый пресет фабрики."""
    return InterceptorSet(
        request=(request_id_interceptor,),
        response=(response_time_interceptor,),
        error=(error_logging_interceptor,),
    )


__all__ = [
    "REQUEST_ID_HEADER",
    "generate_request_id",
    "request_id_interceptor",
    "response_time_interceptor",
    "error_logging_interceptor",
    "default_interceptors",
]
