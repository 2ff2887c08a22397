# src/api_client/interceptors/request_id.py
"""
Интерсептор X-Request-ID.

Помечает каждый запрос уникальным идентификатором и прокидывает его
в correlation id логгера, чтобы все записи попытки были связаны.
"""

import random
import string
import time

from ..core.config import RequestConfig, get_header
from ..core.logging.filters import set_correlation_id

REQUEST_ID_HEADER = "X-Request-ID"

_ALPHABET = string.ascii_lowercase + string.digits


def generate_request_id() -> str:
    """
    Идентификатор вида ``req_<unix_ms>_<9 символов base36>``.

    Example:
        >>> generate_request_id()
        'req_1700000000000_k3j9x0a2b'
    """
    suffix = ''.join(random.choices(_ALPHABET, k=9))
    return f"req_{int(time.time() * 1000)}_{suffix}"


def request_id_interceptor(config: RequestConfig) -> RequestConfig:
    """
    Добавить X-Request-ID, если его ещё нет.

    Существующий заголовок (задан вызывающим кодом) не перезаписывается,
    поэтому повторный прогон на той же конфигурации ничего не меняет.
    """
    request_id = get_header(config.headers, REQUEST_ID_HEADER)
    if request_id is None:
        request_id = generate_request_id()
        config = config.with_headers({REQUEST_ID_HEADER: request_id})

    set_correlation_id(request_id)
    return config
