# src/api_client/utils/sanitizer.py
"""
Утилита для маскирования чувствительных данных в логах.

Используется для защиты токенов, API ключей, паролей и заголовков
аутентификации от попадания в логи.
"""

import re
from typing import Any, Dict, Mapping


# Список чувствительных полей (case-insensitive)
# Этот набор можно расширить с помощью add_sensitive_keys()
SENSITIVE_KEYS = {
    # Пароли
    'password', 'passwd', 'pwd',
    # Токены
    'token', 'access_token', 'refresh_token', 'auth_token', 'api_token', 'bearer_token',
    'jwt', 'id_token',
    # Секреты
    'secret', 'api_secret', 'client_secret', 'secret_key',
    # API ключи
    'api_key', 'apikey', 'x-api-key', 'private_key',
    # Аутентификация
    'authorization', 'proxy-authorization', 'credentials',
    # Сессии и куки
    'cookie', 'set-cookie', 'session_id', 'sessionid', 'csrf_token',
}

# Регулярные выражения для обнаружения sensitive данных в строках
SENSITIVE_PATTERNS = [
    # Bearer tokens в заголовках
    (re.compile(r'(Bearer\s+)([A-Za-z0-9\-._~+/]+=*)', re.IGNORECASE), r'\1***REDACTED***'),
    # Basic auth в заголовках
    (re.compile(r'(Basic\s+)([A-Za-z0-9+/]+=*)', re.IGNORECASE), r'\1***REDACTED***'),
    # API ключи (формат: key=value или key:value)
    (re.compile(r'(api[_-]?key[\s:=]+)([^\s&,;]+)', re.IGNORECASE), r'\1***REDACTED***'),
    # Токены (формат: token=value)
    (re.compile(r'(token[\s:=]+)([^\s&,;]+)', re.IGNORECASE), r'\1***REDACTED***'),
    # Пароли (формат: password=value)
    (re.compile(r'(password[\s:=]+)([^\s&,;]+)', re.IGNORECASE), r'\1***REDACTED***'),
]

DEFAULT_MASK = "***REDACTED***"


def mask_sensitive_data(data: Any, mask: str = DEFAULT_MASK) -> Any:
    """
    Рекурсивно маскирует чувствительные данные в словарях, списках, строках.

    Args:
        data: Данные для маскирования (dict, list, str, или любой другой тип)
        mask: Строка-заменитель для sensitive данных

    Returns:
        Копия данных с замаскированными чувствительными полями

    Examples:
        >>> mask_sensitive_data({"Authorization": "Bearer secret123", "Accept": "application/json"})
        {'Authorization': '***REDACTED***', 'Accept': 'application/json'}

        >>> mask_sensitive_data("https://api.example.com?api_key=secret123&page=1")
        'https://api.example.com?api_key=***REDACTED***&page=1'
    """
    # None, числа, булевы значения возвращаем как есть
    if data is None or isinstance(data, (bool, int, float)):
        return data

    if isinstance(data, str):
        return _mask_string(data, mask)

    if isinstance(data, Mapping):
        return _mask_dict(data, mask)

    if isinstance(data, (list, tuple)):
        return type(data)(mask_sensitive_data(item, mask) for item in data)

    # Для других типов (объекты, etc) возвращаем как есть
    return data


def mask_headers(headers: Mapping[str, str], mask: str = DEFAULT_MASK) -> Dict[str, str]:
    """
    Маскирует чувствительные заголовки HTTP.

    Examples:
        >>> mask_headers({"Authorization": "Bearer token123", "User-Agent": "MyApp/1.0"})
        {'Authorization': '***REDACTED***', 'User-Agent': 'MyApp/1.0'}
    """
    return _mask_dict(headers, mask)


def add_sensitive_keys(*keys: str) -> None:
    """
    Добавляет новые чувствительные ключи в глобальный список SENSITIVE_KEYS.

    Examples:
        >>> add_sensitive_keys('x-tenant-secret')
    """
    for key in keys:
        SENSITIVE_KEYS.add(key.lower())


def _mask_dict(data: Mapping[str, Any], mask: str) -> Dict[str, Any]:
    result = {}
    for key, value in data.items():
        key_lower = key.lower() if isinstance(key, str) else str(key).lower()
        if _is_sensitive_key(key_lower):
            result[key] = mask
        else:
            result[key] = mask_sensitive_data(value, mask)
    return result


def _mask_string(text: str, mask: str) -> str:
    result = text
    for pattern, replacement in SENSITIVE_PATTERNS:
        result = pattern.sub(replacement.replace('***REDACTED***', mask), result)
    return result


def _is_sensitive_key(key: str) -> bool:
    """
    Проверяет, является ли ключ чувствительным.

    Точное совпадение или ключ содержит sensitive слово.
    """
    if key in SENSITIVE_KEYS:
        return True
    return any(sensitive_key in key for sensitive_key in SENSITIVE_KEYS)
