"""
Retry engine: решение "повторять или нет" и расчёт задержки.

Включает:
- Exponential backoff (по умолчанию без jitter)
- Опциональные jitter, ограничение по идемпотентности, Retry-After

Engine только принимает решение. Спит и крутит цикл клиент.
"""

import logging
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import FrozenSet, Optional

from .exceptions import ClientError, RateLimitedError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryDecision:
    """Результат should_retry."""
    retry: bool
    delay_ms: int = 0


class RetryPolicy(ABC):
    """
    Стратегия retry.

    Подключается через ClientConfig.retry_policy, контракт клиента
    от неё не зависит.
    """

    @abstractmethod
    def is_retryable(self, error: ClientError) -> bool:
        """Можно ли повторить попытку после этой ошибки."""
        pass

    @abstractmethod
    def delay_ms(self, error: ClientError, attempt_index: int, base_delay_ms: int) -> int:
        """Задержка перед повтором номер attempt_index (с нуля)."""
        pass


@dataclass(frozen=True)
class ExponentialBackoff(RetryPolicy):
    """
    Exponential backoff: ``base * 2 ** attempt_index``.

    По умолчанию: без jitter, без учёта HTTP метода, без Retry-After.
    Последовательность задержек детерминирована: B, 2B, 4B, ...

    Args:
        jitter: Умножать задержку на случайный коэффициент 0.5-1.5
        idempotent_only: Ретраить только идемпотентные методы
        idempotent_methods: Какие методы считать идемпотентными
        max_delay_ms: Верхняя граница задержки (None = без ограничения)
        respect_retry_after: Для 429 брать задержку из Retry-After
        retry_after_max_ms: Максимум ждать из Retry-After

    Examples:
        >>> ExponentialBackoff()
        >>> ExponentialBackoff(jitter=True, idempotent_only=True, max_delay_ms=30000)
    """
    jitter: bool = False
    idempotent_only: bool = False
    idempotent_methods: FrozenSet[str] = field(
        default_factory=lambda: frozenset({'GET', 'HEAD', 'PUT', 'DELETE', 'OPTIONS'})
    )
    max_delay_ms: Optional[int] = None
    respect_retry_after: bool = False
    retry_after_max_ms: int = 300_000  # 5 минут

    def __post_init__(self):
        """Валидация."""
        if self.max_delay_ms is not None and self.max_delay_ms < 0:
            raise ValueError("max_delay_ms must be non-negative")
        if self.retry_after_max_ms < 0:
            raise ValueError("retry_after_max_ms must be non-negative")

    def is_retryable(self, error: ClientError) -> bool:
        if not error.is_retryable:
            return False
        if self.idempotent_only and error.config is not None:
            return error.config.method.upper() in self.idempotent_methods
        return True

    def delay_ms(self, error: ClientError, attempt_index: int, base_delay_ms: int) -> int:
        # Приоритет 1: Retry-After header
        if self.respect_retry_after and isinstance(error, RateLimitedError):
            retry_after = parse_retry_after(error.retry_after)
            if retry_after is not None:
                return min(int(retry_after * 1000), self.retry_after_max_ms)

        # Приоритет 2: Exponential backoff
        wait = base_delay_ms * (2 ** attempt_index)

        if self.max_delay_ms is not None:
            wait = min(wait, self.max_delay_ms)

        # Добавить jitter (50-150% от wait)
        if self.jitter:
            wait = wait * (0.5 + random.random())

        return int(wait)


def parse_retry_after(value: Optional[str]) -> Optional[float]:
    """
    Распарсить Retry-After header с валидацией против malicious input.

    Args:
        value: Значение header (секунды или HTTP-date)

    Returns:
        Секунды или None
    """
    if not value:
        return None

    # Нормальные значения: "60" или "Wed, 21 Oct 2015 07:28:00 GMT"
    if len(value) > 100:
        logger.warning("Retry-After header too long (%d chars), ignoring", len(value))
        return None

    try:
        seconds = float(value)
    except ValueError:
        try:
            retry_date = parsedate_to_datetime(value)
        except (ValueError, TypeError, OverflowError) as e:
            logger.debug("Failed to parse Retry-After header %r: %s", value, e)
            return None
        if retry_date.tzinfo is None:
            retry_date = retry_date.replace(tzinfo=timezone.utc)
        return max(0.0, (retry_date - datetime.now(timezone.utc)).total_seconds())

    if seconds < 0 or seconds > 86400 * 365:
        logger.warning("Retry-After seconds value out of reasonable range: %s", seconds)
        return None
    return seconds


class RetryEngine:
    """
    Механизм retry для одного логического запроса.

    Engine не хранит состояния между решениями: клиент создаёт его
    из конфигурации конкретной попытки и не делит между запросами.

    Examples:
        >>> engine = RetryEngine(base_delay_ms=1000)
        >>> decision = engine.should_retry(error, attempt_index=0, max_retries=3)
        >>> if decision.retry:
        ...     await asyncio.sleep(decision.delay_ms / 1000)
    """

    def __init__(self, base_delay_ms: int, policy: Optional[RetryPolicy] = None):
        """
        Args:
            base_delay_ms: Базовая задержка backoff
            policy: Стратегия (по умолчанию ExponentialBackoff())
        """
        self.base_delay_ms = base_delay_ms
        self.policy = policy or ExponentialBackoff()

    def should_retry(self, error: ClientError, attempt_index: int, max_retries: int) -> RetryDecision:
        """
        Решить нужен ли retry.

        Args:
            error: Классифицированная ошибка попытки
            attempt_index: Номер повтора, который планируется (0 для первого)
            max_retries: Бюджет повторов

        Returns:
            RetryDecision(retry, delay_ms)
        """
        if attempt_index >= max_retries:
            return RetryDecision(retry=False)

        if not self.policy.is_retryable(error):
            return RetryDecision(retry=False)

        return RetryDecision(
            retry=True,
            delay_ms=self.policy.delay_ms(error, attempt_index, self.base_delay_ms),
        )
