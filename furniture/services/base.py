"""서비스 레이어 공통 모듈

- ServiceError: 서비스별 예외의 부모 클래스 (API 응답용 code 포함)
- log_service_call: 서비스 메서드 호출/소요시간 로깅 데코레이터
"""

from __future__ import annotations

import logging
import time
from functools import wraps
from typing import Any, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

# 이 시간(ms)을 넘기면 WARNING으로 기록
SLOW_CALL_THRESHOLD_MS = 100

# 로그에 남기지 않을 인자 이름
SENSITIVE_KWARGS = frozenset({"password", "token", "secret"})


def log_service_call(func: Callable[..., T]) -> Callable[..., T]:
    """
    서비스 메서드 호출 로깅 데코레이터

    - 호출 시작/종료 DEBUG 로그 (소요시간 ms 포함)
    - 느린 호출 WARNING
    - ServiceError 계열(code 보유)은 WARNING, 그 외 예외는 ERROR + 스택 트레이스

    사용법:
        @classmethod
        @log_service_call
        def compute_fee(cls, ...):
            ...
    """

    @wraps(func)
    def wrapper(*args, **kwargs) -> T:
        # 예: furniture.services.shipping_service -> ShippingService
        module_name = func.__module__.split(".")[-1]
        service_name = "".join(part.title() for part in module_name.split("_"))
        label = f"{service_name}.{func.__name__}"

        safe_kwargs = {k: v for k, v in kwargs.items() if k not in SENSITIVE_KWARGS}
        logger.debug("[%s] 호출 시작 | args=%s, kwargs=%s", label, args[1:3], safe_kwargs)

        start_time = time.perf_counter()
        try:
            result = func(*args, **kwargs)
        except ServiceError as e:
            elapsed = (time.perf_counter() - start_time) * 1000
            logger.warning(
                "[%s] 비즈니스 에러 | code=%s, message=%s, elapsed=%.2fms",
                label,
                e.code,
                e.message,
                elapsed,
            )
            raise
        except Exception as e:
            elapsed = (time.perf_counter() - start_time) * 1000
            logger.error(
                "[%s] 예외 발생 | error=%s, elapsed=%.2fms",
                label,
                str(e),
                elapsed,
                exc_info=True,
            )
            raise

        elapsed = (time.perf_counter() - start_time) * 1000
        logger.debug("[%s] 호출 완료 | elapsed=%.2fms", label, elapsed)
        if elapsed > SLOW_CALL_THRESHOLD_MS:
            logger.warning("[%s] 느린 실행 감지 | elapsed=%.2fms", label, elapsed)

        return result

    return wrapper


class ServiceError(Exception):
    """
    서비스 레이어 기본 예외 클래스

    Attributes:
        message: 사용자에게 보여줄 에러 메시지
        code: 에러 코드 (API 응답의 "code" 필드)
        details: 추가 상세 정보

    사용법:
        raise OrderServiceError("Order not found.", code="ORDER_NOT_FOUND")
    """

    def __init__(self, message: str, code: str = "SERVICE_ERROR", details: dict | None = None):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"

    def to_response(self) -> dict[str, Any]:
        """API 에러 응답 본문"""
        body: dict[str, Any] = {"error": self.message, "code": self.code}
        if self.details:
            body["details"] = self.details
        return body
