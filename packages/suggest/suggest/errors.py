"""suggest 错误码（合同稳定）：fetcher / joiner 捕获后记日志并降级为“不展示”。"""

from __future__ import annotations

from typing import Optional


class SuggestInvalidInputError(ValueError):
    """配置覆盖项非法（未知 option 名等）；error.code = InvalidInput。"""

    code: str = "InvalidInput"

    def __init__(self, message: str = "") -> None:
        self.detail = message
        super().__init__(message or "Invalid input")


class SuggestNetworkError(ValueError):
    """DNS/连接失败、请求被拒；error.code = NetworkError。"""

    code: str = "NetworkError"

    def __init__(self, message: str = "") -> None:
        self.detail = message
        super().__init__(message or "Network error")


class SuggestTimeoutError(ValueError):
    """仅在配置了 timeout_sec 时出现；error.code = Timeout。"""

    code: str = "Timeout"

    def __init__(self, message: str = "") -> None:
        self.detail = message
        super().__init__(message or "Request timeout")


class SuggestServiceError(ValueError):
    """收到响应但非成功：HTTP >= 400 或 envelope status != "200 OK"；error.code = ServiceError。"""

    code: str = "ServiceError"

    def __init__(self, message: str = "", status: Optional[str] = None) -> None:
        self.detail = message
        self.status: Optional[str] = status
        super().__init__(message or "Service error")


class SuggestParseError(ValueError):
    """响应体结构不符合预期；error.code = ParseError。"""

    code: str = "ParseError"

    def __init__(self, message: str = "") -> None:
        self.detail = message
        super().__init__(message or "Parse error")


# fetcher / joiner 统一按“无交付”处理的失败类型
DELIVERY_ERRORS = (
    SuggestNetworkError,
    SuggestTimeoutError,
    SuggestServiceError,
    SuggestParseError,
)
