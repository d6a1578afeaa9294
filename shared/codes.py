"""
Shared business codes used across layers (Domain/Core/API).

This module provides a single source of truth to avoid drift between
multiple enum definitions scattered across the codebase.
"""
from enum import IntEnum


class BusinessCode(IntEnum):
    """业务状态码定义（单一来源）"""

    # 成功
    SUCCESS = 0

    # 参数错误 (1xxxx)
    PARAM_ERROR = 10000
    INVALID_ENCODING = 10004
    BODY_READ_ERROR = 10005

    # 业务错误 (2xxxx)
    BUSINESS_ERROR = 20000
    NOT_FOUND = 20006  # 资源未找到（通用）
    ROOM_NOT_FOUND = 20101

    # 系统错误 (4xxxx)
    SYSTEM_ERROR = 40000
    DELIVERY_ERROR = 40004


__all__ = ["BusinessCode"]
