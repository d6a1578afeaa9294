"""领域层业务异常定义，供领域与基础设施使用。

核心（core）层仅负责全局映射与异常处理，尽量避免领域层反向依赖核心层。
"""
from __future__ import annotations

from typing import Optional
from shared.codes import BusinessCode


class BusinessException(Exception):
    """业务异常基类"""

    def __init__(
        self,
        code: int,
        message: str,
        error_type: str = "BusinessError",
        details: Optional[dict] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.error_type = error_type
        self.details = details
        super().__init__(self.message)


class RoomNotFoundException(BusinessException):
    """房间不存在"""

    def __init__(self, room: Optional[str] = None):
        details = {"room": room} if room is not None else None
        super().__init__(
            code=BusinessCode.ROOM_NOT_FOUND,
            message="That room does not exist",
            error_type="RoomNotFound",
            details=details,
        )


class InvalidCommentException(BusinessException):
    """评论内容无法读取或不是合法的 UTF-8"""

    def __init__(self, message: str = "Not valid utf8", code: int = BusinessCode.INVALID_ENCODING):
        super().__init__(
            code=code,
            message=message,
            error_type="InvalidComment",
        )


class ConnectionClosedError(BusinessException):
    """推送连接已关闭，无法投递"""

    def __init__(self, client_id: Optional[str] = None):
        details = {"client_id": client_id} if client_id else None
        super().__init__(
            code=BusinessCode.DELIVERY_ERROR,
            message="Connection is closed",
            error_type="ConnectionClosed",
            details=details,
        )
