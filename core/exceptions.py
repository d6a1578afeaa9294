"""
自定义异常映射与全局异常处理器

对外接口是纯文本协议：业务异常的响应体就是异常消息本身。
"""
import uuid

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from starlette import status as http_status

from shared.codes import BusinessCode
from core.logging_config import get_logger
from domain.common.exceptions import BusinessException


def business_code_to_http_status(code: int) -> int:
    """根据业务码映射HTTP状态码（默认400）。"""
    mapping = {
        BusinessCode.PARAM_ERROR: http_status.HTTP_400_BAD_REQUEST,
        BusinessCode.INVALID_ENCODING: http_status.HTTP_400_BAD_REQUEST,
        BusinessCode.BODY_READ_ERROR: http_status.HTTP_400_BAD_REQUEST,

        BusinessCode.BUSINESS_ERROR: http_status.HTTP_400_BAD_REQUEST,
        BusinessCode.NOT_FOUND: http_status.HTTP_404_NOT_FOUND,
        BusinessCode.ROOM_NOT_FOUND: http_status.HTTP_404_NOT_FOUND,

        BusinessCode.SYSTEM_ERROR: http_status.HTTP_500_INTERNAL_SERVER_ERROR,
        BusinessCode.DELIVERY_ERROR: http_status.HTTP_500_INTERNAL_SERVER_ERROR,
    }
    try:
        return mapping.get(BusinessCode(code), http_status.HTTP_400_BAD_REQUEST)
    except ValueError:
        return http_status.HTTP_400_BAD_REQUEST


def register_exception_handlers(app: FastAPI):
    """
    注册全局异常处理器

    Args:
        app: FastAPI应用实例
    """

    logger = get_logger(__name__)

    @app.exception_handler(BusinessException)
    async def business_exception_handler(request: Request, exc: BusinessException):
        """处理业务异常"""
        status_code = business_code_to_http_status(exc.code)
        logger.info(
            "business_exception",
            error_type=exc.error_type,
            code=int(exc.code),
            status_code=status_code,
            details=exc.details,
        )
        return PlainTextResponse(exc.message, status_code=status_code)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """处理所有未捕获的异常"""
        request_id = getattr(getattr(request, "state", object()), "request_id", None) or str(uuid.uuid4())

        # 记录日志（使用结构化日志）
        logger.error(
            "unhandled_exception",
            request_id=request_id,
            error=str(exc),
            exc_info=True,
        )

        body = "Internal Server Error"
        # 开发环境返回异常信息
        if app.debug:
            body = f"{body}: {exc}"
        return PlainTextResponse(body, status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR)
