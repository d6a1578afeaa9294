"""
FastAPI应用主入口
"""
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from api.routes import rooms as rooms_routes
from api.routes import ws as ws_routes
from api.middleware import RequestIDMiddleware, LoggingMiddleware
from application.services.chat_service import ChatBox
from core.config import settings
from core.exceptions import register_exception_handlers
from core.logging_config import get_logger, configure_logging
from domain.room.registry import RoomRegistry
from infrastructure.realtime.connection_registry import ConnectionRegistry


# 初始化日志：在入口处显式配置，避免模块导入时的副作用
configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    # 共享状态随应用实例创建，请求处理器通过依赖注入获取
    chat_box = ChatBox(rooms=RoomRegistry(), connections=ConnectionRegistry())
    app.state.chat_box = chat_box
    logger.info(
        "chat_box_initialized",
        queue_max=settings.realtime.send_queue_max,
        overflow_policy=settings.realtime.overflow_policy,
    )

    yield

    # 关闭时断开所有推送连接
    handles = await chat_box.connections.clear()
    for handle in handles:
        await handle.close()
    logger.info("application_shutdown", connections_closed=len(handles))


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    debug=settings.DEBUG,
    lifespan=lifespan,
    description="房间评论与推送通知服务",
)

# 添加中间件（注意顺序：从下往上执行）
app.add_middleware(LoggingMiddleware)
app.add_middleware(RequestIDMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 注册全局异常处理器
register_exception_handlers(app)


# 注册路由（路径与既有客户端保持兼容，不加前缀）
app.include_router(rooms_routes.router)
app.include_router(ws_routes.router)


# 健康检查
@app.get("/health", tags=["Health"])
async def health_check():
    """健康检查端点"""
    return {"status": "healthy"}


# 静态文件最后挂载，只兜底未匹配的路径
if Path(settings.STATIC_DIR).is_dir():
    app.mount("/", StaticFiles(directory=settings.STATIC_DIR, html=True), name="static")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.server.host,
        port=settings.server.port,
        reload=settings.DEBUG,
        # 沿用 configure_logging 的 structlog 处理链
        log_config=None,
    )
