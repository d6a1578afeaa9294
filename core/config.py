"""
配置文件 - 项目配置管理
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, Field, field_validator


class ServerSettings(BaseModel):
    host: str = "127.0.0.1"
    port: int = 8080


class RealtimeSettings(BaseModel):
    # 每个推送连接的发送队列上限
    send_queue_max: int = 100
    # 队列溢出策略: drop_oldest | drop_new | disconnect
    overflow_policy: str = "drop_oldest"
    # WebSocket 握手时读取客户端标识的查询参数名
    client_id_param: str = "client_id"


class Settings(BaseSettings):
    """项目配置"""

    # 基础配置
    PROJECT_NAME: str = "ChatBox"
    VERSION: str = "0.1.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"

    # 分组配置：采用嵌套模型（外部类），环境变量形如 SERVER__PORT
    server: ServerSettings = Field(default_factory=ServerSettings)
    realtime: RealtimeSettings = Field(default_factory=RealtimeSettings)

    # CORS配置
    CORS_ORIGINS: list = Field(default=["http://localhost:8080", "http://127.0.0.1:8080"])

    # 静态文件目录（存在时挂载到 /）
    STATIC_DIR: str = "./static"

    # 日志级别（为空时按 DEBUG 推断）
    LOG_LEVEL: str = ""

    # 访问日志跳过的路径
    LOG_SKIP_PATHS: list = Field(default=["/health"])

    # pydantic-settings v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="allow",
        env_nested_delimiter="__",
    )

    @field_validator("CORS_ORIGINS", "LOG_SKIP_PATHS", mode="before")
    @classmethod
    def _parse_str_list(cls, v):
        """允许 JSON 字符串或逗号分隔字符串两种格式。"""
        if isinstance(v, list):
            return v
        if isinstance(v, str):
            s = v.strip()
            if s.startswith("[") and s.endswith("]"):
                import json
                try:
                    arr = json.loads(s)
                    if isinstance(arr, list):
                        return arr
                except ValueError:
                    pass
            if "," in s:
                return [item.strip() for item in s.split(",") if item.strip()]
            return [s] if s else []
        return v

    @field_validator("realtime")
    @classmethod
    def _check_overflow_policy(cls, v: RealtimeSettings) -> RealtimeSettings:
        policy = (v.overflow_policy or "").lower()
        if policy not in {"drop_oldest", "drop_new", "disconnect"}:
            raise ValueError(f"不支持的队列溢出策略: {v.overflow_policy}")
        v.overflow_policy = policy
        return v


settings = Settings()
