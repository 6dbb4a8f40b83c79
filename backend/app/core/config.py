"""
应用配置管理
从环境变量加载配置，提供类型安全的配置访问
"""

import json
from pathlib import Path
from typing import List, Optional, Union
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator, model_validator

PROJECT_ROOT = Path(__file__).resolve().parents[3]


class Settings(BaseSettings):
    """应用配置类，从环境变量加载所有配置"""

    model_config = SettingsConfigDict(
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,  # 环境变量不区分大小写
        extra="ignore",  # 忽略额外的环境变量
    )

    # ==================== 项目信息 ====================
    PROJECT_NAME: str = Field(default="Notice API")
    VERSION: str = Field(default="1.0.0")

    # ==================== 服务器配置 ====================
    BACKEND_HOST: str = Field(default="0.0.0.0")
    BACKEND_PORT: int = Field(default=3000)
    BACKEND_RELOAD: bool = Field(default=True)  # 开发模式热重载

    # ==================== 调试配置 ====================
    DEBUG: bool = Field(default=True)
    LOG_LEVEL: str = Field(default="INFO")

    # ==================== CORS 配置 ====================
    CORS_ORIGINS: List[str] = Field(default=["*"])

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: Union[str, List[str]]) -> List[str]:
        """解析CORS_ORIGINS，支持JSON字符串或列表"""
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    # ==================== 数据库配置 ====================
    POSTGRES_USER: str = Field(default="notice_user")
    POSTGRES_PASSWORD: str = Field(default="change_me")
    POSTGRES_DB: str = Field(default="announcement_system")
    POSTGRES_HOST: str = Field(default="127.0.0.1")
    POSTGRES_PORT: str = Field(default="5432")
    DATABASE_DRIVER: str = Field(default="asyncpg")
    DB_POOL_SIZE: int = Field(default=10)  # 连接池上限
    DB_MAX_OVERFLOW: int = Field(default=0)
    DB_POOL_TIMEOUT_SECONDS: int = Field(default=30)
    SQLALCHEMY_ECHO: bool = Field(default=False)
    AUTO_CREATE_TABLES: bool = Field(default=False)

    # 数据库URL - 优先使用环境变量中的值
    DATABASE_URL: Optional[str] = Field(default=None, validate_default=True)

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def assemble_db_connection(cls, v: Optional[str], info) -> Optional[str]:
        """构建数据库连接 URL"""
        if v:
            return v

        values = info.data
        driver = values.get("DATABASE_DRIVER", "asyncpg")
        username = values.get("POSTGRES_USER")
        password = values.get("POSTGRES_PASSWORD")
        host = values.get("POSTGRES_HOST")
        port = values.get("POSTGRES_PORT")
        db = values.get("POSTGRES_DB")

        if all([driver, username, password, host, port, db]):
            return f"postgresql+{driver}://{username}:{password}@{host}:{port}/{db}"
        return None

    # ==================== 文件上传配置 ====================
    UPLOAD_FOLDER: str = Field(default="./uploads")
    UPLOAD_URL_PREFIX: str = Field(default="/uploads")
    MAX_UPLOAD_SIZE: int = Field(default=5 * 1024 * 1024)  # 5MB
    UPLOAD_ALLOWED_EXTS: str = Field(default="jpeg,jpg,png,gif")
    MAX_JSON_BODY_SIZE: int = Field(default=10 * 1024 * 1024)  # 富文本可能较大

    # ==================== 公告相关配置 ====================
    NOTICE_PAGE_SIZE_DEFAULT: int = Field(default=10)
    NOTICE_PAGE_SIZE_MAX: int = Field(default=100)
    NOTICE_BATCH_DELETE_MAX: int = Field(default=100)
    NOTICE_TITLE_MAX_LENGTH: int = Field(default=255)
    NOTICE_CONTENT_MAX_LENGTH: int = Field(default=50000)

    @property
    def upload_allowed_exts(self) -> set[str]:
        return {
            x.strip().lower().lstrip(".")
            for x in str(self.UPLOAD_ALLOWED_EXTS or "").split(",")
            if x.strip()
        }

    @model_validator(mode="after")
    def validate_security_settings(self):
        if self.DEBUG:
            return self

        if not self.POSTGRES_PASSWORD or self.POSTGRES_PASSWORD.strip() in {"", "change_me"}:
            if "DATABASE_URL" not in self.model_fields_set:
                raise ValueError("POSTGRES_PASSWORD 未配置或仍为默认值，请在 .env 中设置为安全值")

        return self


# 创建全局配置实例
settings = Settings()
