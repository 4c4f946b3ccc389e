from __future__ import annotations

import logging
import secrets
from pathlib import Path

from dotenv import load_dotenv
from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_APP_DIR = Path(__file__).resolve().parent
_BACKEND_DIR = _APP_DIR.parent
_REPO_ROOT = _BACKEND_DIR.parent

logger = logging.getLogger(__name__)


def _load_root_dotenv() -> None:
    """
    统一从仓库根目录读取 `.env`（并保证其优先级最高）。

    说明：
    - 启动脚本通常会 `cd backend`，导致工具默认只会找子目录下的 `.env`。
    - 先加载 `backend/.env`，再加载根目录 `.env`，并且 `override=True`，确保根目录优先。
    """

    backend_env = _BACKEND_DIR / ".env"
    root_env = _REPO_ROOT / ".env"

    for env_file in (backend_env, root_env):
        if env_file.exists():
            load_dotenv(env_file, override=True, encoding="utf-8")


class Settings(BaseSettings):
    """Application settings"""

    # Server（供 run.py 使用）
    backend_host: str = "0.0.0.0"
    backend_port: int = 5000
    backend_reload: bool = True

    # API
    api_prefix: str = "/api"
    debug: bool = True
    # 日志级别（DEBUG / INFO / WARNING ...）
    log_level: str = "INFO"

    # Storage
    # - memory：进程内 dict 存储（默认；重启即丢失）
    # - sql：SQLAlchemy 异步引擎，DATABASE_URL 优先，否则使用 SQLITE_DB_PATH
    storage_backend: str = "memory"
    database_url: str | None = None
    sqlite_db_path: str = "journalize.db"
    # 是否输出 SQLAlchemy 的 SQL 日志；排查问题时再临时打开
    sql_echo: bool = False

    # CORS（逗号分隔；"*" 表示允许所有来源，此时强制关闭 allow_credentials）
    cors_allow_origins: str = "*"
    cors_allow_credentials: bool = False
    cors_allow_methods: str = "*"
    cors_allow_headers: str = "*"

    # 登录会话 Cookie
    # 未配置 SESSION_SECRET 时每次启动随机生成，重启后所有会话失效
    session_secret: str | None = None
    session_days: int = 30
    session_cookie_name: str = "journalize_session"
    session_cookie_samesite: str = "lax"  # lax | strict | none
    session_cookie_secure: str = "auto"  # auto | true | false

    # 防暴力破解：对 /api/login 做 IP 维度限流
    login_rate_limit_window_seconds: int = 300
    login_rate_limit_max_attempts: int = 20

    # Access Log（本地访问日志，按天落盘：<repo>/logs/YYYY-MM-DD.logs）
    access_log_enabled: bool = True
    access_log_dir: str = "logs"
    # 逗号分隔：完全匹配 path（不含 query）时跳过记录
    access_log_ignore_paths: str = "/health"
    # 是否记录 querystring（默认关闭，避免无意间写入敏感参数）
    access_log_include_query: bool = False

    @model_validator(mode="after")
    def _normalize_storage(self) -> "Settings":
        backend = (self.storage_backend or "memory").strip().lower()
        if backend not in {"memory", "sql"}:
            raise ValueError(f"STORAGE_BACKEND 只支持 memory / sql，当前为：{self.storage_backend}")
        self.storage_backend = backend

        if self.database_url and self.database_url.strip():
            return self

        db_path = Path(self.sqlite_db_path)
        if not db_path.is_absolute():
            db_path = (_REPO_ROOT / db_path).resolve()
        self.database_url = f"sqlite+aiosqlite:///{db_path.as_posix()}"
        return self

    @model_validator(mode="after")
    def _normalize_session(self) -> "Settings":
        secret = (self.session_secret or "").strip()
        if not secret:
            logger.warning("[CONFIG] SESSION_SECRET 未配置，使用随机值（重启后会话失效）")
            secret = secrets.token_urlsafe(32)
        self.session_secret = secret

        if int(self.session_days or 0) <= 0:
            self.session_days = 30

        if not (self.session_cookie_name or "").strip():
            self.session_cookie_name = "journalize_session"

        samesite = (self.session_cookie_samesite or "lax").strip().lower()
        if samesite not in {"lax", "strict", "none"}:
            samesite = "lax"
        self.session_cookie_samesite = samesite

        secure = (self.session_cookie_secure or "auto").strip().lower()
        if secure not in {"auto", "true", "false"}:
            secure = "auto"
        self.session_cookie_secure = secure
        return self

    model_config = SettingsConfigDict(
        case_sensitive=False
    )


_load_root_dotenv()
settings = Settings()
