"""FastAPI application entry point"""
import logging
import uuid
from pathlib import Path
import tomllib

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exception_handlers import http_exception_handler as fastapi_http_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings, settings
from .api import auth_router, folders_router, journals_router, upload_router
from .middleware.session import SessionMiddleware
from .storage import Storage, build_storage
from .utils.access_log import AccessLogTimer, log_http_request
from .utils.errors import exception_summary

logging.basicConfig(
    level=getattr(logging, (settings.log_level or "INFO").upper(), logging.INFO),
    format="%(asctime)s [%(name)s:%(levelname)s] %(message)s",
)
logger = logging.getLogger(__name__)

# 默认降低 SQLAlchemy 的日志噪声；排查 SQL 时再用 SQL_ECHO=true 打开
if not settings.sql_echo:
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)


def _read_app_version() -> str:
    """从仓库根目录的 pyproject.toml 读取版本，避免多处硬编码导致不一致。"""
    pyproject = Path(__file__).resolve().parents[2] / "pyproject.toml"
    try:
        data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError):
        return "0.1.0"
    version = ((data.get("project") or {}).get("version") or "").strip()
    return version or "0.1.0"


APP_VERSION = _read_app_version()


def _split_csv(value: str) -> list[str]:
    return [v.strip() for v in (value or "").split(",") if v.strip()]


def _normalize_request_id(value: str | None) -> str | None:
    """对外部传入的 request id 做一次简单归一化，避免日志注入/过长字符串。"""
    if not value or not isinstance(value, str):
        return None
    s = value.strip()
    if not s or len(s) > 64:
        return None
    # 仅保留可读字符，避免控制字符污染日志/终端
    if any(ord(ch) < 32 for ch in s):
        return None
    return s


def _request_id(request: Request) -> str | None:
    return getattr(getattr(request, "state", None), "request_id", None)


def _add_cors(app: FastAPI, config: Settings) -> None:
    origins = _split_csv(config.cors_allow_origins)
    if not origins or origins == ["*"]:
        origins = ["*"]
        allow_credentials = False
    else:
        allow_credentials = bool(config.cors_allow_credentials)

    methods = _split_csv(config.cors_allow_methods)
    if not methods or methods == ["*"]:
        methods = ["*"]

    headers = _split_csv(config.cors_allow_headers)
    if not headers or headers == ["*"]:
        headers = ["*"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=allow_credentials,
        allow_methods=methods,
        allow_headers=headers,
    )


def create_app(storage: Storage | None = None, config: Settings = settings) -> FastAPI:
    """组装应用。

    存储实例由这里持有（`app.state.storage`），通过依赖注入交给各路由；
    未显式传入时在 startup 阶段按配置构造。
    """
    app = FastAPI(
        title="Journalize API",
        description="Personal journaling backend: journals, folders, import/export",
        version=APP_VERSION,
    )
    app.state.storage = storage
    app.state.owns_storage = storage is None

    _add_cors(app, config)

    # 登录会话识别（只写 request.state.user_id，不做拦截）
    app.add_middleware(
        SessionMiddleware,
        cookie_name=config.session_cookie_name,
        secret=config.session_secret or "",
    )

    # Access log middleware（按天写入本地 logs/）
    @app.middleware("http")
    async def access_log_middleware(request: Request, call_next):
        timer = AccessLogTimer()
        status_code = 500
        error: str | None = None

        try:
            response = await call_next(request)
            status_code = getattr(response, "status_code", 200) or 200
            return response
        except Exception as e:
            error = exception_summary(e, max_len=200 if config.debug else 0)
            raise
        finally:
            # 访问日志不应影响业务逻辑；写日志失败只记 debug
            try:
                await log_http_request(
                    request,
                    status_code=status_code,
                    duration_ms=timer.elapsed_ms(),
                    error=error,
                )
            except Exception:
                logger.debug("[ACCESS_LOG] Failed to write access log", exc_info=True)

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        """为每个请求生成/透传 X-Request-Id，并写入响应头。

        当发生异常时，由 exception handler 补齐响应头（中间件拿不到 response）。
        """
        incoming = request.headers.get("x-request-id") or request.headers.get("x-correlation-id")
        rid = _normalize_request_id(incoming) or uuid.uuid4().hex
        request.state.request_id = rid

        response = await call_next(request)
        response.headers["X-Request-Id"] = rid
        return response

    @app.exception_handler(HTTPException)
    async def http_exception_handler_with_request_id(request: Request, exc: HTTPException):
        response = await fastapi_http_exception_handler(request, exc)
        rid = _request_id(request)
        if rid:
            response.headers["X-Request-Id"] = rid
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """请求体 / 路径参数格式不对：统一 400，并返回逐字段的错误明细。"""
        rid = _request_id(request)
        headers = {"X-Request-Id": rid} if rid else None
        return JSONResponse(
            {"detail": jsonable_encoder(exc.errors())},
            status_code=400,
            headers=headers,
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        rid = _request_id(request)
        logger.exception("[UNHANDLED] request_id=%s", rid or "-")

        # 对外默认不泄露内部异常细节；debug 时给一个可读摘要便于定位
        detail = "INTERNAL_ERROR"
        if config.debug:
            detail = exception_summary(exc, max_len=200)

        payload: dict[str, object] = {"detail": detail}
        if rid:
            payload["request_id"] = rid

        headers = {"X-Request-Id": rid} if rid else None
        return JSONResponse(payload, status_code=500, headers=headers)

    # Register API routers
    app.include_router(auth_router, prefix=config.api_prefix)
    app.include_router(journals_router, prefix=config.api_prefix)
    app.include_router(folders_router, prefix=config.api_prefix)
    app.include_router(upload_router, prefix=config.api_prefix)

    @app.on_event("startup")
    async def startup_event():
        """Build storage on startup (unless one was injected)"""
        if app.state.storage is None:
            app.state.storage = await build_storage(config)

    @app.on_event("shutdown")
    async def shutdown_event():
        """Release storage on shutdown"""
        if app.state.owns_storage and app.state.storage is not None:
            await app.state.storage.close()
            app.state.storage = None

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {"message": "Journalize API", "version": APP_VERSION}

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        if app.state.storage is None:
            raise HTTPException(status_code=503, detail="STORAGE_UNAVAILABLE")
        return {"status": "healthy", "storage": config.storage_backend}

    return app


app = create_app()
