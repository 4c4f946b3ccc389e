"""Register / login / session API"""

from __future__ import annotations

import logging
import threading
import time
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends, HTTPException, Request
from starlette.responses import Response

from ..config import settings
from ..schemas import ChangePasswordRequest, LoginRequest, RegisterRequest, UserResponse
from ..storage import EntityNotFoundError, Storage, User
from ..utils.access_log import get_client_ip
from ..utils.errors import safe_str
from ..utils.passwords import hash_password, verify_password
from ..utils.session_token import issue_token
from .deps import get_optional_user_id, get_storage, require_user_id

router = APIRouter(tags=["auth"])
logger = logging.getLogger(__name__)

_RATE_LOCK = threading.Lock()
_RATE_ATTEMPTS: dict[str, list[float]] = {}


def _enforce_rate_limit(ip: str | None) -> None:
    if not ip:
        return

    window = int(settings.login_rate_limit_window_seconds or 0)
    max_attempts = int(settings.login_rate_limit_max_attempts or 0)
    if window <= 0 or max_attempts <= 0:
        return

    cutoff = time.time() - window
    with _RATE_LOCK:
        items = [ts for ts in _RATE_ATTEMPTS.get(ip, []) if ts >= cutoff]
        _RATE_ATTEMPTS[ip] = items
        if len(items) >= max_attempts:
            raise HTTPException(status_code=429, detail="TOO_MANY_ATTEMPTS")


def _record_failed_attempt(ip: str | None) -> None:
    if not ip:
        return
    with _RATE_LOCK:
        _RATE_ATTEMPTS.setdefault(ip, []).append(time.time())


def reset_rate_limits() -> None:
    with _RATE_LOCK:
        _RATE_ATTEMPTS.clear()


def _is_https(request: Request) -> bool:
    if (request.url.scheme or "").lower() == "https":
        return True

    xf_proto = request.headers.get("x-forwarded-proto")
    if xf_proto:
        return xf_proto.split(",")[0].strip().lower() == "https"
    return False


def _resolve_cookie_secure(request: Request) -> bool:
    raw = settings.session_cookie_secure
    if raw == "true":
        return True
    if raw == "false":
        return False
    return _is_https(request)


def _set_session_cookie(response: Response, request: Request, user: User) -> None:
    token = issue_token(
        user.id,
        secret=settings.session_secret or "",
        days=settings.session_days,
    )
    max_age = int(settings.session_days) * 24 * 60 * 60
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=max_age,
        expires=datetime.now(timezone.utc) + timedelta(seconds=max_age),
        httponly=True,
        samesite=settings.session_cookie_samesite,
        secure=_resolve_cookie_secure(request),
        path="/",
    )


@router.post("/register", response_model=UserResponse, status_code=201)
async def register(
    body: RegisterRequest,
    request: Request,
    response: Response,
    storage: Storage = Depends(get_storage),
):
    """注册并直接登录"""
    # 存储层不保证用户名唯一，必须先查后建
    if await storage.get_user_by_username(body.username) is not None:
        raise HTTPException(status_code=400, detail="Username already exists")

    user = await storage.create_user(
        {"username": body.username, "password": hash_password(body.password)}
    )
    _set_session_cookie(response, request, user)
    logger.info("[AUTH] registered user_id=%s username=%s", user.id, safe_str(user.username, max_len=100))
    return user


@router.post("/login", response_model=UserResponse)
async def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    storage: Storage = Depends(get_storage),
):
    ip = get_client_ip(request)
    _enforce_rate_limit(ip)

    user = await storage.get_user_by_username(body.username)
    if user is None or not verify_password(body.password, user.password):
        _record_failed_attempt(ip)
        logger.info("[AUTH] login failed username=%s ip=%s", safe_str(body.username, max_len=100), ip or "-")
        raise HTTPException(status_code=401, detail="Invalid username or password")

    _set_session_cookie(response, request, user)
    return user


@router.post("/logout")
async def logout() -> Response:
    response = Response(status_code=204)
    response.delete_cookie(
        key=settings.session_cookie_name,
        path="/",
    )
    return response


@router.get("/user", response_model=UserResponse)
async def current_user(
    user_id: int | None = Depends(get_optional_user_id),
    storage: Storage = Depends(get_storage),
):
    """当前登录用户；会话有效但用户已不存在（例如内存存储重启）时同样返回 401"""
    user = await storage.get_user(user_id) if user_id is not None else None
    if user is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user


@router.post("/change-password")
async def change_password(
    body: ChangePasswordRequest,
    user_id: int = Depends(require_user_id),
    storage: Storage = Depends(get_storage),
) -> dict[str, bool]:
    user = await storage.get_user(user_id)
    if user is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    if not verify_password(body.current_password, user.password):
        raise HTTPException(status_code=400, detail="Current password is incorrect")

    try:
        await storage.update_user_password(user.id, hash_password(body.new_password))
    except EntityNotFoundError:
        raise HTTPException(status_code=401, detail="Unauthorized") from None
    logger.info("[AUTH] password changed user_id=%s", user.id)
    return {"ok": True}
