from __future__ import annotations

from fastapi import HTTPException, Request

from ..storage import Storage


def get_storage(request: Request) -> Storage:
    """Dependency：返回应用启动时构造的存储实例（挂在 app.state 上，不使用全局单例）。"""
    return request.app.state.storage


def get_optional_user_id(request: Request) -> int | None:
    return getattr(request.state, "user_id", None)


def require_user_id(request: Request) -> int:
    """Dependency：必须已登录，否则 401（在读取/校验请求体之前执行）。"""
    user_id = get_optional_user_id(request)
    if user_id is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user_id
