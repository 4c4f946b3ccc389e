from __future__ import annotations

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from ..utils.session_token import user_id_from_token


class SessionMiddleware(BaseHTTPMiddleware):
    """解析登录会话 Cookie，把调用者 ID 写到 `request.state.user_id`（未登录为 None）。

    这里只负责“识别身份”，是否必须登录由各路由的依赖决定（未登录统一 401）。
    """

    def __init__(self, app, *, cookie_name: str, secret: str):
        super().__init__(app)
        self._cookie_name = cookie_name
        self._secret = secret

    async def dispatch(self, request: Request, call_next) -> Response:
        token = request.cookies.get(self._cookie_name)
        request.state.user_id = user_id_from_token(token, secret=self._secret)
        return await call_next(request)
