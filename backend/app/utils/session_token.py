"""登录会话 token：`<payload_b64url>.<hmac_sha256_b64url>`。

payload 为 JSON：{"v": 1, "sub": <user_id>, "iat": ..., "exp": ...}
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import json
import time
from typing import Any

TOKEN_VERSION = 1


def _b64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def _b64url_decode(text: str) -> bytes:
    padding = "=" * (-len(text) % 4)
    return base64.urlsafe_b64decode(text + padding)


def _sign(payload_b64url: str, secret: str) -> str:
    sig = hmac.new(
        secret.encode("utf-8"),
        payload_b64url.encode("utf-8"),
        hashlib.sha256,
    ).digest()
    return _b64url_encode(sig)


def issue_token(user_id: int, *, secret: str, days: int, now: int | None = None) -> str:
    now_int = int(now if now is not None else time.time())
    days = int(days or 0)
    if days <= 0:
        days = 30

    payload = {
        "v": TOKEN_VERSION,
        "sub": int(user_id),
        "iat": now_int,
        "exp": now_int + days * 24 * 60 * 60,
    }
    payload_raw = json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
    payload_b64 = _b64url_encode(payload_raw)
    sig_b64 = _sign(payload_b64, secret)
    return f"{payload_b64}.{sig_b64}"


def verify_token(
    token: str | None,
    *,
    secret: str,
    now: int | None = None,
) -> tuple[bool, str, dict[str, Any] | None]:
    """返回 (是否有效, 原因, payload)；原因用于日志排查，不直接返回给客户端。"""
    if not token:
        return False, "missing", None

    token = token.strip()
    if not token:
        return False, "missing", None

    parts = token.split(".")
    if len(parts) != 2:
        return False, "format", None

    payload_b64, sig_b64 = parts
    expected_sig = _sign(payload_b64, secret)
    if not hmac.compare_digest(expected_sig, sig_b64):
        return False, "bad_sig", None

    try:
        payload: Any = json.loads(_b64url_decode(payload_b64).decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return False, "bad_payload", None
    if not isinstance(payload, dict):
        return False, "bad_payload", None

    if payload.get("v") != TOKEN_VERSION:
        return False, "bad_version", payload

    try:
        exp_int = int(payload.get("exp"))
    except (TypeError, ValueError):
        return False, "bad_exp", payload

    now_int = int(now if now is not None else time.time())
    if exp_int < now_int:
        return False, "expired", payload

    sub = payload.get("sub")
    if not isinstance(sub, int) or isinstance(sub, bool):
        return False, "bad_sub", payload

    return True, "ok", payload


def user_id_from_token(token: str | None, *, secret: str) -> int | None:
    ok, _reason, payload = verify_token(token, secret=secret)
    if not ok or payload is None:
        return None
    return int(payload["sub"])
