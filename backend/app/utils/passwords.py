from __future__ import annotations

import base64
import hashlib
import hmac
import secrets

_SCHEME = "pbkdf2_sha256"
DEFAULT_ITERATIONS = 210_000


def _pbkdf2_sha256(secret: str, *, salt: bytes, iterations: int) -> bytes:
    return hashlib.pbkdf2_hmac(
        "sha256",
        secret.encode("utf-8"),
        salt,
        iterations,
    )


def hash_password(
    password: str,
    *,
    iterations: int = DEFAULT_ITERATIONS,
    salt_bytes: int = 16,
) -> str:
    """生成 PBKDF2-SHA256 hash 字符串（存入 users.password）。

    格式：pbkdf2_sha256$<iterations>$<salt_b64>$<hash_b64>
    """
    if not password:
        raise ValueError("password 不能为空")
    if iterations <= 0:
        raise ValueError("iterations 必须 > 0")
    if salt_bytes <= 0:
        raise ValueError("salt_bytes 必须 > 0")

    salt = secrets.token_bytes(salt_bytes)
    dk = _pbkdf2_sha256(password, salt=salt, iterations=iterations)
    salt_b64 = base64.b64encode(salt).decode("utf-8")
    hash_b64 = base64.b64encode(dk).decode("utf-8")
    return f"{_SCHEME}${iterations}${salt_b64}${hash_b64}"


def verify_password(password: str, stored: str) -> bool:
    """校验密码（常量时间比较）；格式不对一律视为不匹配。"""
    if not password or not stored:
        return False

    try:
        scheme, iterations_raw, salt_b64, hash_b64 = stored.split("$", 3)
        if scheme != _SCHEME:
            return False

        iterations = int(iterations_raw)
        if iterations <= 0:
            return False

        salt = base64.b64decode(salt_b64)
        expected = base64.b64decode(hash_b64)
    except (ValueError, TypeError):
        return False

    actual = _pbkdf2_sha256(password, salt=salt, iterations=iterations)
    return hmac.compare_digest(actual, expected)
