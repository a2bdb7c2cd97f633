# community_auth/core/security/tokens.py
"""
Random token generation for CSRF protection and login cookies.

Both token kinds share one alphanumeric alphabet and the `secrets` CSPRNG;
they differ only in length (12 for CSRF, 16 for the login nonce).
"""

import secrets
import string

ALPHANUMERIC = string.ascii_letters + string.digits

CSRF_TOKEN_LENGTH = 12
LOGIN_NONCE_LENGTH = 16


def random_alphanumeric(length: int) -> str:
    """Uniformly random [A-Za-z0-9] string of the given length"""
    if length <= 0:
        raise ValueError(f"Token length must be positive, got {length}")
    return "".join(secrets.choice(ALPHANUMERIC) for _ in range(length))


def generate_csrf_token() -> str:
    return random_alphanumeric(CSRF_TOKEN_LENGTH)


def generate_login_nonce() -> str:
    return random_alphanumeric(LOGIN_NONCE_LENGTH)


def tokens_match(expected: str, provided: str) -> bool:
    """Constant-time comparison; blank tokens never match"""
    if not expected or not provided:
        return False
    return secrets.compare_digest(expected.encode("utf-8"), provided.encode("utf-8"))
