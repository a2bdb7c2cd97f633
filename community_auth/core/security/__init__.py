"""
Security layer.

Centralizes the authentication lifecycle:
- Encrypted remember-me cookie codec
- CSRF / login token generation
- Session-backed login, logout and current-user lookup
"""

from .cookie_codec import LoginCookieRecord
from .session_auth import (
    LoginResult,
    LogoutResult,
    SessionAuthenticator,
    get_authenticator,
    init_authenticator
)
from .tokens import generate_csrf_token, generate_login_nonce

__all__ = [
    'LoginCookieRecord',
    'LoginResult',
    'LogoutResult',
    'SessionAuthenticator',
    'get_authenticator',
    'init_authenticator',
    'generate_csrf_token',
    'generate_login_nonce'
]
