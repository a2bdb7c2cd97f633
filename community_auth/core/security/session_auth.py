"""
Session-backed authentication.

Login state lives in the session store: the `user` attribute marks a session
as authenticated and `csrfToken` holds its CSRF token. The remember-me cookie
is only produced here (as a CookieDescriptor) and read back by
resume_from_cookie; current_user never trusts the cookie.

Every public operation returns a value; encode/decode/session failures are
reported inside LoginResult instead of being raised.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

from community_auth.core.config import AuthConfig
from community_auth.core.exceptions import (
    AuthBaseException,
    ConfigurationError,
    CookieDecodeError,
    CookieEncodeError,
    NoSessionError
)
from community_auth.core.security import cookie_codec
from community_auth.core.security.cookie_codec import LoginCookieRecord
from community_auth.core.security.tokens import (
    generate_csrf_token,
    generate_login_nonce,
    tokens_match
)
from community_auth.models.cookies import CookieDescriptor
from community_auth.models.session_state import AuthRequest

logger = logging.getLogger(__name__)

# Session attributes
USER = "user"
CSRF_TOKEN = "csrfToken"
# Request attribute
IP = "ip"

# User record fields read by the authenticator
OBJECT_ID = "oId"
USER_PASSWORD = "userPassword"

UserRecord = Mapping[str, Any]
UserLookup = Callable[[str], Optional[UserRecord]]


@dataclass(frozen=True)
class LoginResult:
    """Outcome of login: token and cookie on success, error otherwise"""
    user: Optional[UserRecord] = None
    token: Optional[str] = None
    cookie: Optional[CookieDescriptor] = None
    error: Optional[AuthBaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.token is not None


@dataclass(frozen=True)
class LogoutResult:
    logged_out: bool
    cookie: Optional[CookieDescriptor] = None

    def __bool__(self) -> bool:
        return self.logged_out


class SessionAuthenticator:
    """
    Login/logout/current-user/CSRF operations over a session store.

    Stateless apart from its immutable config; all state goes through the
    request's session.
    """

    def __init__(self, config: AuthConfig):
        self.config = config

    def get_csrf_token(self, request: AuthRequest) -> str:
        """
        Get the CSRF token of the request's session.

        Returns:
            The stored token, or "" when there is no session or no token.
            Callers must reject unsafe operations on "".
        """
        session = request.get_session(create=False)
        if session is None:
            return ""

        token = session.get_attribute(CSRF_TOKEN)
        if not token or not str(token).strip():
            return ""

        return token

    def validate_csrf_token(self, request: AuthRequest, provided: Optional[str]) -> bool:
        """True only if provided matches the session's current token exactly"""
        return tokens_match(self.get_csrf_token(request), provided or "")

    def login(
        self,
        request: AuthRequest,
        user: UserRecord,
        remember_login: bool = False
    ) -> LoginResult:
        """
        Log the user into the request's existing session.

        Credentials must already be verified. Session attributes written
        before a cookie encode failure are kept.

        Args:
            request: Request carrying the session
            user: User record, at least "oId" and "userPassword"
            remember_login: Issue a 30-day cookie instead of a browser-session one

        Returns:
            LoginResult with token and cookie, or with NoSessionError /
            CookieEncodeError
        """
        session = request.get_session(create=False)
        if session is None:
            logger.warning("Login attempted without a session")
            return LoginResult(error=NoSessionError("Login requires an existing session"))

        session.set_attribute(USER, user)
        request.set_attribute(IP, request.remote_addr)
        session.set_attribute(CSRF_TOKEN, generate_csrf_token())

        object_id = str(user.get(OBJECT_ID) or "")
        password_hash = str(user.get(USER_PASSWORD) or "")

        try:
            record = LoginCookieRecord(
                object_id=object_id,
                token=f"{password_hash}:{generate_login_nonce()}",
                remember_login=remember_login
            )
            token = cookie_codec.encode(record, self.config.cookie_secret)
        except CookieEncodeError as e:
            logger.warning(f"Can not write cookie [oId={object_id}, token={password_hash}]: {e.message}")
            return LoginResult(user=user, error=e)

        cookie = CookieDescriptor(
            name=self.config.cookie_name,
            value=token,
            path="/",
            max_age=self.config.cookie_max_age if remember_login else None,
            http_only=True,
            secure=self.config.secure_cookies
        )

        logger.info(f"🔐 User {object_id} logged in on session {session.session_id[:8]}...")
        return LoginResult(user=user, token=token, cookie=cookie)

    def logout(self, request: AuthRequest) -> LogoutResult:
        """
        Delete the login cookie and invalidate the session.

        Without a session nothing happens and logged_out is False.
        """
        session = request.get_session(create=False)
        if session is None:
            return LogoutResult(logged_out=False)

        cookie = self.expired_cookie()

        session_id = session.session_id
        session.invalidate()
        logger.info(f"🚪 Session {session_id[:8]}... logged out")

        return LogoutResult(logged_out=True, cookie=cookie)

    def expired_cookie(self) -> CookieDescriptor:
        """Descriptor that deletes the login cookie on the client"""
        return CookieDescriptor(
            name=self.config.cookie_name,
            value="",
            path="/",
            max_age=0,
            http_only=True,
            secure=self.config.secure_cookies
        )

    def current_user(self, request: AuthRequest) -> Optional[UserRecord]:
        """Logged-in user of the request's session, None if anonymous"""
        session = request.get_session(create=False)
        if session is None:
            return None
        return session.get_attribute(USER)

    def resume_from_cookie(
        self,
        request: AuthRequest,
        cookie_value: Optional[str],
        find_user: UserLookup
    ) -> Optional[LoginResult]:
        """
        Re-establish a login from a remember-me cookie.

        The cookie is accepted only if it decrypts with the configured secret,
        names a known user, and carries that user's current password hash.
        A successful resume logs the user in again, so the returned result
        holds a fresh cookie.

        Returns:
            LoginResult of the renewed login, or None if the cookie is
            absent or not acceptable
        """
        if not cookie_value:
            return None

        try:
            record = cookie_codec.decode(cookie_value, self.config.cookie_secret)
        except CookieDecodeError as e:
            logger.info(f"Ignoring login cookie: {e}")
            return None

        user = find_user(record.object_id)
        if user is None:
            logger.info(f"Login cookie names unknown user {record.object_id}")
            return None

        if not tokens_match(str(user.get(USER_PASSWORD) or ""), record.password_hash):
            logger.warning(f"🔒 Stale login cookie for user {record.object_id}")
            return None

        return self.login(request, user, record.remember_login)


# Global instance - initialized at application start-up
authenticator: Optional[SessionAuthenticator] = None


def get_authenticator() -> SessionAuthenticator:
    """
    Get the global authenticator instance.

    Follows FastAPI dependency injection pattern.
    """
    if authenticator is None:
        raise ConfigurationError("SessionAuthenticator not initialized", component="auth")
    return authenticator


def init_authenticator(config: AuthConfig) -> SessionAuthenticator:
    """Initialize the global authenticator"""
    global authenticator
    authenticator = SessionAuthenticator(config)
    logger.info("🔐 Initialized SessionAuthenticator")
    return authenticator
