"""
Session middleware binding HTTP requests to the session store.

Each request gets an HTTPAuthRequest on request.state.auth. Anonymous
sessions that present a remember-me cookie are logged back in before the
endpoint runs.
"""

import logging
from typing import Any, Callable, Optional

from fastapi import Request, Response

from community_auth.core.rate_limit_config import get_real_ip
from community_auth.core.security.session_auth import SessionAuthenticator, UserLookup
from community_auth.models.cookies import CookieDescriptor
from community_auth.models.session_state import InMemorySessionStore, SessionState

logger = logging.getLogger(__name__)


class HTTPAuthRequest:
    """AuthRequest over a starlette Request; request attributes go to request.state"""

    def __init__(self, request: Request, store: InMemorySessionStore, session_cookie_name: str):
        self.request = request
        self.store = store
        self.session_id: Optional[str] = request.cookies.get(session_cookie_name)
        self.remote_addr = get_real_ip(request)

    def get_session(self, create: bool = False) -> Optional[SessionState]:
        session = self.store.get(self.session_id)
        if session is None and create:
            session = self.store.create_session()
            self.session_id = session.session_id
            logger.debug(f"Created session {session.session_id[:8]}... for {self.remote_addr}")
        return session

    def get_attribute(self, key: str) -> Any:
        return getattr(self.request.state, key, None)

    def set_attribute(self, key: str, value: Any) -> None:
        setattr(self.request.state, key, value)


def apply_cookie(response: Response, cookie: Optional[CookieDescriptor]) -> None:
    """Attach a cookie descriptor to a response"""
    if cookie is not None:
        response.set_cookie(**cookie.set_cookie_kwargs())


class SessionMiddleware:
    """Session cookie handling and remember-me login"""

    def __init__(
        self,
        authenticator: SessionAuthenticator,
        store: InMemorySessionStore,
        find_user: UserLookup,
        session_cookie_name: str = "sid"
    ):
        self.authenticator = authenticator
        self.store = store
        self.find_user = find_user
        self.session_cookie_name = session_cookie_name

    async def __call__(self, request: Request, call_next: Callable) -> Response:
        auth_request = HTTPAuthRequest(request, self.store, self.session_cookie_name)
        incoming_id = auth_request.session_id

        auth_request.get_session(create=True)
        request.state.auth = auth_request

        resumed = None
        rejected_cookie = False
        if self.authenticator.current_user(auth_request) is None:
            cookie_value = request.cookies.get(self.authenticator.config.cookie_name)
            resumed = self.authenticator.resume_from_cookie(auth_request, cookie_value, self.find_user)
            if resumed is not None and resumed.ok:
                logger.info(f"♻️ Login resumed from cookie for {auth_request.remote_addr}")
            # Unusable cookie, cleared below
            rejected_cookie = bool(cookie_value) and resumed is None

        response = await call_next(request)

        # A session invalidated by the endpoint (logout) is not advertised
        session_alive = self.store.get(auth_request.session_id) is not None

        if session_alive and auth_request.session_id != incoming_id:
            response.set_cookie(
                key=self.session_cookie_name,
                value=auth_request.session_id,
                path="/",
                httponly=True,
                samesite="lax",
                secure=self.authenticator.config.secure_cookies,
            )

        if session_alive and resumed is not None and resumed.ok:
            apply_cookie(response, resumed.cookie)
        elif rejected_cookie and session_alive and self.authenticator.current_user(auth_request) is None:
            apply_cookie(response, self.authenticator.expired_cookie())

        return response
