# community_auth/main.py
"""
FastAPI application exposing the session authentication operations.

Credential verification and user lookup are injected through create_app;
the core never sees passwords.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from typing import Callable, Optional
import logging
import secrets

from fastapi import Depends, FastAPI, Header, HTTPException, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded

from community_auth.core.config import Settings, settings as default_settings, validate_required_settings
from community_auth.core.exceptions import AuthBaseException, CSRFError, config_error
from community_auth.core.logging_config import setup_logging
from community_auth.core.rate_limit_config import get_rate_limit_message, get_real_ip
from community_auth.core.security import init_authenticator
from community_auth.core.security.session_auth import OBJECT_ID, USER_PASSWORD, UserLookup, UserRecord
from community_auth.middleware.session_middleware import HTTPAuthRequest, SessionMiddleware, apply_cookie
from community_auth.models.session_state import InMemorySessionStore

logger = logging.getLogger(__name__)

CredentialCheck = Callable[[str, str], Optional[UserRecord]]

CSRF_HEADER = "X-CSRF-Token"


class LoginRequest(BaseModel):
    user_name: str
    password: str
    remember_login: bool = False


class LoginResponse(BaseModel):
    object_id: str
    csrf_token: str


def get_safe_error_message(error: Exception, context: str = "") -> str:
    """Return a safe error message that doesn't expose internal details"""
    logger.error(f"Error in {context}: {type(error).__name__}: {str(error)}")

    if isinstance(error, HTTPException):
        return error.detail

    if isinstance(error, AuthBaseException):
        return "Login failed. Please try again later."

    return "An error occurred. Please try again later."


def public_user(user: UserRecord) -> dict:
    """User record without the password hash"""
    return {k: v for k, v in user.items() if k != USER_PASSWORD}


def _reject_credentials(user_name: str, password: str) -> Optional[UserRecord]:
    logger.warning("No credential check configured, rejecting login")
    return None


def _no_users(object_id: str) -> Optional[UserRecord]:
    return None


def custom_rate_limit_handler(request: Request, exc: RateLimitExceeded):
    """Rate limit response with a helpful message"""
    response = PlainTextResponse(
        content=get_rate_limit_message("login" if request.url.path == "/login" else "default"),
        status_code=429,
    )
    response.headers["Retry-After"] = "60"
    response.headers["X-RateLimit-Limit"] = str(getattr(exc, "limit", "N/A"))
    return response


def csrf_error_handler(request: Request, exc: CSRFError):
    return JSONResponse(status_code=403, content={"detail": exc.message})


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start-up/shutdown logging"""
    setup_logging(app.state.settings)
    logger.info("🚀 community-auth starting...")
    logger.info(f"  - Secure cookies: {app.state.authenticator.config.secure_cookies}")
    yield
    logger.info("🛑 community-auth shutting down")


def create_app(
    app_settings: Optional[Settings] = None,
    verify_credentials: CredentialCheck = _reject_credentials,
    find_user: UserLookup = _no_users,
    store: Optional[InMemorySessionStore] = None
) -> FastAPI:
    """
    Build the application.

    Args:
        app_settings: Settings to use instead of the process-wide ones
        verify_credentials: (user name, password) -> user record or None
        find_user: object id -> user record or None, used for remember-me
        store: Session store, by default an in-memory one expiring sessions
            after SESSION_IDLE_MINUTES
    """
    app_settings = app_settings or default_settings

    if app_settings.SERVER_SCHEME.lower() not in ("http", "https"):
        raise config_error(f"Unsupported server scheme '{app_settings.SERVER_SCHEME}'", "SERVER_SCHEME")

    auth_config = app_settings.auth_config()
    if not validate_required_settings(app_settings):
        # Cookies issued with this secret do not survive a restart
        auth_config = auth_config.model_copy(update={"cookie_secret": secrets.token_urlsafe(32)})
        logger.warning("⚠️ No COOKIE_SECRET set. Generated temporary secret.")

    authenticator = init_authenticator(auth_config)
    if store is None:
        store = InMemorySessionStore(idle_timeout=timedelta(minutes=app_settings.SESSION_IDLE_MINUTES))

    app = FastAPI(
        title=app_settings.APP_NAME,
        description="Session-backed authentication",
        version="1.0.0",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None
    )
    app.state.settings = app_settings
    app.state.authenticator = authenticator
    app.state.session_store = store

    limiter = Limiter(key_func=get_real_ip)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, custom_rate_limit_handler)
    app.add_exception_handler(CSRFError, csrf_error_handler)

    app.middleware("http")(SessionMiddleware(
        authenticator,
        store,
        find_user,
        session_cookie_name=app_settings.SESSION_COOKIE_NAME
    ))

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response

    def get_auth_request(request: Request) -> HTTPAuthRequest:
        return request.state.auth

    def require_csrf(
        auth: HTTPAuthRequest = Depends(get_auth_request),
        x_csrf_token: Optional[str] = Header(default=None, alias=CSRF_HEADER)
    ) -> None:
        if not authenticator.validate_csrf_token(auth, x_csrf_token):
            logger.warning(f"❌ CSRF check failed for {auth.remote_addr}")
            raise CSRFError("Invalid CSRF token", details={"path": auth.request.url.path})

    @app.get("/health", status_code=200)
    def health():
        return {"status": "healthy", "timestamp": datetime.now().isoformat()}

    @app.get("/csrf")
    def csrf_token(auth: HTTPAuthRequest = Depends(get_auth_request)):
        return {"csrf_token": authenticator.get_csrf_token(auth)}

    @app.get("/me")
    def me(auth: HTTPAuthRequest = Depends(get_auth_request)):
        user = authenticator.current_user(auth)
        if user is None:
            raise HTTPException(status_code=401, detail="Not logged in")
        return public_user(user)

    @app.post("/login", response_model=LoginResponse)
    @limiter.limit(app_settings.LOGIN_RATE_LIMIT)
    def login(request: Request, response: Response, req: LoginRequest):
        auth = get_auth_request(request)

        user = verify_credentials(req.user_name, req.password)
        if user is None:
            logger.info(f"Rejected login for {req.user_name!r} from {auth.remote_addr}")
            raise HTTPException(status_code=401, detail="Invalid user name or password")

        result = authenticator.login(auth, user, req.remember_login)
        if not result.ok:
            raise HTTPException(
                status_code=500,
                detail=get_safe_error_message(result.error, "login")
            )

        apply_cookie(response, result.cookie)
        return {
            "object_id": str(user.get(OBJECT_ID) or ""),
            "csrf_token": authenticator.get_csrf_token(auth)
        }

    @app.post("/logout", dependencies=[Depends(require_csrf)])
    def logout(response: Response, auth: HTTPAuthRequest = Depends(get_auth_request)):
        result = authenticator.logout(auth)
        apply_cookie(response, result.cookie)
        return {"logged_out": result.logged_out}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000, log_level="info")
