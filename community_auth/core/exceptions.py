# community_auth/core/exceptions.py
"""
Core exceptions - standardized error handling for the authentication layer.

The authenticator never lets these escape its public operations; they are
returned inside result objects so callers can tell "absent" from "failed".
The HTTP layer is the only place that turns them into responses.
"""

from typing import Optional, Dict, Any


class AuthBaseException(Exception):
    """Base exception for all authentication errors"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize base exception.

        Args:
            message: Human-readable error message
            details: Optional additional error details
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class NoSessionError(AuthBaseException):
    """Login attempted on a request that carries no session"""


class CookieEncodeError(AuthBaseException):
    """Errors while serializing or encrypting the login cookie"""

    def __init__(
        self,
        message: str,
        object_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize encode error.

        Args:
            message: Error description
            object_id: Object id of the user the cookie was built for
            details: Additional context
        """
        super().__init__(message, details)
        self.object_id = object_id

        if object_id:
            self.details['object_id'] = object_id


class CookieDecodeError(AuthBaseException):
    """Malformed, tampered or foreign-secret login cookie"""

    def __init__(
        self,
        message: str,
        reason: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize decode error.

        Args:
            message: Error description
            reason: Short machine-readable cause (ciphertext, payload, secret)
            details: Additional context
        """
        super().__init__(message, details)
        self.reason = reason

        if reason:
            self.details['reason'] = reason


class SessionError(AuthBaseException):
    """Errors in session management and state handling"""

    def __init__(
        self,
        message: str,
        session_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize session error.

        Args:
            message: Error description
            session_id: Session that failed
            details: Additional session context
        """
        super().__init__(message, details)
        self.session_id = session_id

        if session_id:
            self.details['session_id'] = session_id[:8]


class ConfigurationError(AuthBaseException):
    """Errors in system configuration and initialization"""

    def __init__(
        self,
        message: str,
        component: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, details)
        self.component = component

        if component:
            self.details['component'] = component


class CSRFError(AuthBaseException):
    """Unsafe request without a matching CSRF token"""


# Convenience functions for creating common errors

def session_error(message: str, session_id: str) -> SessionError:
    """Create a session error with session context."""
    return SessionError(message, session_id=session_id)


def config_error(message: str, component: str) -> ConfigurationError:
    """Create a configuration error with component context."""
    return ConfigurationError(message, component=component)


# Alias for shorter name
DecodeError = CookieDecodeError
