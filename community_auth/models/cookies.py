# community_auth/models/cookies.py

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict


class CookieDescriptor(BaseModel):
    """
    Cookie the calling layer should attach to its response.

    max_age None means a browser-session cookie, 0 tells the client to
    delete the cookie.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    value: str = ""
    path: str = "/"
    max_age: Optional[int] = None
    http_only: bool = True
    secure: bool = False

    @property
    def is_deletion(self) -> bool:
        return self.max_age == 0

    def set_cookie_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for starlette's Response.set_cookie"""
        return {
            "key": self.name,
            "value": self.value,
            "path": self.path,
            "max_age": self.max_age,
            "httponly": self.http_only,
            "secure": self.secure,
        }
