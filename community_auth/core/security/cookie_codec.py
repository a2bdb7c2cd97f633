# community_auth/core/security/cookie_codec.py
"""
Login cookie codec.

Serializes a LoginCookieRecord to compact JSON and encrypts it with Fernet
(AES-128-CBC + HMAC-SHA256, random IV per call). The Fernet key is derived
from the configured string secret, so any non-empty secret works and a
different secret fails authentication instead of yielding garbage.
"""

import base64
import hashlib

from cryptography.fernet import Fernet, InvalidToken
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from community_auth.core.exceptions import CookieDecodeError, CookieEncodeError


class LoginCookieRecord(BaseModel):
    """Payload of the remember-me cookie"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    object_id: str = Field(alias="objectId")
    # "<password hash>:<16-char nonce>"
    token: str
    remember_login: bool = Field(default=False, alias="rememberLogin")

    @property
    def password_hash(self) -> str:
        return self.token.rpartition(":")[0]

    @property
    def nonce(self) -> str:
        return self.token.rpartition(":")[2]


def _fernet(secret: str) -> Fernet:
    key = base64.urlsafe_b64encode(hashlib.sha256(secret.encode("utf-8")).digest())
    return Fernet(key)


def encode(record: LoginCookieRecord, secret: str) -> str:
    """
    Encrypt a record into a cookie value.

    Raises:
        CookieEncodeError: secret missing or serialization/encryption failed
    """
    if not secret:
        raise CookieEncodeError("Cookie secret is not configured", object_id=record.object_id)

    try:
        payload = record.model_dump_json(by_alias=True)
        return _fernet(secret).encrypt(payload.encode("utf-8")).decode("ascii")
    except (TypeError, ValueError) as e:
        raise CookieEncodeError(
            f"Can not encrypt login cookie: {type(e).__name__}",
            object_id=record.object_id
        ) from e


def decode(cookie_value: str, secret: str) -> LoginCookieRecord:
    """
    Decrypt a cookie value back into a record.

    Raises:
        CookieDecodeError: empty input, wrong secret, tampered or malformed
            ciphertext, or a plaintext that is not a login record
    """
    if not secret:
        raise CookieDecodeError("Cookie secret is not configured", reason="secret")
    if not cookie_value:
        raise CookieDecodeError("Empty login cookie", reason="ciphertext")

    try:
        plaintext = _fernet(secret).decrypt(cookie_value.encode("ascii"))
    except (InvalidToken, UnicodeEncodeError) as e:
        raise CookieDecodeError("Login cookie can not be decrypted", reason="ciphertext") from e

    try:
        return LoginCookieRecord.model_validate_json(plaintext)
    except ValidationError as e:
        raise CookieDecodeError(
            "Login cookie payload is not a login record",
            reason="payload",
            details={"errors": e.error_count()}
        ) from e
