# tests/core/test_cookie_codec.py
"""
Unit tests for the login cookie codec.
"""

import json

import pytest

from community_auth.core.exceptions import CookieDecodeError, CookieEncodeError, DecodeError
from community_auth.core.security import cookie_codec
from community_auth.core.security.cookie_codec import LoginCookieRecord

SECRET = "codec-secret"


@pytest.fixture
def record():
    return LoginCookieRecord(
        object_id="1536034564000",
        token="5f4dcc3b5aa765d61d8327deb882cf99:Ab3dEf6hIj9kLm2n",
        remember_login=True
    )


class TestEncode:
    """Encoding records into cookie values"""

    def test_round_trip_preserves_record(self, record):
        decoded = cookie_codec.decode(cookie_codec.encode(record, SECRET), SECRET)

        assert decoded.object_id == record.object_id
        assert decoded.remember_login is True
        assert decoded.token == record.token

    def test_plaintext_uses_wire_field_names(self, record):
        """The encrypted payload is compact JSON with objectId/token/rememberLogin"""
        value = cookie_codec.encode(record, SECRET)
        plaintext = cookie_codec._fernet(SECRET).decrypt(value.encode("ascii"))

        assert json.loads(plaintext) == {
            "objectId": "1536034564000",
            "token": "5f4dcc3b5aa765d61d8327deb882cf99:Ab3dEf6hIj9kLm2n",
            "rememberLogin": True,
        }
        assert b" " not in plaintext

    def test_same_record_encodes_differently_each_time(self, record):
        assert cookie_codec.encode(record, SECRET) != cookie_codec.encode(record, SECRET)

    def test_cookie_value_is_cookie_safe(self, record):
        value = cookie_codec.encode(record, SECRET)
        assert all(c.isalnum() or c in "-_=" for c in value)

    def test_empty_secret_fails(self, record):
        with pytest.raises(CookieEncodeError) as exc_info:
            cookie_codec.encode(record, "")
        assert exc_info.value.object_id == "1536034564000"


class TestDecode:
    """Decoding must fail loudly, never return a look-alike record"""

    def test_wrong_secret_fails(self, record):
        value = cookie_codec.encode(record, SECRET)

        with pytest.raises(CookieDecodeError) as exc_info:
            cookie_codec.decode(value, "another-secret")
        assert exc_info.value.reason == "ciphertext"

    def test_tampered_value_fails(self, record):
        value = cookie_codec.encode(record, SECRET)
        middle = len(value) // 2
        replacement = "A" if value[middle] != "A" else "B"
        tampered = value[:middle] + replacement + value[middle + 1:]

        with pytest.raises(CookieDecodeError):
            cookie_codec.decode(tampered, SECRET)

    @pytest.mark.parametrize("value", ["", "not-a-cookie", "gAAAAA", "café"])
    def test_malformed_values_fail(self, value):
        with pytest.raises(CookieDecodeError):
            cookie_codec.decode(value, SECRET)

    def test_foreign_payload_fails(self):
        """Authentic ciphertext whose plaintext is not a login record"""
        value = cookie_codec._fernet(SECRET).encrypt(b'{"foo": 1}').decode("ascii")

        with pytest.raises(CookieDecodeError) as exc_info:
            cookie_codec.decode(value, SECRET)
        assert exc_info.value.reason == "payload"

    def test_non_json_payload_fails(self):
        value = cookie_codec._fernet(SECRET).encrypt(b"oId=1;token=x").decode("ascii")

        with pytest.raises(CookieDecodeError) as exc_info:
            cookie_codec.decode(value, SECRET)
        assert exc_info.value.reason == "payload"

    def test_empty_secret_fails(self, record):
        value = cookie_codec.encode(record, SECRET)

        with pytest.raises(CookieDecodeError) as exc_info:
            cookie_codec.decode(value, "")
        assert exc_info.value.reason == "secret"

    def test_decode_error_alias(self):
        assert DecodeError is CookieDecodeError


class TestLoginCookieRecord:

    def test_token_parts(self, record):
        assert record.password_hash == "5f4dcc3b5aa765d61d8327deb882cf99"
        assert record.nonce == "Ab3dEf6hIj9kLm2n"

    def test_hash_containing_colon(self):
        record = LoginCookieRecord(object_id="1", token="sha1:abc:Ab3dEf6hIj9kLm2n")
        assert record.password_hash == "sha1:abc"
        assert record.nonce == "Ab3dEf6hIj9kLm2n"

    def test_accepts_wire_names(self):
        record = LoginCookieRecord.model_validate(
            {"objectId": "7", "token": "h:n", "rememberLogin": False}
        )
        assert record.object_id == "7"
        assert record.remember_login is False
