# tests/core/test_tokens.py

import pytest

from community_auth.core.security.tokens import (
    ALPHANUMERIC,
    generate_csrf_token,
    generate_login_nonce,
    random_alphanumeric,
    tokens_match
)


class TestTokenGeneration:

    def test_csrf_token_is_12_alphanumeric(self):
        token = generate_csrf_token()
        assert len(token) == 12
        assert token.isalnum() and token.isascii()

    def test_login_nonce_is_16_alphanumeric(self):
        nonce = generate_login_nonce()
        assert len(nonce) == 16
        assert nonce.isalnum() and nonce.isascii()

    def test_tokens_are_unpredictable(self):
        tokens = {generate_csrf_token() for _ in range(200)}
        assert len(tokens) == 200

    def test_alphabet(self):
        assert len(ALPHANUMERIC) == 62
        sample = random_alphanumeric(2000)
        assert set(sample) <= set(ALPHANUMERIC)

    @pytest.mark.parametrize("length", [0, -1])
    def test_non_positive_length_rejected(self, length):
        with pytest.raises(ValueError):
            random_alphanumeric(length)


class TestTokensMatch:

    def test_exact_match(self):
        assert tokens_match("Ab3dEf6hIj9k", "Ab3dEf6hIj9k")

    def test_mismatch(self):
        assert not tokens_match("Ab3dEf6hIj9k", "ab3dEf6hIj9k")
        assert not tokens_match("Ab3dEf6hIj9k", "Ab3dEf6hIj9")

    def test_blank_never_matches(self):
        assert not tokens_match("", "")
        assert not tokens_match("", "Ab3dEf6hIj9k")
        assert not tokens_match("Ab3dEf6hIj9k", "")

    def test_non_ascii_input_does_not_raise(self):
        assert not tokens_match("Ab3dEf6hIj9k", "été")
