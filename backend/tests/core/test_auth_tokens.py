from __future__ import annotations

from datetime import timedelta

import jwt
import pytest

from weddinglens.auth import create_access_token, decode_access_token


def test_token_round_trip_stringifies_subject():
    token = create_access_token({"sub": 42})
    payload = decode_access_token(token)

    assert payload["sub"] == "42"
    assert "exp" in payload


def test_expired_token_is_rejected():
    token = create_access_token({"sub": 1}, expires_delta=timedelta(seconds=-5))

    with pytest.raises(jwt.ExpiredSignatureError):
        decode_access_token(token)


def test_token_signed_with_other_key_is_rejected():
    token = jwt.encode({"sub": "1"}, "not-the-server-key", algorithm="HS256")

    with pytest.raises(jwt.InvalidSignatureError):
        decode_access_token(token)
