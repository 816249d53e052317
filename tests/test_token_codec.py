from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from app.security import token_codec
from app.security.token_codec import (
    ExpiredTokenError, InvalidSignatureError, MalformedTokenError
)

SECRET = "l2k3j4lkjlkdsj"
NOW = datetime(2025, 1, 15, 12, 0, 0, tzinfo=timezone.utc)
TTL = timedelta(seconds=60)


def _replace_char(text: str, index: int) -> str:
    replacement = "A" if text[index] != "A" else "B"
    return text[:index] + replacement + text[index + 1:]


B64URL_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_"


def _flip_low_bit(text: str, index: int) -> str:
    """base64url 문자의 6비트 값 중 최하위 비트를 뒤집은 문자열"""
    flipped = B64URL_ALPHABET[B64URL_ALPHABET.index(text[index]) ^ 1]
    return text[:index] + flipped + text[index + 1:]


def test_issue_verify_round_trip():
    token = token_codec.issue("alice", SECRET, TTL, now=NOW)
    assert token_codec.verify(token, SECRET, now=NOW) == "alice"


def test_claims_carry_iat_and_exp():
    token = token_codec.issue("alice", SECRET, TTL, now=NOW)
    claims = jwt.get_unverified_claims(token)
    assert claims["sub"] == "alice"
    assert claims["iat"] == int(NOW.timestamp())
    assert claims["exp"] == int(NOW.timestamp()) + 60


def test_issue_is_deterministic_for_fixed_now():
    assert token_codec.issue("bob", SECRET, TTL, now=NOW) == token_codec.issue("bob", SECRET, TTL, now=NOW)


def test_issue_rejects_empty_subject():
    with pytest.raises(ValueError):
        token_codec.issue("", SECRET, TTL, now=NOW)


def test_expiry_boundary():
    token = token_codec.issue("alice", SECRET, TTL, now=NOW)

    assert token_codec.verify(token, SECRET, now=NOW + timedelta(seconds=59)) == "alice"

    with pytest.raises(ExpiredTokenError) as exc_info:
        token_codec.verify(token, SECRET, now=NOW + TTL)
    assert exc_info.value.expired_at == int(NOW.timestamp()) + 60

    with pytest.raises(ExpiredTokenError):
        token_codec.verify(token, SECRET, now=NOW + timedelta(days=1))


def test_naive_now_is_treated_as_utc():
    token = token_codec.issue("alice", SECRET, TTL, now=NOW.replace(tzinfo=None))
    assert token_codec.verify(token, SECRET, now=NOW) == "alice"


def test_wrong_secret_is_rejected():
    token = token_codec.issue("alice", SECRET, TTL, now=NOW)
    with pytest.raises(InvalidSignatureError):
        token_codec.verify(token, "another-secret", now=NOW)


def test_tampered_payload_is_rejected():
    token = token_codec.issue("alice", SECRET, TTL, now=NOW)
    header, _, signature = token.split(".")
    forged = token_codec.issue("mallory", SECRET, TTL, now=NOW).split(".")[1]

    with pytest.raises(InvalidSignatureError):
        token_codec.verify(f"{header}.{forged}.{signature}", SECRET, now=NOW)


def test_tampered_signature_is_rejected():
    token = token_codec.issue("alice", SECRET, TTL, now=NOW)
    header, payload, signature = token.split(".")
    tampered = _replace_char(signature, len(signature) // 2)

    with pytest.raises(InvalidSignatureError):
        token_codec.verify(f"{header}.{payload}.{tampered}", SECRET, now=NOW)


def test_last_signature_char_padding_bits_are_checked():
    token = token_codec.issue("alice", SECRET, TTL, now=NOW)

    with pytest.raises(InvalidSignatureError):
        token_codec.verify(_flip_low_bit(token, len(token) - 1), SECRET, now=NOW)


def test_any_single_char_change_is_rejected():
    token = token_codec.issue("alice", SECRET, TTL, now=NOW)

    for index, char in enumerate(token):
        if char == ".":
            continue
        with pytest.raises(token_codec.TokenError):
            token_codec.verify(_flip_low_bit(token, index), SECRET, now=NOW)


def test_disallowed_algorithm_is_rejected():
    other_alg = jwt.encode({"sub": "alice", "exp": int(NOW.timestamp()) + 60}, SECRET, algorithm="HS512")
    with pytest.raises(InvalidSignatureError):
        token_codec.verify(other_alg, SECRET, now=NOW)


@pytest.mark.parametrize("token", ["", "abc", "a.b", "not.a.jwt", "Bearer BOGUS"])
def test_malformed_tokens(token):
    with pytest.raises(MalformedTokenError):
        token_codec.verify(token, SECRET, now=NOW)


def test_missing_subject_is_malformed():
    token = jwt.encode({"exp": int(NOW.timestamp()) + 60}, SECRET, algorithm="HS256")
    with pytest.raises(MalformedTokenError):
        token_codec.verify(token, SECRET, now=NOW)


def test_missing_expiry_is_malformed():
    token = jwt.encode({"sub": "alice"}, SECRET, algorithm="HS256")
    with pytest.raises(MalformedTokenError):
        token_codec.verify(token, SECRET, now=NOW)


def test_configured_algorithm_is_enforced():
    token = token_codec.issue("alice", SECRET, TTL, now=NOW, algorithm="HS512")
    assert jwt.get_unverified_header(token)["alg"] == "HS512"
    assert token_codec.verify(token, SECRET, now=NOW, algorithm="HS512") == "alice"

    with pytest.raises(InvalidSignatureError):
        token_codec.verify(token, SECRET, now=NOW)


def test_unsupported_algorithm_is_refused():
    with pytest.raises(ValueError):
        token_codec.issue("alice", SECRET, TTL, now=NOW, algorithm="none")
    with pytest.raises(ValueError):
        token_codec.verify("a.b.c", SECRET, now=NOW, algorithm="RS256")
