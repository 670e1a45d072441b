"""Token service tests — issue, verify, tampering, expiry."""

import uuid
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from motorpool.auth.jwt import TokenService
from motorpool.errors import ExpiredToken, InvalidSignature, MalformedToken, TokenError

SECRET = "unit-test-secret-0123456789abcdef0123456789"
B64URL = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_"


@pytest.fixture()
def tokens():
    return TokenService(SECRET, expire_minutes=60)


def _flip(token: str, index: int) -> str:
    """Change one character so the decoded bytes are guaranteed to differ."""
    c = token[index]
    replacement = B64URL[B64URL.index(c) ^ 32]
    return token[:index] + replacement + token[index + 1:]


def test_round_trip(tokens):
    user_id = uuid.uuid4()
    claims = tokens.verify(tokens.issue(user_id, username="alice"))
    assert claims.user_id == str(user_id)
    assert claims.username == "alice"


def test_extra_claims_survive(tokens):
    claims = tokens.verify(tokens.issue("42", username="bob", display="Bob B"))
    assert claims.extra == {"display": "Bob B"}


def test_password_never_enters_a_token(tokens):
    with pytest.raises(ValueError):
        tokens.issue("42", username="bob", password="secret")


def test_issue_carries_user_id_claim(tokens):
    user_id = uuid.uuid4()
    payload = jwt.decode(tokens.issue(user_id), SECRET, algorithms=["HS256"])
    assert payload["user_id"] == payload["sub"] == str(user_id)
    assert tokens.verify(tokens.issue(user_id)).extra == {}


def test_issue_is_signed_with_configured_secret(tokens):
    token = tokens.issue("42")
    payload = jwt.decode(token, SECRET, algorithms=["HS256"])
    assert payload["sub"] == "42"
    assert "exp" in payload


def test_no_expiry_when_disabled():
    svc = TokenService(SECRET, expire_minutes=0)
    token = svc.issue("42")
    payload = jwt.decode(token, options={"verify_signature": False})
    assert "exp" not in payload
    assert svc.verify(token).user_id == "42"


def test_every_tampered_character_fails_signature(tokens):
    token = tokens.issue(uuid.uuid4(), username="alice")
    positions = [i for i, c in enumerate(token) if c != "."]
    for i in positions:
        with pytest.raises(InvalidSignature):
            tokens.verify(_flip(token, i))


@pytest.mark.parametrize("bits", [1, 2, 3])
def test_low_bits_of_last_signature_character_fail_signature(tokens, bits):
    token = tokens.issue(uuid.uuid4(), username="alice")
    last = token[-1]
    tampered = token[:-1] + B64URL[B64URL.index(last) ^ bits]
    assert tampered != token
    with pytest.raises(InvalidSignature):
        tokens.verify(tampered)


def test_wrong_secret(tokens):
    other = TokenService("another-secret-0123456789abcdef0123456789")
    with pytest.raises(InvalidSignature):
        tokens.verify(other.issue("42"))


def test_forged_alg_none_rejected(tokens):
    forged = jwt.encode({"sub": "42"}, None, algorithm="none")
    with pytest.raises(TokenError):
        tokens.verify(forged)


@pytest.mark.parametrize(
    "token",
    ["", "garbage", "a.b", "a.b.c.d", "..", "a..c", "é.é.é"],
)
def test_malformed(tokens, token):
    with pytest.raises(MalformedToken):
        tokens.verify(token)


def test_non_string_is_malformed(tokens):
    with pytest.raises(MalformedToken):
        tokens.verify(None)


def test_expired(tokens):
    past = datetime.now(timezone.utc) - timedelta(minutes=5)
    token = jwt.encode(
        {"sub": "42", "iat": past - timedelta(hours=1), "exp": past},
        SECRET,
        algorithm="HS256",
    )
    with pytest.raises(ExpiredToken):
        tokens.verify(token)


def test_signed_but_missing_subject_is_malformed(tokens):
    token = jwt.encode({"username": "alice"}, SECRET, algorithm="HS256")
    with pytest.raises(MalformedToken):
        tokens.verify(token)


def test_only_hmac_algorithms():
    with pytest.raises(ValueError):
        TokenService(SECRET, algorithm="RS256")
