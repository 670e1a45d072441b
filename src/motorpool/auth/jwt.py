"""JWT token creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication. A token is
header.payload.signature; the signature is an HMAC over "header.payload"
with the process-wide secret, so the server needs no lookup to verify it
and cannot revoke it before it expires.

The token carries the user id (as "sub" and "user_id") plus extra claims such
as the username. Expiry is optional: token_expire_minutes=0 issues tokens
without an "exp" claim.

verify() checks the HMAC itself before handing the token to PyJWT, so no
part of the token (header included) is decoded or trusted until the
signature is known to be good.
"""

import binascii
import hmac
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import jwt
from jwt.algorithms import HMACAlgorithm
from jwt.utils import base64url_decode, base64url_encode

from motorpool.config import Settings
from motorpool.errors import ExpiredToken, InvalidSignature, MalformedToken

_HMAC_ALGORITHMS = {
    "HS256": HMACAlgorithm.SHA256,
    "HS384": HMACAlgorithm.SHA384,
    "HS512": HMACAlgorithm.SHA512,
}
_REGISTERED = {"sub", "user_id", "iat", "exp"}


@dataclass(frozen=True)
class TokenClaims:
    """Identity decoded from a verified token."""

    user_id: str
    username: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict)


class TokenService:
    """Issues and verifies signed, self-contained session tokens."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        expire_minutes: Optional[int] = None,
    ):
        if algorithm not in _HMAC_ALGORITHMS:
            raise ValueError(f"unsupported token algorithm: {algorithm}")
        self.secret = secret
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes or None
        self._hmac = HMACAlgorithm(_HMAC_ALGORITHMS[algorithm])
        self._key = self._hmac.prepare_key(secret)

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        return cls(
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            expire_minutes=settings.token_expire_minutes,
        )

    def issue(self, user_id: Any, **extra: Any) -> str:
        """Create a token for user_id carrying the given extra claims."""
        if "password" in extra:
            raise ValueError("passwords must never be placed in a token")
        now = datetime.now(timezone.utc)
        payload = {**extra, "sub": str(user_id), "user_id": str(user_id), "iat": now}
        if self.expire_minutes:
            payload["exp"] = now + timedelta(minutes=self.expire_minutes)
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenClaims:
        """Verify and decode a token.

        Raises MalformedToken, InvalidSignature or ExpiredToken.

        Learn: the signature is compared in its encoded text form. base64url
        decoding ignores the unused low bits of the last character, so
        comparing decoded bytes would accept a signature segment that was
        altered in those bits.
        """
        signing_input, signature = self._split(token)
        expected = base64url_encode(self._hmac.sign(signing_input, self._key))
        if not hmac.compare_digest(expected, signature):
            raise InvalidSignature()

        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["sub"]},
            )
        except jwt.ExpiredSignatureError:
            raise ExpiredToken()
        except jwt.InvalidTokenError as e:
            raise MalformedToken(detail=str(e))

        return TokenClaims(
            user_id=payload["sub"],
            username=payload.get("username"),
            extra={
                k: v
                for k, v in payload.items()
                if k not in _REGISTERED and k != "username"
            },
        )

    @staticmethod
    def _split(token: str) -> tuple[bytes, bytes]:
        if not isinstance(token, str):
            raise MalformedToken()
        segments = token.split(".")
        if len(segments) != 3 or not all(segments):
            raise MalformedToken()
        try:
            signing_input = f"{segments[0]}.{segments[1]}".encode("ascii")
            signature = segments[2].encode("ascii")
            base64url_decode(signature)
        except (binascii.Error, UnicodeEncodeError):
            raise MalformedToken()
        return signing_input, signature
