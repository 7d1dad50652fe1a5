# clima/core/security.py
"""Password hashing and signed, expiring tokens."""
from __future__ import annotations

import time
from typing import Any, Callable

from jose import JWTError, jwt
from jose.utils import base64url_decode, base64url_encode
from passlib.context import CryptContext

from clima.core.errors import InvalidTokenError

# bcrypt work factor, fixed
BCRYPT_ROUNDS = 10

_password_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=BCRYPT_ROUNDS,
)


class PasswordHasher:
    """Hash and verify user passwords using bcrypt."""

    @staticmethod
    def hash(password: str) -> str:
        return _password_context.hash(password)

    @staticmethod
    def verify(password: str, hashed: str | None) -> bool:
        if not hashed:
            return False
        try:
            return _password_context.verify(password, hashed)
        except ValueError:
            # Stored value is not a recognizable hash.
            return False


Clock = Callable[[], float]


def _has_canonical_signature(token: str) -> bool:
    """
    True when the signature segment is the exact unpadded base64url encoding
    of the bytes it decodes to.

    The last character of a base64url segment carries unused low bits that a
    lenient decoder drops, so several spellings map to the same signature.
    """
    signature = token.rsplit(".", 1)[-1].encode("ascii", "replace")
    try:
        decoded = base64url_decode(signature)
    except ValueError:
        return False
    return base64url_encode(decoded) == signature


class TokenSigner:
    """
    Issue and verify HS256 JWTs with a fixed lifetime.

    Expiry is checked against `clock` instead of python-jose's own check,
    so callers (and tests) control what "now" means.

    Claims written:
      - iat: issuance time (epoch seconds)
      - exp: iat + lifetime
      - any extra claims passed to `issue`
    """

    def __init__(
        self,
        secret: str,
        lifetime_seconds: int,
        algorithm: str = "HS256",
        clock: Clock = time.time,
    ) -> None:
        if not secret:
            raise ValueError("A signing secret is required")
        self._secret = secret
        self._algorithm = algorithm
        self.lifetime_seconds = lifetime_seconds
        self._clock = clock

    def issue(self, claims: dict[str, Any]) -> str:
        issued_at = int(self._clock())
        payload = {**claims, "iat": issued_at, "exp": issued_at + self.lifetime_seconds}
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> dict[str, Any]:
        """
        Return the token claims.

        Raises:
            InvalidTokenError: bad signature, malformed token, or expired.
        """
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"verify_exp": False, "verify_iat": False, "verify_aud": False},
            )
        except JWTError as exc:
            raise InvalidTokenError() from exc

        if not _has_canonical_signature(token):
            raise InvalidTokenError()

        expires_at = claims.get("exp")
        if not isinstance(expires_at, (int, float)) or self._clock() >= expires_at:
            raise InvalidTokenError()
        return claims


class ResetTokenIssuer:
    """
    Reset-link tokens binding a user id and email.

    Stateless: nothing is stored server-side, so a token stays valid until
    it expires.
    """

    def __init__(self, signer: TokenSigner):
        self.signer = signer

    def issue(self, user_id: int, email: str) -> str:
        return self.signer.issue({"id": user_id, "email": email})

    def verify(self, token: str) -> tuple[int, str]:
        claims = self.signer.verify(token)
        user_id = claims.get("id")
        email = claims.get("email")
        if not isinstance(user_id, int) or isinstance(user_id, bool) or not email:
            raise InvalidTokenError()
        return user_id, email


class SessionTokenIssuer:
    """Bearer tokens returned by login; `sub` holds the user id."""

    def __init__(self, signer: TokenSigner):
        self.signer = signer

    def issue(self, user_id: int) -> str:
        return self.signer.issue({"sub": str(user_id)})

    def verify(self, token: str) -> int:
        claims = self.signer.verify(token)
        try:
            return int(claims["sub"])
        except (KeyError, TypeError, ValueError) as exc:
            raise InvalidTokenError("Invalid session.") from exc
