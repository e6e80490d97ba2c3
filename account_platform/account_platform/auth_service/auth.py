from datetime import datetime, timedelta, timezone
import logging
import secrets

import jwt
from passlib.context import CryptContext

logger = logging.getLogger(__name__)


class TokenError(Exception):
    """Base class for token verification failures."""


class InvalidSignature(TokenError):
    pass


class Expired(TokenError):
    pass


class Malformed(TokenError):
    pass


class SigningError(Exception):
    pass


# Claims each kind of token must carry besides exp
SESSION_CLAIMS = ("username", "authkey")
RESET_CLAIMS = ("id",)


class TokenCodec:
    """
    Signs and verifies claims with a shared secret.

    Only the configured HMAC algorithm is ever accepted when verifying, so a
    token declaring ``none`` or another algorithm is rejected outright.
    """

    def __init__(self, secret: str, algorithm: str = "HS256"):
        self.secret = secret
        self.algorithm = algorithm

    def issue(self, claims: dict, expiry: datetime) -> str:
        if not self.secret:
            raise SigningError("Signing secret is empty")
        payload = dict(claims)
        payload["exp"] = expiry
        try:
            return jwt.encode(payload, self.secret, algorithm=self.algorithm)
        except (jwt.PyJWTError, TypeError, ValueError) as e:
            raise SigningError(str(e)) from e

    def verify(self, token: str, required: tuple = ()) -> dict:
        try:
            claims = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["exp"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise Expired(str(e)) from e
        except (jwt.InvalidAlgorithmError, jwt.InvalidSignatureError) as e:
            raise InvalidSignature(str(e)) from e
        except jwt.InvalidTokenError as e:
            raise Malformed(str(e)) from e

        for name in required:
            value = claims.get(name)
            if not isinstance(value, str) or not value:
                raise Malformed(f"Claim '{name}' is missing or not a string")
        return claims


class PasswordHasher:
    def __init__(self, rounds: int = 29000):
        # pbkdf2_sha256 avoids external bcrypt backend issues in some environments
        self.context = CryptContext(
            schemes=["pbkdf2_sha256"],
            deprecated="auto",
            pbkdf2_sha256__default_rounds=rounds,
        )

    def hash(self, password: str) -> str:
        return self.context.hash(password)

    def verify(self, password: str, hashed_password: str) -> bool:
        if not hashed_password:
            return False
        try:
            return self.context.verify(password, hashed_password)
        except ValueError:
            # Stored value is not a hash this context recognises
            logger.warning("Unrecognised password hash format")
            return False


def generate_auth_key() -> str:
    return secrets.token_hex(12)


def expiry_after(seconds: int) -> datetime:
    return datetime.now(timezone.utc) + timedelta(seconds=seconds)


def create_session_token(codec: TokenCodec, account, ttl_seconds: int) -> str:
    claims = {"username": account.username, "authkey": account.auth_key}
    return codec.issue(claims, expiry_after(ttl_seconds))


def create_password_reset_token(codec: TokenCodec, identifier: str, ttl_seconds: int) -> str:
    """
    Mint a reset token for an account id or email.

    The caller must store the returned string as the account's
    ``password_reset_token`` before sending it out; the reset route only
    accepts a token equal to the stored one.
    """
    return codec.issue({"id": identifier}, expiry_after(ttl_seconds))

