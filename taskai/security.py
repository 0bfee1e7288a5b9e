"""Password hashing and session tokens.

Session tokens are random strings handed to the client once; only an HMAC of
the token (keyed by ``API_KEY_SECRET``) is stored, plus a short prefix for
support lookups. Passwords are stored as bcrypt hashes.
"""

import hashlib
import hmac
import secrets

import bcrypt

from taskai.settings import settings


TOKEN_PREFIX = "tk_"
PASSWORD_MAX_BYTES = 72


def new_session_token() -> str:
    return TOKEN_PREFIX + secrets.token_urlsafe(32)


def hash_session_token(token: str) -> str:
    if not settings.API_KEY_SECRET:
        raise RuntimeError("API_KEY_SECRET must be set to issue or check session tokens")
    key = settings.API_KEY_SECRET.encode("utf-8")
    return hmac.new(key, token.encode("utf-8"), hashlib.sha256).hexdigest()


def token_prefix(token: str) -> str:
    return token[: len(TOKEN_PREFIX) + 5]


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, stored: str | None) -> bool:
    if not stored or not stored.startswith("$2"):
        return False
    encoded = password.encode("utf-8")
    # bcrypt only looks at the first 72 bytes; longer input never matches
    if len(encoded) > PASSWORD_MAX_BYTES:
        return False
    return bcrypt.checkpw(encoded, stored.encode("utf-8"))
