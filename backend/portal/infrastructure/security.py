"""Credentials — bcrypt password hashing and PyJWT bearer tokens.

Invariants:
    - Passwords are stored only as bcrypt hashes
    - Access and refresh tokens are HS256 JWTs signed with different secrets
    - Every token carries sub (user id), username, role, type, iss, iat, exp
    - Any decode failure (bad signature, expiry, wrong type/issuer) → AuthenticationError

Design Decisions:
    - bcrypt used directly (no passlib wrapper)
    - Token type claim prevents a refresh token being used as an access token
"""

from datetime import datetime, timedelta, timezone

import bcrypt
import jwt

from portal.core.errors import AuthenticationError

TOKEN_ISSUER = "stmadb-portal"
ALGORITHM = "HS256"
ACCESS = "access"
REFRESH = "refresh"


def hash_password(password: str, rounds: int = 12) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def _encode(payload: dict, secret: str, token_type: str, expires_in: timedelta) -> str:
    now = datetime.now(timezone.utc)
    claims = {
        **payload,
        "type": token_type,
        "iss": TOKEN_ISSUER,
        "iat": now,
        "exp": now + expires_in,
    }
    return jwt.encode(claims, secret, algorithm=ALGORITHM)


def token_payload(user) -> dict:
    """Claims identifying a user: sub, username, role."""
    role = user.role.value if hasattr(user.role, "value") else user.role
    return {"sub": str(user.id), "username": user.username, "role": role}


def create_access_token(payload: dict, secret: str, expires_minutes: int) -> str:
    return _encode(payload, secret, ACCESS, timedelta(minutes=expires_minutes))


def create_refresh_token(payload: dict, secret: str, expires_days: int) -> str:
    return _encode(payload, secret, REFRESH, timedelta(days=expires_days))


def decode_token(token: str, secret: str, token_type: str = ACCESS) -> dict:
    try:
        claims = jwt.decode(
            token, secret, algorithms=[ALGORITHM], issuer=TOKEN_ISSUER,
            options={"require": ["exp", "sub"]},
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token expired")
    except jwt.InvalidTokenError:
        raise AuthenticationError("Invalid or expired token")
    if claims.get("type") != token_type:
        raise AuthenticationError("Invalid or expired token")
    return claims


def extract_user_id(claims: dict) -> int:
    try:
        return int(claims["sub"])
    except (KeyError, TypeError, ValueError):
        raise AuthenticationError("Invalid or expired token")
