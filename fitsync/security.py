from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Request
from jose import jwt, ExpiredSignatureError, JWTError
from passlib.context import CryptContext

from . import config
from .errors import TokenExpired, TokenInvalid, Unauthenticated

# ---- password hashing ----
pwd_ctx = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_pw(p: str) -> str:
    return pwd_ctx.hash(p)


def verify_pw(p: str, h: str) -> bool:
    return pwd_ctx.verify(p, h)


# ---- JWT helpers ----
@dataclass(frozen=True)
class AuthPayload:
    user_id: str
    email: str


def make_token(user_id: str, email: str, ttl: Optional[timedelta] = None) -> str:
    now = datetime.now(tz=timezone.utc)
    payload = {
        "sub": user_id,
        "email": email,
        "iat": int(now.timestamp()),
        "exp": int((now + (ttl or config.JWT_TTL)).timestamp()),
    }
    return jwt.encode(payload, config.JWT_SECRET, algorithm=config.JWT_ALG)


def verify_token(token: str) -> AuthPayload:
    try:
        data = jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALG])
    except ExpiredSignatureError:
        raise TokenExpired("Token expired")
    except JWTError:
        raise TokenInvalid("Invalid token")

    user_id = data.get("sub")
    if not user_id:
        raise TokenInvalid("Invalid token")
    return AuthPayload(user_id=str(user_id), email=data.get("email") or "")


# ---- dependencies ----
def get_current_auth(request: Request) -> AuthPayload:
    header = request.headers.get("Authorization")
    if not header:
        raise Unauthenticated("No token provided")

    parts = header.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer" or not parts[1]:
        raise Unauthenticated("Token format invalid")

    return verify_token(parts[1])
