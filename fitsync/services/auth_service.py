from __future__ import annotations
from typing import Optional
import logging

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session as DBSession, select

from ..errors import Conflict, InvalidInput, NotFound, Unauthorized
from ..models import User, new_id, utcnow
from ..schemas import AuthResult, UserPublic
from ..security import hash_pw, make_token, verify_pw
from .common import normalize_email, normalize_whitespace

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
INVALID_CREDENTIALS = "Invalid email or password"


def _public(u: User) -> UserPublic:
    return UserPublic(
        id=u.id,
        email=u.email,
        name=u.name,
        created_at=u.created_at,
        updated_at=u.updated_at,
        last_login=u.last_login,
    )


def _check_password(password: str) -> None:
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise InvalidInput(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")


def signup(db: DBSession, email: str, password: str, name: Optional[str] = None) -> AuthResult:
    email = normalize_email(email)
    _check_password(password)

    exists = db.exec(select(User).where(User.email == email)).first()
    if exists:
        raise Conflict("Email already registered")

    u = User(id=new_id(), email=email, password_hash=hash_pw(password), name=normalize_whitespace(name))
    db.add(u)
    try:
        db.commit()
    except IntegrityError:
        # lost a race against a concurrent signup for the same address
        db.rollback()
        raise Conflict("Email already registered")
    db.refresh(u)

    logger.info("User %s signed up", u.id)
    return AuthResult(user=_public(u), token=make_token(u.id, u.email))


def login(db: DBSession, email: str, password: str) -> AuthResult:
    email = normalize_email(email)
    u = db.exec(select(User).where(User.email == email)).first()
    if not u or not verify_pw(password, u.password_hash):
        raise Unauthorized(INVALID_CREDENTIALS)

    u.last_login = utcnow()
    db.add(u)
    db.commit()
    db.refresh(u)

    return AuthResult(user=_public(u), token=make_token(u.id, u.email))


def get_user_by_id(db: DBSession, user_id: str) -> Optional[UserPublic]:
    u = db.get(User, user_id)
    if not u:
        return None
    return _public(u)


def update_password(db: DBSession, user_id: str, new_password: str) -> None:
    _check_password(new_password)
    u = db.get(User, user_id)
    if not u:
        raise NotFound("User not found")

    u.password_hash = hash_pw(new_password)
    u.updated_at = utcnow()
    db.add(u)
    db.commit()
