from fastapi import APIRouter, Depends
from sqlmodel import Session as DBSession

from ..db import get_session
from ..errors import NotFound
from ..responses import ok
from ..schemas import LoginIn, SignupIn
from ..security import AuthPayload, get_current_auth
from ..services import auth_service as svc

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signup", status_code=201)
def signup(payload: SignupIn, db: DBSession = Depends(get_session)):
    return ok(svc.signup(db=db, email=payload.email, password=payload.password, name=payload.name))


@router.post("/login")
def login(payload: LoginIn, db: DBSession = Depends(get_session)):
    return ok(svc.login(db=db, email=payload.email, password=payload.password))


@router.get("/me")
def me(
    auth: AuthPayload = Depends(get_current_auth),
    db: DBSession = Depends(get_session),
):
    user = svc.get_user_by_id(db=db, user_id=auth.user_id)
    if user is None:
        raise NotFound("User not found")
    return ok({"user": user})
