import logging

from fastapi import APIRouter, Depends
from sqlmodel import Session as DBSession

from ..db import get_session
from ..errors import NotFound, ServiceError, Unauthenticated
from ..responses import fail, ok
from ..schemas import TemplateCreate, TemplateUpdate
from ..security import AuthPayload, get_current_auth
from ..services import templates_service as svc

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/templates", tags=["templates"])

TEMPLATE_NOT_FOUND = "Template not found"


@router.get("")
def list_templates(
    db: DBSession = Depends(get_session),
    auth: AuthPayload = Depends(get_current_auth),
):
    return ok(svc.list_templates(db=db, user_id=auth.user_id))


@router.get("/active")
def get_active_template(
    db: DBSession = Depends(get_session),
    auth: AuthPayload = Depends(get_current_auth),
):
    template = svc.get_active_template(db=db, user_id=auth.user_id)
    if template is None:
        return ok(None, message="No active template")
    return ok(template)


@router.get("/{template_id}")
def get_template(
    template_id: str,
    db: DBSession = Depends(get_session),
    auth: AuthPayload = Depends(get_current_auth),
):
    template = svc.get_template(db=db, template_id=template_id, user_id=auth.user_id)
    if template is None:
        raise NotFound(TEMPLATE_NOT_FOUND)
    return ok(template)


@router.post("", status_code=201)
def create_template(
    payload: TemplateCreate,
    db: DBSession = Depends(get_session),
    auth: AuthPayload = Depends(get_current_auth),
):
    try:
        template = svc.create_template(db=db, user_id=auth.user_id, payload=payload)
    except ServiceError:
        raise
    except Exception as exc:
        # this endpoint reports the underlying failure to the client
        logger.exception("Failed to create template for user %s", auth.user_id)
        return fail(500, "Failed to create template", details=str(exc))
    return ok(template, message="Template created")


@router.put("/{template_id}")
def update_template(
    template_id: str,
    payload: TemplateUpdate,
    db: DBSession = Depends(get_session),
    auth: AuthPayload = Depends(get_current_auth),
):
    template = svc.update_template(db=db, template_id=template_id, user_id=auth.user_id, payload=payload)
    if template is None:
        raise NotFound(TEMPLATE_NOT_FOUND)
    return ok(template, message="Template updated")


@router.put("/{template_id}/activate")
def activate_template(
    template_id: str,
    db: DBSession = Depends(get_session),
    auth: AuthPayload = Depends(get_current_auth),
):
    if not auth.user_id:
        raise Unauthenticated("Not authenticated")
    if not svc.activate_template(db=db, template_id=template_id, user_id=auth.user_id):
        raise NotFound(TEMPLATE_NOT_FOUND)
    return ok(message="Template activated")


@router.delete("/{template_id}")
def delete_template(
    template_id: str,
    db: DBSession = Depends(get_session),
    auth: AuthPayload = Depends(get_current_auth),
):
    if not svc.delete_template(db=db, template_id=template_id, user_id=auth.user_id):
        raise NotFound(TEMPLATE_NOT_FOUND)
    return ok(message="Template deleted")
