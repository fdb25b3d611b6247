import logging
from typing import Any

from fastapi import APIRouter, HTTPException
from sqlalchemy.exc import SQLAlchemyError

from app import crud
from app.api.deps import SessionDep
from app.api.routes.utils import not_found, storage_failure
from app.models import Success, TemplateCreate, TemplatePublic, TemplateRef, TemplateUpdate

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=list[TemplatePublic])
def read_templates(session: SessionDep) -> Any:
    """
    Retrieve all templates, defaults first.
    """
    try:
        return crud.get_all_templates(session=session)
    except SQLAlchemyError as exc:
        raise storage_failure(session, "fetch templates", exc) from exc


@router.post("", response_model=TemplatePublic)
def create_new_template(*, session: SessionDep, template_in: TemplateCreate) -> Any:
    try:
        return crud.create_template(
            session=session,
            name=template_in.name,
            content=template_in.content,
            type=template_in.type,
        )
    except SQLAlchemyError as exc:
        raise storage_failure(session, "create template", exc) from exc


@router.put("", response_model=Success)
def update_template(*, session: SessionDep, template_in: TemplateUpdate) -> Any:
    try:
        crud.update_template(
            session=session,
            template_id=template_in.id,
            name=template_in.name,
            content=template_in.content,
        )
    except crud.RecordNotFoundError as exc:
        raise not_found(exc) from exc
    except SQLAlchemyError as exc:
        raise storage_failure(session, "update template", exc) from exc
    return Success()


@router.delete("", response_model=Success)
def delete_template(*, session: SessionDep, template_ref: TemplateRef) -> Any:
    """
    Delete a user template. Default templates are refused with a 400.
    """
    try:
        deleted = crud.delete_template(session=session, template_id=template_ref.id)
    except crud.RecordNotFoundError as exc:
        raise not_found(exc) from exc
    except SQLAlchemyError as exc:
        raise storage_failure(session, "delete template", exc) from exc
    if not deleted:
        logger.info("Refused to delete default template %s", template_ref.id)
        raise HTTPException(status_code=400, detail="Cannot delete default templates")
    return Success()
