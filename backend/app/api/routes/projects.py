from typing import Any

from fastapi import APIRouter
from sqlalchemy.exc import SQLAlchemyError

from app import crud
from app.api.deps import SessionDep
from app.api.routes.utils import not_found, storage_failure
from app.models import ProjectCreate, ProjectPublic, ProjectRef, ProjectUpdate, Success

router = APIRouter()


@router.post("", response_model=ProjectPublic)
def create_new_project(*, session: SessionDep, project_in: ProjectCreate) -> Any:
    try:
        return crud.create_project(session=session, name=project_in.name)
    except SQLAlchemyError as exc:
        raise storage_failure(session, "create project", exc) from exc


@router.put("", response_model=Success)
def rename_project(*, session: SessionDep, project_in: ProjectUpdate) -> Any:
    try:
        crud.update_project(session=session, project_id=project_in.id, name=project_in.name)
    except crud.RecordNotFoundError as exc:
        raise not_found(exc) from exc
    except SQLAlchemyError as exc:
        raise storage_failure(session, "update project", exc) from exc
    return Success()


@router.delete("", response_model=Success)
def delete_project(*, session: SessionDep, project_ref: ProjectRef) -> Any:
    """
    Delete a project together with all of its prompts.
    """
    try:
        crud.delete_project(session=session, project_id=project_ref.id)
    except crud.RecordNotFoundError as exc:
        raise not_found(exc) from exc
    except SQLAlchemyError as exc:
        raise storage_failure(session, "delete project", exc) from exc
    return Success()
