from typing import Any

from fastapi import APIRouter
from sqlalchemy.exc import SQLAlchemyError

from app import crud
from app.api.deps import SessionDep
from app.api.routes.utils import not_found, storage_failure
from app.models import PromptCreate, PromptPublic, PromptRef, PromptUpdate, Success

router = APIRouter()


@router.post("", response_model=PromptPublic)
def create_new_prompt(*, session: SessionDep, prompt_in: PromptCreate) -> Any:
    """
    Create an empty prompt under a project and touch the project.
    """
    try:
        return crud.create_prompt(
            session=session, project_id=prompt_in.project_id, name=prompt_in.name
        )
    except crud.RecordNotFoundError as exc:
        raise not_found(exc) from exc
    except SQLAlchemyError as exc:
        raise storage_failure(session, "create prompt", exc) from exc


@router.put("", response_model=Success)
def update_prompt_field(*, session: SessionDep, prompt_in: PromptUpdate) -> Any:
    """
    Write a single prompt field (name, requirements or successCriteria).
    """
    try:
        crud.update_prompt(
            session=session,
            prompt_id=prompt_in.id,
            project_id=prompt_in.project_id,
            field=prompt_in.field,
            value=prompt_in.value,
        )
    except crud.RecordNotFoundError as exc:
        raise not_found(exc) from exc
    except SQLAlchemyError as exc:
        raise storage_failure(session, "update prompt", exc) from exc
    return Success()


@router.delete("", response_model=Success)
def delete_prompt(*, session: SessionDep, prompt_ref: PromptRef) -> Any:
    try:
        crud.delete_prompt(
            session=session, prompt_id=prompt_ref.id, project_id=prompt_ref.project_id
        )
    except crud.RecordNotFoundError as exc:
        raise not_found(exc) from exc
    except SQLAlchemyError as exc:
        raise storage_failure(session, "delete prompt", exc) from exc
    return Success()
