from typing import Any

from fastapi import APIRouter
from sqlalchemy.exc import SQLAlchemyError

from app import crud
from app.api.deps import SessionDep
from app.api.routes.utils import storage_failure
from app.models import (
    AppStatePublic,
    ExportPayload,
    ImportPayload,
    ImportSummary,
    TemplatePublic,
)

router = APIRouter()


@router.get("/state", response_model=AppStatePublic)
def read_state(session: SessionDep) -> Any:
    """
    Everything a client needs on startup: projects with prompts, and templates.
    """
    try:
        projects = crud.get_all_projects(session=session)
        templates = crud.get_all_templates(session=session)
    except SQLAlchemyError as exc:
        raise storage_failure(session, "fetch state", exc) from exc
    return AppStatePublic(
        projects=projects,
        templates=[TemplatePublic.model_validate(t.model_dump()) for t in templates],
    )


@router.get("/export", response_model=ExportPayload)
def export_data(session: SessionDep) -> Any:
    """
    Snapshot of all user data. Default templates are left out.
    """
    try:
        return crud.export_all_data(session=session)
    except SQLAlchemyError as exc:
        raise storage_failure(session, "export data", exc) from exc


@router.post("/import", response_model=ImportSummary)
def import_data(*, session: SessionDep, payload: ImportPayload) -> Any:
    """
    Add the projects, prompts and templates of an export as new records.
    """
    try:
        return crud.import_data(session=session, data=payload)
    except SQLAlchemyError as exc:
        raise storage_failure(session, "import data", exc) from exc
