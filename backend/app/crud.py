from sqlmodel import Session, col, select

from app.models import (
    ExportPayload,
    ImportPayload,
    ImportSummary,
    Project,
    ProjectPublic,
    Prompt,
    PromptField,
    PromptPublic,
    Template,
    TemplatePublic,
    TemplateType,
    get_datetime_utc,
)


class RecordNotFoundError(LookupError):
    """Raised when an update or delete references an id that is not stored."""

    def __init__(self, entity: str, record_id: str):
        self.entity = entity
        self.record_id = record_id
        super().__init__(f"{entity} {record_id!r} not found")


DEFAULT_TEMPLATES: tuple[dict, ...] = (
    {
        "id": "default-req-1",
        "name": "Next.js/Tailwind Stack",
        "content": "Use nextJS/tailwind with permanent local storage",
        "type": TemplateType.REQUIREMENTS,
    },
    {
        "id": "default-req-2",
        "name": "SQLite Database",
        "content": "Store all data in a SQLite database using better-sqlite3",
        "type": TemplateType.REQUIREMENTS,
    },
    {
        "id": "default-req-3",
        "name": "Export to JSON",
        "content": "Include an export to JSON button for data portability",
        "type": TemplateType.REQUIREMENTS,
    },
    {
        "id": "default-success-1",
        "name": "Standard Completion",
        "content": (
            "All requirements implemented, no linter errors, documentation updated, "
            "Output <promise> COMPLETE </promise> When done."
        ),
        "type": TemplateType.SUCCESS_CRITERIA,
    },
)


def _get_or_raise(session: Session, model: type, record_id: str):
    record = session.get(model, record_id)
    if record is None:
        raise RecordNotFoundError(model.__name__, record_id)
    return record


def _touch_project(session: Session, project_id: str, now) -> Project:
    project = _get_or_raise(session, Project, project_id)
    project.updated_at = now
    session.add(project)
    return project


# Projects

def create_project(*, session: Session, name: str) -> Project:
    now = get_datetime_utc()
    db_project = Project(name=name, created_at=now, updated_at=now)
    session.add(db_project)
    session.commit()
    session.refresh(db_project)
    return db_project


def update_project(*, session: Session, project_id: str, name: str) -> Project:
    db_project = _get_or_raise(session, Project, project_id)
    db_project.name = name
    db_project.updated_at = get_datetime_utc()
    session.add(db_project)
    session.commit()
    session.refresh(db_project)
    return db_project


def delete_project(*, session: Session, project_id: str) -> None:
    db_project = _get_or_raise(session, Project, project_id)
    prompts = session.exec(select(Prompt).where(Prompt.project_id == project_id)).all()
    for prompt in prompts:
        session.delete(prompt)
    # Prompt rows must be deleted before the project row.
    session.flush()
    session.delete(db_project)
    session.commit()


def get_project_prompts(*, session: Session, project_id: str) -> list[Prompt]:
    statement = (
        select(Prompt)
        .where(Prompt.project_id == project_id)
        .order_by(col(Prompt.updated_at).desc())
    )
    return list(session.exec(statement).all())


def get_all_projects(*, session: Session) -> list[ProjectPublic]:
    """Every project, newest activity first, each with its prompts loaded."""
    projects = session.exec(select(Project).order_by(col(Project.updated_at).desc())).all()
    return [
        ProjectPublic(
            id=project.id,
            name=project.name,
            created_at=project.created_at,
            updated_at=project.updated_at,
            prompts=[
                PromptPublic.model_validate(prompt.model_dump())
                for prompt in get_project_prompts(session=session, project_id=project.id)
            ],
        )
        for project in projects
    ]


# Prompts

def create_prompt(*, session: Session, project_id: str, name: str) -> Prompt:
    now = get_datetime_utc()
    _touch_project(session, project_id, now)
    db_prompt = Prompt(project_id=project_id, name=name, created_at=now, updated_at=now)
    session.add(db_prompt)
    session.commit()
    session.refresh(db_prompt)
    return db_prompt


def update_prompt(
    *,
    session: Session,
    prompt_id: str,
    project_id: str,
    field: PromptField,
    value: str,
) -> Prompt:
    db_prompt = _get_or_raise(session, Prompt, prompt_id)
    now = get_datetime_utc()
    setattr(db_prompt, PromptField(field).attribute, value)
    db_prompt.updated_at = now
    session.add(db_prompt)
    _touch_project(session, project_id, now)
    session.commit()
    session.refresh(db_prompt)
    return db_prompt


def delete_prompt(*, session: Session, prompt_id: str, project_id: str) -> None:
    db_prompt = _get_or_raise(session, Prompt, prompt_id)
    session.delete(db_prompt)
    _touch_project(session, project_id, get_datetime_utc())
    session.commit()


# Templates

def get_all_templates(*, session: Session) -> list[Template]:
    statement = select(Template).order_by(
        col(Template.is_default).desc(), col(Template.created_at).desc()
    )
    return list(session.exec(statement).all())


def create_template(
    *, session: Session, name: str, content: str, type: TemplateType
) -> Template:
    db_template = Template(
        name=name,
        content=content,
        type=TemplateType(type),
        is_default=False,
    )
    session.add(db_template)
    session.commit()
    session.refresh(db_template)
    return db_template


def update_template(
    *, session: Session, template_id: str, name: str, content: str
) -> Template:
    db_template = _get_or_raise(session, Template, template_id)
    db_template.name = name
    db_template.content = content
    session.add(db_template)
    session.commit()
    session.refresh(db_template)
    return db_template


def delete_template(*, session: Session, template_id: str) -> bool:
    """Delete a user template. Returns False, leaving the row, for a default."""
    db_template = _get_or_raise(session, Template, template_id)
    if db_template.is_default:
        return False
    session.delete(db_template)
    session.commit()
    return True


def seed_default_templates(*, session: Session) -> int:
    inserted = 0
    for template in DEFAULT_TEMPLATES:
        if session.get(Template, template["id"]) is not None:
            continue
        session.add(Template(**template, is_default=True))
        inserted += 1
    session.commit()
    return inserted


# Export / import

def export_all_data(*, session: Session) -> ExportPayload:
    templates = [
        TemplatePublic.model_validate(template.model_dump())
        for template in get_all_templates(session=session)
        if not template.is_default
    ]
    return ExportPayload(
        exported_at=get_datetime_utc(),
        projects=get_all_projects(session=session),
        templates=templates,
    )


def import_data(*, session: Session, data: ImportPayload) -> ImportSummary:
    """Add everything in `data` as new rows. Existing rows are never touched."""
    summary = ImportSummary()
    for project_in in data.projects:
        db_project = create_project(session=session, name=project_in.name)
        summary.projects += 1
        for prompt_in in project_in.prompts:
            db_prompt = create_prompt(
                session=session, project_id=db_project.id, name=prompt_in.name
            )
            summary.prompts += 1
            if prompt_in.requirements:
                update_prompt(
                    session=session,
                    prompt_id=db_prompt.id,
                    project_id=db_project.id,
                    field=PromptField.REQUIREMENTS,
                    value=prompt_in.requirements,
                )
            if prompt_in.success_criteria:
                update_prompt(
                    session=session,
                    prompt_id=db_prompt.id,
                    project_id=db_project.id,
                    field=PromptField.SUCCESS_CRITERIA,
                    value=prompt_in.success_criteria,
                )
    for template_in in data.templates:
        create_template(
            session=session,
            name=template_in.name,
            content=template_in.content,
            type=template_in.type,
        )
        summary.templates += 1
    return summary
