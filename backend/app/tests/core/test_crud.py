import warnings

import pytest
from sqlmodel import Session, select

from app import crud
from app.core.db import Store
from app.models import (
    ImportPayload,
    Project,
    Prompt,
    PromptField,
    Template,
    TemplateType,
)


def _project_snapshot(export):
    return sorted(
        (
            project.name,
            tuple(
                sorted(
                    (prompt.name, prompt.requirements, prompt.success_criteria)
                    for prompt in project.prompts
                )
            ),
        )
        for project in export.projects
    )


def _template_snapshot(export):
    return sorted((t.name, t.content, t.type) for t in export.templates)


def test_create_project_starts_empty(session: Session):
    project = crud.create_project(session=session, name="P1")

    assert project.id
    assert project.created_at == project.updated_at
    [listed] = crud.get_all_projects(session=session)
    assert listed.name == "P1"
    assert listed.prompts == []


def test_update_project_renames_and_touches(session: Session):
    project = crud.create_project(session=session, name="Old")
    created_at = project.updated_at

    updated = crud.update_project(session=session, project_id=project.id, name="New")

    assert updated.name == "New"
    assert updated.updated_at > created_at


def test_projects_are_listed_by_most_recent_activity(session: Session):
    first = crud.create_project(session=session, name="First")
    second = crud.create_project(session=session, name="Second")
    assert [p.name for p in crud.get_all_projects(session=session)] == ["Second", "First"]

    crud.create_prompt(session=session, project_id=first.id, name="Task")

    assert [p.id for p in crud.get_all_projects(session=session)] == [first.id, second.id]


def test_prompt_changes_touch_the_parent_project(session: Session):
    project = crud.create_project(session=session, name="P1")
    before_create = project.updated_at

    prompt = crud.create_prompt(session=session, project_id=project.id, name="Task A")
    session.refresh(project)
    after_create = project.updated_at
    assert after_create > before_create
    assert prompt.requirements == ""
    assert prompt.success_criteria == ""

    crud.update_prompt(
        session=session,
        prompt_id=prompt.id,
        project_id=project.id,
        field=PromptField.REQUIREMENTS,
        value="Do X",
    )
    session.refresh(project)
    after_update = project.updated_at
    assert after_update > after_create
    assert prompt.updated_at == after_update

    crud.delete_prompt(session=session, prompt_id=prompt.id, project_id=project.id)
    session.refresh(project)
    assert project.updated_at > after_update


def test_update_prompt_writes_only_the_named_field(session: Session):
    project = crud.create_project(session=session, name="P1")
    prompt = crud.create_prompt(session=session, project_id=project.id, name="Task A")

    crud.update_prompt(
        session=session,
        prompt_id=prompt.id,
        project_id=project.id,
        field=PromptField.SUCCESS_CRITERIA,
        value="X works",
    )
    crud.update_prompt(
        session=session,
        prompt_id=prompt.id,
        project_id=project.id,
        field=PromptField.NAME,
        value="Task B",
    )

    stored = session.get(Prompt, prompt.id)
    assert stored.name == "Task B"
    assert stored.requirements == ""
    assert stored.success_criteria == "X works"


def test_prompts_are_listed_newest_first(session: Session):
    project = crud.create_project(session=session, name="P1")
    older = crud.create_prompt(session=session, project_id=project.id, name="Older")
    newer = crud.create_prompt(session=session, project_id=project.id, name="Newer")
    assert [p.id for p in crud.get_project_prompts(session=session, project_id=project.id)] == [
        newer.id,
        older.id,
    ]

    crud.update_prompt(
        session=session,
        prompt_id=older.id,
        project_id=project.id,
        field=PromptField.REQUIREMENTS,
        value="edited",
    )

    [listed] = crud.get_all_projects(session=session)
    assert [p.id for p in listed.prompts] == [older.id, newer.id]


def test_delete_project_removes_only_its_prompts(session: Session):
    doomed = crud.create_project(session=session, name="Doomed")
    kept = crud.create_project(session=session, name="Kept")
    for name in ("a", "b", "c"):
        crud.create_prompt(session=session, project_id=doomed.id, name=name)
    survivor = crud.create_prompt(session=session, project_id=kept.id, name="survivor")

    with warnings.catch_warnings():
        warnings.simplefilter("error")
        crud.delete_project(session=session, project_id=doomed.id)

    remaining = session.exec(select(Prompt)).all()
    assert [p.id for p in remaining] == [survivor.id]
    assert session.get(Project, doomed.id) is None
    assert session.get(Project, kept.id) is not None


def test_unknown_ids_raise_not_found(session: Session):
    project = crud.create_project(session=session, name="P1")

    with pytest.raises(crud.RecordNotFoundError):
        crud.update_project(session=session, project_id="missing", name="x")
    with pytest.raises(crud.RecordNotFoundError):
        crud.delete_project(session=session, project_id="missing")
    with pytest.raises(crud.RecordNotFoundError):
        crud.create_prompt(session=session, project_id="missing", name="x")
    with pytest.raises(crud.RecordNotFoundError):
        crud.update_prompt(
            session=session,
            prompt_id="missing",
            project_id=project.id,
            field=PromptField.NAME,
            value="x",
        )
    with pytest.raises(crud.RecordNotFoundError):
        crud.delete_prompt(session=session, prompt_id="missing", project_id=project.id)
    with pytest.raises(crud.RecordNotFoundError) as excinfo:
        crud.delete_template(session=session, template_id="missing")
    assert excinfo.value.entity == "Template"


def test_templates_list_defaults_first_then_newest(session: Session):
    older = crud.create_template(
        session=session, name="Older", content="a", type=TemplateType.REQUIREMENTS
    )
    newer = crud.create_template(
        session=session, name="Newer", content="b", type=TemplateType.SUCCESS_CRITERIA
    )

    templates = crud.get_all_templates(session=session)

    assert all(t.is_default for t in templates[:4])
    assert [t.id for t in templates[4:]] == [newer.id, older.id]


def test_created_templates_are_never_defaults(session: Session):
    template = crud.create_template(
        session=session, name="Mine", content="Use pytest", type="requirements"
    )

    assert template.is_default is False
    assert template.type is TemplateType.REQUIREMENTS


def test_update_template_changes_name_and_content_only(session: Session):
    template = crud.create_template(
        session=session, name="Mine", content="a", type=TemplateType.SUCCESS_CRITERIA
    )

    crud.update_template(session=session, template_id=template.id, name="Renamed", content="b")

    stored = session.get(Template, template.id)
    assert (stored.name, stored.content) == ("Renamed", "b")
    assert stored.type is TemplateType.SUCCESS_CRITERIA
    assert stored.is_default is False


def test_delete_default_template_is_refused(session: Session):
    before = [t.id for t in crud.get_all_templates(session=session)]

    assert crud.delete_template(session=session, template_id="default-req-1") is False

    assert [t.id for t in crud.get_all_templates(session=session)] == before


def test_delete_custom_template_removes_exactly_that_row(session: Session):
    keep = crud.create_template(session=session, name="Keep", content="k", type="requirements")
    drop = crud.create_template(session=session, name="Drop", content="d", type="requirements")

    assert crud.delete_template(session=session, template_id=drop.id) is True

    ids = {t.id for t in crud.get_all_templates(session=session)}
    assert drop.id not in ids
    assert keep.id in ids
    assert len(ids) == 5


def test_export_leaves_out_default_templates(session: Session):
    crud.create_template(session=session, name="Mine", content="c", type="requirements")

    export = crud.export_all_data(session=session)

    assert [t.name for t in export.templates] == ["Mine"]
    assert export.exported_at.tzinfo is not None


def test_import_is_additive_and_assigns_new_ids(session: Session):
    existing = crud.create_project(session=session, name="P1")
    payload = ImportPayload.model_validate(
        {
            "projects": [
                {
                    "id": existing.id,
                    "name": "P1",
                    "prompts": [{"name": "Task", "requirements": "r", "successCriteria": ""}],
                }
            ],
            "templates": [{"name": "T", "content": "c", "type": "success-criteria"}],
        }
    )

    summary = crud.import_data(session=session, data=payload)
    crud.import_data(session=session, data=payload)

    assert (summary.projects, summary.prompts, summary.templates) == (1, 1, 1)
    projects = crud.get_all_projects(session=session)
    assert [p.name for p in projects].count("P1") == 3
    assert len({p.id for p in projects}) == 3
    imported = [p for p in projects if p.id != existing.id]
    assert all(p.prompts[0].requirements == "r" for p in imported)
    assert len(crud.export_all_data(session=session).templates) == 2


def test_export_import_round_trip_into_empty_store(session: Session, tmp_path):
    project = crud.create_project(session=session, name="P1")
    prompt = crud.create_prompt(session=session, project_id=project.id, name="Task A")
    crud.update_prompt(
        session=session,
        prompt_id=prompt.id,
        project_id=project.id,
        field=PromptField.REQUIREMENTS,
        value="Do X",
    )
    crud.update_prompt(
        session=session,
        prompt_id=prompt.id,
        project_id=project.id,
        field=PromptField.SUCCESS_CRITERIA,
        value="X works",
    )
    crud.create_prompt(session=session, project_id=project.id, name="Empty")
    crud.create_project(session=session, name="P2")
    crud.create_template(session=session, name="Mine", content="c", type="requirements")
    exported = crud.export_all_data(session=session)

    target = Store(f"sqlite:///{tmp_path / 'target.db'}")
    target.init()
    try:
        with target.session() as target_session:
            wire = exported.model_dump(mode="json", by_alias=True)
            crud.import_data(session=target_session, data=ImportPayload.model_validate(wire))
            reexported = crud.export_all_data(session=target_session)
    finally:
        target.close()

    assert _project_snapshot(reexported) == _project_snapshot(exported)
    assert _template_snapshot(reexported) == _template_snapshot(exported)
