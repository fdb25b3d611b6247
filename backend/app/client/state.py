"""Client-side mirror of the server data and the reducer that mutates it.

`reduce` is a pure `(state, action) -> state` function. Every action kind is
handled explicitly; the trailing `assert_never` makes a type checker flag an
action added to `Action` without a matching case.
"""

from collections.abc import Callable
from dataclasses import dataclass, field, replace
from typing import assert_never

from app.models import (
    ProjectPublic,
    PromptField,
    PromptPublic,
    TemplatePublic,
    get_datetime_utc,
)


@dataclass(frozen=True)
class AppState:
    projects: list[ProjectPublic] = field(default_factory=list)
    templates: list[TemplatePublic] = field(default_factory=list)
    selected_project_id: str | None = None
    selected_prompt_id: str | None = None
    is_loading: bool = True


@dataclass(frozen=True)
class SetState:
    projects: list[ProjectPublic]
    templates: list[TemplatePublic]


@dataclass(frozen=True)
class SetLoading:
    is_loading: bool


@dataclass(frozen=True)
class AddProject:
    project: ProjectPublic


@dataclass(frozen=True)
class DeleteProject:
    project_id: str


@dataclass(frozen=True)
class SelectProject:
    project_id: str | None


@dataclass(frozen=True)
class AddPrompt:
    project_id: str
    prompt: PromptPublic


@dataclass(frozen=True)
class DeletePrompt:
    project_id: str
    prompt_id: str


@dataclass(frozen=True)
class SelectPrompt:
    prompt_id: str | None


@dataclass(frozen=True)
class UpdatePrompt:
    project_id: str
    prompt_id: str
    field: PromptField
    value: str


@dataclass(frozen=True)
class AddTemplate:
    template: TemplatePublic


@dataclass(frozen=True)
class UpdateTemplate:
    template_id: str
    name: str
    content: str


@dataclass(frozen=True)
class DeleteTemplate:
    template_id: str


@dataclass(frozen=True)
class SetTemplates:
    templates: list[TemplatePublic]


Action = (
    SetState
    | SetLoading
    | AddProject
    | DeleteProject
    | SelectProject
    | AddPrompt
    | DeletePrompt
    | SelectPrompt
    | UpdatePrompt
    | AddTemplate
    | UpdateTemplate
    | DeleteTemplate
    | SetTemplates
)


def _update_project(
    projects: list[ProjectPublic],
    project_id: str,
    change: Callable[[ProjectPublic], ProjectPublic],
) -> list[ProjectPublic]:
    return [change(p) if p.id == project_id else p for p in projects]


def reduce(state: AppState, action: Action) -> AppState:
    match action:
        case SetState(projects=projects, templates=templates):
            return replace(
                state, projects=list(projects), templates=list(templates), is_loading=False
            )

        case SetLoading(is_loading=is_loading):
            return replace(state, is_loading=is_loading)

        case AddProject(project=project):
            return replace(
                state,
                projects=[project, *state.projects],
                selected_project_id=project.id,
                selected_prompt_id=None,
            )

        case DeleteProject(project_id=project_id):
            was_selected = state.selected_project_id == project_id
            return replace(
                state,
                projects=[p for p in state.projects if p.id != project_id],
                selected_project_id=None if was_selected else state.selected_project_id,
                selected_prompt_id=None if was_selected else state.selected_prompt_id,
            )

        case SelectProject(project_id=project_id):
            return replace(state, selected_project_id=project_id, selected_prompt_id=None)

        case AddPrompt(project_id=project_id, prompt=prompt):
            now = get_datetime_utc()
            return replace(
                state,
                projects=_update_project(
                    state.projects,
                    project_id,
                    lambda p: p.model_copy(
                        update={"prompts": [prompt, *p.prompts], "updated_at": now}
                    ),
                ),
                selected_prompt_id=prompt.id,
            )

        case DeletePrompt(project_id=project_id, prompt_id=prompt_id):
            now = get_datetime_utc()
            return replace(
                state,
                projects=_update_project(
                    state.projects,
                    project_id,
                    lambda p: p.model_copy(
                        update={
                            "prompts": [pr for pr in p.prompts if pr.id != prompt_id],
                            "updated_at": now,
                        }
                    ),
                ),
                selected_prompt_id=(
                    None if state.selected_prompt_id == prompt_id else state.selected_prompt_id
                ),
            )

        case SelectPrompt(prompt_id=prompt_id):
            return replace(state, selected_prompt_id=prompt_id)

        case UpdatePrompt(project_id=project_id, prompt_id=prompt_id, field=prompt_field, value=value):
            now = get_datetime_utc()
            attribute = PromptField(prompt_field).attribute

            def update_prompt(pr: PromptPublic) -> PromptPublic:
                if pr.id != prompt_id:
                    return pr
                return pr.model_copy(update={attribute: value, "updated_at": now})

            return replace(
                state,
                projects=_update_project(
                    state.projects,
                    project_id,
                    lambda p: p.model_copy(
                        update={
                            "prompts": [update_prompt(pr) for pr in p.prompts],
                            "updated_at": now,
                        }
                    ),
                ),
            )

        case AddTemplate(template=template):
            return replace(state, templates=[*state.templates, template])

        case UpdateTemplate(template_id=template_id, name=name, content=content):
            return replace(
                state,
                templates=[
                    t.model_copy(update={"name": name, "content": content})
                    if t.id == template_id
                    else t
                    for t in state.templates
                ],
            )

        case DeleteTemplate(template_id=template_id):
            return replace(
                state, templates=[t for t in state.templates if t.id != template_id]
            )

        case SetTemplates(templates=templates):
            return replace(state, templates=list(templates))

        case _:
            assert_never(action)


def selected_project(state: AppState) -> ProjectPublic | None:
    if state.selected_project_id is None:
        return None
    return next((p for p in state.projects if p.id == state.selected_project_id), None)


def selected_prompt(state: AppState) -> PromptPublic | None:
    project = selected_project(state)
    if project is None or state.selected_prompt_id is None:
        return None
    return next((p for p in project.prompts if p.id == state.selected_prompt_id), None)
