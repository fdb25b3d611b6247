import json
import logging
from collections.abc import Callable
from typing import Any

import httpx
from pydantic import ValidationError

from app.client.api import DefaultTemplateProtectedError, PromptBuilderAPI
from app.client.debounce import DebounceRegistry
from app.client.state import (
    Action,
    AddProject,
    AddPrompt,
    AddTemplate,
    AppState,
    DeleteProject,
    DeletePrompt,
    DeleteTemplate,
    SelectProject,
    SelectPrompt,
    SetLoading,
    SetState,
    SetTemplates,
    UpdatePrompt,
    UpdateTemplate,
    reduce,
    selected_project,
    selected_prompt,
)
from app.core.config import Settings
from app.formatting import append_template_content
from app.models import (
    ImportPayload,
    ImportSummary,
    ProjectPublic,
    PromptField,
    PromptPublic,
    TemplatePublic,
    TemplateType,
)

logger = logging.getLogger(__name__)

# Failures a network call can end with; all are logged and leave state as is.
CLIENT_ERRORS = (httpx.HTTPError, ValidationError)

Listener = Callable[[AppState], None]


class ClientStore:
    """Client-side state kept in sync with the prompt builder API.

    Creates, deletes and template edits wait for the server and only then
    change local state. Prompt field edits change local state immediately and
    are written back after `debounce_seconds` without a newer edit to the same
    prompt field.
    """

    def __init__(self, api: PromptBuilderAPI, *, debounce_seconds: float = 0.5):
        self.api = api
        self.debounce_seconds = debounce_seconds
        self.state = AppState()
        self._debouncer = DebounceRegistry()
        self._listeners: list[Listener] = []

    @classmethod
    def from_settings(cls, settings: Settings) -> "ClientStore":
        return cls(
            PromptBuilderAPI.from_settings(settings),
            debounce_seconds=settings.PERSIST_DEBOUNCE_SECONDS,
        )

    def dispatch(self, action: Action) -> AppState:
        self.state = reduce(self.state, action)
        for listener in list(self._listeners):
            listener(self.state)
        return self.state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    async def load(self) -> None:
        try:
            data = await self.api.get_state()
        except CLIENT_ERRORS as exc:
            logger.warning("Failed to load state: %s", exc)
            self.dispatch(SetLoading(False))
            return
        self.dispatch(SetState(projects=data.projects, templates=data.templates))

    # Projects

    async def add_project(self, name: str) -> ProjectPublic | None:
        try:
            project = await self.api.create_project(name)
        except CLIENT_ERRORS as exc:
            logger.warning("Failed to add project: %s", exc)
            return None
        self.dispatch(AddProject(project))
        return project

    async def delete_project(self, project_id: str) -> bool:
        try:
            await self.api.delete_project(project_id)
        except CLIENT_ERRORS as exc:
            logger.warning("Failed to delete project %s: %s", project_id, exc)
            return False
        project = next((p for p in self.state.projects if p.id == project_id), None)
        if project is not None:
            self._cancel_prompt_writes([prompt.id for prompt in project.prompts])
        self.dispatch(DeleteProject(project_id))
        return True

    def select_project(self, project_id: str | None) -> None:
        self.dispatch(SelectProject(project_id))

    # Prompts

    async def add_prompt(self, project_id: str, name: str) -> PromptPublic | None:
        try:
            prompt = await self.api.create_prompt(project_id, name)
        except CLIENT_ERRORS as exc:
            logger.warning("Failed to add prompt: %s", exc)
            return None
        self.dispatch(AddPrompt(project_id=project_id, prompt=prompt))
        return prompt

    async def delete_prompt(self, project_id: str, prompt_id: str) -> bool:
        try:
            await self.api.delete_prompt(prompt_id, project_id)
        except CLIENT_ERRORS as exc:
            logger.warning("Failed to delete prompt %s: %s", prompt_id, exc)
            return False
        self._cancel_prompt_writes([prompt_id])
        self.dispatch(DeletePrompt(project_id=project_id, prompt_id=prompt_id))
        return True

    def _cancel_prompt_writes(self, prompt_ids: list[str]) -> None:
        for prompt_id in prompt_ids:
            for field in PromptField:
                self._debouncer.cancel((prompt_id, field))

    def select_prompt(self, prompt_id: str | None) -> None:
        self.dispatch(SelectPrompt(prompt_id))

    def update_prompt(
        self, project_id: str, prompt_id: str, field: PromptField, value: str
    ) -> None:
        """Apply the edit now and schedule its write-back.

        Must be called from a running event loop.
        """
        field = PromptField(field)
        self.dispatch(
            UpdatePrompt(project_id=project_id, prompt_id=prompt_id, field=field, value=value)
        )

        async def persist() -> None:
            try:
                await self.api.update_prompt(prompt_id, project_id, field, value)
            except CLIENT_ERRORS as exc:
                logger.warning("Failed to update prompt %s %s: %s", prompt_id, field.value, exc)

        self._debouncer.schedule((prompt_id, field), self.debounce_seconds, persist)

    @property
    def pending_writes(self) -> tuple[Any, ...]:
        return self._debouncer.pending

    # Templates

    async def add_template(
        self, name: str, content: str, type: TemplateType
    ) -> TemplatePublic | None:
        try:
            template = await self.api.create_template(name, content, type)
        except CLIENT_ERRORS as exc:
            logger.warning("Failed to add template: %s", exc)
            return None
        self.dispatch(AddTemplate(template))
        return template

    async def update_template(self, template_id: str, name: str, content: str) -> bool:
        try:
            await self.api.update_template(template_id, name, content)
        except CLIENT_ERRORS as exc:
            logger.warning("Failed to update template %s: %s", template_id, exc)
            return False
        self.dispatch(UpdateTemplate(template_id=template_id, name=name, content=content))
        return True

    async def delete_template(self, template_id: str) -> bool:
        try:
            await self.api.delete_template(template_id)
        except DefaultTemplateProtectedError:
            logger.warning("Default template %s cannot be deleted", template_id)
            return False
        except CLIENT_ERRORS as exc:
            logger.warning("Failed to delete template %s: %s", template_id, exc)
            return False
        self.dispatch(DeleteTemplate(template_id))
        return True

    async def refresh_templates(self) -> None:
        try:
            templates = await self.api.get_templates()
        except CLIENT_ERRORS as exc:
            logger.warning("Failed to refresh templates: %s", exc)
            return
        self.dispatch(SetTemplates(templates))

    def unadded_templates(self, template_type: TemplateType) -> list[TemplatePublic]:
        """Templates of `template_type` whose text is not yet in the selected prompt."""
        prompt = self.selected_prompt()
        field = PromptField.for_template_type(TemplateType(template_type))
        current = getattr(prompt, field.attribute) if prompt else ""
        return [
            t
            for t in self.state.templates
            if t.type == template_type and t.content.strip() not in current
        ]

    def insert_template(self, content: str, template_type: TemplateType) -> bool:
        project = self.selected_project()
        prompt = self.selected_prompt()
        if project is None or prompt is None:
            return False
        field = PromptField.for_template_type(TemplateType(template_type))
        new_value = append_template_content(getattr(prompt, field.attribute), content)
        if new_value is None:
            return False
        self.update_prompt(project.id, prompt.id, field, new_value)
        return True

    def insert_all_templates(self, template_type: TemplateType) -> int:
        inserted = 0
        for template in self.unadded_templates(template_type):
            if self.insert_template(template.content, template_type):
                inserted += 1
        return inserted

    # Export / import

    async def export_data(self) -> str:
        try:
            data = await self.api.export_data()
        except CLIENT_ERRORS as exc:
            logger.warning("Failed to export data: %s", exc)
            return ""
        return json.dumps(data, indent=2)

    async def import_data(self, payload: ImportPayload | dict[str, Any]) -> ImportSummary | None:
        try:
            summary = await self.api.import_data(payload)
        except CLIENT_ERRORS as exc:
            logger.warning("Failed to import data: %s", exc)
            return None
        await self.load()
        return summary

    # Accessors

    def selected_project(self) -> ProjectPublic | None:
        return selected_project(self.state)

    def selected_prompt(self) -> PromptPublic | None:
        return selected_prompt(self.state)

    async def flush(self) -> None:
        await self._debouncer.flush()

    async def aclose(self) -> None:
        await self.flush()
        await self.api.aclose()
