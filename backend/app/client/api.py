from typing import Any

import httpx

from app.core.config import Settings
from app.models import (
    AppStatePublic,
    ImportPayload,
    ImportSummary,
    ProjectCreate,
    ProjectPublic,
    ProjectRef,
    ProjectUpdate,
    PromptCreate,
    PromptField,
    PromptPublic,
    PromptRef,
    PromptUpdate,
    TemplateCreate,
    TemplatePublic,
    TemplateRef,
    TemplateType,
    TemplateUpdate,
)


class DefaultTemplateProtectedError(Exception):
    """The server refused to delete a default template."""


def _body(model: Any) -> dict[str, Any]:
    return model.model_dump(mode="json", by_alias=True)


class PromptBuilderAPI:
    """Async HTTP client for the prompt builder endpoints.

    Every method raises `httpx.HTTPError` when the call fails, including
    `httpx.HTTPStatusError` for non-2xx responses.
    """

    def __init__(
        self,
        base_url: str,
        *,
        api_prefix: str = "/api",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/") + api_prefix,
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "PromptBuilderAPI":
        return cls(
            settings.CLIENT_BASE_URL,
            api_prefix=settings.API_PREFIX,
            timeout=settings.CLIENT_TIMEOUT_SECONDS,
        )

    async def _request(self, method: str, path: str, json: dict[str, Any] | None = None) -> Any:
        response = await self._client.request(method, path, json=json)
        response.raise_for_status()
        return response.json()

    async def aclose(self) -> None:
        await self._client.aclose()

    # State

    async def get_state(self) -> AppStatePublic:
        return AppStatePublic.model_validate(await self._request("GET", "/state"))

    async def export_data(self) -> dict[str, Any]:
        return await self._request("GET", "/export")

    async def import_data(self, payload: ImportPayload | dict[str, Any]) -> ImportSummary:
        payload = ImportPayload.model_validate(payload)
        return ImportSummary.model_validate(
            await self._request("POST", "/import", json=_body(payload))
        )

    # Projects

    async def create_project(self, name: str) -> ProjectPublic:
        data = await self._request("POST", "/projects", json=_body(ProjectCreate(name=name)))
        return ProjectPublic.model_validate(data)

    async def update_project(self, project_id: str, name: str) -> None:
        await self._request(
            "PUT", "/projects", json=_body(ProjectUpdate(id=project_id, name=name))
        )

    async def delete_project(self, project_id: str) -> None:
        await self._request("DELETE", "/projects", json=_body(ProjectRef(id=project_id)))

    # Prompts

    async def create_prompt(self, project_id: str, name: str) -> PromptPublic:
        data = await self._request(
            "POST", "/prompts", json=_body(PromptCreate(project_id=project_id, name=name))
        )
        return PromptPublic.model_validate(data)

    async def update_prompt(
        self, prompt_id: str, project_id: str, field: PromptField, value: str
    ) -> None:
        body = PromptUpdate(id=prompt_id, project_id=project_id, field=field, value=value)
        await self._request("PUT", "/prompts", json=_body(body))

    async def delete_prompt(self, prompt_id: str, project_id: str) -> None:
        await self._request(
            "DELETE", "/prompts", json=_body(PromptRef(id=prompt_id, project_id=project_id))
        )

    # Templates

    async def get_templates(self) -> list[TemplatePublic]:
        return [TemplatePublic.model_validate(t) for t in await self._request("GET", "/templates")]

    async def create_template(
        self, name: str, content: str, type: TemplateType
    ) -> TemplatePublic:
        body = TemplateCreate(name=name, content=content, type=type)
        return TemplatePublic.model_validate(
            await self._request("POST", "/templates", json=_body(body))
        )

    async def update_template(self, template_id: str, name: str, content: str) -> None:
        body = TemplateUpdate(id=template_id, name=name, content=content)
        await self._request("PUT", "/templates", json=_body(body))

    async def delete_template(self, template_id: str) -> None:
        try:
            await self._request("DELETE", "/templates", json=_body(TemplateRef(id=template_id)))
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code == 400:
                raise DefaultTemplateProtectedError(template_id) from exc
            raise
