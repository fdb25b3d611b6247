import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import ConfigDict, field_validator, model_validator
from pydantic.alias_generators import to_camel
from sqlalchemy import DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy.types import TypeDecorator
from sqlmodel import Field, SQLModel


def get_datetime_utc() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class UTCDateTime(TypeDecorator):
    """Timezone-aware datetime column; SQLite hands values back naive."""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class TemplateType(str, Enum):
    REQUIREMENTS = "requirements"
    SUCCESS_CRITERIA = "success-criteria"


class PromptField(str, Enum):
    """Prompt fields editable one at a time, named as they appear on the wire."""

    REQUIREMENTS = "requirements"
    SUCCESS_CRITERIA = "successCriteria"
    NAME = "name"

    @property
    def attribute(self) -> str:
        return "success_criteria" if self is PromptField.SUCCESS_CRITERIA else self.value

    @classmethod
    def for_template_type(cls, template_type: TemplateType) -> "PromptField":
        if template_type is TemplateType.REQUIREMENTS:
            return cls.REQUIREMENTS
        return cls.SUCCESS_CRITERIA


# Wire models use camelCase keys; database columns stay snake_case.
class CamelModel(SQLModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Generic success envelope
class Success(CamelModel):
    success: bool = True


# Projects

class Project(SQLModel, table=True):
    __tablename__ = "projects"

    id: str = Field(default_factory=new_id, primary_key=True)
    name: str = Field(max_length=255)
    created_at: datetime = Field(
        default_factory=get_datetime_utc,
        sa_type=UTCDateTime(),  # type: ignore
    )
    updated_at: datetime = Field(
        default_factory=get_datetime_utc,
        sa_type=UTCDateTime(),  # type: ignore
    )


class ProjectCreate(CamelModel):
    name: str = Field(min_length=1, max_length=255)


class ProjectUpdate(CamelModel):
    id: str
    name: str = Field(min_length=1, max_length=255)


class ProjectRef(CamelModel):
    id: str


class PromptPublic(CamelModel):
    id: str
    project_id: str
    name: str
    requirements: str = ""
    success_criteria: str = ""
    created_at: datetime
    updated_at: datetime


class ProjectPublic(CamelModel):
    id: str
    name: str
    created_at: datetime
    updated_at: datetime
    prompts: list[PromptPublic] = Field(default_factory=list)


# Prompts

class Prompt(SQLModel, table=True):
    __tablename__ = "prompts"

    id: str = Field(default_factory=new_id, primary_key=True)
    project_id: str = Field(
        foreign_key="projects.id", nullable=False, ondelete="CASCADE", index=True
    )
    name: str = Field(max_length=255)
    requirements: str = Field(default="")
    success_criteria: str = Field(default="")
    created_at: datetime = Field(
        default_factory=get_datetime_utc,
        sa_type=UTCDateTime(),  # type: ignore
    )
    updated_at: datetime = Field(
        default_factory=get_datetime_utc,
        sa_type=UTCDateTime(),  # type: ignore
    )


class PromptCreate(CamelModel):
    project_id: str
    name: str = Field(min_length=1, max_length=255)


class PromptUpdate(CamelModel):
    id: str
    project_id: str
    field: PromptField
    value: str

    @model_validator(mode="after")
    def check_name(self) -> "PromptUpdate":
        # Renames follow the same rule as PromptCreate.name.
        if self.field is PromptField.NAME and not 1 <= len(self.value) <= 255:
            raise ValueError("Prompt name must be between 1 and 255 characters")
        return self


class PromptRef(CamelModel):
    id: str
    project_id: str


# Templates

class Template(SQLModel, table=True):
    __tablename__ = "templates"

    id: str = Field(default_factory=new_id, primary_key=True)
    name: str = Field(max_length=255)
    content: str
    type: TemplateType = Field(
        sa_type=SAEnum(  # type: ignore
            TemplateType,
            name="template_type",
            values_callable=lambda enum: [member.value for member in enum],
            create_constraint=True,
            validate_strings=True,
        )
    )
    is_default: bool = Field(default=False)
    created_at: datetime = Field(
        default_factory=get_datetime_utc,
        sa_type=UTCDateTime(),  # type: ignore
    )


class TemplateCreate(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    content: str = Field(min_length=1)
    type: TemplateType


class TemplateUpdate(CamelModel):
    id: str
    name: str = Field(min_length=1, max_length=255)
    content: str = Field(min_length=1)


class TemplateRef(CamelModel):
    id: str


class TemplatePublic(CamelModel):
    id: str
    name: str
    content: str
    type: TemplateType
    is_default: bool = False
    created_at: datetime


# Whole-store snapshots

class AppStatePublic(CamelModel):
    projects: list[ProjectPublic]
    templates: list[TemplatePublic]


class ExportPayload(CamelModel):
    exported_at: datetime
    projects: list[ProjectPublic]
    templates: list[TemplatePublic]


class ImportPrompt(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    requirements: str = ""
    success_criteria: str = ""


class ImportProject(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    prompts: list[ImportPrompt] = Field(default_factory=list)


class ImportTemplate(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    content: str = Field(min_length=1)
    type: TemplateType


class ImportPayload(CamelModel):
    """Accepts the export format; ids and timestamps in it are ignored."""

    projects: list[ImportProject] = Field(default_factory=list)
    templates: list[ImportTemplate] = Field(default_factory=list)

    @field_validator("projects", "templates", mode="before")
    @classmethod
    def none_as_empty(cls, value):
        return [] if value is None else value


class ImportSummary(Success):
    projects: int = 0
    prompts: int = 0
    templates: int = 0


class ErrorResponse(CamelModel):
    error: str
