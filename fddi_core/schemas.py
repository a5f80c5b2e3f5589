from __future__ import annotations

from collections.abc import Iterator, Mapping
from datetime import date
from typing import ClassVar, Literal, TypeVar

from pydantic import BaseModel, Field, JsonValue, field_validator


Status = Literal["notstarted", "underway", "attention", "complete", "inactive"]

TBaseSchema = TypeVar("TBaseSchema", bound="BaseSchema")


def _require_name(value: str) -> str:
    if not value.strip():
        raise ValueError("name must not be empty")
    return value


class BaseSchema(BaseModel):
    table_name: ClassVar[str | None] = None
    name_required: ClassVar[bool] = False

    def to_json(self) -> str:
        from .codec import encode

        return encode(self)

    def to_dict(self) -> dict[str, object]:
        return self.model_dump()

    @classmethod
    def from_json(cls: type[TBaseSchema], data: str) -> TBaseSchema:
        from .codec import decode

        return decode(data, cls)

    @classmethod
    def from_dict(cls: type[TBaseSchema], data: Mapping[str, object]) -> TBaseSchema:
        return cls.model_validate(data)


class KPI(BaseSchema):
    status: Status
    count: int = Field(ge=0)


class Progress(BaseSchema):
    id: str | None = None
    completion: int = Field(default=0, ge=0, le=100)
    count: int = Field(default=1, ge=0)
    status: Status | None = None
    kpis: list[KPI] | None = None
    extensions: dict[str, JsonValue] = Field(default_factory=dict)


class Note(BaseSchema):
    id: str | None = None
    text: str | None = None
    posted_on: date | None = None
    extensions: dict[str, JsonValue] = Field(default_factory=dict)


class Milestone(BaseSchema):
    table_name = "Milestones"

    id: str | None = None
    planned: date | None = None
    actual: date | None = None
    status: Status | None = None
    extensions: dict[str, JsonValue] = Field(default_factory=dict)


class Feature(BaseSchema):
    table_name = "Features"

    id: str | None = None
    name: str | None = None
    initials: str | None = None
    seq: int | None = Field(default=None, ge=1)
    milestones: list[Milestone] | None = None
    remarks: list[Note] | None = None
    progress: Progress | None = None
    extensions: dict[str, JsonValue] = Field(default_factory=dict)


class Activity(BaseSchema):
    table_name = "Activities"

    id: str | None = None
    name: str | None = None
    initials: str | None = None
    # Target month, e.g. "2026-03".
    target: str | None = Field(default=None, pattern=r"^\d{4}-(0[1-9]|1[0-2])$")
    features: list[Feature] | None = None
    progress: Progress | None = None
    extensions: dict[str, JsonValue] = Field(default_factory=dict)


class Subject(BaseSchema):
    table_name = "Subjects"

    id: str | None = None
    prefix: str | None = None
    name: str | None = None
    activities: list[Activity] | None = None
    progress: Progress | None = None
    extensions: dict[str, JsonValue] = Field(default_factory=dict)


class MilestoneInfo(BaseSchema):
    """Definition of one milestone column; effort is the percent it is worth."""

    id: str | None = None
    name: str | None = None
    effort: int = Field(default=0, ge=0, le=100)
    extensions: dict[str, JsonValue] = Field(default_factory=dict)


class AspectInfo(BaseSchema):
    id: str | None = None
    subject_name: str | None = None
    activity_name: str | None = None
    feature_name: str | None = None
    milestone_name: str | None = None
    milestone_info: list[MilestoneInfo] | None = None
    extensions: dict[str, JsonValue] = Field(default_factory=dict)


class Aspect(BaseSchema):
    table_name = "Aspects"
    name_required = True

    id: str | None = None
    name: str
    info: AspectInfo | None = None
    subjects: list[Subject] | None = None
    progress: Progress | None = None
    extensions: dict[str, JsonValue] = Field(default_factory=dict)

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, value: str) -> str:
        return _require_name(value)


class Project(BaseSchema):
    table_name = "Projects"
    name_required = True

    id: str | None = None
    name: str
    aspects: list[Aspect] | None = None
    progress: Progress | None = None
    extensions: dict[str, JsonValue] = Field(default_factory=dict)

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, value: str) -> str:
        return _require_name(value)


class Program(BaseSchema):
    table_name = "Programs"

    id: str | None = None
    name: str | None = None
    programs: list[Program] | None = None
    projects: list[Project] | None = None
    progress: Progress | None = None
    extensions: dict[str, JsonValue] = Field(default_factory=dict)


RECORD_TYPES: dict[str, type[BaseSchema]] = {
    record_type.__name__.lower(): record_type
    for record_type in (
        Program,
        Project,
        Aspect,
        AspectInfo,
        MilestoneInfo,
        Subject,
        Activity,
        Feature,
        Milestone,
        Note,
        Progress,
        KPI,
    )
}


def resolve_record_type(name: str) -> type[BaseSchema]:
    """Look up a record type by case-insensitive class name."""
    try:
        return RECORD_TYPES[name.strip().lower()]
    except KeyError:
        known = ", ".join(sorted(RECORD_TYPES))
        raise ValueError(f"Unknown record type: {name} (expected one of: {known})") from None


def iter_records(record: BaseSchema, path: str = "") -> Iterator[tuple[str, BaseSchema]]:
    """Walk a record tree depth-first, yielding (path, record) pairs."""
    path = path or type(record).__name__
    yield path, record
    for field_name in type(record).model_fields:
        value = getattr(record, field_name)
        if isinstance(value, BaseSchema):
            yield from iter_records(value, f"{path}.{field_name}")
        elif isinstance(value, list):
            for index, item in enumerate(value):
                if isinstance(item, BaseSchema):
                    yield from iter_records(item, f"{path}.{field_name}[{index}]")


def missing_names(record: BaseSchema) -> list[str]:
    """Paths of records in the tree whose required name is empty."""
    missing: list[str] = []
    for path, node in iter_records(record):
        if not node.name_required:
            continue
        name = getattr(node, "name", None)
        if not isinstance(name, str) or not name.strip():
            missing.append(path)
    return missing
