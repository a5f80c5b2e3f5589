import json
from datetime import date

import pytest

from fddi_core.codec import decode, encode
from fddi_core.errors import DecodeError, EncodeError
from fddi_core.schemas import (
    KPI,
    Activity,
    Aspect,
    AspectInfo,
    Feature,
    Milestone,
    MilestoneInfo,
    Note,
    Program,
    Progress,
    Project,
    Subject,
)


def _make_program() -> Program:
    feature = Feature(
        id="F1",
        name="User Registration",
        initials="DEV1",
        seq=1,
        milestones=[
            Milestone(planned=date(2026, 1, 15), actual=date(2026, 1, 14), status="complete"),
            Milestone(planned=date(2026, 2, 1), status="notstarted"),
        ],
        remarks=[Note(text="Needs review", posted_on=date(2026, 1, 10))],
    )
    aspect = Aspect(
        id="A1",
        name="Development",
        info=AspectInfo(
            subject_name="Subject Area",
            activity_name="Business Activity",
            feature_name="Feature",
            milestone_name="Milestone",
            milestone_info=[
                MilestoneInfo(name="Design", effort=40),
                MilestoneInfo(name="Build", effort=60),
            ],
        ),
        subjects=[
            Subject(
                prefix="UM",
                name="User Management",
                activities=[Activity(name="Accounts", target="2026-02", features=[feature])],
            )
        ],
        progress=Progress(completion=20, status="underway", kpis=[KPI(status="complete", count=1)]),
    )
    return Program(
        id="PG1",
        name="Program A",
        programs=[Program(name="Sub Program")],
        projects=[Project(name="Alpha", aspects=[aspect])],
        extensions={
            "owner": "pmo",
            "budget": 12.5,
            "active": True,
            "tags": ["a", "b"],
            "meta": {"nested": {"depth": 2}, "empty": None},
        },
    )


def test_round_trip_preserves_tree() -> None:
    program = _make_program()

    restored = decode(encode(program))

    assert restored == program
    feature = restored.projects[0].aspects[0].subjects[0].activities[0].features[0]
    assert feature.milestones[0].planned == date(2026, 1, 15)
    assert restored.extensions["meta"] == {"nested": {"depth": 2}, "empty": None}


def test_encode_is_deterministic_and_sorted() -> None:
    assert encode(Program()) == (
        '{"extensions": {}, "id": null, "name": null, '
        '"programs": null, "progress": null, "projects": null}'
    )
    assert encode(_make_program()) == encode(_make_program())


def test_encode_keeps_field_names_and_nesting() -> None:
    payload = json.loads(encode(_make_program()))

    assert payload["name"] == "Program A"
    assert payload["projects"][0]["name"] == "Alpha"
    aspect = payload["projects"][0]["aspects"][0]
    assert aspect["info"]["milestone_info"][1] == {
        "effort": 60,
        "extensions": {},
        "id": None,
        "name": "Build",
    }


def test_encode_with_indent() -> None:
    text = encode(Project(name="Alpha"), indent=2)

    assert text.startswith("{\n  ")
    assert decode(text, Project) == Project(name="Alpha")


def test_encode_rejects_unrepresentable_extension() -> None:
    program = Program(name="P")
    program.extensions["handle"] = object()

    with pytest.raises(EncodeError):
        _ = encode(program)


@pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
def test_encode_rejects_non_finite_extension(value: float) -> None:
    constructed = Program(name="P", extensions={"ratio": value})
    mutated = Project(name="Alpha", extensions={"ratio": 0.5})
    mutated.extensions["ratio"] = value

    with pytest.raises(EncodeError):
        _ = encode(constructed)
    with pytest.raises(EncodeError):
        _ = encode(mutated)
    with pytest.raises(EncodeError):
        _ = encode(Program(projects=[mutated]))


def test_encode_rejects_empty_required_name() -> None:
    project = Project(name="Alpha")
    project.name = ""

    with pytest.raises(EncodeError):
        _ = encode(project)

    program = Program(projects=[Project(name="Alpha", aspects=[Aspect(name="X")])])
    program.projects[0].aspects[0].name = ""
    with pytest.raises(EncodeError):
        _ = encode(program)


def test_decode_defaults_to_program() -> None:
    record = decode('{"name": "Program A", "projects": [{"name": "Alpha"}]}')

    assert isinstance(record, Program)
    assert record.projects == [Project(name="Alpha")]


def test_decode_accepts_missing_optional_fields() -> None:
    project = decode('{"name": "Alpha"}', Project)

    assert project.id is None
    assert project.aspects is None
    assert project.extensions == {}


@pytest.mark.parametrize(
    "text",
    [
        "{",
        "",
        "[]",
        '"Alpha"',
        "{}",
        '{"name": ""}',
        '{"name": null}',
        '{"name": "Alpha", "aspects": "not a list"}',
        '{"name": "Alpha", "aspects": [{"id": "A1"}]}',
    ],
)
def test_decode_rejects_invalid_project(text: str) -> None:
    with pytest.raises(DecodeError):
        _ = decode(text, Project)


def test_decode_rejects_bad_nested_values() -> None:
    with pytest.raises(DecodeError):
        _ = decode('{"progress": {"completion": 250}}')
    with pytest.raises(DecodeError):
        _ = decode('{"name": "A", "aspects": [{"name": "X", "subjects": [{"activities": [{"target": "2026-13"}]}]}]}', Project)


def test_schema_helpers_use_codec() -> None:
    project = Project(name="Alpha", extensions={"color": "blue"})

    assert Project.from_json(project.to_json()) == project
    with pytest.raises(DecodeError):
        _ = Project.from_json("{}")
