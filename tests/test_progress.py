from datetime import date

from fddi_core.progress import feature_completion, is_late, outline, rollup, target_date
from fddi_core.schemas import (
    Activity,
    Aspect,
    AspectInfo,
    Feature,
    Milestone,
    MilestoneInfo,
    Program,
    Progress,
    Project,
    Subject,
)


def _aspect_info() -> AspectInfo:
    return AspectInfo(
        milestone_info=[
            MilestoneInfo(name="Walkthrough", effort=10),
            MilestoneInfo(name="Design", effort=40),
            MilestoneInfo(name="Build", effort=50),
        ]
    )


def _feature(*statuses: str, planned: date | None = None) -> Feature:
    return Feature(
        name="Feature",
        milestones=[Milestone(status=status, planned=planned) for status in statuses],
    )


def _program() -> Program:
    activity = Activity(
        name="Accounts",
        features=[
            _feature("complete", "complete", "notstarted", planned=date(2026, 1, 31)),
            _feature("complete", "complete", "complete", planned=date(2026, 3, 31)),
        ],
    )
    aspect = Aspect(
        name="Development",
        info=_aspect_info(),
        subjects=[Subject(name="Users", activities=[activity, Activity(name="Empty")])],
    )
    return Program(name="Program A", projects=[Project(name="Alpha", aspects=[aspect])])


def test_feature_completion_sums_completed_effort() -> None:
    feature = _feature("complete", "underway", "complete")

    assert feature_completion(feature, _aspect_info()) == 60


def test_feature_completion_without_definitions() -> None:
    assert feature_completion(_feature("complete"), None) == 0
    assert feature_completion(Feature(name="Bare"), _aspect_info()) == 0


def test_rollup_averages_children() -> None:
    program = _program()

    completion = rollup(program)

    subject = program.projects[0].aspects[0].subjects[0]
    accounts, empty = subject.activities
    assert [f.progress.completion for f in accounts.features] == [50, 100]
    assert accounts.progress.completion == 75
    assert empty.progress.completion == 0
    assert subject.progress.completion == 37
    assert program.projects[0].progress.completion == 37
    assert completion == 37


def test_rollup_leaf_node_is_zero() -> None:
    project = Project(name="Alpha")

    assert rollup(project) == 0
    assert project.progress == Progress(completion=0)


def test_rollup_keeps_existing_progress_fields() -> None:
    project = Project(
        name="Alpha",
        progress=Progress(id="pr-1", completion=90, status="attention", extensions={"note": "x"}),
    )

    _ = rollup(project)

    assert project.progress.completion == 0
    assert project.progress.id == "pr-1"
    assert project.progress.status == "attention"
    assert project.progress.extensions == {"note": "x"}


def test_rollup_feature_with_explicit_aspect_info() -> None:
    feature = _feature("complete", "complete", "complete")

    assert rollup(feature, _aspect_info()) == 100


def test_target_date_is_latest_planned() -> None:
    program = _program()

    assert target_date(program) == date(2026, 3, 31)
    assert target_date(Project(name="Empty")) is None


def test_is_late_for_features() -> None:
    late = _feature("complete", "notstarted", planned=date(2026, 1, 1))
    done = _feature("complete", "complete", planned=date(2026, 1, 1))

    assert is_late(late, today=date(2026, 2, 1)) is True
    assert is_late(late, today=date(2025, 12, 1)) is False
    assert is_late(done, today=date(2026, 2, 1)) is False


def test_is_late_for_branches() -> None:
    program = _program()
    _ = rollup(program)

    assert is_late(program, today=date(2026, 4, 1)) is True
    assert is_late(program, today=date(2026, 3, 1)) is False


def test_outline_order() -> None:
    program = _program()

    kinds = [(depth, type(node).__name__) for depth, node in outline(program)]

    assert kinds == [
        (0, "Program"),
        (1, "Project"),
        (2, "Aspect"),
        (3, "Subject"),
        (4, "Activity"),
        (5, "Feature"),
        (5, "Feature"),
        (4, "Activity"),
    ]
