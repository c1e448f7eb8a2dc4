from datetime import datetime, timezone

import pytest
from pydantic import ValidationError as SchemaValidationError

from school_records.core.errors import PermissionDenied
from school_records.schemas.auth import Role, UserCreate
from school_records.schemas.grades import Grade, GradeCreate, GradeRead, GradeType, average_five_point


def _grade(value, max_value=5.0):
    return Grade(
        id="g",
        student_id="s",
        course_id="c",
        teacher_id="t",
        value=value,
        max_value=max_value,
        type=GradeType.TEST,
        description="Etude",
        date=datetime(2026, 10, 1, tzinfo=timezone.utc),
        year=3,
    )


def test_derived_scores():
    read = GradeRead.model_validate(_grade(4, 5).model_dump())
    assert read.percentage == 80
    assert read.five_point == 4.0
    assert read.model_dump()["percentage"] == 80

    ten_point = GradeRead.model_validate(_grade(7, 10).model_dump())
    assert ten_point.percentage == 70
    assert ten_point.five_point == 3.5


def test_average_on_five_point_scale():
    assert average_five_point([]) == 0.0
    assert average_five_point([_grade(4, 5), _grade(3, 5)]) == 3.5
    assert average_five_point([_grade(4, 5), _grade(7, 10), _grade(5, 5)]) == 4.2
    assert average_five_point([_grade(5, 5)]) == 5.0


@pytest.mark.parametrize("value, max_value", [(0, 5), (6, 5), (-1, 5)])
def test_value_must_be_within_bounds(value, max_value):
    with pytest.raises(SchemaValidationError):
        GradeCreate(student_id="s", course_id="c", value=value, max_value=max_value, description="x")


def test_max_value_defaults_to_five():
    assert GradeCreate(student_id="s", course_id="c", value=5, description="x").max_value == 5


async def test_teacher_grade_takes_year_from_student(records, actors, demo_users):
    course = (await records.courses.get_by_teacher(demo_users[Role.TEACHER].id))[0]
    grade = await records.create_grade(
        actors[Role.TEACHER],
        GradeCreate(student_id=demo_users[Role.STUDENT].id, course_id=course.id, value=4, description="Etude"),
    )
    assert grade.year == 3
    assert grade.teacher_id == demo_users[Role.TEACHER].id
    assert grade.type == GradeType.PERFORMANCE
    assert grade.date is not None


async def test_stored_ten_point_grade_reads_back_as_percentage_and_five_point(records, actors, demo_users):
    course = (await records.courses.get_by_teacher(demo_users[Role.TEACHER].id))[0]
    await records.create_grade(
        actors[Role.TEACHER],
        GradeCreate(
            student_id=demo_users[Role.STUDENT].id,
            course_id=course.id,
            value=8,
            max_value=10,
            description="Recital",
        ),
    )
    [stored] = await records.list_grades(actors[Role.STUDENT])
    read = GradeRead.model_validate(stored.model_dump())
    assert (read.value, read.max_value) == (8, 10)
    assert read.percentage == 80
    assert read.five_point == 4.0


async def test_unknown_student_defaults_to_first_year(records, actors, demo_users):
    course = (await records.courses.get_by_teacher(demo_users[Role.TEACHER].id))[0]
    grade = await records.create_grade(
        actors[Role.TEACHER],
        GradeCreate(student_id="ghost", course_id=course.id, value=3, description="Sight reading"),
    )
    assert grade.year == 1


async def test_grade_visibility_and_permissions(records, actors, demo_users):
    course = (await records.courses.get_by_teacher(demo_users[Role.TEACHER].id))[0]
    other = await records.create_user(
        actors[Role.ADMIN],
        UserCreate(email="other@music-school.ru", password="secret1", role=Role.STUDENT, name="N", surname="S", year=3),
    )
    mine = await records.create_grade(
        actors[Role.TEACHER],
        GradeCreate(student_id=demo_users[Role.STUDENT].id, course_id=course.id, value=5, description="Exam"),
    )
    await records.create_grade(
        actors[Role.TEACHER],
        GradeCreate(student_id=other.id, course_id=course.id, value=2, description="Exam"),
    )

    assert [g.id for g in await records.list_grades(actors[Role.STUDENT])] == [mine.id]
    assert len(await records.list_grades(actors[Role.TEACHER])) == 2
    assert len(await records.list_grades(actors[Role.DIRECTOR])) == 2

    with pytest.raises(PermissionDenied):
        await records.create_grade(
            actors[Role.STUDENT],
            GradeCreate(student_id=demo_users[Role.STUDENT].id, course_id=course.id, value=5, description="Self"),
        )
    with pytest.raises(PermissionDenied):
        await records.create_grade(
            actors[Role.DIRECTOR],
            GradeCreate(student_id=demo_users[Role.STUDENT].id, course_id=course.id, value=5, description="x"),
        )
