from datetime import date

import pytest

from school_records.core.errors import PermissionDenied, ValidationError
from school_records.schemas.assignments import AssignmentCreate, AssignmentUpdate
from school_records.schemas.auth import Role, UserCreate
from school_records.services.records import RecordsService
from school_records.services.scoping import Actor


async def _piano_course(records, demo_users):
    courses = await records.courses.get_by_teacher(demo_users[Role.TEACHER].id)
    return next(c for c in courses if c.name == "Piano performance")


async def _new_user(records, actors, email, role, year=None):
    user = await records.create_user(
        actors[Role.ADMIN],
        UserCreate(email=email, password="secret1", role=role, name="N", surname="S", year=year),
    )
    return Actor.from_user(user)


def _payload(course_id, **extra):
    return AssignmentCreate(
        title="Scales", description="C major", course_id=course_id, due_date=date(2026, 11, 1), **extra
    )


async def test_teacher_creates_broadcast_assignment(records, actors, demo_users):
    course = await _piano_course(records, demo_users)
    assignment = await records.create_assignment(actors[Role.TEACHER], _payload(course.id))
    assert assignment.is_broadcast
    assert assignment.teacher_id == demo_users[Role.TEACHER].id
    assert assignment.year == course.year == 3
    assert assignment.completed is False and assignment.submission_date is None


async def test_broadcast_visible_to_every_student_targeted_only_to_one(records, actors, demo_users):
    course = await _piano_course(records, demo_users)
    student = demo_users[Role.STUDENT]
    other = await _new_user(records, actors, "other@music-school.ru", Role.STUDENT, year=3)

    broadcast = await records.create_assignment(actors[Role.TEACHER], _payload(course.id))
    targeted = await records.create_assignment(
        actors[Role.TEACHER], _payload(course.id, student_id=student.id)
    )

    own = {a.id for a in await records.list_assignments(actors[Role.STUDENT])}
    theirs = {a.id for a in await records.list_assignments(other)}
    assert own == {broadcast.id, targeted.id}
    assert theirs == {broadcast.id}
    assert await records.get_assignment(other, targeted.id) is None


async def test_get_by_student_returns_own_and_broadcast(records, actors, demo_users):
    course = await _piano_course(records, demo_users)
    student = demo_users[Role.STUDENT]
    await records.create_assignment(actors[Role.TEACHER], _payload(course.id))
    await records.create_assignment(actors[Role.TEACHER], _payload(course.id, student_id=student.id))
    await records.create_assignment(actors[Role.TEACHER], _payload(course.id, student_id="someone-else"))
    assert len(await records.assignments.get_by_student(student.id)) == 2


async def test_completion_toggle_stamps_and_clears_submission_date(records, actors, demo_users):
    course = await _piano_course(records, demo_users)
    student = demo_users[Role.STUDENT]
    created = await records.create_assignment(
        actors[Role.TEACHER], _payload(course.id, student_id=student.id)
    )

    done = await records.update_assignment(actors[Role.STUDENT], created.id, AssignmentUpdate(completed=True))
    assert done.completed is True
    assert done.submission_date is not None
    assert done.title == "Scales"

    reopened = await records.update_assignment(
        actors[Role.STUDENT], created.id, AssignmentUpdate(completed=False)
    )
    assert reopened.completed is False
    assert reopened.submission_date is None


async def test_only_students_complete_and_only_owners_edit(records, actors, demo_users):
    course = await _piano_course(records, demo_users)
    created = await records.create_assignment(actors[Role.TEACHER], _payload(course.id))

    with pytest.raises(PermissionDenied):
        await records.update_assignment(actors[Role.TEACHER], created.id, AssignmentUpdate(completed=True))
    with pytest.raises(PermissionDenied):
        await records.update_assignment(actors[Role.STUDENT], created.id, AssignmentUpdate(title="Arpeggios"))

    other_teacher = await _new_user(records, actors, "t2@music-school.ru", Role.TEACHER)
    assert await records.update_assignment(other_teacher, created.id, AssignmentUpdate(title="Arpeggios")) is None
    assert await records.update_assignment(other_teacher, "missing", AssignmentUpdate(title="Arpeggios")) is None
    assert (await records.assignments.get_by_id(created.id)).title == "Scales"

    edited = await records.update_assignment(
        actors[Role.TEACHER], created.id, AssignmentUpdate(title="Arpeggios")
    )
    assert edited.title == "Arpeggios"
    assert edited.description == "C major"


async def test_student_cannot_complete_someone_elses_assignment(records, actors, demo_users):
    course = await _piano_course(records, demo_users)
    other = await _new_user(records, actors, "other@music-school.ru", Role.STUDENT, year=3)
    targeted = await records.create_assignment(
        actors[Role.TEACHER], _payload(course.id, student_id=demo_users[Role.STUDENT].id)
    )
    assert await records.update_assignment(other, targeted.id, AssignmentUpdate(completed=True)) is None
    assert (await records.assignments.get_by_id(targeted.id)).completed is False


async def test_teacher_cannot_assign_on_foreign_course(records, actors, demo_users):
    course = await _piano_course(records, demo_users)
    other_teacher = await _new_user(records, actors, "t2@music-school.ru", Role.TEACHER)
    with pytest.raises(PermissionDenied):
        await records.create_assignment(other_teacher, _payload(course.id))
    with pytest.raises(PermissionDenied):
        await records.create_assignment(actors[Role.STUDENT], _payload(course.id))
    with pytest.raises(PermissionDenied):
        await records.create_assignment(actors[Role.DIRECTOR], _payload(course.id))


async def test_admin_assignment_is_owned_by_course_teacher(records, actors, demo_users):
    course = await _piano_course(records, demo_users)
    assignment = await records.create_assignment(actors[Role.ADMIN], _payload(course.id))
    assert assignment.teacher_id == demo_users[Role.TEACHER].id


async def test_unknown_course_needs_explicit_year(records, actors, seeded):
    with pytest.raises(ValidationError):
        await records.create_assignment(actors[Role.TEACHER], _payload("no-such-course"))
    assignment = await records.create_assignment(actors[Role.TEACHER], _payload("no-such-course", year=2))
    assert assignment.year == 2

    strict = RecordsService(seeded, enforce_references=True)
    with pytest.raises(ValidationError):
        await strict.create_assignment(actors[Role.TEACHER], _payload("no-such-course", year=2))


async def test_update_of_missing_assignment_returns_none(records, actors):
    assert await records.update_assignment(actors[Role.STUDENT], "missing", AssignmentUpdate(completed=True)) is None
