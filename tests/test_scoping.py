from datetime import date, datetime, timezone

import pytest

from school_records.core.errors import PermissionDenied
from school_records.schemas.assignments import Assignment
from school_records.schemas.auth import Role
from school_records.schemas.courses import Course
from school_records.schemas.schedules import Schedule, Weekday
from school_records.services import scoping
from school_records.services.scoping import Actor

NOW = datetime(2026, 10, 1, tzinfo=timezone.utc)

STUDENT = Actor(user_id="s1", role=Role.STUDENT, year=3)
YEARLESS_STUDENT = Actor(user_id="s2", role=Role.STUDENT)
TEACHER = Actor(user_id="t1", role=Role.TEACHER)
ADMIN = Actor(user_id="a1", role=Role.ADMIN)
DIRECTOR = Actor(user_id="d1", role=Role.DIRECTOR)


def _assignment(id, teacher_id="t1", student_id=None):
    return Assignment(
        id=id,
        title="Scales",
        course_id="c1",
        teacher_id=teacher_id,
        student_id=student_id,
        year=3,
        due_date=date(2026, 11, 1),
        created_at=NOW,
    )


def _course(id, year, teacher_id):
    return Course(id=id, name=id, department="piano", year=year, teacher_id=teacher_id)


def _schedule(id, year, teacher_id):
    return Schedule(
        id=id, course_id="c1", teacher_id=teacher_id, day=Weekday.MONDAY, time="10:00", duration=45, year=year, room="12"
    )


ASSIGNMENTS = [
    _assignment("broadcast"),
    _assignment("mine", student_id="s1"),
    _assignment("someone-else", student_id="s9"),
    _assignment("other-teacher", teacher_id="t2"),
]


def test_student_sees_own_and_broadcast_assignments():
    visible = {a.id for a in scoping.scope_assignments(ASSIGNMENTS, STUDENT)}
    assert visible == {"broadcast", "mine", "other-teacher"}


def test_teacher_sees_only_own_assignments():
    visible = {a.id for a in scoping.scope_assignments(ASSIGNMENTS, TEACHER)}
    assert visible == {"broadcast", "mine", "someone-else"}


@pytest.mark.parametrize("actor", [ADMIN, DIRECTOR])
def test_management_sees_everything(actor):
    assert len(scoping.scope_assignments(ASSIGNMENTS, actor)) == len(ASSIGNMENTS)
    courses = [_course("a", 1, "t1"), _course("b", 3, "t2")]
    assert scoping.scope_courses(courses, actor) == courses


def test_courses_and_schedules_by_year_for_students_and_owner_for_teachers():
    courses = [_course("y3", 3, "t2"), _course("y1", 1, "t1")]
    schedules = [_schedule("y3", 3, "t2"), _schedule("y1", 1, "t1")]
    assert [c.id for c in scoping.scope_courses(courses, STUDENT)] == ["y3"]
    assert [c.id for c in scoping.scope_courses(courses, TEACHER)] == ["y1"]
    assert [s.id for s in scoping.scope_schedules(schedules, STUDENT)] == ["y3"]
    assert [s.id for s in scoping.scope_schedules(schedules, TEACHER)] == ["y1"]


def test_student_without_year_sees_no_courses():
    assert scoping.scope_courses([_course("y3", 3, "t1")], YEARLESS_STUDENT) == []
    assert scoping.scope_schedules([_schedule("y3", 3, "t1")], YEARLESS_STUDENT) == []


def test_capability_table():
    assert scoping.can(STUDENT, scoping.ASSIGNMENTS_COMPLETE)
    assert not scoping.can(STUDENT, scoping.ASSIGNMENTS_CREATE)
    assert scoping.can(TEACHER, scoping.GRADES_CREATE)
    assert not scoping.can(TEACHER, scoping.USERS_CREATE)
    assert scoping.can(ADMIN, scoping.USERS_DELETE) and scoping.can(ADMIN, scoping.SCHEDULES_CREATE)
    assert scoping.can(DIRECTOR, scoping.REPORTS_VIEW)
    assert not scoping.can(DIRECTOR, scoping.GRADES_CREATE)
    assert set(scoping.CAPABILITIES) == set(Role)


def test_require_raises_permission_denied():
    scoping.require(ADMIN, scoping.COURSES_CREATE)
    with pytest.raises(PermissionDenied):
        scoping.require(TEACHER, scoping.COURSES_CREATE)
