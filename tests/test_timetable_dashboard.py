import pytest

from school_records.core.errors import PermissionDenied
from school_records.schemas.assignments import AssignmentCreate, AssignmentUpdate
from school_records.schemas.auth import Role
from school_records.schemas.courses import CourseCreate, DepartmentCreate, DepartmentUpdate
from school_records.schemas.grades import GradeCreate
from school_records.schemas.schedules import ScheduleCreate, Weekday
from school_records.services.dashboard import DashboardService
from school_records.services.reports import GRADE_REPORT_COLUMNS, ReportService


async def _courses(records, demo_users):
    return await records.courses.get_by_teacher(demo_users[Role.TEACHER].id)


async def test_schedule_defaults_and_weekly_grouping(records, actors, demo_users):
    course = (await _courses(records, demo_users))[0]
    late = await records.create_schedule(
        actors[Role.TEACHER], ScheduleCreate(course_id=course.id, day=Weekday.MONDAY, time="14:30", room="7")
    )
    early = await records.create_schedule(
        actors[Role.ADMIN], ScheduleCreate(course_id=course.id, day=Weekday.MONDAY, time="09:00", room="7")
    )
    assert late.duration == 45
    assert late.year == course.year
    assert early.teacher_id == demo_users[Role.TEACHER].id

    week = await records.weekly_schedule(actors[Role.STUDENT])
    assert list(week) == [d.value for d in Weekday]
    assert [s.id for s in week["monday"]] == [early.id, late.id]
    assert week["saturday"] == []

    assert await records.list_schedules(actors[Role.STUDENT], year=1) == []


async def test_schedule_requires_teaching_role(records, actors, demo_users):
    course = (await _courses(records, demo_users))[0]
    with pytest.raises(PermissionDenied):
        await records.create_schedule(
            actors[Role.STUDENT], ScheduleCreate(course_id=course.id, day=Weekday.FRIDAY, time="10:00", room="1")
        )


async def test_courses_and_departments_management(records, actors, demo_users):
    teacher = demo_users[Role.TEACHER]
    course = await records.create_course(
        actors[Role.DIRECTOR], CourseCreate(name="Ensemble", department="piano", teacher_id=teacher.id)
    )
    assert course.year == 1 and course.description == ""
    with pytest.raises(PermissionDenied):
        await records.create_course(actors[Role.TEACHER], CourseCreate(name="X", department="y", teacher_id=teacher.id))

    assert [c.id for c in await records.list_courses(actors[Role.STUDENT])] == [
        c.id for c in await records.courses.get_by_year(3)
    ]
    assert len(await records.list_courses(actors[Role.TEACHER], teacher_id=teacher.id)) == 3
    assert await records.get_course(actors[Role.STUDENT], course.id) is None

    department = await records.create_department(
        actors[Role.ADMIN], DepartmentCreate(name="Strings", description="Violin and cello")
    )
    renamed = await records.update_department(actors[Role.DIRECTOR], department.id, DepartmentUpdate(name="Bowed strings"))
    assert renamed.name == "Bowed strings" and renamed.description == "Violin and cello"
    assert len(await records.list_departments(actors[Role.STUDENT])) == 4
    assert await records.update_department(actors[Role.ADMIN], "missing", DepartmentUpdate(name="x")) is None


async def test_dashboards_per_role(seeded, records, actors, demo_users):
    course = (await _courses(records, demo_users))[0]
    created = await records.create_assignment(
        actors[Role.TEACHER],
        AssignmentCreate(title="Etude", course_id=course.id, due_date="2026-12-01"),
    )
    await records.create_assignment(
        actors[Role.TEACHER],
        AssignmentCreate(title="Scales", course_id=course.id, due_date="2026-12-01"),
    )
    await records.update_assignment(actors[Role.STUDENT], created.id, AssignmentUpdate(completed=True))
    await records.create_grade(
        actors[Role.TEACHER],
        GradeCreate(student_id=demo_users[Role.STUDENT].id, course_id=course.id, value=4, description="Etude"),
    )

    service = DashboardService(seeded)

    def stats(dashboard):
        return {s.key: s.value for s in dashboard.stats}

    student = stats(await service.build(actors[Role.STUDENT]))
    assert student == {"active_assignments": 1, "courses": 2, "grades": 1, "year_of_study": 3}

    teacher = stats(await service.build(actors[Role.TEACHER]))
    assert teacher == {"courses": 2, "assignments": 2, "students": 1}

    admin = stats(await service.build(actors[Role.ADMIN]))
    assert admin == {"users": 4, "courses": 2, "departments": 3}

    director = stats(await service.build(actors[Role.DIRECTOR]))
    assert director == {"students": 1, "teachers": 1, "grades": 1, "average_grade": 4.0}


async def test_grade_report_frame(seeded, records, actors, demo_users):
    course = (await _courses(records, demo_users))[0]
    await records.create_grade(
        actors[Role.TEACHER],
        GradeCreate(student_id=demo_users[Role.STUDENT].id, course_id=course.id, value=4, description="Etude"),
    )
    df = await ReportService(seeded).grades_frame(actors[Role.DIRECTOR])
    assert list(df.columns) == GRADE_REPORT_COLUMNS
    row = df.iloc[0]
    assert row["student"] == "Dmitry Kozlov"
    assert row["teacher"] == "Elena Ivanova"
    assert row["course"] == course.name
    assert row["percentage"] == 80

    with pytest.raises(PermissionDenied):
        await ReportService(seeded).grades_frame(actors[Role.TEACHER])
