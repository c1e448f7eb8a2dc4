from __future__ import annotations

from typing import List

from school_records.db.store import RecordStore
from school_records.schemas.auth import Role
from school_records.schemas.dashboard import DashboardRead, DashboardStat
from school_records.schemas.grades import average_five_point
from school_records.services.base import BaseService
from school_records.services.records import RecordsService
from school_records.services.scoping import Actor

# Length of the full programme, in years of study
PROGRAMME_YEARS = 7


class DashboardService(BaseService):
    """
    Role-specific summary counters for the landing page.

    Counts are computed over the same scoped reads the rest of the API uses.
    """

    def __init__(self, store: RecordStore) -> None:
        super().__init__(store)
        self.records = RecordsService(store)

    # PUBLIC_INTERFACE
    async def build(self, actor: Actor) -> DashboardRead:
        """Return the dashboard counters for actor's role."""
        builders = {
            Role.STUDENT: self._student,
            Role.TEACHER: self._teacher,
            Role.ADMIN: self._admin,
            Role.DIRECTOR: self._director,
        }
        stats = await builders[actor.role](actor)
        return DashboardRead(role=actor.role, stats=stats)

    async def _student(self, actor: Actor) -> List[DashboardStat]:
        assignments = await self.records.list_assignments(actor, student_id=actor.user_id)
        grades = await self.records.list_grades(actor, student_id=actor.user_id)
        courses = await self.records.list_courses(actor)
        return [
            DashboardStat(
                key="active_assignments",
                title="Active assignments",
                value=sum(1 for a in assignments if not a.completed),
                description="assignments to complete",
            ),
            DashboardStat(
                key="courses",
                title="Courses",
                value=len(courses),
                description="courses this year",
            ),
            DashboardStat(
                key="grades",
                title="Grades",
                value=len(grades),
                description="grades received",
            ),
            DashboardStat(
                key="year_of_study",
                title="Year of study",
                value=actor.year or 1,
                description=f"of {PROGRAMME_YEARS} years in the programme",
            ),
        ]

    async def _teacher(self, actor: Actor) -> List[DashboardStat]:
        courses = await self.records.list_courses(actor, teacher_id=actor.user_id)
        assignments = await self.records.list_assignments(actor, teacher_id=actor.user_id)
        students = await self.records.users.get_by_role(Role.STUDENT)
        return [
            DashboardStat(key="courses", title="My courses", value=len(courses), description="courses taught"),
            DashboardStat(
                key="assignments",
                title="Assignments",
                value=len(assignments),
                description="assignments created",
            ),
            DashboardStat(
                key="students",
                title="Students",
                value=len(students),
                description="students in the school",
            ),
        ]

    async def _admin(self, actor: Actor) -> List[DashboardStat]:
        users = await self.records.users.get_all()
        courses = await self.records.list_courses(actor)
        departments = await self.records.list_departments(actor)
        return [
            DashboardStat(key="users", title="Users", value=len(users), description="users in the system"),
            DashboardStat(key="courses", title="Courses", value=len(courses), description="courses created"),
            DashboardStat(
                key="departments",
                title="Departments",
                value=len(departments),
                description="departments running",
            ),
        ]

    async def _director(self, actor: Actor) -> List[DashboardStat]:
        users = await self.records.users.get_all()
        grades = await self.records.list_grades(actor)
        return [
            DashboardStat(
                key="students",
                title="Students",
                value=sum(1 for u in users if u.role == Role.STUDENT),
                description="students enrolled",
            ),
            DashboardStat(
                key="teachers",
                title="Teachers",
                value=sum(1 for u in users if u.role == Role.TEACHER),
                description="teachers on staff",
            ),
            DashboardStat(key="grades", title="Grades", value=len(grades), description="grades recorded"),
            DashboardStat(
                key="average_grade",
                title="Average grade",
                value=average_five_point(grades),
                description="mean on the five-point scale",
            ),
        ]
