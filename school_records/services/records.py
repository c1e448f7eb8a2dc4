from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from school_records.core.errors import PermissionDenied, ValidationError
from school_records.core.security import get_password_hash
from school_records.db.store import RecordStore
from school_records.repositories import (
    AssignmentRepository,
    CourseRepository,
    DepartmentRepository,
    GradeRepository,
    ScheduleRepository,
    UserRepository,
)
from school_records.schemas.assignments import Assignment, AssignmentCreate, AssignmentUpdate
from school_records.schemas.auth import Role, UserCreate, UserRecord, UserUpdate
from school_records.schemas.courses import (
    Course,
    CourseCreate,
    Department,
    DepartmentCreate,
    DepartmentUpdate,
)
from school_records.schemas.grades import Grade, GradeCreate
from school_records.schemas.schedules import Schedule, ScheduleCreate, Weekday
from school_records.services import scoping
from school_records.services.base import BaseService
from school_records.services.scoping import Actor

logger = logging.getLogger(__name__)

_COMPLETION_FIELDS = {"completed"}


class RecordsService(BaseService):
    """
    Role-enforcing facade over the entity repositories.

    Every operation takes the acting user's Actor explicitly, checks the role's
    capability, fills server-side fields (owning teacher, year of study) and
    returns role-scoped results. Foreign keys are taken as given unless
    enforce_references is set, in which case creates verify that referenced
    users and courses exist.
    """

    def __init__(self, store: RecordStore, *, enforce_references: bool = False) -> None:
        super().__init__(store)
        self.enforce_references = enforce_references
        self.users = UserRepository(store)
        self.departments = DepartmentRepository(store)
        self.courses = CourseRepository(store)
        self.assignments = AssignmentRepository(store)
        self.grades = GradeRepository(store)
        self.schedules = ScheduleRepository(store)

    # Reference checks

    async def _require_user(self, user_id: str, role: Role, field: str) -> UserRecord:
        user = await self.users.get_by_id(user_id)
        if user is None or user.role != role:
            raise ValidationError(f"{field} must reference an existing {role.value}")
        return user

    async def _require_course(self, course_id: str) -> Course:
        course = await self.courses.get_by_id(course_id)
        if course is None:
            raise ValidationError("course_id must reference an existing course")
        return course

    def _check_teaches(self, actor: Actor, course: Optional[Course]) -> None:
        if actor.role == Role.TEACHER and course is not None and course.teacher_id != actor.user_id:
            raise PermissionDenied("Teachers may only manage their own courses")

    # Users

    # PUBLIC_INTERFACE
    async def list_users(self, actor: Actor, role: Optional[Role] = None) -> List[Dict[str, Any]]:
        """All users, optionally of one role, projected to the fields actor may read."""
        users = await (self.users.get_by_role(role) if role else self.users.get_all())
        return scoping.scope_users(users, actor)

    # PUBLIC_INTERFACE
    async def get_user(self, actor: Actor, user_id: str) -> Optional[Dict[str, Any]]:
        user = await self.users.get_by_id(user_id)
        return scoping.project_user(user, actor) if user else None

    # PUBLIC_INTERFACE
    async def create_user(self, actor: Actor, payload: UserCreate) -> UserRecord:
        scoping.require(actor, scoping.USERS_CREATE)
        user = await self.users.create(payload, hashed_password=get_password_hash(payload.password))
        logger.info("Created %s user %s", user.role.value, user.id)
        return user

    # PUBLIC_INTERFACE
    async def update_user(self, actor: Actor, user_id: str, payload: UserUpdate) -> Optional[UserRecord]:
        scoping.require(actor, scoping.USERS_UPDATE)
        hashed = get_password_hash(payload.password) if payload.password else None
        updated = await self.users.update(user_id, payload, hashed_password=hashed)
        if updated:
            logger.info("Updated user %s", user_id)
        return updated

    # PUBLIC_INTERFACE
    async def delete_user(self, actor: Actor, user_id: str) -> bool:
        """
        Delete a user. Records that reference the user (courses, assignments,
        grades, schedules) are left as they are.
        """
        scoping.require(actor, scoping.USERS_DELETE)
        deleted = await self.users.delete(user_id)
        if deleted:
            logger.info("Deleted user %s", user_id)
        return deleted

    # Departments

    # PUBLIC_INTERFACE
    async def list_departments(self, actor: Actor) -> List[Department]:
        return await self.departments.get_all()

    # PUBLIC_INTERFACE
    async def create_department(self, actor: Actor, payload: DepartmentCreate) -> Department:
        scoping.require(actor, scoping.DEPARTMENTS_CREATE)
        if self.enforce_references and payload.head_teacher_id:
            await self._require_user(payload.head_teacher_id, Role.TEACHER, "head_teacher_id")
        return await self.departments.create(payload)

    # PUBLIC_INTERFACE
    async def update_department(
        self, actor: Actor, department_id: str, payload: DepartmentUpdate
    ) -> Optional[Department]:
        scoping.require(actor, scoping.DEPARTMENTS_UPDATE)
        if self.enforce_references and payload.head_teacher_id:
            await self._require_user(payload.head_teacher_id, Role.TEACHER, "head_teacher_id")
        return await self.departments.update(department_id, payload)

    # Courses

    # PUBLIC_INTERFACE
    async def list_courses(
        self, actor: Actor, *, year: Optional[int] = None, teacher_id: Optional[str] = None
    ) -> List[Course]:
        """Courses visible to actor, optionally narrowed by year and/or teacher."""
        if year is not None:
            courses = await self.courses.get_by_year(year)
        elif teacher_id is not None:
            courses = await self.courses.get_by_teacher(teacher_id)
        else:
            courses = await self.courses.get_all()
        if teacher_id is not None:
            courses = [c for c in courses if c.teacher_id == teacher_id]
        return scoping.scope_courses(courses, actor)

    # PUBLIC_INTERFACE
    async def get_course(self, actor: Actor, course_id: str) -> Optional[Course]:
        course = await self.courses.get_by_id(course_id)
        if course is None or not scoping.scope_courses([course], actor):
            return None
        return course

    # PUBLIC_INTERFACE
    async def create_course(self, actor: Actor, payload: CourseCreate) -> Course:
        scoping.require(actor, scoping.COURSES_CREATE)
        if self.enforce_references:
            await self._require_user(payload.teacher_id, Role.TEACHER, "teacher_id")
        course = await self.courses.create(payload)
        logger.info("Created course %s for teacher %s", course.id, course.teacher_id)
        return course

    # Assignments

    # PUBLIC_INTERFACE
    async def list_assignments(
        self,
        actor: Actor,
        *,
        student_id: Optional[str] = None,
        teacher_id: Optional[str] = None,
    ) -> List[Assignment]:
        """
        Assignments visible to actor.

        student_id selects that student's own plus broadcast assignments;
        teacher_id selects assignments set by that teacher.
        """
        if student_id is not None:
            assignments = await self.assignments.get_by_student(student_id)
        elif teacher_id is not None:
            assignments = await self.assignments.get_by_teacher(teacher_id)
        else:
            assignments = await self.assignments.get_all()
        if teacher_id is not None:
            assignments = [a for a in assignments if a.teacher_id == teacher_id]
        return scoping.scope_assignments(assignments, actor)

    # PUBLIC_INTERFACE
    async def get_assignment(self, actor: Actor, assignment_id: str) -> Optional[Assignment]:
        assignment = await self.assignments.get_by_id(assignment_id)
        if assignment is None or not scoping.assignment_visible(assignment, actor):
            return None
        return assignment

    # PUBLIC_INTERFACE
    async def create_assignment(self, actor: Actor, payload: AssignmentCreate) -> Assignment:
        """
        Create an assignment owned by the acting teacher.

        year defaults to the course's year; an admin's assignment is owned by the
        course teacher unless teacher_id is given.
        """
        scoping.require(actor, scoping.ASSIGNMENTS_CREATE)
        if self.enforce_references:
            course: Optional[Course] = await self._require_course(payload.course_id)
            if payload.student_id:
                await self._require_user(payload.student_id, Role.STUDENT, "student_id")
        else:
            course = await self.courses.get_by_id(payload.course_id)
        self._check_teaches(actor, course)

        if actor.role == Role.TEACHER:
            teacher_id = actor.user_id
        else:
            teacher_id = payload.teacher_id or (course.teacher_id if course else actor.user_id)
        year = payload.year if payload.year is not None else (course.year if course else None)
        if year is None:
            raise ValidationError("year is required when the course is unknown")

        assignment = await self.assignments.create(
            payload.model_copy(update={"teacher_id": teacher_id, "year": year})
        )
        logger.info(
            "Created assignment %s for %s",
            assignment.id,
            assignment.student_id or "all students",
        )
        return assignment

    # PUBLIC_INTERFACE
    async def update_assignment(
        self, actor: Actor, assignment_id: str, payload: AssignmentUpdate
    ) -> Optional[Assignment]:
        """
        Apply a partial update.

        Changing `completed` is reserved to students the assignment is visible
        to; every other field is reserved to the owning teacher or an admin.
        Returns None when the assignment does not exist or is not visible.
        """
        changes = payload.model_dump(exclude_unset=True)
        current = await self.assignments.get_by_id(assignment_id)
        if current is None:
            return None

        # unknown and invisible ids look alike
        if not scoping.assignment_visible(current, actor):
            return None

        content = {k: v for k, v in changes.items() if k not in _COMPLETION_FIELDS}
        if "completed" in changes:
            scoping.require(actor, scoping.ASSIGNMENTS_COMPLETE)
            if changes["completed"] is None:
                raise ValidationError("completed must be true or false")
        if content:
            scoping.require(actor, scoping.ASSIGNMENTS_UPDATE)
        if not changes:
            return current

        updated = await self.assignments.update(assignment_id, changes)
        if updated and "completed" in changes:
            logger.info(
                "Assignment %s marked %s",
                assignment_id,
                "complete" if updated.completed else "incomplete",
            )
        return updated

    # Grades

    # PUBLIC_INTERFACE
    async def list_grades(self, actor: Actor, *, student_id: Optional[str] = None) -> List[Grade]:
        if student_id is not None:
            grades = await self.grades.get_by_student(student_id)
        else:
            grades = await self.grades.get_all()
        return scoping.scope_grades(grades, actor)

    # PUBLIC_INTERFACE
    async def create_grade(self, actor: Actor, payload: GradeCreate) -> Grade:
        """
        Record a grade.

        Teachers may only grade courses they teach. year defaults to the
        student's year of study (1 if unknown).
        """
        scoping.require(actor, scoping.GRADES_CREATE)
        if self.enforce_references:
            course: Optional[Course] = await self._require_course(payload.course_id)
            student: Optional[UserRecord] = await self._require_user(
                payload.student_id, Role.STUDENT, "student_id"
            )
        else:
            course = await self.courses.get_by_id(payload.course_id)
            student = await self.users.get_by_id(payload.student_id)
        self._check_teaches(actor, course)

        if actor.role == Role.TEACHER:
            teacher_id = actor.user_id
        else:
            teacher_id = payload.teacher_id or (course.teacher_id if course else actor.user_id)
        year = payload.year
        if year is None:
            year = (student.year if student else None) or 1

        grade = await self.grades.create(
            payload.model_copy(update={"teacher_id": teacher_id, "year": year})
        )
        logger.info("Recorded grade %s for student %s", grade.id, grade.student_id)
        return grade

    # Schedules

    # PUBLIC_INTERFACE
    async def list_schedules(self, actor: Actor, *, year: Optional[int] = None) -> List[Schedule]:
        if year is not None:
            schedules = await self.schedules.get_by_year(year)
        else:
            schedules = await self.schedules.get_all()
        return scoping.scope_schedules(schedules, actor)

    # PUBLIC_INTERFACE
    async def weekly_schedule(self, actor: Actor) -> Dict[str, List[Schedule]]:
        """Visible schedule entries grouped by weekday (all six days present), each day sorted by time."""
        entries = await self.list_schedules(actor)
        week: Dict[str, List[Schedule]] = {day.value: [] for day in Weekday}
        for entry in sorted(entries, key=lambda s: s.time):
            week[entry.day.value].append(entry)
        return week

    # PUBLIC_INTERFACE
    async def create_schedule(self, actor: Actor, payload: ScheduleCreate) -> Schedule:
        """
        Add a timetable entry. teacher_id defaults to the acting teacher, then to
        the course's teacher; year defaults to the course's year.
        """
        scoping.require(actor, scoping.SCHEDULES_CREATE)
        if self.enforce_references:
            course: Optional[Course] = await self._require_course(payload.course_id)
        else:
            course = await self.courses.get_by_id(payload.course_id)
        self._check_teaches(actor, course)

        if actor.role == Role.TEACHER:
            teacher_id = actor.user_id
        else:
            teacher_id = payload.teacher_id or (course.teacher_id if course else actor.user_id)
        year = payload.year if payload.year is not None else (course.year if course else None)
        if year is None:
            raise ValidationError("year is required when the course is unknown")

        schedule = await self.schedules.create(
            payload.model_copy(update={"teacher_id": teacher_id, "year": year})
        )
        logger.info("Scheduled course %s on %s %s", schedule.course_id, schedule.day.value, schedule.time)
        return schedule
