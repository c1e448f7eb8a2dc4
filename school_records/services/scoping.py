"""
Role-scoping rules.

Pure functions deriving what an actor may see or do from already-loaded
collections. Nothing here touches storage. Every role maps to one Capability
entry (allowed operation codes and visible user fields), looked up once and
consumed the same way by every caller.

Visibility:
  - student: own and broadcast assignments, own grades, courses and schedule
    entries of their year of study
  - teacher: assignments, courses and schedule entries they teach; all grades
  - admin, director: everything
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterable, List, Optional

from pydantic import BaseModel, Field

from school_records.core.errors import PermissionDenied
from school_records.schemas.assignments import Assignment
from school_records.schemas.auth import Role, UserRead, UserRecord
from school_records.schemas.courses import Course
from school_records.schemas.grades import Grade
from school_records.schemas.schedules import Schedule

logger = logging.getLogger(__name__)

# Operation codes
USERS_CREATE = "users:create"
USERS_UPDATE = "users:update"
USERS_DELETE = "users:delete"
COURSES_CREATE = "courses:create"
DEPARTMENTS_CREATE = "departments:create"
DEPARTMENTS_UPDATE = "departments:update"
ASSIGNMENTS_CREATE = "assignments:create"
ASSIGNMENTS_UPDATE = "assignments:update"
ASSIGNMENTS_COMPLETE = "assignments:complete"
SCHEDULES_CREATE = "schedules:create"
GRADES_CREATE = "grades:create"
REPORTS_VIEW = "reports:view"


class Actor(BaseModel):
    """Explicit identity context passed into every scoped call."""
    user_id: str = Field(..., description="Acting user id")
    role: Role = Field(...)
    year: Optional[int] = Field(None, description="Year of study for students")

    class Config:
        frozen = True

    @classmethod
    def from_user(cls, user: UserRecord | UserRead) -> "Actor":
        return cls(user_id=user.id, role=user.role, year=user.year)


@dataclass(frozen=True)
class Capability:
    operations: FrozenSet[str]
    user_fields: FrozenSet[str]


_ALL_USER_FIELDS = frozenset(UserRead.model_fields)
_PUBLIC_USER_FIELDS = frozenset({"id", "role", "name", "surname", "year", "department"})

_MANAGEMENT = frozenset(
    {
        USERS_CREATE,
        USERS_UPDATE,
        USERS_DELETE,
        COURSES_CREATE,
        DEPARTMENTS_CREATE,
        DEPARTMENTS_UPDATE,
        REPORTS_VIEW,
    }
)
_TEACHING = frozenset({ASSIGNMENTS_CREATE, ASSIGNMENTS_UPDATE, SCHEDULES_CREATE, GRADES_CREATE})

CAPABILITIES: Dict[Role, Capability] = {
    Role.STUDENT: Capability(frozenset({ASSIGNMENTS_COMPLETE}), _PUBLIC_USER_FIELDS),
    Role.TEACHER: Capability(_TEACHING, _PUBLIC_USER_FIELDS),
    Role.ADMIN: Capability(_MANAGEMENT | _TEACHING, _ALL_USER_FIELDS),
    Role.DIRECTOR: Capability(_MANAGEMENT, _ALL_USER_FIELDS),
}


# PUBLIC_INTERFACE
def capability_for(role: Role) -> Capability:
    """Return the capability entry of a role."""
    return CAPABILITIES[role]


# PUBLIC_INTERFACE
def can(actor: Actor, operation: str) -> bool:
    """Whether the actor's role allows operation."""
    return operation in capability_for(actor.role).operations


# PUBLIC_INTERFACE
def require(actor: Actor, operation: str) -> None:
    """Raise PermissionDenied unless the actor's role allows operation."""
    if not can(actor, operation):
        logger.warning("Denied %s for %s %s", operation, actor.role.value, actor.user_id)
        raise PermissionDenied(f"Role '{actor.role.value}' may not perform {operation}")


def _sees_everything(actor: Actor) -> bool:
    return actor.role in (Role.ADMIN, Role.DIRECTOR)


# PUBLIC_INTERFACE
def assignment_visible(assignment: Assignment, actor: Actor) -> bool:
    """Visibility of a single assignment for actor."""
    if _sees_everything(actor):
        return True
    if actor.role == Role.STUDENT:
        return assignment.is_broadcast or assignment.student_id == actor.user_id
    return assignment.teacher_id == actor.user_id


# PUBLIC_INTERFACE
def scope_assignments(assignments: Iterable[Assignment], actor: Actor) -> List[Assignment]:
    return [a for a in assignments if assignment_visible(a, actor)]


# PUBLIC_INTERFACE
def scope_grades(grades: Iterable[Grade], actor: Actor) -> List[Grade]:
    """Students see their own grades; every other role reads all of them."""
    if actor.role == Role.STUDENT:
        return [g for g in grades if g.student_id == actor.user_id]
    return list(grades)


# PUBLIC_INTERFACE
def scope_courses(courses: Iterable[Course], actor: Actor) -> List[Course]:
    """Students see their year's courses (none without a year); teachers their own."""
    if _sees_everything(actor):
        return list(courses)
    if actor.role == Role.STUDENT:
        return [c for c in courses if actor.year is not None and c.year == actor.year]
    return [c for c in courses if c.teacher_id == actor.user_id]


# PUBLIC_INTERFACE
def scope_schedules(schedules: Iterable[Schedule], actor: Actor) -> List[Schedule]:
    """Same rule as courses: year for students, ownership for teachers."""
    if _sees_everything(actor):
        return list(schedules)
    if actor.role == Role.STUDENT:
        return [s for s in schedules if actor.year is not None and s.year == actor.year]
    return [s for s in schedules if s.teacher_id == actor.user_id]


# PUBLIC_INTERFACE
def project_user(user: UserRecord | UserRead, actor: Actor) -> Dict[str, Any]:
    """The fields of user the actor's role may read; never the password hash."""
    fields = capability_for(actor.role).user_fields
    return UserRead.model_validate(user, from_attributes=True).model_dump(mode="json", include=set(fields))


# PUBLIC_INTERFACE
def scope_users(users: Iterable[UserRecord], actor: Actor) -> List[Dict[str, Any]]:
    return [project_user(u, actor) for u in users]
