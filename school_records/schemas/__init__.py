"""
Public Pydantic schemas used by FastAPI routes, services, repositories and tests.

Schemas are grouped by domain module (users and sessions, courses and
departments, assignments, grades, schedules, dashboard) and also include
common reusable models such as the standard error envelope.
"""

from .common import MessageResponse  # noqa: F401
