"""
API route modules.

This package contains subrouters for:
- Sessions: login, logout, current session, OAuth2 token and /me
- Users and Departments: administration plus role-projected reads
- Courses, Assignments, Grades, Schedules: academic records
- Dashboard and Reports: role summaries and grade exports

Routers are included from school_records.api.main (under the /api/v1 prefix).
"""
