"""
Service layer: identity and session handling, role-scoping rules, and the
role-enforcing records facade used by the API routes.
"""
