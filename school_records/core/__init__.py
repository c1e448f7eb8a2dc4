"""
Core application utilities for settings, security and FastAPI dependencies.

This package provides:
- Application-level settings (separate from DB settings)
- Password hashing and access tokens
- Domain error types shared by services and routes
- Dependency helpers (record store, acting user, capability checks)
"""
