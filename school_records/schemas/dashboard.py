from __future__ import annotations

from typing import List, Union

from pydantic import BaseModel, Field

from .auth import Role


class DashboardStat(BaseModel):
    """One counter tile on the dashboard."""
    key: str = Field(..., description="Stable machine-readable key")
    title: str = Field(..., description="Tile title")
    value: Union[int, float] = Field(...)
    description: str = Field("")


class DashboardRead(BaseModel):
    """Role-specific dashboard counters."""
    role: Role = Field(...)
    stats: List[DashboardStat] = Field(default_factory=list)
