from datetime import datetime

from pydantic import BaseModel, Field


class Analytics(BaseModel):
    """Process-wide usage counters"""
    tools_generated: int = Field(default=0, ge=0)
    total_requests: int = Field(default=0, ge=0)
    success_rate: int = Field(default=0, ge=0, le=100)
    active_sessions: int = Field(default=0, ge=0)
    updated_at: datetime
