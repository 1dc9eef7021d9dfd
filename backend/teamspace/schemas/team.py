"""
Teamspace Backend — Team Schemas
==================================

What:  Response models for GET /api/teams/current.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class TeamResponse(BaseModel):
    team_id: int
    name: str
    description: Optional[str] = None
    created_by: Optional[int] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class TeamMemberResponse(BaseModel):
    """A roster entry joined with the member's profile fields."""
    team_member_id: int
    team_id: int
    user_id: int
    role: str
    joined_at: datetime
    first_name: str
    last_name: str
    email: str
    pfp_url: Optional[str] = None
    job_title: Optional[str] = None


class CurrentTeamResponse(BaseModel):
    team: TeamResponse
    members: List[TeamMemberResponse]
