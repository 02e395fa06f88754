from typing import Optional, List
from datetime import datetime

from pydantic import EmailStr, Field

from teamboard.models.team import MemberRole
from .common import APIModel

class TeamCreate(APIModel):
    name: str = Field(min_length=2, max_length=100)

class TeamUpdate(APIModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=100)

class MemberAdd(APIModel):
    email: EmailStr
    role: MemberRole = MemberRole.MEMBER

class MemberRoleUpdate(APIModel):
    new_role: MemberRole

class TeamMemberOut(APIModel):
    user_id: int
    role: MemberRole
    first_name: str
    last_name: str
    email: str

class RosterMemberOut(TeamMemberOut):
    assigned_tasks: int = 0

class TaskStats(APIModel):
    total: int = 0
    completed: int = 0
    in_progress: int = 0
    pending: int = 0
    cancelled: int = 0
    overdue: int = 0

class TeamSummary(APIModel):
    id: int
    name: str
    created_by: int
    creator_first_name: str
    creator_last_name: str
    member_count: int
    task_count: int

class UserTeamOut(TeamSummary):
    role: MemberRole

class TeamDetail(APIModel):
    id: int
    name: str
    created_by: int
    creator_first_name: str
    creator_last_name: str
    creator_email: str
    created_at: Optional[datetime] = None
    members: List[TeamMemberOut]
    member_count: int
    task_stats: TaskStats

class TeamStatsOut(APIModel):
    team_id: int
    team_name: str
    member_count: int
    task_stats: TaskStats
    created_at: Optional[datetime] = None

class MembershipAdd(APIModel):
    team_id: int = Field(gt=0)
    user_email: EmailStr
    role: MemberRole = MemberRole.MEMBER

class MembershipRemove(APIModel):
    team_id: int = Field(gt=0)
    member_id: int = Field(gt=0)

class MembershipRoleChange(MembershipRemove):
    new_role: MemberRole

class PermissionCheck(APIModel):
    has_permission: bool
    user_id: int
    team_id: int
    checked_roles: List[MemberRole]
