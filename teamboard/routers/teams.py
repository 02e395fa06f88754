from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from teamboard.database import get_db
from teamboard.models.team import MemberRole
from teamboard.schemas.common import Envelope
from teamboard.schemas.team import (
    MemberAdd,
    MemberRoleUpdate,
    PermissionCheck,
    RosterMemberOut,
    TeamCreate,
    TeamDetail,
    TeamMemberOut,
    TeamStatsOut,
    TeamSummary,
    TeamUpdate,
    UserTeamOut,
)
from teamboard.services.teams import TeamService
from teamboard.utils.auth import Principal, get_current_principal, get_optional_principal
from teamboard.utils.errors import AuthError, ValidationError

router = APIRouter()


def _parse_roles(raw: Optional[str]) -> List[MemberRole]:
    """Turn "Admin,Member" into roles; an empty value means any role"""
    roles = []
    for value in (raw or "").split(","):
        value = value.strip()
        if not value:
            continue
        try:
            roles.append(MemberRole(value))
        except ValueError:
            raise ValidationError(f"Invalid role: {value}")
    return roles


def _member_filter(my_teams: bool, principal: Optional[Principal]) -> Optional[int]:
    if not my_teams:
        return None
    if principal is None:
        raise AuthError("Authentication required")
    return principal.user_id


@router.get("/", response_model=Envelope[List[TeamSummary]])
def list_teams(
    search: Optional[str] = Query(default=None, max_length=100),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    my_teams: bool = Query(default=False, alias="myTeams"),
    principal: Optional[Principal] = Depends(get_optional_principal),
    db: Session = Depends(get_db)
):
    teams, pagination = TeamService(db).list_teams(
        page=page,
        limit=limit,
        search=search,
        only_for_user=_member_filter(my_teams, principal),
    )
    return Envelope[List[TeamSummary]](
        message="Teams retrieved successfully",
        data=teams,
        pagination=pagination,
    )


@router.get("/mine", response_model=Envelope[List[UserTeamOut]])
def my_teams(principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db)):
    teams = TeamService(db).get_user_teams(principal.user_id)
    return Envelope[List[UserTeamOut]](message="User teams retrieved successfully", data=teams)


@router.get("/search", response_model=Envelope[List[TeamSummary]])
def search_teams(
    search: str = Query(min_length=1, max_length=100),
    limit: int = Query(default=10, ge=1, le=100),
    my_teams: bool = Query(default=False, alias="myTeams"),
    principal: Optional[Principal] = Depends(get_optional_principal),
    db: Session = Depends(get_db)
):
    teams = TeamService(db).search_teams(search, limit=limit, only_for_user=_member_filter(my_teams, principal))
    return Envelope[List[TeamSummary]](message="Teams search completed", data=teams)


@router.post("/", response_model=Envelope[TeamDetail], status_code=status.HTTP_201_CREATED)
def create_team(
    payload: TeamCreate,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    team = TeamService(db).create_team(payload.name, principal.user_id)
    return Envelope[TeamDetail](message="Team created successfully", data=team)


@router.get("/{team_id}", response_model=Envelope[TeamDetail])
def get_team(team_id: int, db: Session = Depends(get_db)):
    team = TeamService(db).get_team(team_id)
    return Envelope[TeamDetail](message="Team retrieved successfully", data=team)


@router.put("/{team_id}", response_model=Envelope[TeamDetail])
def update_team(
    team_id: int,
    payload: TeamUpdate,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    team = TeamService(db).update_team(team_id, payload, principal.user_id)
    return Envelope[TeamDetail](message="Team updated successfully", data=team)


@router.delete("/{team_id}", response_model=Envelope[None])
def delete_team(
    team_id: int,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    name = TeamService(db).delete_team(team_id, principal.user_id)
    return Envelope[None](message=f'Team "{name}" has been deleted successfully')


@router.get("/{team_id}/members", response_model=Envelope[List[RosterMemberOut]])
def get_members(
    team_id: int,
    principal: Optional[Principal] = Depends(get_optional_principal),
    db: Session = Depends(get_db)
):
    caller_id = principal.user_id if principal else None
    members = TeamService(db).get_members(team_id, caller_id)
    return Envelope[List[RosterMemberOut]](message="Team members retrieved successfully", data=members)


@router.post("/{team_id}/members", response_model=Envelope[TeamMemberOut], status_code=status.HTTP_201_CREATED)
def add_member(
    team_id: int,
    payload: MemberAdd,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    member = TeamService(db).add_member(team_id, payload.email, payload.role, principal.user_id)
    return Envelope[TeamMemberOut](message="Member added successfully", data=member)


@router.delete("/{team_id}/members/{member_id}", response_model=Envelope[TeamMemberOut])
def remove_member(
    team_id: int,
    member_id: int,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    member = TeamService(db).remove_member(team_id, member_id, principal.user_id)
    return Envelope[TeamMemberOut](message="Member removed successfully", data=member)


@router.put("/{team_id}/members/{member_id}/role", response_model=Envelope[TeamMemberOut])
def update_member_role(
    team_id: int,
    member_id: int,
    payload: MemberRoleUpdate,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    member = TeamService(db).update_member_role(team_id, member_id, payload.new_role, principal.user_id)
    return Envelope[TeamMemberOut](message="Member role updated successfully", data=member)


@router.get("/{team_id}/permissions", response_model=Envelope[PermissionCheck])
def check_permissions(
    team_id: int,
    roles: Optional[str] = Query(default=None),
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    allowed = _parse_roles(roles)
    result = PermissionCheck(
        has_permission=TeamService(db).check_permission(principal.user_id, team_id, allowed),
        user_id=principal.user_id,
        team_id=team_id,
        checked_roles=allowed,
    )
    return Envelope[PermissionCheck](message="Permission check completed", data=result)


@router.get("/{team_id}/stats", response_model=Envelope[TeamStatsOut])
def team_stats(
    team_id: int,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    stats = TeamService(db).get_team_stats(team_id, principal.user_id)
    return Envelope[TeamStatsOut](message="Team statistics retrieved successfully", data=stats)
