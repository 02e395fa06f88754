from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from teamboard.database import get_db
from teamboard.schemas.common import Envelope
from teamboard.schemas.team import (
    MembershipAdd,
    MembershipRemove,
    MembershipRoleChange,
    RosterMemberOut,
    TeamMemberOut,
    UserTeamOut,
)
from teamboard.services.teams import TeamService
from teamboard.utils.auth import Principal, get_current_principal

router = APIRouter()


@router.post("/add", response_model=Envelope[TeamMemberOut], status_code=status.HTTP_201_CREATED)
def add_member(payload: MembershipAdd, principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db)):
    member = TeamService(db).add_member(payload.team_id, payload.user_email, payload.role, principal.user_id)
    return Envelope[TeamMemberOut](message="Member added successfully", data=member)


@router.post("/remove", response_model=Envelope[TeamMemberOut])
def remove_member(payload: MembershipRemove, principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db)):
    member = TeamService(db).remove_member(payload.team_id, payload.member_id, principal.user_id)
    return Envelope[TeamMemberOut](message="Member removed successfully", data=member)


@router.post("/update-role", response_model=Envelope[TeamMemberOut])
def update_member_role(
    payload: MembershipRoleChange,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    member = TeamService(db).update_member_role(payload.team_id, payload.member_id, payload.new_role, principal.user_id)
    return Envelope[TeamMemberOut](message="Member role updated successfully", data=member)


@router.get("/team/{team_id}", response_model=Envelope[List[RosterMemberOut]])
def team_members(team_id: int, principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db)):
    members = TeamService(db).get_members(team_id, principal.user_id)
    return Envelope[List[RosterMemberOut]](message="Team members retrieved successfully", data=members)


@router.get("/my-teams", response_model=Envelope[List[UserTeamOut]])
def my_teams(principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db)):
    teams = TeamService(db).get_user_teams(principal.user_id)
    return Envelope[List[UserTeamOut]](message="User teams retrieved successfully", data=teams)


@router.delete("/leave/{team_id}", response_model=Envelope[None])
def leave_team(team_id: int, principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db)):
    TeamService(db).leave_team(team_id, principal.user_id)
    return Envelope[None](message="Successfully left the team")
