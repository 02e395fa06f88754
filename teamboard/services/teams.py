# teamboard/services/teams.py
"""
Teams and their membership roster.

Every mutation first resolves the team (so a missing team reports "Team not
found" before any permission error), then consults the authorization gate.
The creator's Admin membership is permanent: it cannot be removed, demoted or
left, only dropped together with the team.
"""

import logging
import math
from datetime import date
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import and_, case, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from teamboard.config.settings import settings
from teamboard.models import Membership, MemberRole, Task, TaskStatus, Team, User, CLOSED_STATUSES
from teamboard.schemas.common import Pagination
from teamboard.schemas.team import (
    RosterMemberOut,
    TaskStats,
    TeamDetail,
    TeamMemberOut,
    TeamStatsOut,
    TeamSummary,
    TeamUpdate,
    UserTeamOut,
)
from teamboard.services.authorization import ADMIN_ONLY, ANY_ROLE, has_role, is_creator, is_member
from teamboard.utils.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def clamp_page(page: int, limit: int) -> Tuple[int, int]:
    """Normalise 1-indexed offset pagination: page >= 1, 1 <= limit <= MAX_PAGE_SIZE"""
    page = max(page or 1, 1)
    limit = min(max(limit or settings.DEFAULT_PAGE_SIZE, 1), settings.MAX_PAGE_SIZE)
    return page, limit


def _roster_order(member):
    return (member.role.rank, member.first_name)


class TeamService:
    """Team and membership operations over the injected session"""

    def __init__(self, db: Session):
        self.db = db

    # ---- helpers ---------------------------------------------------------

    def _get_team(self, team_id: int) -> Team:
        team = self.db.query(Team).filter(Team.id == team_id).first()
        if not team:
            raise NotFoundError("Team not found")
        return team

    def _require_admin(self, caller_id: int, team_id: int, message: str) -> None:
        if not has_role(self.db, caller_id, team_id, ADMIN_ONLY):
            raise AuthorizationError(message)

    def _member_count(self):
        return (
            select(func.count(Membership.user_id))
            .where(Membership.team_id == Team.id)
            .correlate(Team)
            .scalar_subquery()
        )

    def _task_count(self):
        return (
            select(func.count(Task.id))
            .where(Task.team_id == Team.id)
            .correlate(Team)
            .scalar_subquery()
        )

    def _summary_query(self, *extra_columns):
        return self.db.query(
            Team.id,
            Team.name,
            Team.created_by,
            User.first_name,
            User.last_name,
            self._member_count().label("member_count"),
            self._task_count().label("task_count"),
            *extra_columns
        ).join(User, Team.created_by == User.id)

    def _team_filters(self, search: Optional[str], only_for_user: Optional[int]) -> list:
        filters = []
        if search:
            pattern = f"%{search}%"
            filters.append(or_(
                Team.name.ilike(pattern),
                (User.first_name + " " + User.last_name).ilike(pattern),
            ))
        if only_for_user is not None:
            filters.append(Team.id.in_(
                select(Membership.team_id).where(Membership.user_id == only_for_user)
            ))
        return filters

    @staticmethod
    def _summary(row) -> TeamSummary:
        return TeamSummary(
            id=row.id,
            name=row.name,
            created_by=row.created_by,
            creator_first_name=row.first_name,
            creator_last_name=row.last_name,
            member_count=row.member_count or 0,
            task_count=row.task_count or 0,
        )

    def _members(self, team_id: int) -> List[TeamMemberOut]:
        rows = self.db.query(Membership, User).join(
            User, Membership.user_id == User.id
        ).filter(Membership.team_id == team_id).all()

        members = [
            TeamMemberOut(
                user_id=user.id,
                role=membership.role,
                first_name=user.first_name,
                last_name=user.last_name,
                email=user.email,
            )
            for membership, user in rows
        ]
        return sorted(members, key=_roster_order)

    def task_stats(self, team_id: int) -> TaskStats:
        """Aggregate task counts by status plus overdue open tasks"""
        overdue = and_(Task.due_date < date.today(), ~Task.status.in_(list(CLOSED_STATUSES)))
        total, completed, in_progress, pending, cancelled, overdue_count = self.db.query(
            func.count(Task.id),
            func.count(case((Task.status == TaskStatus.COMPLETED, 1))),
            func.count(case((Task.status == TaskStatus.IN_PROGRESS, 1))),
            func.count(case((Task.status == TaskStatus.PENDING, 1))),
            func.count(case((Task.status == TaskStatus.CANCELLED, 1))),
            func.count(case((overdue, 1))),
        ).filter(Task.team_id == team_id).one()

        return TaskStats(
            total=total or 0,
            completed=completed or 0,
            in_progress=in_progress or 0,
            pending=pending or 0,
            cancelled=cancelled or 0,
            overdue=overdue_count or 0,
        )

    def _find_user_by_email(self, email: str) -> Optional[User]:
        candidates = self.db.query(User).filter(
            func.lower(User.email) == email.lower()
        ).order_by(User.id).all()
        if not candidates:
            return None
        # Accounts may differ only by case; the exact spelling wins
        for user in candidates:
            if user.email == email:
                return user
        return candidates[0]

    # ---- teams -----------------------------------------------------------

    def create_team(self, name: str, creator_id: int) -> TeamDetail:
        """Create the team and the creator's Admin membership atomically"""
        try:
            team = Team(name=name, created_by=creator_id)
            self.db.add(team)
            self.db.flush()

            self.db.add(Membership(user_id=creator_id, team_id=team.id, role=MemberRole.ADMIN))
            self.db.commit()
        except Exception:
            logger.error("Team creation by user %s rolled back", creator_id, exc_info=True)
            self.db.rollback()
            raise

        logger.info("User %s created team %s", creator_id, team.id)
        return self.get_team(team.id)

    def get_team(self, team_id: int) -> TeamDetail:
        row = self.db.query(Team, User).join(
            User, Team.created_by == User.id
        ).filter(Team.id == team_id).first()
        if not row:
            raise NotFoundError("Team not found")

        team, creator = row
        members = self._members(team_id)
        return TeamDetail(
            id=team.id,
            name=team.name,
            created_by=team.created_by,
            creator_first_name=creator.first_name,
            creator_last_name=creator.last_name,
            creator_email=creator.email,
            created_at=team.created_at,
            members=members,
            member_count=len(members),
            task_stats=self.task_stats(team_id),
        )

    def update_team(self, team_id: int, data: TeamUpdate, caller_id: int) -> TeamDetail:
        team = self._get_team(team_id)
        self._require_admin(caller_id, team_id, "Insufficient permissions to update team")

        # Null means "keep", never "clear"
        if data.name is not None:
            team.name = data.name
        self.db.commit()

        return self.get_team(team_id)

    def delete_team(self, team_id: int, caller_id: int) -> str:
        """Delete a team with its tasks and memberships; returns the deleted team's name"""
        team = self._get_team(team_id)
        if not is_creator(self.db, caller_id, team_id):
            raise AuthorizationError("Only team creator can delete the team")

        team_name = team.name
        try:
            # Order matters: tasks, then memberships, then the team row
            self.db.query(Task).filter(Task.team_id == team_id).delete(synchronize_session=False)
            self.db.query(Membership).filter(Membership.team_id == team_id).delete(synchronize_session=False)
            deleted = self.db.query(Team).filter(Team.id == team_id).delete(synchronize_session=False)
            if not deleted:
                raise NotFoundError("Team not found")
            self.db.commit()
        except Exception:
            logger.error("Deletion of team %s rolled back", team_id, exc_info=True)
            self.db.rollback()
            raise

        logger.info("User %s deleted team %s", caller_id, team_id)
        return team_name

    def list_teams(
        self,
        page: int = 1,
        limit: int = 10,
        search: Optional[str] = None,
        only_for_user: Optional[int] = None,
    ) -> Tuple[List[TeamSummary], Pagination]:
        page, limit = clamp_page(page, limit)
        filters = self._team_filters(search, only_for_user)

        total = self.db.query(func.count(Team.id)).select_from(Team).join(
            User, Team.created_by == User.id
        ).filter(*filters).scalar() or 0

        rows = self._summary_query().filter(*filters).order_by(
            Team.id.desc()
        ).offset((page - 1) * limit).limit(limit).all()

        total_pages = math.ceil(total / limit)
        pagination = Pagination(
            current_page=page,
            total_pages=total_pages,
            total_teams=total,
            has_next_page=page < total_pages,
            has_prev_page=page > 1,
        )
        return [self._summary(row) for row in rows], pagination

    def search_teams(self, term: str, limit: int = 10, only_for_user: Optional[int] = None) -> List[TeamSummary]:
        """Teams matching the term; exact name matches first, newest next"""
        _, limit = clamp_page(1, limit)
        relevance = case(
            (func.lower(Team.name) == term.lower(), 1),
            (Team.name.ilike(f"%{term}%"), 2),
            else_=3,
        )
        rows = self._summary_query().filter(
            *self._team_filters(term, only_for_user)
        ).order_by(relevance, Team.id.desc()).limit(limit).all()
        return [self._summary(row) for row in rows]

    def get_user_teams(self, user_id: int) -> List[UserTeamOut]:
        rows = self._summary_query(Membership.role).join(
            Membership, and_(Membership.team_id == Team.id, Membership.user_id == user_id)
        ).order_by(Team.id.desc()).all()

        return [
            UserTeamOut(role=row.role, **self._summary(row).model_dump())
            for row in rows
        ]

    def get_team_stats(self, team_id: int, caller_id: int) -> TeamStatsOut:
        team = self._get_team(team_id)
        if not is_member(self.db, caller_id, team_id):
            raise AuthorizationError("Access denied to view team statistics")

        member_count = self.db.query(func.count(Membership.user_id)).filter(
            Membership.team_id == team_id
        ).scalar() or 0
        return TeamStatsOut(
            team_id=team.id,
            team_name=team.name,
            member_count=member_count,
            task_stats=self.task_stats(team_id),
            created_at=team.created_at,
        )

    def check_permission(self, user_id: int, team_id: int, allowed_roles: Iterable[MemberRole] = ANY_ROLE) -> bool:
        return has_role(self.db, user_id, team_id, allowed_roles)

    # ---- membership ------------------------------------------------------

    def get_members(self, team_id: int, caller_id: Optional[int] = None) -> List[RosterMemberOut]:
        """Roster with the number of tasks each member is assigned in this team.

        Anonymous callers may read the roster; an identified caller must be a member.
        """
        self._get_team(team_id)
        if caller_id is not None and not is_member(self.db, caller_id, team_id):
            raise AuthorizationError("Access denied to view team members")

        assigned_tasks = (
            select(func.count(Task.id))
            .where(Task.team_id == team_id, Task.assigned_to == Membership.user_id)
            .correlate(Membership)
            .scalar_subquery()
        )
        rows = self.db.query(
            Membership.user_id,
            Membership.role,
            User.first_name,
            User.last_name,
            User.email,
            assigned_tasks.label("assigned_tasks"),
        ).join(User, Membership.user_id == User.id).filter(Membership.team_id == team_id).all()

        members = [
            RosterMemberOut(
                user_id=row.user_id,
                role=row.role,
                first_name=row.first_name,
                last_name=row.last_name,
                email=row.email,
                assigned_tasks=row.assigned_tasks or 0,
            )
            for row in rows
        ]
        return sorted(members, key=_roster_order)

    def add_member(self, team_id: int, email: str, role: MemberRole = MemberRole.MEMBER, caller_id: Optional[int] = None) -> TeamMemberOut:
        self._get_team(team_id)
        self._require_admin(caller_id, team_id, "Insufficient permissions to add members")

        user = self._find_user_by_email(email)
        if not user:
            raise NotFoundError(f"User with email {email} not found")

        existing = self.db.query(Membership).filter(
            Membership.user_id == user.id,
            Membership.team_id == team_id
        ).first()
        if existing:
            raise ConflictError(f"User is already a member of this team with role: {existing.role.value}")

        try:
            self.db.add(Membership(user_id=user.id, team_id=team_id, role=role))
            self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent add of the same user
            self.db.rollback()
            raise ConflictError("User is already a member of this team")

        logger.info("User %s added user %s to team %s as %s", caller_id, user.id, team_id, role.value)
        return TeamMemberOut(
            user_id=user.id,
            role=role,
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email,
        )

    def _membership_with_user(self, team_id: int, member_id: int):
        return self.db.query(Membership, User).join(
            User, Membership.user_id == User.id
        ).filter(
            Membership.user_id == member_id,
            Membership.team_id == team_id
        ).first()

    def remove_member(self, team_id: int, member_id: int, caller_id: int) -> TeamMemberOut:
        team = self._get_team(team_id)
        self._require_admin(caller_id, team_id, "Insufficient permissions to remove members")
        if team.created_by == member_id:
            raise ValidationError("Cannot remove team creator from the team")

        row = self._membership_with_user(team_id, member_id)
        if not row:
            raise NotFoundError("Member not found in this team")
        membership, user = row
        removed = TeamMemberOut(
            user_id=user.id,
            role=membership.role,
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email,
        )

        deleted = self.db.query(Membership).filter(
            Membership.user_id == member_id,
            Membership.team_id == team_id
        ).delete(synchronize_session=False)
        if not deleted:
            raise NotFoundError("Member not found in team")
        self.db.commit()

        logger.info("User %s removed user %s from team %s", caller_id, member_id, team_id)
        return removed

    def update_member_role(self, team_id: int, member_id: int, new_role: MemberRole, caller_id: int) -> TeamMemberOut:
        team = self._get_team(team_id)
        self._require_admin(caller_id, team_id, "Insufficient permissions to update member roles")
        if team.created_by == member_id:
            raise ValidationError("Cannot change team creator role")

        row = self._membership_with_user(team_id, member_id)
        if not row:
            raise NotFoundError("Member not found in team")
        membership, user = row

        membership.role = new_role
        self.db.commit()

        logger.info("User %s set role of user %s in team %s to %s", caller_id, member_id, team_id, new_role.value)
        return TeamMemberOut(
            user_id=user.id,
            role=new_role,
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email,
        )

    def leave_team(self, team_id: int, user_id: int) -> None:
        team = self._get_team(team_id)
        if team.created_by == user_id:
            raise ValidationError("Team creator cannot leave the team. Please delete the team instead.")

        deleted = self.db.query(Membership).filter(
            Membership.user_id == user_id,
            Membership.team_id == team_id
        ).delete(synchronize_session=False)
        if not deleted:
            raise NotFoundError("You are not a member of this team")
        self.db.commit()

        logger.info("User %s left team %s", user_id, team_id)
