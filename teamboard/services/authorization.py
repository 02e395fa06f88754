# teamboard/services/authorization.py
"""
Role-based permission checks consulted before any team or task mutation.

Two privilege tiers are used by the domain services: ``ANY_ROLE`` (read access,
task creation) and ``ADMIN_ONLY`` (team and membership mutation). Creator
checks (delete team, touching the creator's membership) form a third, stricter
tier layered on top of Admin via ``is_creator``.
"""

import logging
from typing import Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from teamboard.models import Membership, MemberRole, Team

logger = logging.getLogger(__name__)

ANY_ROLE = frozenset()
ADMIN_ONLY = frozenset({MemberRole.ADMIN})


def get_role(db: Session, user_id: Optional[int], team_id: int) -> Optional[MemberRole]:
    """Return the user's role in the team, or None if they are not a member"""
    if user_id is None:
        return None
    membership = db.query(Membership).filter(
        Membership.user_id == user_id,
        Membership.team_id == team_id
    ).first()
    return membership.role if membership else None


def has_role(db: Session, user_id: Optional[int], team_id: int, allowed: Iterable[MemberRole] = ANY_ROLE) -> bool:
    """True if the user is a member of the team holding one of ``allowed``.

    An empty ``allowed`` set accepts any membership. Never raises: a failed
    lookup is logged and treated as "no permission".
    """
    try:
        role = get_role(db, user_id, team_id)
    except SQLAlchemyError:
        logger.exception("Membership lookup failed for user %s in team %s", user_id, team_id)
        return False

    if role is None:
        return False
    allowed = frozenset(allowed)
    return not allowed or role in allowed


def is_member(db: Session, user_id: Optional[int], team_id: int) -> bool:
    return has_role(db, user_id, team_id, ANY_ROLE)


def is_admin(db: Session, user_id: Optional[int], team_id: int) -> bool:
    return has_role(db, user_id, team_id, ADMIN_ONLY)


def is_creator(db: Session, user_id: Optional[int], team_id: int) -> bool:
    if user_id is None:
        return False
    try:
        created_by = db.query(Team.created_by).filter(Team.id == team_id).scalar()
    except SQLAlchemyError:
        logger.exception("Creator lookup failed for team %s", team_id)
        return False
    return created_by is not None and created_by == user_id
