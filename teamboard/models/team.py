# teamboard/models/team.py
import enum

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from teamboard.database import Base

class MemberRole(str, enum.Enum):
    ADMIN = "Admin"
    MEMBER = "Member"
    VIEWER = "Viewer"

    @property
    def rank(self) -> int:
        """Display order within a roster, most privileged first"""
        return _ROLE_RANK[self]

_ROLE_RANK = {
    MemberRole.ADMIN: 1,
    MemberRole.MEMBER: 2,
    MemberRole.VIEWER: 3,
}

class Team(Base):
    __tablename__ = "teams"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, index=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    creator = relationship("User", foreign_keys=[created_by], back_populates="created_teams")
    memberships = relationship("Membership", back_populates="team", passive_deletes=True)
    tasks = relationship("Task", back_populates="team", passive_deletes=True)

class Membership(Base):
    """Grants one user one role in one team"""
    __tablename__ = "memberships"

    user_id = Column(Integer, ForeignKey("users.id"), primary_key=True)
    team_id = Column(Integer, ForeignKey("teams.id"), primary_key=True, index=True)
    role = Column(
        Enum(MemberRole, name="member_role", values_callable=lambda roles: [role.value for role in roles]),
        nullable=False,
        default=MemberRole.MEMBER,
    )
    joined_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", back_populates="memberships")
    team = relationship("Team", back_populates="memberships")
