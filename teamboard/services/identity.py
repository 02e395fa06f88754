# teamboard/services/identity.py
"""
Identity store: registration, credential checks, profile and account lifecycle.
"""

import logging
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from teamboard.config.settings import settings
from teamboard.models import User, Team, Membership, Task
from teamboard.schemas.user import UserRegister, ProfileUpdate
from teamboard.utils.errors import AuthError, ConflictError, NotFoundError
from teamboard.utils.security import hash_password, verify_password

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


class IdentityService:
    """User accounts backed by the injected session"""

    def __init__(self, db: Session):
        self.db = db

    def email_exists(self, email: str, exclude_user_id: Optional[int] = None) -> bool:
        """Check whether an account already uses this email.

        Case-sensitive unless EMAIL_UNIQUENESS_CASE_INSENSITIVE is enabled.
        """
        if settings.EMAIL_UNIQUENESS_CASE_INSENSITIVE:
            query = self.db.query(User.id).filter(func.lower(User.email) == email.lower())
        else:
            query = self.db.query(User.id).filter(User.email == email)
        if exclude_user_id is not None:
            query = query.filter(User.id != exclude_user_id)
        return query.first() is not None

    def register(self, data: UserRegister) -> User:
        if self.email_exists(data.email):
            raise ConflictError("User with this email already exists")

        user = User(
            email=data.email,
            hashed_password=hash_password(data.password),
            first_name=data.first_name,
            last_name=data.last_name,
            bio=data.bio or "",
        )
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)

        logger.info("Registered user %s", user.id)
        return user

    def authenticate(self, email: str, password: str) -> User:
        # Unknown email and wrong password must be indistinguishable to the caller
        user = self.db.query(User).filter(User.email == email).first()
        if not user or not verify_password(password, user.hashed_password):
            raise AuthError(INVALID_CREDENTIALS)
        return user

    def find_by_id(self, user_id: int) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def get_user(self, user_id: int) -> User:
        user = self.find_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def update_profile(self, user_id: int, data: ProfileUpdate) -> User:
        user = self.get_user(user_id)

        if data.email and data.email != user.email and self.email_exists(data.email, exclude_user_id=user_id):
            raise ConflictError("Email already in use by another user")

        # Omitted or null fields keep their current value
        for field, value in data.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(user, field, value)

        self.db.commit()
        self.db.refresh(user)
        return user

    def change_password(self, user_id: int, current_password: str, new_password: str) -> None:
        user = self.get_user(user_id)
        if not verify_password(current_password, user.hashed_password):
            raise AuthError("Current password is incorrect")

        user.hashed_password = hash_password(new_password)
        self.db.commit()
        logger.info("Password changed for user %s", user_id)

    def delete_account(self, user_id: int, password: str) -> None:
        """Hard-delete the account after re-checking the password.

        Teams the user created go with it (tasks and memberships first), the
        user's other memberships are removed and tasks referencing the user are
        detached. Everything happens in one transaction.
        """
        user = self.get_user(user_id)
        if not verify_password(password, user.hashed_password):
            raise AuthError("Password is incorrect")

        try:
            owned_team_ids = [
                team_id for (team_id,) in self.db.query(Team.id).filter(Team.created_by == user_id).all()
            ]
            if owned_team_ids:
                self.db.query(Task).filter(Task.team_id.in_(owned_team_ids)).delete(synchronize_session=False)
                self.db.query(Membership).filter(Membership.team_id.in_(owned_team_ids)).delete(synchronize_session=False)
                self.db.query(Team).filter(Team.id.in_(owned_team_ids)).delete(synchronize_session=False)

            self.db.query(Membership).filter(Membership.user_id == user_id).delete(synchronize_session=False)
            self.db.query(Task).filter(Task.assigned_to == user_id).update(
                {Task.assigned_to: None}, synchronize_session=False
            )
            self.db.query(Task).filter(Task.created_by == user_id).update(
                {Task.created_by: None}, synchronize_session=False
            )

            deleted = self.db.query(User).filter(User.id == user_id).delete(synchronize_session=False)
            if not deleted:
                raise NotFoundError("User not found or already deleted")

            self.db.commit()
        except Exception:
            logger.error("Account deletion for user %s rolled back", user_id, exc_info=True)
            self.db.rollback()
            raise

        logger.info("Deleted account %s and %d owned team(s)", user_id, len(owned_team_ids))
