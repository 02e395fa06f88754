# teamboard/services/tasks.py
"""
Tasks inside teams. Any member may create, edit and delete a team's tasks;
changing a task's status is reserved to its assignee and the team's Admins.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import or_, select
from sqlalchemy.orm import Session, joinedload

from teamboard.config.settings import settings
from teamboard.models import Membership, Task, TaskStatus, Team, User
from teamboard.schemas.task import TaskCreate, TaskFilters, UPDATABLE_TASK_FIELDS
from teamboard.services.authorization import is_admin, is_member
from teamboard.services.teams import clamp_page
from teamboard.utils.errors import (
    AuthorizationError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

NOT_A_MEMBER = "You are not a member of this team"

# Columns that accept an explicit null to clear them
CLEARABLE_FIELDS = ("description", "due_date", "assigned_to")


class TaskService:
    """Task operations over the injected session"""

    def __init__(self, db: Session):
        self.db = db

    def _check_assignee(self, assignee_id: Optional[int], team_id: int) -> None:
        if assignee_id is None:
            return
        exists = self.db.query(User.id).filter(User.id == assignee_id).first()
        if not exists:
            raise NotFoundError("Assigned user not found")
        if settings.ENFORCE_ASSIGNEE_MEMBERSHIP and not is_member(self.db, assignee_id, team_id):
            raise ValidationError("Assigned user is not a member of this team")

    def create_task(self, data: TaskCreate, caller_id: int) -> Task:
        team_exists = self.db.query(Team.id).filter(Team.id == data.team_id).first()
        if not team_exists:
            raise NotFoundError("Team not found")
        if not is_member(self.db, caller_id, data.team_id):
            raise AuthorizationError(NOT_A_MEMBER)

        self._check_assignee(data.assigned_to, data.team_id)

        task = Task(
            team_id=data.team_id,
            title=data.title,
            description=data.description,
            due_date=data.due_date,
            assigned_to=data.assigned_to,
            status=data.status or TaskStatus.PENDING,
            created_by=caller_id,
        )
        self.db.add(task)
        self.db.commit()
        self.db.refresh(task)

        logger.info("User %s created task %s in team %s", caller_id, task.id, task.team_id)
        return task

    def list_tasks(self, filters: TaskFilters, caller_id: int) -> List[Task]:
        """Tasks from the caller's teams, soonest due first, undated last"""
        page, limit = clamp_page(filters.page, filters.limit)

        caller_teams = select(Membership.team_id).where(Membership.user_id == caller_id)
        query = self.db.query(Task).options(joinedload(Task.assignee)).filter(
            Task.team_id.in_(caller_teams)
        )

        if filters.team_id is not None:
            query = query.filter(Task.team_id == filters.team_id)
        if filters.assigned_to is not None:
            query = query.filter(Task.assigned_to == filters.assigned_to)
        if filters.status is not None:
            query = query.filter(Task.status == filters.status)
        if filters.search:
            pattern = f"%{filters.search}%"
            query = query.filter(or_(
                Task.title.ilike(pattern),
                Task.description.ilike(pattern),
            ))

        return query.order_by(
            Task.due_date.asc().nulls_last(),
            Task.id.desc()
        ).offset((page - 1) * limit).limit(limit).all()

    def get_task(self, task_id: int, caller_id: int) -> Task:
        task = self.db.query(Task).filter(Task.id == task_id).first()
        if not task:
            raise NotFoundError("Task not found")
        if not is_member(self.db, caller_id, task.team_id):
            raise AuthorizationError(NOT_A_MEMBER)
        return task

    def update_task(self, task_id: int, fields: Dict[str, Any], caller_id: int) -> Task:
        """Apply a partial update.

        ``fields`` holds only the keys the client sent. A null description, due
        date or assignee clears it; a null title or status is ignored.
        """
        task = self.get_task(task_id, caller_id)

        changes = {
            name: value for name, value in fields.items()
            if name in UPDATABLE_TASK_FIELDS and (value is not None or name in CLEARABLE_FIELDS)
        }
        if not changes:
            raise ValidationError("No valid fields to update")

        new_status = changes.get("status")
        if new_status is not None and new_status != task.status:
            if task.assigned_to != caller_id and not is_admin(self.db, caller_id, task.team_id):
                raise AuthorizationError("Only assigned user or team admin can update status")

        if "assigned_to" in changes:
            self._check_assignee(changes["assigned_to"], task.team_id)

        for name, value in changes.items():
            setattr(task, name, value)
        self.db.commit()
        self.db.refresh(task)

        logger.info("User %s updated task %s (%s)", caller_id, task_id, ", ".join(sorted(changes)))
        return task

    def update_task_status(self, task_id: int, status: TaskStatus, caller_id: int) -> Task:
        return self.update_task(task_id, {"status": status}, caller_id)

    def delete_task(self, task_id: int, caller_id: int) -> None:
        task = self.get_task(task_id, caller_id)
        self.db.delete(task)
        self.db.commit()
        logger.info("User %s deleted task %s", caller_id, task_id)
