# teamboard/schemas/task.py
from datetime import date, datetime
from typing import Optional

from pydantic import Field

from teamboard.models.task import TaskStatus
from .common import APIModel
from .user import UserBasic

# Fields a task update may touch; anything else in the body is ignored
UPDATABLE_TASK_FIELDS = ("title", "description", "due_date", "status", "assigned_to")


class TaskCreate(APIModel):
    team_id: int = Field(gt=0)
    title: str = Field(min_length=2, max_length=255)
    description: Optional[str] = None
    due_date: Optional[date] = None
    assigned_to: Optional[int] = Field(default=None, gt=0)
    status: Optional[TaskStatus] = None


class TaskUpdate(APIModel):
    title: Optional[str] = Field(default=None, min_length=2, max_length=255)
    description: Optional[str] = None
    due_date: Optional[date] = None
    assigned_to: Optional[int] = Field(default=None, gt=0)
    status: Optional[TaskStatus] = None


class TaskStatusUpdate(APIModel):
    status: TaskStatus


class TaskFilters(APIModel):
    team_id: Optional[int] = None
    assigned_to: Optional[int] = None
    status: Optional[TaskStatus] = None
    search: Optional[str] = Field(default=None, max_length=100)
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1)


class TaskOut(APIModel):
    id: int
    team_id: int
    title: str
    description: Optional[str] = None
    due_date: Optional[date] = None
    status: TaskStatus
    assigned_to: Optional[int] = None
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    is_overdue: bool = False

    # Related objects
    assignee: Optional[UserBasic] = None
