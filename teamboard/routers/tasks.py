from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from teamboard.database import get_db
from teamboard.models.task import TaskStatus
from teamboard.schemas.common import Envelope
from teamboard.schemas.task import TaskCreate, TaskFilters, TaskOut, TaskStatusUpdate, TaskUpdate
from teamboard.services.tasks import TaskService
from teamboard.utils.auth import Principal, get_current_principal

router = APIRouter()


@router.get("/", response_model=Envelope[List[TaskOut]])
def list_tasks(
    team_id: Optional[int] = Query(default=None, alias="teamId"),
    assigned_to: Optional[int] = Query(default=None, alias="assignedTo"),
    task_status: Optional[TaskStatus] = Query(default=None, alias="status"),
    search: Optional[str] = Query(default=None, max_length=100),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    filters = TaskFilters(
        team_id=team_id,
        assigned_to=assigned_to,
        status=task_status,
        search=search,
        page=page,
        limit=limit,
    )
    tasks = TaskService(db).list_tasks(filters, principal.user_id)
    return Envelope[List[TaskOut]](
        message="Tasks retrieved successfully",
        data=[TaskOut.model_validate(task) for task in tasks],
    )


@router.post("/", response_model=Envelope[TaskOut], status_code=status.HTTP_201_CREATED)
def create_task(
    payload: TaskCreate,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    task = TaskService(db).create_task(payload, principal.user_id)
    return Envelope[TaskOut](message="Task created successfully", data=TaskOut.model_validate(task))


@router.get("/{task_id}", response_model=Envelope[TaskOut])
def get_task(task_id: int, principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db)):
    task = TaskService(db).get_task(task_id, principal.user_id)
    return Envelope[TaskOut](message="Task retrieved successfully", data=TaskOut.model_validate(task))


@router.put("/{task_id}", response_model=Envelope[TaskOut])
def update_task(
    task_id: int,
    payload: TaskUpdate,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    # Only the keys the client actually sent; explicit nulls are kept
    fields = payload.model_dump(exclude_unset=True)
    task = TaskService(db).update_task(task_id, fields, principal.user_id)
    return Envelope[TaskOut](message="Task updated successfully", data=TaskOut.model_validate(task))


@router.put("/{task_id}/status", response_model=Envelope[TaskOut])
def update_task_status(
    task_id: int,
    payload: TaskStatusUpdate,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    task = TaskService(db).update_task_status(task_id, payload.status, principal.user_id)
    return Envelope[TaskOut](message="Task status updated successfully", data=TaskOut.model_validate(task))


@router.delete("/{task_id}", response_model=Envelope[None])
def delete_task(task_id: int, principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db)):
    TaskService(db).delete_task(task_id, principal.user_id)
    return Envelope[None](message="Task deleted successfully")
