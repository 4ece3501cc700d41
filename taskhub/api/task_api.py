from typing import Annotated, List

from fastapi import APIRouter, Depends, Path, status
from sqlmodel import Session

from taskhub.auth.auth_handler import get_current_identity, require_admin
from taskhub.auth.token_service import Identity
from taskhub.configs.database import get_db
from taskhub.models import MAX_ID
from taskhub.schemas.task_schema import (
    TaskAssignRequest,
    TaskCreateRequest,
    TaskMessageResponse,
    TaskRespondRequest,
    TaskResponse,
    TaskStatusRequest,
    TaskUpdateRequest,
)
from taskhub.services import task_service

router = APIRouter(prefix="/tasks", tags=["tasks"])

TaskId = Annotated[int, Path(le=MAX_ID)]


@router.get("", response_model=List[TaskResponse])
def list_my_tasks(identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    tasks = task_service.list_tasks_by_owner(db, identity.subject_id)
    return [TaskResponse.from_task(task) for task in tasks]


@router.post("", response_model=TaskMessageResponse, status_code=status.HTTP_201_CREATED)
def create_task(task_req: TaskCreateRequest, identity: Identity = Depends(get_current_identity),
                db: Session = Depends(get_db)):
    task = task_service.create_task(
        db,
        owner_id=identity.subject_id,
        title=task_req.title,
        description=task_req.description,
        due_date=task_req.due_date,
    )
    return {"message": "Task created successfully", "task": TaskResponse.from_task(task)}


@router.get("/admin/all", response_model=List[TaskResponse])
def list_all_tasks(admin: Identity = Depends(require_admin), db: Session = Depends(get_db)):
    return task_service.list_all_tasks(db)


@router.put("/admin/{task_id}", response_model=TaskMessageResponse)
def admin_update_task(task_id: TaskId, task_req: TaskUpdateRequest, admin: Identity = Depends(require_admin),
                      db: Session = Depends(get_db)):
    task = task_service.admin_update_task(db, task_id, task_req)
    return {"message": "Task updated successfully", "task": TaskResponse.from_task(task)}


@router.delete("/admin/{task_id}")
def admin_delete_task(task_id: TaskId, admin: Identity = Depends(require_admin), db: Session = Depends(get_db)):
    task_service.admin_delete_task(db, task_id)
    return {"message": "Task deleted successfully"}


@router.post("/assign", response_model=TaskMessageResponse, status_code=status.HTTP_201_CREATED)
def assign_task(task_req: TaskAssignRequest, admin: Identity = Depends(require_admin),
                db: Session = Depends(get_db)):
    task = task_service.assign_task(
        db,
        assigner_id=admin.subject_id,
        user_id=task_req.user_id,
        title=task_req.title,
        description=task_req.description,
        due_date=task_req.due_date,
    )
    return {"message": "Task assigned successfully", "task": task}


@router.get("/assigned", response_model=List[TaskResponse])
def list_assigned_tasks(identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    return task_service.list_assigned_tasks(db, identity.subject_id)


@router.put("/{task_id}", response_model=TaskMessageResponse)
def update_task(task_id: TaskId, task_req: TaskUpdateRequest, identity: Identity = Depends(get_current_identity),
                db: Session = Depends(get_db)):
    task = task_service.update_task(db, task_id, identity.subject_id, task_req)
    return {"message": "Task updated successfully", "task": TaskResponse.from_task(task)}


@router.patch("/{task_id}/status", response_model=TaskMessageResponse)
def update_task_status(task_id: TaskId, status_req: TaskStatusRequest,
                       identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    task = task_service.update_task_status(db, task_id, identity.subject_id, status_req.status)
    return {"message": "Task status updated successfully", "task": TaskResponse.from_task(task)}


@router.patch("/{task_id}/respond", response_model=TaskMessageResponse)
def respond_to_task(task_id: TaskId, respond_req: TaskRespondRequest,
                    identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    task = task_service.respond_to_task(db, task_id, identity.subject_id, respond_req.response)
    return {"message": f"Task {task.assignment_status.value} successfully", "task": task}


@router.delete("/{task_id}")
def delete_task(task_id: TaskId, identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    task_service.delete_task(db, task_id, identity.subject_id)
    return {"message": "Task deleted successfully"}
