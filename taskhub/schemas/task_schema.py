from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from taskhub.models import MAX_ID, Task, TaskStatus, AssignmentStatus, User
from taskhub.schemas.user_schema import UserResponse


class TaskCreateRequest(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    due_date: Optional[datetime] = None


class TaskAssignRequest(TaskCreateRequest):
    user_id: Optional[int] = Field(None, le=MAX_ID)


class TaskUpdateRequest(BaseModel):
    """Fields left out of the body are not touched."""
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    due_date: Optional[datetime] = None


class TaskStatusRequest(BaseModel):
    status: Optional[str] = None


class TaskRespondRequest(BaseModel):
    response: Optional[str] = None


class TaskResponse(BaseModel):
    id: int
    title: str
    description: str
    status: TaskStatus
    owner_id: int
    assigner_id: Optional[int] = None
    assignment_status: AssignmentStatus
    due_date: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    owner: Optional[UserResponse] = None
    assigner: Optional[UserResponse] = None

    @staticmethod
    def from_task(task: Task, owner: User | None = None, assigner: User | None = None) -> 'TaskResponse':
        response = TaskResponse.model_validate(task.model_dump())
        response.owner = UserResponse.from_user(owner)
        response.assigner = UserResponse.from_user(assigner)
        return response


class TaskMessageResponse(BaseModel):
    message: str
    task: TaskResponse
