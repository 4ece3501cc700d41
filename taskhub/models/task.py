from datetime import datetime, UTC
from enum import Enum
from typing import Optional

from sqlmodel import SQLModel, Field


class TaskStatus(str, Enum):
    pending = "pending"
    started = "started"
    completed = "completed"


class AssignmentStatus(str, Enum):
    self_created = "self-created"
    assigned = "assigned"
    accepted = "accepted"
    rejected = "rejected"


# largest value an INTEGER primary key can hold
MAX_ID = 2**63 - 1


def utcnow() -> datetime:
    return datetime.now(UTC)


class Task(SQLModel, table=True):
    __table_args__ = {"sqlite_autoincrement": True}

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    description: str
    status: TaskStatus = Field(default=TaskStatus.pending)
    # plain references: a deleted user leaves its tasks behind
    owner_id: int = Field(index=True)
    assigner_id: Optional[int] = Field(default=None, index=True)
    assignment_status: AssignmentStatus = Field(default=AssignmentStatus.self_created)
    due_date: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utcnow, index=True)
    updated_at: datetime = Field(default_factory=utcnow)
