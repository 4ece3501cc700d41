import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import delete, update
from sqlmodel import Session, select

from taskhub.errors import MissingField, NotFound, TaskNotRespondable, ValidationError
from taskhub.models import Task, User, AssignmentStatus
from taskhub.models.task import utcnow
from taskhub.schemas.task_schema import TaskResponse, TaskUpdateRequest
from taskhub.services.assignment import (
    ASSIGNED_VIEW_STATES,
    next_state,
    parse_response,
    parse_status,
    respondable_states,
)

logger = logging.getLogger(__name__)


def _newest_first(statement):
    return statement.order_by(Task.created_at.desc(), Task.id.desc())


def _users_by_id(db: Session, user_ids: Iterable[Optional[int]]) -> Dict[int, User]:
    ids = {user_id for user_id in user_ids if user_id is not None}
    if not ids:
        return {}
    users = db.exec(select(User).where(User.id.in_(ids))).all()
    return {user.id: user for user in users}


def _apply_update(db: Session, task_id: int, conditions: list, values: Dict[str, Any]) -> Optional[Task]:
    """Single conditional UPDATE; returns the fresh row or None when nothing matched."""
    values = dict(values, updated_at=utcnow())
    statement = update(Task).where(Task.id == task_id, *conditions).values(**values)
    result = db.exec(statement)
    db.commit()
    if result.rowcount == 0:
        return None
    return db.get(Task, task_id)


def _apply_delete(db: Session, task_id: int, conditions: list) -> bool:
    result = db.exec(delete(Task).where(Task.id == task_id, *conditions))
    db.commit()
    return result.rowcount > 0


def _collect_changes(req: TaskUpdateRequest) -> Dict[str, Any]:
    changes = req.model_dump(exclude_unset=True)
    for field in ("title", "description"):
        if field in changes and not changes[field]:
            raise ValidationError(f"{field.capitalize()} cannot be empty")
    if "status" in changes:
        changes["status"] = parse_status(changes["status"])
    return changes


def list_tasks_by_owner(db: Session, owner_id: int) -> List[Task]:
    statement = _newest_first(select(Task).where(Task.owner_id == owner_id))
    return db.exec(statement).all()


def create_task(db: Session, owner_id: int, title: str | None, description: str | None,
                due_date: Optional[datetime] = None) -> Task:
    if not title or not description:
        raise MissingField("Title and description are required")
    task = Task(title=title, description=description, due_date=due_date, owner_id=owner_id)
    db.add(task)
    db.commit()
    db.refresh(task)
    logger.info(f"Task {task.id} created by user {owner_id}")
    return task


def assign_task(db: Session, assigner_id: int, user_id: int | None, title: str | None,
                description: str | None, due_date: Optional[datetime] = None) -> TaskResponse:
    if not title or not description or user_id is None:
        raise MissingField("Title, description, and user_id are required")
    owner = db.get(User, user_id)
    if not owner:
        raise NotFound("User not found")

    task = Task(
        title=title,
        description=description,
        due_date=due_date,
        owner_id=owner.id,
        assigner_id=assigner_id,
        assignment_status=AssignmentStatus.assigned,
    )
    db.add(task)
    db.commit()
    db.refresh(task)
    logger.info(f"Task {task.id} assigned to user {owner.id} by admin {assigner_id}")
    return TaskResponse.from_task(task, owner, db.get(User, assigner_id))


def update_task(db: Session, task_id: int, owner_id: int, req: TaskUpdateRequest) -> Task:
    task = _apply_update(db, task_id, [Task.owner_id == owner_id], _collect_changes(req))
    if not task:
        raise NotFound("Task not found")
    return task


def admin_update_task(db: Session, task_id: int, req: TaskUpdateRequest) -> Task:
    task = _apply_update(db, task_id, [], _collect_changes(req))
    if not task:
        raise NotFound("Task not found")
    return task


def update_task_status(db: Session, task_id: int, owner_id: int, status: str | None) -> Task:
    # TODO: decide whether work may start before an assignment is accepted; allowed for now
    new_status = parse_status(status)
    task = _apply_update(db, task_id, [Task.owner_id == owner_id], {"status": new_status})
    if not task:
        raise NotFound("Task not found")
    return task


def delete_task(db: Session, task_id: int, owner_id: int):
    if not _apply_delete(db, task_id, [Task.owner_id == owner_id]):
        raise NotFound("Task not found")
    logger.info(f"Task {task_id} deleted by owner {owner_id}")


def admin_delete_task(db: Session, task_id: int):
    if not _apply_delete(db, task_id, []):
        raise NotFound("Task not found")
    logger.info(f"Task {task_id} deleted by admin")


def respond_to_task(db: Session, task_id: int, owner_id: int, response: str | None) -> TaskResponse:
    """Owner accepts or rejects an assignment.

    Missing task, somebody else's task and an already answered task all give
    the same TaskNotRespondable error.
    """
    answer = parse_response(response)
    for source in respondable_states(answer):
        target = next_state(source, answer)
        task = _apply_update(
            db,
            task_id,
            [Task.owner_id == owner_id, Task.assignment_status == source],
            {"assignment_status": target},
        )
        if task:
            logger.info(f"Task {task_id}: {source.value} -> {target.value} by user {owner_id}")
            users = _users_by_id(db, [task.owner_id, task.assigner_id])
            return TaskResponse.from_task(task, users.get(task.owner_id), users.get(task.assigner_id))
    raise TaskNotRespondable()


def list_assigned_tasks(db: Session, owner_id: int) -> List[TaskResponse]:
    statement = _newest_first(
        select(Task).where(Task.owner_id == owner_id, Task.assignment_status.in_(ASSIGNED_VIEW_STATES))
    )
    tasks = db.exec(statement).all()
    assigners = _users_by_id(db, (task.assigner_id for task in tasks))
    return [TaskResponse.from_task(task, assigner=assigners.get(task.assigner_id)) for task in tasks]


def list_all_tasks(db: Session) -> List[TaskResponse]:
    tasks = db.exec(_newest_first(select(Task))).all()
    users = _users_by_id(db, [t.owner_id for t in tasks] + [t.assigner_id for t in tasks])
    result = []
    for task in tasks:
        owner = users.get(task.owner_id)
        if owner is None:
            # owner account was deleted
            continue
        result.append(TaskResponse.from_task(task, owner, users.get(task.assigner_id)))
    return result
