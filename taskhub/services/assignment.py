"""Assignment workflow of a task.

    self-created                      (created by the owner, never assigned)
    assigned --accepted--> accepted   (created by an admin for the owner)
    assigned --rejected--> rejected

Only the owner answers an assignment and only once. ``accepted``,
``rejected`` and ``self-created`` have no outgoing transitions.
"""
from enum import Enum
from typing import Dict, Optional, Tuple

from taskhub.errors import InvalidResponse, InvalidStatus, TaskNotRespondable
from taskhub.models import AssignmentStatus, TaskStatus


class AssignmentResponse(str, Enum):
    accepted = "accepted"
    rejected = "rejected"


TRANSITIONS: Dict[Tuple[AssignmentStatus, AssignmentResponse], AssignmentStatus] = {
    (AssignmentStatus.assigned, AssignmentResponse.accepted): AssignmentStatus.accepted,
    (AssignmentStatus.assigned, AssignmentResponse.rejected): AssignmentStatus.rejected,
}

# states that show up in the "assigned to me" view
ASSIGNED_VIEW_STATES = (AssignmentStatus.assigned, AssignmentStatus.accepted, AssignmentStatus.rejected)


def parse_response(value: Optional[str]) -> AssignmentResponse:
    try:
        return AssignmentResponse(value)
    except ValueError:
        raise InvalidResponse()


def parse_status(value: Optional[str]) -> TaskStatus:
    try:
        return TaskStatus(value)
    except ValueError:
        raise InvalidStatus()


def next_state(current: AssignmentStatus, response: AssignmentResponse) -> AssignmentStatus:
    try:
        return TRANSITIONS[(current, response)]
    except KeyError:
        raise TaskNotRespondable()


def respondable_states(response: AssignmentResponse) -> Tuple[AssignmentStatus, ...]:
    return tuple(state for (state, answer) in TRANSITIONS if answer is response)
