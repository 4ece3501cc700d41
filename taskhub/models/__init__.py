from .user import User, UserRole
from .task import MAX_ID, Task, TaskStatus, AssignmentStatus
