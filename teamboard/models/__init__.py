from .user import User
from .team import Team, Membership, MemberRole
from .task import Task, TaskStatus, CLOSED_STATUSES
