from .common import APIModel, Envelope, Pagination, ErrorDetail, error_body
from .user import UserRegister, UserLogin, ProfileUpdate, PasswordChange, AccountDelete, UserBasic, UserOut, UserInfo, AuthSession
from .team import TeamCreate, TeamUpdate, MemberAdd, MemberRoleUpdate, TeamMemberOut, RosterMemberOut, TaskStats, TeamSummary, UserTeamOut, TeamDetail, TeamStatsOut, MembershipAdd, MembershipRemove, MembershipRoleChange, PermissionCheck
from .task import TaskCreate, TaskUpdate, TaskStatusUpdate, TaskFilters, TaskOut, UPDATABLE_TASK_FIELDS
