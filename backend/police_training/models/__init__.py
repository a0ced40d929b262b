from .auth import User, Role, Permission, UserRole, RolePermission, Token
from .reference import (
    Region, Formation, Posting, Rank, TrainingType, TrainingCategory,
    TrainingStatus, EnrollmentStatus, AttendanceStatus, ProgressStatus,
)
from .training import Officer, Workshop, TrainingSession, TrainingEnrollment

__all__ = [
    'User', 'Role', 'Permission', 'UserRole', 'RolePermission', 'Token',
    'Region', 'Formation', 'Posting', 'Rank', 'TrainingType', 'TrainingCategory',
    'TrainingStatus', 'EnrollmentStatus', 'AttendanceStatus', 'ProgressStatus',
    'Officer', 'Workshop', 'TrainingSession', 'TrainingEnrollment',
]
