from enum import Enum


class Role(str, Enum):
    """프로젝트 멤버십 역할. 권한 크기는 OWNER > EDITOR > VIEWER 순서입니다."""
    OWNER = "owner"
    EDITOR = "editor"
    VIEWER = "viewer"

    @property
    def rank(self) -> int:
        return _ROLE_RANK[self]

    def covers(self, required: "Role") -> bool:
        """이 역할이 required 역할 이상의 권한을 갖는지 여부."""
        return self.rank >= required.rank


_ROLE_RANK = {Role.VIEWER: 1, Role.EDITOR: 2, Role.OWNER: 3}


class ProjectPhase(str, Enum):
    INACTIVE = "Inactive"
    ACTIVE = "Active"
    TERMINATING = "Terminating"
    TERMINATED = "Terminated"


class ClusterPhase(str, Enum):
    PROVISIONING = "Provisioning"
    RUNNING = "Running"
    DEGRADED = "Degraded"
    TERMINATING = "Terminating"
    DELETED = "Deleted"


class AddonPhase(str, Enum):
    PENDING = "Pending"
    INSTALLED = "Installed"
    FAILED = "Failed"
