from .enums import Role, ProjectPhase, ClusterPhase, AddonPhase
from .user import User
from .membership import Membership
from .project import Project
from .cluster import Cluster
from .addon import Addon

__all__ = [
    "Role", "ProjectPhase", "ClusterPhase", "AddonPhase",
    "User", "Membership", "Project", "Cluster", "Addon",
]
