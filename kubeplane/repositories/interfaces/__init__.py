from .user import IUserRepository
from .project import IProjectRepository
from .membership import IMembershipRepository
from .cluster import IClusterRepository
from .addon import IAddonRepository

__all__ = [
    "IUserRepository",
    "IProjectRepository",
    "IMembershipRepository",
    "IClusterRepository",
    "IAddonRepository",
]
