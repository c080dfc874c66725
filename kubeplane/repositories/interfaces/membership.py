from abc import ABC, abstractmethod
from typing import List, Optional
from kubeplane.database import models

class IMembershipRepository(ABC):
    @abstractmethod
    def find(self, user_id: str, project_id: str) -> Optional[models.Membership]:
        """사용자의 특정 프로젝트 멤버십을 조회합니다."""
        pass

    @abstractmethod
    def list_by_user(self, user_id: str) -> List[models.Membership]:
        """사용자가 가진 모든 멤버십을 조회합니다."""
        pass

    @abstractmethod
    def list_by_project(self, project_id: str) -> List[models.Membership]:
        """특정 프로젝트에 속한 모든 멤버십을 조회합니다."""
        pass

    @abstractmethod
    def upsert(self, membership: models.Membership) -> models.Membership:
        """멤버십을 생성하거나, 이미 존재하면 역할을 덮어씁니다."""
        pass

    @abstractmethod
    def delete(self, membership: models.Membership) -> bool:
        """멤버십을 삭제합니다."""
        pass
