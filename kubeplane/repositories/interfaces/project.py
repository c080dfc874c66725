from abc import ABC, abstractmethod
from typing import List, Optional
from kubeplane.database import models

class IProjectRepository(ABC):
    @abstractmethod
    def create_with_owner(self, project_model: models.Project, owner: models.Membership) -> models.Project:
        """
        프로젝트와 Owner 멤버십을 하나의 트랜잭션으로 생성합니다.

        둘 중 하나라도 실패하면 어느 쪽도 저장되지 않습니다.

        Raises:
            AlreadyExistsError: 같은 소유자의 같은 이름 프로젝트가 이미 존재할 때.
            IdCollisionError: 프로젝트 ID가 다른 프로젝트와 겹칠 때.
            IntegrityError: 그 밖의 제약 조건 위반 (예: 소유자 User 기록이 없을 때).
        """
        pass

    @abstractmethod
    def find_by_id(self, project_id: str) -> Optional[models.Project]:
        """고유 ID로 특정 프로젝트를 조회합니다."""
        pass

    @abstractmethod
    def find_by_owner_and_display_name(self, owner_id: str, display_name: str) -> Optional[models.Project]:
        """특정 사용자가 소유한 프로젝트 중 이름이 일치하는 프로젝트를 조회합니다."""
        pass

    @abstractmethod
    def list_all(self) -> List[models.Project]:
        """모든 프로젝트의 목록을 조회합니다. 순서는 보장하지 않습니다."""
        pass

    @abstractmethod
    def list_by_member(self, user_id: str) -> List[models.Project]:
        """사용자가 멤버십을 가진 프로젝트만 조회합니다. 순서는 보장하지 않습니다."""
        pass

    @abstractmethod
    def update_phase(self, project: models.Project, phase: models.ProjectPhase) -> models.Project:
        """프로젝트의 phase를 변경합니다."""
        pass

    @abstractmethod
    def delete(self, project: models.Project) -> bool:
        """프로젝트와 그 멤버십 전체를 데이터베이스에서 삭제합니다."""
        pass
