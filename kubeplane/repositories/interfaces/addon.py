from abc import ABC, abstractmethod
from typing import Optional
from kubeplane.database import models

class IAddonRepository(ABC):
    @abstractmethod
    def create(self, addon_model: models.Addon) -> models.Addon:
        """
        새로운 애드온 기록을 생성합니다.

        Raises:
            AlreadyExistsError: 같은 클러스터에 같은 이름의 애드온이 이미 존재할 때.
        """
        pass

    @abstractmethod
    def find_by_cluster_and_name(self, cluster_id: str, name: str) -> Optional[models.Addon]:
        """클러스터 내에서 이름으로 애드온을 조회합니다."""
        pass

    @abstractmethod
    def delete(self, addon: models.Addon) -> bool:
        """애드온 기록을 삭제합니다."""
        pass
