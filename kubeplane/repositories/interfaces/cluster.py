from abc import ABC, abstractmethod
from typing import List, Optional
from kubeplane.database import models

class IClusterRepository(ABC):
    @abstractmethod
    def create(self, cluster_model: models.Cluster) -> models.Cluster:
        """
        새로운 클러스터 정보를 데이터베이스에 생성합니다.

        Raises:
            AlreadyExistsError: 같은 ID의 클러스터가 이미 존재할 때.
        """
        pass

    @abstractmethod
    def find_by_id(self, cluster_id: str) -> Optional[models.Cluster]:
        """고유 ID로 특정 클러스터를 조회합니다."""
        pass

    @abstractmethod
    def list_by_project_id(self, project_id: str) -> List[models.Cluster]:
        """특정 프로젝트에 속한 모든 클러스터를 생성 시각 순으로 조회합니다."""
        pass

    @abstractmethod
    def count_by_project_id(self, project_id: str) -> int:
        """특정 프로젝트에 속한 클러스터의 개수를 조회합니다."""
        pass

    @abstractmethod
    def update_phase(self, cluster: models.Cluster, phase: models.ClusterPhase) -> models.Cluster:
        """클러스터의 phase를 변경합니다."""
        pass

    @abstractmethod
    def delete(self, cluster: models.Cluster) -> bool:
        """클러스터와 그 애드온 기록을 데이터베이스에서 삭제합니다."""
        pass
