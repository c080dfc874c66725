# kubeplane/backends/interfaces.py
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from kubeplane.database import models


@dataclass
class ClusterHealth:
    """
    상태 보고자가 알려주는 클러스터의 건강 상태.

    fatal_error가 있으면 프로비저닝이 복구 불가능하게 실패한 것이고,
    all_healthy가 False이면 아직 준비 중인 것입니다.
    """
    all_healthy: bool
    fatal_error: Optional[str] = None


@dataclass
class WorkloadSpec:
    """관리자 클라이언트를 통해 대상 클러스터에 생성할 워크로드."""
    name: str
    namespace: str = "kube-system"
    replicas: int = 1
    spec: Dict[str, Any] = field(default_factory=dict)


class ClusterBackend(ABC):
    """클라우드 제공자에서 실제로 클러스터를 올리고 내리는 백엔드."""

    @abstractmethod
    def create_cluster(self, cluster: models.Cluster) -> None:
        """클러스터 생성을 요청합니다. 완료를 기다리지 않습니다."""
        pass

    @abstractmethod
    def delete_cluster(self, cluster: models.Cluster) -> None:
        """클러스터 삭제를 요청합니다. 완료를 기다리지 않습니다."""
        pass


class ClusterStatusReporter(ABC):
    @abstractmethod
    def health(self, cluster: models.Cluster) -> ClusterHealth:
        """클러스터의 현재 건강 상태를 조회합니다."""
        pass


class AdminClient(ABC):
    """사용자 클러스터에 대한 관리자 권한 클라이언트."""

    @abstractmethod
    def create_workload(self, spec: WorkloadSpec) -> None:
        pass


class AdminCredentialIssuer(ABC):
    @abstractmethod
    def admin_client(self, cluster: models.Cluster) -> AdminClient:
        """
        클러스터의 관리자 클라이언트를 발급합니다.

        접근 엔드포인트가 아직 준비되지 않았다면 예외를 발생시킵니다.
        """
        pass
