import logging
from typing import Any, Dict, List, Optional

from kubeplane.backends.interfaces import ClusterBackend
from kubeplane.database import models
from kubeplane.database.models import AddonPhase, ClusterPhase, ProjectPhase, Role
from kubeplane.repositories.exceptions import AlreadyExistsError
from kubeplane.repositories.interfaces import IClusterRepository, IAddonRepository
from kubeplane.services.authorization_service import AuthorizationService
from kubeplane.services.exceptions import (
    ClusterNotFoundError, ConflictError, TerminalError
)
from kubeplane.services.project_service import PROJECT_RESOURCE, ProjectService
from kubeplane.utils.ids import generate_id

logger = logging.getLogger(__name__)

_TERMINATING_PHASES = (ProjectPhase.TERMINATING.value, ProjectPhase.TERMINATED.value)

class ClusterService:
    def __init__(
        self,
        cluster_repo: IClusterRepository,
        addon_repo: IAddonRepository,
        project_service: ProjectService,
        authorization: AuthorizationService,
        backend: Optional[ClusterBackend] = None,
    ):
        """
        ClusterService를 초기화합니다.

        Args:
            cluster_repo: 클러스터 데이터에 접근하기 위한 리포지토리.
            addon_repo: 애드온 데이터에 접근하기 위한 리포지토리.
            project_service: 마지막 클러스터 삭제 후 프로젝트를 정리하기 위한 서비스.
            authorization: 조회 요청의 권한 판단을 위한 서비스.
            backend: 실제로 클러스터를 올리고 내리는 백엔드. 조회만 하는 경우 생략할 수 있습니다.
        """
        self.cluster_repo = cluster_repo
        self.addon_repo = addon_repo
        self.project_service = project_service
        self.authorization = authorization
        self.backend = backend

    def create_cluster(self, project: models.Project, name: str, provider_spec: Dict[str, Any]) -> models.Cluster:
        """
        프로젝트에 새 클러스터를 Provisioning 상태로 기록하고 백엔드에 생성을 요청합니다.

        백엔드 요청이 실패하면 방금 만든 기록을 지우고 TerminalError를 발생시킵니다.

        Raises:
            ConflictError: 프로젝트가 삭제 중이거나 클러스터 ID가 충돌할 때.
            TerminalError: 백엔드가 없거나 생성 요청이 실패했을 때.
        """
        if project.phase in _TERMINATING_PHASES:
            raise ConflictError(
                PROJECT_RESOURCE, project.display_name,
                message=f"Project '{project.id}' is {project.phase.lower()}, clusters cannot be created.",
            )
        backend = self._require_backend()

        cluster = models.Cluster(
            id=generate_id(),
            name=name,
            project_id=project.id,
            provider_spec=provider_spec or {},
            phase=ClusterPhase.PROVISIONING.value,
        )
        try:
            created = self.cluster_repo.create(cluster)
        except AlreadyExistsError as e:
            raise ConflictError("clusters.kubeplane.io", cluster.id) from e

        try:
            backend.create_cluster(created)
        except Exception as e:
            logger.error("Backend failed to create cluster '%s': %s. Removing record...", created.id, e)
            self.cluster_repo.delete(created)
            raise TerminalError(f"Failed to create cluster '{name}': {e}") from e

        logger.info("Cluster '%s' (%s) requested in project '%s'", name, created.id, project.id)
        return created

    def get_cluster(self, cluster_id: str) -> models.Cluster:
        """
        Raises:
            ClusterNotFoundError: 해당 ID의 클러스터를 찾을 수 없을 때.
        """
        cluster = self.cluster_repo.find_by_id(cluster_id)
        if not cluster:
            raise ClusterNotFoundError(f"Cluster with id '{cluster_id}' not found.")
        return cluster

    def list_clusters(self, user_id: str, project_id: str) -> List[models.Cluster]:
        """프로젝트 멤버에게 프로젝트의 클러스터 목록을 반환합니다."""
        self.authorization.authorize(user_id, project_id, Role.VIEWER, hide_existence=True)
        return self.cluster_repo.list_by_project_id(project_id)

    def get_project_cluster(self, user_id: str, project_id: str, cluster_id: str) -> models.Cluster:
        """
        Raises:
            ProjectNotFoundError: 프로젝트가 없거나 사용자가 멤버가 아닐 때.
            ClusterNotFoundError: 클러스터가 없거나 다른 프로젝트에 속할 때.
        """
        self.authorization.authorize(user_id, project_id, Role.VIEWER, hide_existence=True)
        cluster = self.cluster_repo.find_by_id(cluster_id)
        if not cluster or cluster.project_id != project_id:
            raise ClusterNotFoundError(f"Cluster with id '{cluster_id}' not found.")
        return cluster

    def set_phase(self, cluster: models.Cluster, phase: ClusterPhase) -> models.Cluster:
        return self.cluster_repo.update_phase(cluster, phase)

    def delete_cluster(self, cluster_id: str) -> bool:
        """
        클러스터를 삭제하고, 소유 프로젝트가 삭제 대기 중이었다면 정리합니다.

        백엔드 삭제 요청은 완료를 기다리지 않습니다. 기록은 백엔드 요청이 성공한 뒤에만 지웁니다.

        Raises:
            ClusterNotFoundError: 해당 ID의 클러스터를 찾을 수 없을 때.
        """
        cluster = self.get_cluster(cluster_id)
        backend = self._require_backend()
        project_id = cluster.project_id

        cluster = self.cluster_repo.update_phase(cluster, ClusterPhase.TERMINATING)
        backend.delete_cluster(cluster)
        self.cluster_repo.delete(cluster)
        logger.info("Cluster '%s' deleted from project '%s'", cluster_id, project_id)

        self.project_service.finalize_if_drained(project_id)
        return True

    def create_addon(self, cluster: models.Cluster, name: str) -> models.Addon:
        """
        클러스터에 애드온 설치를 요청합니다. 이미 존재하면 기존 기록을 그대로 반환합니다.
        """
        addon = models.Addon(cluster_id=cluster.id, name=name, phase=AddonPhase.PENDING.value)
        try:
            created = self.addon_repo.create(addon)
        except AlreadyExistsError:
            logger.info("Addon '%s' already exists on cluster '%s'", name, cluster.id)
            return self.addon_repo.find_by_cluster_and_name(cluster.id, name)
        logger.info("Addon '%s' requested on cluster '%s'", name, cluster.id)
        return created

    def delete_addon(self, cluster_id: str, name: str) -> bool:
        addon = self.addon_repo.find_by_cluster_and_name(cluster_id, name)
        if not addon:
            logger.info("Addon '%s' not found on cluster '%s', skipping delete", name, cluster_id)
            return False
        return self.addon_repo.delete(addon)

    def _require_backend(self) -> ClusterBackend:
        if self.backend is None:
            raise TerminalError("No cluster backend is configured.")
        return self.backend
