# tests/services/test_cluster_service.py
import pytest
from unittest.mock import MagicMock

from kubeplane.backends.interfaces import ClusterBackend
from kubeplane.database import models
from kubeplane.database.models import ClusterPhase, ProjectPhase
from kubeplane.repositories.sqlalchemy.sqlalchemy_user_repository import SqlalchemyUserRepository
from kubeplane.repositories.sqlalchemy.sqlalchemy_project_repository import SqlalchemyProjectRepository
from kubeplane.repositories.sqlalchemy.sqlalchemy_membership_repository import SqlalchemyMembershipRepository
from kubeplane.repositories.sqlalchemy.sqlalchemy_cluster_repository import SqlalchemyClusterRepository
from kubeplane.repositories.sqlalchemy.sqlalchemy_addon_repository import SqlalchemyAddonRepository
from kubeplane.services.authorization_service import AuthorizationService
from kubeplane.services.cluster_service import ClusterService
from kubeplane.services.project_service import ProjectService
from kubeplane.services.exceptions import *

# ===================================================================
#  Fixture 설정
# ===================================================================

@pytest.fixture
def mock_backend() -> MagicMock:
    """ClusterBackend에 대한 모의 객체를 생성합니다."""
    return MagicMock(spec=ClusterBackend)

@pytest.fixture
def project_service(db_session, settings) -> ProjectService:
    user_repo = SqlalchemyUserRepository(db_session)
    user_repo.create(models.User(id="john", email="john@acme.com"))
    project_repo = SqlalchemyProjectRepository(db_session)
    membership_repo = SqlalchemyMembershipRepository(db_session)
    authorization = AuthorizationService(membership_repo, project_repo)
    return ProjectService(
        project_repo, membership_repo, SqlalchemyClusterRepository(db_session), user_repo,
        authorization, settings=settings,
    )

@pytest.fixture
def cluster_service(db_session, project_service, mock_backend) -> ClusterService:
    return ClusterService(
        SqlalchemyClusterRepository(db_session),
        SqlalchemyAddonRepository(db_session),
        project_service,
        project_service.authorization,
        mock_backend,
    )

@pytest.fixture
def project(project_service) -> models.Project:
    return project_service.create_project("john", "demo")

# ===================================================================
#  클러스터 생성 테스트
# ===================================================================
class TestCreateCluster:
    def test_create_cluster_success(self, cluster_service, project, mock_backend):
        # === Act ===
        cluster = cluster_service.create_cluster(project, "prod", {"aws": {"region": "eu-central-1"}})

        # === Assert ===
        assert cluster.phase == ClusterPhase.PROVISIONING.value
        assert cluster.project_id == project.id
        assert cluster.provider_spec == {"aws": {"region": "eu-central-1"}}
        mock_backend.create_cluster.assert_called_once_with(cluster)

    def test_backend_failure_removes_record(self, cluster_service, project, mock_backend):
        """백엔드 생성 요청이 실패하면 기록을 남기지 않고 TerminalError가 발생합니다."""
        mock_backend.create_cluster.side_effect = RuntimeError("quota exceeded")

        with pytest.raises(TerminalError):
            cluster_service.create_cluster(project, "prod", {})

        assert cluster_service.cluster_repo.count_by_project_id(project.id) == 0

    def test_terminating_project_rejects_new_clusters(self, cluster_service, project_service, project, mock_backend):
        cluster_service.create_cluster(project, "prod", {})
        project_service.delete_project("john", project.id)

        with pytest.raises(ConflictError):
            cluster_service.create_cluster(project, "staging", {})
        assert mock_backend.create_cluster.call_count == 1

    def test_missing_backend_is_terminal(self, cluster_service, project):
        cluster_service.backend = None

        with pytest.raises(TerminalError):
            cluster_service.create_cluster(project, "prod", {})

# ===================================================================
#  클러스터 삭제 및 프로젝트 정리 테스트
# ===================================================================
class TestDeleteCluster:
    def test_last_cluster_finalizes_terminating_project(self, cluster_service, project_service, project, mock_backend):
        """삭제 대기 중인 프로젝트는 마지막 클러스터가 삭제될 때 함께 제거됩니다."""
        # === Arrange ===
        first = cluster_service.create_cluster(project, "a", {})
        second = cluster_service.create_cluster(project, "b", {})
        first_id, second_id, project_id = first.id, second.id, project.id
        queued = project_service.delete_project("john", project_id)
        assert queued.phase == ProjectPhase.TERMINATING.value

        # === Act & Assert ===
        cluster_service.delete_cluster(first_id)
        assert project_service.project_repo.find_by_id(project_id) is not None

        cluster_service.delete_cluster(second_id)
        assert project_service.project_repo.find_by_id(project_id) is None
        assert mock_backend.delete_cluster.call_count == 2

    def test_delete_unknown_cluster(self, cluster_service):
        with pytest.raises(ClusterNotFoundError):
            cluster_service.delete_cluster("nosuchcluster")

    def test_delete_addon_that_does_not_exist(self, cluster_service, project):
        cluster = cluster_service.create_cluster(project, "prod", {})
        assert cluster_service.delete_addon(cluster.id, "hubble") is False

# ===================================================================
#  클러스터 조회 테스트
# ===================================================================
class TestReadClusters:
    def test_cluster_of_another_project_is_not_found(self, cluster_service, project_service, project):
        other = project_service.create_project("john", "other")
        cluster = cluster_service.create_cluster(project, "prod", {})

        with pytest.raises(ClusterNotFoundError):
            cluster_service.get_project_cluster("john", other.id, cluster.id)

        assert cluster_service.get_project_cluster("john", project.id, cluster.id).id == cluster.id
        assert [c.id for c in cluster_service.list_clusters("john", project.id)] == [cluster.id]
