import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from kubeplane.backends.interfaces import (
    AdminClient, AdminCredentialIssuer, ClusterStatusReporter, WorkloadSpec
)
from kubeplane.config import Settings, get_settings
from kubeplane.database import models
from kubeplane.database.models import ClusterPhase
from kubeplane.services.cluster_service import ClusterService
from kubeplane.services.exceptions import (
    ClusterNotFoundError, PollCancelledError, ProvisioningError, TerminalError, TransientError
)
from kubeplane.services.project_service import ProjectService
from kubeplane.utils.readiness import CancelToken, ReadinessPoller
from kubeplane.utils.teardown import CompensationFailure, TeardownStack

logger = logging.getLogger(__name__)


@dataclass
class ProvisioningRequest:
    project_name: str
    cluster_name: str
    provider_spec: Dict[str, Any]
    addon_name: str
    workload: WorkloadSpec


@dataclass
class ProvisioningTask:
    """
    한 번의 프로비저닝 실행 기록. 저장되지 않으며 실행이 끝나면 버려집니다.

    성공한 실행의 teardown_stack에는 생성된 리소스를 되돌리는 보상 작업이 남아 있으므로,
    호출자는 teardown()으로 언제든 명시적으로 정리할 수 있습니다.
    """
    steps: List[str]
    current_index: int = 0
    teardown_stack: TeardownStack = field(default_factory=TeardownStack)
    project: Optional[models.Project] = None
    cluster: Optional[models.Cluster] = None
    addon: Optional[models.Addon] = None
    admin_client: Optional[AdminClient] = None

    @property
    def current_step(self) -> str:
        return self.steps[self.current_index]

    def teardown(self) -> List[CompensationFailure]:
        return self.teardown_stack.unwind_all()


class ProvisioningService:
    """
    프로젝트 → 클러스터 → 애드온 → 워크로드 순서로 리소스를 생성합니다.

    각 단계는 앞 단계의 준비 조건이 충족된 뒤에만 시작합니다. 어느 단계든 복구할 수 없는
    오류, 시간 초과, 취소로 실패하면 그때까지 쌓인 보상 작업을 역순으로 모두 실행한 뒤
    ProvisioningError를 발생시킵니다. 재시도는 ReadinessPoller 안에서만 일어납니다.
    """

    STEPS = (
        "create_project",
        "create_cluster",
        "wait_for_healthy",
        "create_addon",
        "retrieve_admin_client",
        "create_workload",
    )

    def __init__(
        self,
        project_service: ProjectService,
        cluster_service: ClusterService,
        status_reporter: ClusterStatusReporter,
        credential_issuer: AdminCredentialIssuer,
        poller: Optional[ReadinessPoller] = None,
        settings: Optional[Settings] = None,
    ):
        self.project_service = project_service
        self.cluster_service = cluster_service
        self.status_reporter = status_reporter
        self.credential_issuer = credential_issuer
        self.poller = poller or ReadinessPoller()
        self.settings = settings or get_settings()

    def provision(self, user_id: str, request: ProvisioningRequest,
                  cancel_token: Optional[CancelToken] = None) -> ProvisioningTask:
        """
        파이프라인 전체를 순서대로 실행합니다.

        Args:
            user_id: 프로젝트 Owner가 될 사용자의 ID.
            request: 생성할 프로젝트/클러스터/애드온/워크로드 정보.
            cancel_token: 실행을 중단시키기 위한 토큰. 취소되어도 롤백은 수행됩니다.

        Returns:
            모든 단계가 끝난 ProvisioningTask.

        Raises:
            ProvisioningError: 한 단계가 실패했을 때. 롤백이 끝난 뒤에 발생합니다.
        """
        token = cancel_token or CancelToken()
        task = ProvisioningTask(steps=list(self.STEPS))

        for index, step in enumerate(task.steps):
            task.current_index = index
            try:
                if token.cancelled:
                    raise PollCancelledError(f"provisioning cancelled before step '{step}'")
                logger.info("Provisioning step %d/%d: %s", index + 1, len(task.steps), step)
                getattr(self, f"_{step}")(task, user_id, request, token)
            except Exception as e:
                logger.error("Provisioning step '%s' failed: %s. Starting rollback...", step, e)
                failures = task.teardown()
                if failures:
                    logger.warning("Rollback finished with %d failed compensation(s)", len(failures))
                raise ProvisioningError(step, e, failures) from e

        logger.info("Provisioning of project '%s' finished", task.project.id)
        return task

    # --------------------------------------------------------------------------
    ## 파이프라인 단계
    # --------------------------------------------------------------------------

    def _create_project(self, task, user_id, request, token):
        project = self.project_service.create_project(user_id, request.project_name)
        task.project = project
        project_id = project.id
        task.teardown_stack.push(
            lambda: self.project_service.delete_project(user_id, project_id),
            f"delete project {project_id}",
        )

    def _create_cluster(self, task, user_id, request, token):
        cluster = self.cluster_service.create_cluster(task.project, request.cluster_name, request.provider_spec)
        task.cluster = cluster
        cluster_id = cluster.id
        task.teardown_stack.push(
            lambda: self.cluster_service.delete_cluster(cluster_id),
            f"delete cluster {cluster_id}",
        )

    def _wait_for_healthy(self, task, user_id, request, token):
        cluster_id = task.cluster.id

        def check():
            try:
                cluster = self.cluster_service.get_cluster(cluster_id)
            except ClusterNotFoundError as e:
                return None, TerminalError(f"cluster disappeared while provisioning: {e}")
            try:
                health = self.status_reporter.health(cluster)
            except Exception as e:
                return TransientError(f"failed to retrieve cluster health: {e}"), None
            if health.fatal_error:
                return None, TerminalError(f"cluster provisioning failed: {health.fatal_error}")
            if not health.all_healthy:
                return TransientError("cluster is not all healthy"), None
            return None, None

        self.poller.poll(
            check,
            self.settings.health_poll_interval,
            self.settings.health_poll_timeout,
            token,
            description=f"cluster {cluster_id} to become healthy",
        )
        task.cluster = self.cluster_service.set_phase(
            self.cluster_service.get_cluster(cluster_id), ClusterPhase.RUNNING
        )

    def _create_addon(self, task, user_id, request, token):
        cluster_id = task.cluster.id
        addon_name = request.addon_name
        try:
            task.addon = self.cluster_service.create_addon(task.cluster, addon_name)
        except Exception as e:
            raise TerminalError(f"failed to create addon '{addon_name}': {e}") from e
        task.teardown_stack.push(
            lambda: self.cluster_service.delete_addon(cluster_id, addon_name),
            f"delete addon {addon_name}",
        )

    def _retrieve_admin_client(self, task, user_id, request, token):
        # 노출 메커니즘이 준비될 때까지 몇 번 실패할 수 있음
        cluster = task.cluster
        client = None

        def check():
            nonlocal client
            try:
                client = self.credential_issuer.admin_client(cluster)
            except Exception as e:
                return e, None
            return None, None

        self.poller.poll(
            check,
            self.settings.admin_client_poll_interval,
            self.settings.admin_client_poll_timeout,
            token,
            description=f"cluster {cluster.id} to become reachable",
        )
        task.admin_client = client

    def _create_workload(self, task, user_id, request, token):
        client = task.admin_client
        workload = request.workload

        def check():
            try:
                client.create_workload(workload)
            except Exception as e:
                return e, None
            return None, None

        # 워크로드의 생명주기는 클러스터가 소유하므로 보상 작업을 쌓지 않음
        self.poller.poll_immediate(
            check,
            self.settings.workload_poll_interval,
            self.settings.workload_poll_timeout,
            token,
            description=f"workload {workload.name} to be created",
        )
