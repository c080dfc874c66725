import logging
from typing import Callable, List, Optional

from kubeplane.config import Settings, get_settings
from kubeplane.database import models
from kubeplane.database.models import ProjectPhase, Role
from kubeplane.repositories.exceptions import AlreadyExistsError, IdCollisionError
from kubeplane.repositories.interfaces import (
    IProjectRepository, IMembershipRepository, IClusterRepository, IUserRepository
)
from kubeplane.services.authorization_service import AuthorizationService
from kubeplane.services.exceptions import (
    ConflictError, UserNotFoundError, ValidationError
)
from kubeplane.utils.ids import generate_id

logger = logging.getLogger(__name__)

PROJECT_RESOURCE = "projects.kubeplane.io"
MAX_ID_ATTEMPTS = 5

class ProjectService:
    """프로젝트의 생성, 조회, 삭제와 멤버십 관리를 담당하는 상태 머신입니다."""

    def __init__(
        self,
        project_repo: IProjectRepository,
        membership_repo: IMembershipRepository,
        cluster_repo: IClusterRepository,
        user_repo: IUserRepository,
        authorization: AuthorizationService,
        settings: Optional[Settings] = None,
        id_generator: Optional[Callable[[int], str]] = None,
    ):
        """
        ProjectService를 초기화합니다.

        Args:
            project_repo: 프로젝트 데이터에 접근하기 위한 리포지토리.
            membership_repo: 멤버십 데이터에 접근하기 위한 리포지토리.
            cluster_repo: 클러스터 데이터에 접근하기 위한 리포지토리 (삭제 시 잔여 클러스터 확인용).
            user_repo: 사용자 데이터에 접근하기 위한 리포지토리 (멤버 추가 시 검증용).
            authorization: 역할 기반 권한 판단을 위한 서비스.
            settings: 이름 길이, ID 길이 등의 설정. 생략하면 전역 설정을 사용합니다.
            id_generator: 프로젝트 ID 생성 함수. 테스트에서 고정 ID를 주입할 때 사용합니다.
        """
        self.project_repo = project_repo
        self.membership_repo = membership_repo
        self.cluster_repo = cluster_repo
        self.user_repo = user_repo
        self.authorization = authorization
        self.settings = settings or get_settings()
        self.id_generator = id_generator or generate_id

    # --------------------------------------------------------------------------
    ## 프로젝트 생명주기
    # --------------------------------------------------------------------------

    def create_project(self, user_id: str, display_name: str) -> models.Project:
        """
        새로운 프로젝트를 Inactive 상태로 생성하고, 요청자를 Owner로 등록합니다.

        프로젝트와 Owner 멤버십은 하나의 트랜잭션으로 저장됩니다.
        동시에 같은 이름으로 생성 요청이 들어와도 저장소의 유니크 제약 조건이
        하나만 통과시키므로 별도의 잠금을 사용하지 않습니다.

        Args:
            user_id: 프로젝트를 생성하는 사용자의 ID. 이 사용자가 Owner가 됩니다.
            display_name: 사용자에게 보이는 프로젝트 이름.

        Returns:
            생성된 프로젝트 모델.

        Raises:
            ValidationError: 이름이 비어 있거나 너무 길 때.
            UserNotFoundError: 요청한 사용자의 User 기록이 없을 때.
            ConflictError: 같은 사용자가 같은 이름의 프로젝트를 이미 소유하고 있을 때.
            IdCollisionError: 새로 생성한 ID가 매번 기존 프로젝트와 겹칠 때.
        """
        display_name = self._validate_display_name(display_name)

        if not self.user_repo.find_by_id(user_id):
            raise UserNotFoundError(f"User with id '{user_id}' not found.")

        existing = self.project_repo.find_by_owner_and_display_name(user_id, display_name)
        if existing:
            raise ConflictError(PROJECT_RESOURCE, display_name)

        for attempt in range(1, MAX_ID_ATTEMPTS + 1):
            project = models.Project(
                id=self.id_generator(self.settings.project_id_length),
                display_name=display_name,
                owner_id=user_id,
                phase=ProjectPhase.INACTIVE.value,
            )
            owner = models.Membership(user_id=user_id, project_id=project.id, role=Role.OWNER.value)
            try:
                created = self.project_repo.create_with_owner(project, owner)
                break
            except AlreadyExistsError as e:
                raise ConflictError(PROJECT_RESOURCE, display_name) from e
            except IdCollisionError:
                if attempt == MAX_ID_ATTEMPTS:
                    raise
                logger.warning("Generated project id '%s' is taken, retrying (%d/%d)",
                               project.id, attempt, MAX_ID_ATTEMPTS)

        logger.info("Project '%s' (%s) created by '%s'", display_name, created.id, user_id)
        return created

    def get_project(self, user_id: str, project_id: str) -> models.Project:
        """
        ID로 특정 프로젝트를 조회합니다. 어떤 역할이든 가진 멤버만 조회할 수 있습니다.

        Raises:
            ProjectNotFoundError: 프로젝트가 없거나 사용자가 멤버가 아닐 때.
        """
        return self.authorization.authorize(user_id, project_id, Role.VIEWER, hide_existence=True)

    def list_projects(self, user_id: str) -> List[models.Project]:
        """사용자가 멤버인 프로젝트 목록을 생성 시각(동률이면 ID) 순으로 반환합니다."""
        # 후보는 저장소가 멤버십으로 좁히고, 가시성 판단은 AuthorizationService가 한다
        candidates = self.project_repo.list_by_member(user_id)
        visible = self.authorization.filter_visible(user_id, candidates)
        return sorted(visible, key=lambda p: (p.created_at, p.id))

    def delete_project(self, user_id: str, project_id: str) -> models.Project:
        """
        프로젝트를 삭제합니다. Owner만 삭제할 수 있습니다.

        프로젝트는 먼저 Terminating 상태가 되고, 남은 클러스터가 없으면 즉시
        멤버십과 함께 제거되어 Terminated 상태로 반환됩니다. 클러스터가 남아 있으면
        Terminating 상태로 대기하며, 마지막 클러스터가 삭제될 때 정리됩니다.

        Raises:
            ProjectNotFoundError: 해당 ID의 프로젝트를 찾을 수 없을 때.
            ForbiddenError: 사용자가 프로젝트의 Owner가 아닐 때. 이 경우 아무것도 변경되지 않습니다.
        """
        project = self.authorization.authorize(user_id, project_id, Role.OWNER)

        if project.phase != ProjectPhase.TERMINATING.value:
            project = self.project_repo.update_phase(project, ProjectPhase.TERMINATING)
            logger.info("Project '%s' is terminating (requested by '%s')", project_id, user_id)

        terminated = self.finalize_if_drained(project_id)
        return terminated or project

    def finalize_if_drained(self, project_id: str) -> Optional[models.Project]:
        """
        Terminating 상태의 프로젝트에 클러스터가 하나도 없으면 프로젝트를 제거합니다.

        Returns:
            제거되었다면 Terminated 상태의 프로젝트 사본, 아니면 None.
        """
        project = self.project_repo.find_by_id(project_id)
        if not project or project.phase != ProjectPhase.TERMINATING.value:
            return None

        remaining = self.cluster_repo.count_by_project_id(project_id)
        if remaining > 0:
            logger.info("Project '%s' still owns %d cluster(s), deletion queued", project_id, remaining)
            return None

        terminated = models.Project(
            id=project.id,
            display_name=project.display_name,
            owner_id=project.owner_id,
            phase=ProjectPhase.TERMINATED.value,
            created_at=project.created_at,
        )
        self.project_repo.delete(project)
        logger.info("Project '%s' terminated", project_id)
        return terminated

    def mark_active(self, project_id: str) -> None:
        """
        외부 reconciler가 프로젝트를 Active로 승격했다는 알림을 받습니다.

        phase 변경은 reconciler가 저장소에 직접 기록하므로 여기서는 아무것도 하지 않습니다.
        """
        logger.debug("Project '%s' reported active by reconciler", project_id)

    # --------------------------------------------------------------------------
    ## 멤버십 관리
    # --------------------------------------------------------------------------

    def list_members(self, user_id: str, project_id: str) -> List[models.Membership]:
        """
        프로젝트의 모든 멤버십을 조회합니다.

        Raises:
            ProjectNotFoundError: 프로젝트가 없거나 사용자가 멤버가 아닐 때.
        """
        self.authorization.authorize(user_id, project_id, Role.VIEWER, hide_existence=True)
        return self.membership_repo.list_by_project(project_id)

    def assign_member(self, user_id: str, project_id: str, member_id: str, role_name: str) -> models.Membership:
        """
        다른 사용자에게 프로젝트의 Editor 또는 Viewer 역할을 부여합니다.

        프로젝트당 Owner는 정확히 하나여야 하므로 Owner 역할은 부여할 수 없고,
        Owner 본인의 역할도 바꿀 수 없습니다.

        Raises:
            ForbiddenError: 요청자가 Owner가 아닐 때.
            ValidationError: 알 수 없는 역할이거나, Owner 불변 조건을 깨뜨리는 요청일 때.
            UserNotFoundError: 대상 사용자를 찾을 수 없을 때.
        """
        project = self.authorization.authorize(user_id, project_id, Role.OWNER)
        role = self._parse_role(role_name)
        if role == Role.OWNER:
            raise ValidationError("The owner role cannot be assigned; a project has exactly one owner.")
        if member_id == project.owner_id:
            raise ValidationError("The project owner's role cannot be changed.")

        if not self.user_repo.find_by_id(member_id):
            raise UserNotFoundError(f"User with id '{member_id}' not found.")

        membership = self.membership_repo.upsert(
            models.Membership(user_id=member_id, project_id=project_id, role=role.value)
        )
        logger.info("User '%s' is now %s of project '%s'", member_id, role.value, project_id)
        return membership

    def revoke_member(self, user_id: str, project_id: str, member_id: str) -> bool:
        """
        사용자의 프로젝트 멤버십을 회수합니다. Owner의 멤버십은 회수할 수 없습니다.

        Raises:
            ForbiddenError: 요청자가 Owner가 아닐 때.
            ValidationError: Owner의 멤버십을 회수하려 할 때.
            UserNotFoundError: 대상 사용자가 프로젝트의 멤버가 아닐 때.
        """
        self.authorization.authorize(user_id, project_id, Role.OWNER)
        membership = self.membership_repo.find(member_id, project_id)
        if not membership:
            raise UserNotFoundError(f"User '{member_id}' is not a member of project '{project_id}'.")
        if membership.role == Role.OWNER.value:
            raise ValidationError("The project owner cannot be removed from the project.")

        self.membership_repo.delete(membership)
        logger.info("User '%s' removed from project '%s'", member_id, project_id)
        return True

    def _validate_display_name(self, display_name) -> str:
        if not isinstance(display_name, str) or not display_name.strip():
            raise ValidationError("Project name must be a non-empty string.")
        display_name = display_name.strip()
        if len(display_name) > self.settings.project_name_max_length:
            raise ValidationError(
                f"Project name must be at most {self.settings.project_name_max_length} characters."
            )
        return display_name

    @staticmethod
    def _parse_role(role_name) -> Role:
        try:
            return Role(role_name)
        except ValueError:
            raise ValidationError(f"Unknown role '{role_name}'.")
