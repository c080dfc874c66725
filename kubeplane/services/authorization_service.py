from typing import Iterable, List, Optional

from kubeplane.database import models
from kubeplane.database.models import Role
from kubeplane.repositories.interfaces import IMembershipRepository, IProjectRepository
from kubeplane.services.exceptions import ForbiddenError, ProjectNotFoundError

class AuthorizationService:
    """
    멤버십 바인딩으로부터 사용자의 프로젝트 역할을 판단하고,
    조회/목록/변경 요청의 허용 여부를 결정합니다.

    멤버십 상태를 읽기만 하므로 부수 효과가 없고, 동시에 몇 명이 호출해도 안전합니다.
    """

    def __init__(self, membership_repo: IMembershipRepository, project_repo: IProjectRepository):
        self.membership_repo = membership_repo
        self.project_repo = project_repo

    def role(self, user_id: str, project_id: str) -> Optional[Role]:
        """사용자의 프로젝트 역할을 반환합니다. 멤버가 아니면 None."""
        membership = self.membership_repo.find(user_id, project_id)
        if not membership:
            return None
        return Role(membership.role)

    def filter_visible(self, user_id: str, projects: Iterable[models.Project]) -> List[models.Project]:
        """
        사용자가 어떤 역할이든 가지고 있는 프로젝트만 남깁니다.

        입력 순서를 그대로 유지하며 정렬하지 않습니다. 정렬은 호출자의 몫입니다.
        """
        visible_ids = {m.project_id for m in self.membership_repo.list_by_user(user_id)}
        return [p for p in projects if p.id in visible_ids]

    def authorize(self, user_id: str, project_id: str, required_role: Role,
                  hide_existence: bool = False) -> models.Project:
        """
        사용자가 프로젝트에 대해 required_role 이상의 역할을 가졌는지 확인합니다.

        Args:
            user_id: 요청한 사용자의 ID.
            project_id: 대상 프로젝트의 ID.
            required_role: 필요한 최소 역할. OWNER는 정확히 소유자만 통과합니다.
            hide_existence: True이면 멤버가 아닌 사용자에게 Forbidden 대신 NotFound를
                반환하여 프로젝트의 존재 여부를 숨깁니다.

        Returns:
            권한 확인을 통과한 프로젝트 모델.

        Raises:
            ProjectNotFoundError: 프로젝트가 없거나, 존재를 숨겨야 할 때.
            ForbiddenError: 역할이 없거나 required_role보다 낮을 때.
        """
        project = self.project_repo.find_by_id(project_id)
        if not project:
            raise ProjectNotFoundError(f"Project with id '{project_id}' not found.")

        role = self.role(user_id, project_id)
        if role is None:
            if hide_existence:
                raise ProjectNotFoundError(f"Project with id '{project_id}' not found.")
            raise ForbiddenError(f"User '{user_id}' is not a member of project '{project_id}'.")

        if not role.covers(required_role):
            raise ForbiddenError(
                f"User '{user_id}' has role '{role.value}' in project '{project_id}', "
                f"but '{required_role.value}' is required."
            )
        return project
