import logging

from kubeplane.database import models
from kubeplane.repositories.exceptions import AlreadyExistsError
from kubeplane.repositories.interfaces import IUserRepository
from kubeplane.services.exceptions import UserNotFoundError, ValidationError

logger = logging.getLogger(__name__)

class IdentityService:
    """외부 신원 제공자가 알려준 사용자를 컨트롤 플레인의 User 기록과 연결합니다."""

    def __init__(self, user_repo: IUserRepository):
        self.user_repo = user_repo

    def ensure_user(self, user_id: str, email: str) -> models.User:
        """
        인증된 사용자의 User 기록을 조회하고, 없으면 새로 만듭니다.

        같은 사용자의 첫 요청이 동시에 들어와 생성이 충돌하면,
        먼저 만들어진 기록을 다시 읽어 반환합니다.

        Raises:
            ValidationError: user_id가 비어 있을 때.
        """
        if not user_id:
            raise ValidationError("User id must not be empty.")

        user = self.user_repo.find_by_id(user_id)
        if user:
            return user

        try:
            user = self.user_repo.create(models.User(id=user_id, email=email or ""))
            logger.info("Registered user '%s'", user_id)
            return user
        except AlreadyExistsError:
            return self.user_repo.find_by_id(user_id)

    def get_user(self, user_id: str) -> models.User:
        """
        Raises:
            UserNotFoundError: 해당 ID의 사용자를 찾을 수 없을 때.
        """
        user = self.user_repo.find_by_id(user_id)
        if not user:
            raise UserNotFoundError(f"User with id '{user_id}' not found.")
        return user
