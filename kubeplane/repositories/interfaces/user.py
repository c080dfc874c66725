from abc import ABC, abstractmethod
from typing import Optional
from kubeplane.database import models

class IUserRepository(ABC):
    @abstractmethod
    def create(self, user_model: models.User) -> models.User:
        """
        새로운 사용자를 데이터베이스에 생성합니다.

        Raises:
            AlreadyExistsError: 같은 ID의 사용자가 이미 존재할 때.
        """
        pass

    @abstractmethod
    def find_by_id(self, user_id: str) -> Optional[models.User]:
        """고유 ID로 특정 사용자를 조회합니다."""
        pass
