# kubeplane/backends/identity.py
from abc import ABC, abstractmethod
from dataclasses import dataclass

from kubeplane.services.exceptions import UnauthenticatedError


@dataclass
class AuthenticatedUser:
    id: str
    email: str


class IdentityProvider(ABC):
    @abstractmethod
    def authenticate(self, environ) -> AuthenticatedUser:
        """
        WSGI 요청 환경에서 인증된 사용자를 꺼냅니다.

        Raises:
            UnauthenticatedError: 인증 정보가 없거나 유효하지 않을 때.
        """
        pass


class HeaderIdentityProvider(IdentityProvider):
    """
    앞단의 인증 프록시가 검증 후 붙여주는 헤더를 신뢰합니다.
    토큰 검증 자체는 프록시의 몫입니다.
    """

    def __init__(self, user_header: str = "X-Remote-User", email_header: str = "X-Remote-Email"):
        self.user_key = self._environ_key(user_header)
        self.email_key = self._environ_key(email_header)

    def authenticate(self, environ) -> AuthenticatedUser:
        user_id = environ.get(self.user_key, "").strip()
        if not user_id:
            raise UnauthenticatedError("Missing authenticated user.")
        return AuthenticatedUser(id=user_id, email=environ.get(self.email_key, "").strip())

    @staticmethod
    def _environ_key(header: str) -> str:
        return "HTTP_" + header.upper().replace("-", "_")
