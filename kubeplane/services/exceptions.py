# kubeplane/services/exceptions.py
from typing import List, Optional

# 폴링 오류는 ReadinessPoller와 함께 정의되며, 서비스 계층에서는 여기서 가져다 씁니다.
from kubeplane.utils.readiness import PollCancelledError, PollTimeoutError  # noqa: F401

# --- Not Found Exceptions ---
class ProjectNotFoundError(Exception):
    """프로젝트를 찾을 수 없거나, 호출자에게 보이지 않을 때"""
    pass

class ClusterNotFoundError(Exception):
    """클러스터를 찾을 수 없을 때"""
    pass

class UserNotFoundError(Exception):
    """사용자를 찾을 수 없을 때"""
    pass

# --- Creation/Validation Exceptions ---
class ConflictError(Exception):
    """
    동일한 리소스가 이미 존재하여 생성할 수 없을 때.

    충돌한 리소스의 종류(resource)와 이름(name)을 그대로 보관하므로
    호출자가 메시지를 가공하지 않고 그대로 보고할 수 있습니다.
    """
    def __init__(self, resource: str, name: str, message: Optional[str] = None):
        self.resource = resource
        self.name = name
        super().__init__(message or f'{resource} "{name}" already exists')

class ValidationError(Exception):
    """입력 값이 올바르지 않을 때"""
    pass

# --- Auth Exceptions ---
class UnauthenticatedError(Exception):
    """요청에 인증된 사용자 정보가 없을 때"""
    pass

class ForbiddenError(Exception):
    """사용자의 역할이 요청된 작업을 수행하기에 부족할 때"""
    pass

# --- Provisioning Exceptions ---
class TransientError(Exception):
    """재시도하면 해결될 수 있는 일시적인 프로비저닝 상태"""
    pass

class TerminalError(Exception):
    """재시도해도 복구할 수 없는 프로비저닝 실패. 롤백을 유발합니다."""
    pass

class ProvisioningError(Exception):
    """
    프로비저닝 파이프라인의 한 단계가 실패했을 때.

    롤백은 이 예외가 발생하기 전에 이미 끝난 상태이며,
    롤백 중 실패한 보상 작업은 compensation_failures에 담깁니다.
    """
    def __init__(self, step: str, cause: BaseException, compensation_failures: Optional[List] = None):
        self.step = step
        self.cause = cause
        self.compensation_failures = compensation_failures or []
        super().__init__(f"provisioning step '{step}' failed: {cause}")
