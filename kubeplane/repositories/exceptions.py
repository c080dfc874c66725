# kubeplane/repositories/exceptions.py

class AlreadyExistsError(Exception):
    """유니크 제약 조건 위반으로 저장소가 생성을 거부했을 때"""
    pass

class IdCollisionError(Exception):
    """생성하려는 리소스의 ID가 이미 다른 리소스에 사용 중일 때. 새 ID로 다시 시도할 수 있습니다."""
    pass
