# kubeplane/config.py
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    컨트롤 플레인 전역 설정.

    KUBEPLANE_ 접두사를 가진 환경 변수 또는 .env 파일에서 값을 읽어옵니다.
    """

    model_config = SettingsConfigDict(
        env_prefix="KUBEPLANE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # 저장소 / 서버
    database_url: str = Field(default="sqlite:///kubeplane.db", description="SQLAlchemy 연결 문자열")
    host: str = Field(default="", description="WSGI 서버 바인드 주소")
    port: int = Field(default=8000, description="WSGI 서버 포트")
    log_level: str = Field(default="INFO", description="루트 로거 레벨")

    # 프로젝트
    project_id_length: int = Field(default=10, ge=6, le=32)
    project_name_max_length: int = Field(default=63)

    # 프로비저닝 대기 조건 (초 단위)
    health_poll_interval: float = Field(default=2.0, gt=0)
    health_poll_timeout: float = Field(default=600.0, gt=0)
    admin_client_poll_interval: float = Field(default=1.0, gt=0)
    admin_client_poll_timeout: float = Field(default=30.0, gt=0)
    workload_poll_interval: float = Field(default=1.0, gt=0)
    workload_poll_timeout: float = Field(default=30.0, gt=0)


@lru_cache
def get_settings() -> Settings:
    return Settings()
