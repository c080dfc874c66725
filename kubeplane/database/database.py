from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from kubeplane.config import get_settings

SQLALCHEMY_DATABASE_URL = get_settings().database_url


def make_engine(url: str):
    """
    SQLAlchemy 엔진을 생성합니다.

    connect_args는 SQLite에서만 필요합니다. (thread-safe 설정)
    """
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args)


engine = make_engine(SQLALCHEMY_DATABASE_URL)

# autoflush=False로 설정하여, 명시적으로 commit을 호출할 때만 DB에 반영됩니다.
SessionLocal = sessionmaker(autoflush=False, bind=engine)

# 모든 모델 클래스가 상속받을 Base 클래스
Base = declarative_base()
