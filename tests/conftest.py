# tests/conftest.py
import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from kubeplane.config import Settings
from kubeplane.database.database import Base
from kubeplane.database import models  # noqa: F401  테이블 등록
from kubeplane.utils.readiness import CancelToken

# ===================================================================
#  공용 Fixture: 인메모리 SQLite 저장소
# ===================================================================

@pytest.fixture
def engine():
    """테스트마다 새로 만드는 인메모리 SQLite 엔진. 모든 세션이 같은 연결을 공유합니다."""
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()

@pytest.fixture
def session_factory(engine):
    return sessionmaker(autoflush=False, bind=engine)

@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()

@pytest.fixture
def fk_db_session():
    """외래 키 제약을 강제하는 인메모리 SQLite 세션. SQLite는 기본적으로 외래 키를 검사하지 않습니다."""
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )

    @event.listens_for(engine, "connect")
    def enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autoflush=False, bind=engine)()
    yield session
    session.close()
    engine.dispose()

@pytest.fixture
def settings() -> Settings:
    """.env 파일과 무관한 기본 설정."""
    return Settings(_env_file=None)

# ===================================================================
#  공용 Fixture: 가짜 시계
# ===================================================================

class FakeClock:
    """실제로 잠들지 않고 시간을 흘려보내는 시계."""
    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

class ClockedToken(CancelToken):
    """wait()가 실제로 잠드는 대신 FakeClock을 앞당기는 취소 토큰."""
    def __init__(self, clock: FakeClock):
        super().__init__()
        self.clock = clock
        self.waits = []

    def wait(self, seconds: float) -> bool:
        if self.cancelled:
            return True
        self.waits.append(seconds)
        self.clock.now += seconds
        return self.cancelled

@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()

@pytest.fixture
def clocked_token(fake_clock) -> ClockedToken:
    return ClockedToken(fake_clock)
