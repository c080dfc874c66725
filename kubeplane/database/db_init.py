import logging

from kubeplane.config import get_settings
from .database import engine, Base
from . import models  # noqa: F401  모든 모델을 Base.metadata에 등록

logger = logging.getLogger(__name__)

def initialize_db(bind=None):
    """
    DB와 테이블을 생성합니다. 이미 존재하는 테이블은 건드리지 않습니다.

    사용자와 멤버십은 외부 신원 제공자로부터 첫 요청 시 만들어지므로
    별도의 기본 데이터는 넣지 않습니다.
    """
    bind = bind or engine
    logger.info("Initializing database at %s", bind.url)
    Base.metadata.create_all(bind=bind)
    logger.info("Tables ready: %s", ", ".join(sorted(Base.metadata.tables)))

if __name__ == '__main__':
    logging.basicConfig(level=get_settings().log_level.upper())
    initialize_db()
