from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from ..database import Base
from ._time import utcnow

class Project(Base):
    """
    하나의 격리된 테넌트(tenant) 경계를 나타냅니다.
    id는 시스템이 생성하는 불변 식별자이고, display_name은 사용자에게 보이는 이름입니다.
    display_name은 같은 소유자(owner_id)의 프로젝트들 사이에서만 유일하며,
    이 제약은 유니크 제약 조건으로 저장소가 직접 검사합니다.
    """
    __tablename__ = "projects"
    id = Column(String(32), primary_key=True, index=True)
    display_name = Column(String(255), nullable=False)
    owner_id = Column(String(255), ForeignKey("users.id"), nullable=False, index=True)
    phase = Column(String(16), nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    memberships = relationship("Membership", back_populates="project", cascade="all, delete-orphan")
    clusters = relationship("Cluster", back_populates="project")

    __table_args__ = (
        UniqueConstraint("owner_id", "display_name", name="uq_projects_owner_display_name"),
    )
