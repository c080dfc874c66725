from sqlalchemy import Column, String, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from ..database import Base
from ._time import utcnow

class Cluster(Base):
    """
    프로젝트가 소유하는 관리형 Kubernetes 클러스터입니다.
    provider_spec은 클러스터 생성 백엔드에 그대로 전달되는 불투명한(opaque) 값입니다.
    """
    __tablename__ = "clusters"
    id = Column(String(32), primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    provider_spec = Column(JSON, nullable=False, default=dict)
    phase = Column(String(16), nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    project_id = Column(String(32), ForeignKey("projects.id"), nullable=False, index=True)
    project = relationship("Project", back_populates="clusters")
    addons = relationship("Addon", back_populates="cluster", cascade="all, delete-orphan")
