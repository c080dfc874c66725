from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from ..database import Base
from ._time import utcnow

class Addon(Base):
    """
    클러스터에 설치되는 애드온(예: 'hubble')을 나타냅니다.
    실제 설치는 클러스터 쪽 컨트롤러가 담당하고, 컨트롤 플레인은 요청 기록만 보관합니다.
    """
    __tablename__ = "addons"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    phase = Column(String(16), nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    cluster_id = Column(String(32), ForeignKey("clusters.id"), nullable=False, index=True)
    cluster = relationship("Cluster", back_populates="addons")

    __table_args__ = (
        UniqueConstraint("cluster_id", "name", name="uq_addons_cluster_name"),
    )
