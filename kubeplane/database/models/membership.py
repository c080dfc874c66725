from sqlalchemy import Column, String, ForeignKey, Index, text
from sqlalchemy.orm import relationship
from ..database import Base

class Membership(Base):
    """
    사용자(User)와 프로젝트(Project) 사이의 역할 바인딩입니다.
    (user_id, project_id)가 기본 키이므로 한 사용자는 프로젝트마다 하나의 역할만 가집니다.
    부분 유니크 인덱스로 프로젝트당 Owner 멤버십이 두 개 이상 생기는 것을 저장소 수준에서 막습니다.
    """
    __tablename__ = "memberships"
    user_id = Column(String(255), ForeignKey("users.id"), primary_key=True)
    project_id = Column(String(32), ForeignKey("projects.id"), primary_key=True, index=True)
    role = Column(String(16), nullable=False)

    user = relationship("User", back_populates="memberships")
    project = relationship("Project", back_populates="memberships")

    __table_args__ = (
        Index(
            "uq_memberships_project_owner",
            "project_id",
            unique=True,
            sqlite_where=text("role = 'owner'"),
            postgresql_where=text("role = 'owner'"),
        ),
    )
