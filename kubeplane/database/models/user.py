from sqlalchemy import Column, String
from sqlalchemy.orm import relationship
from ..database import Base

class User(Base):
    """
    외부 신원 제공자(identity provider)로 인증된 사용자를 나타냅니다.
    id는 신원 제공자가 발급한 식별자를 그대로 사용하며,
    사용자는 Membership을 통해 여러 프로젝트에 서로 다른 역할로 소속될 수 있습니다.
    """
    __tablename__ = "users"
    id = Column(String(255), primary_key=True, index=True)
    email = Column(String(255), nullable=False)

    memberships = relationship("Membership", back_populates="user", cascade="all, delete-orphan")
