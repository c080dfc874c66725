from typing import List, Optional
from sqlalchemy.orm import Session, joinedload
from kubeplane.database import models
from kubeplane.repositories.interfaces import IMembershipRepository

class SqlalchemyMembershipRepository(IMembershipRepository):
    def __init__(self, db_session: Session):
        self.db = db_session

    def find(self, user_id: str, project_id: str) -> Optional[models.Membership]:
        # (user_id, project_id)가 기본 키이므로 identity map을 먼저 확인하는 get()을 사용
        return self.db.get(models.Membership, (user_id, project_id))

    def list_by_user(self, user_id: str) -> List[models.Membership]:
        return self.db.query(models.Membership).filter(models.Membership.user_id == user_id).all()

    def list_by_project(self, project_id: str) -> List[models.Membership]:
        return self.db.query(models.Membership).options(
            joinedload(models.Membership.user)
        ).filter(
            models.Membership.project_id == project_id
        ).order_by(models.Membership.user_id.asc()).all()

    def upsert(self, membership: models.Membership) -> models.Membership:
        merged = self.db.merge(membership) # INSERT OR UPDATE와 유사한 동작
        self.db.commit()
        return merged

    def delete(self, membership: models.Membership) -> bool:
        if membership:
            self.db.delete(membership)
            self.db.commit()
            return True
        return False
