from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from kubeplane.database import models
from kubeplane.repositories.exceptions import AlreadyExistsError
from kubeplane.repositories.interfaces import IUserRepository

class SqlalchemyUserRepository(IUserRepository):
    def __init__(self, db_session: Session):
        self.db = db_session

    def create(self, user_model: models.User) -> models.User:
        self.db.add(user_model)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise AlreadyExistsError(f"users \"{user_model.id}\" already exists") from e
        self.db.refresh(user_model)
        return user_model

    def find_by_id(self, user_id: str) -> Optional[models.User]:
        return self.db.query(models.User).filter(models.User.id == user_id).first()
