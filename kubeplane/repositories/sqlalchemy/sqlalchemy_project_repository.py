from typing import List, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from kubeplane.database import models
from kubeplane.repositories.exceptions import AlreadyExistsError, IdCollisionError
from kubeplane.repositories.interfaces import IProjectRepository

class SqlalchemyProjectRepository(IProjectRepository):
    def __init__(self, db_session: Session):
        self.db = db_session

    def create_with_owner(self, project_model: models.Project, owner: models.Membership) -> models.Project:
        project_id = project_model.id
        owner_id = project_model.owner_id
        display_name = project_model.display_name

        self.db.add(project_model)
        self.db.add(owner)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            # 위반된 제약 조건의 이름은 DB 드라이버마다 다르게 보고되므로, 롤백 후 실제로 충돌한 행을 확인
            if self.find_by_owner_and_display_name(owner_id, display_name):
                raise AlreadyExistsError(f"projects \"{display_name}\" already exists") from e
            if self.find_by_id(project_id):
                raise IdCollisionError(f"project id \"{project_id}\" is already taken") from e
            raise
        self.db.refresh(project_model)
        return project_model

    def find_by_id(self, project_id: str) -> Optional[models.Project]:
        return self.db.query(models.Project).filter(models.Project.id == project_id).first()

    def find_by_owner_and_display_name(self, owner_id: str, display_name: str) -> Optional[models.Project]:
        return self.db.query(models.Project).filter(
            models.Project.owner_id == owner_id,
            models.Project.display_name == display_name
        ).first()

    def list_all(self) -> List[models.Project]:
        return self.db.query(models.Project).all()

    def list_by_member(self, user_id: str) -> List[models.Project]:
        return self.db.query(models.Project).join(
            models.Membership, models.Membership.project_id == models.Project.id
        ).filter(models.Membership.user_id == user_id).all()

    def update_phase(self, project: models.Project, phase: models.ProjectPhase) -> models.Project:
        project.phase = phase.value
        self.db.commit()
        self.db.refresh(project)
        return project

    def delete(self, project: models.Project) -> bool:
        if project:
            self.db.delete(project)
            self.db.commit()
            return True
        return False
