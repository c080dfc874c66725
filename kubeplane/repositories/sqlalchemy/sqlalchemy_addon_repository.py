from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from kubeplane.database import models
from kubeplane.repositories.exceptions import AlreadyExistsError
from kubeplane.repositories.interfaces import IAddonRepository

class SqlalchemyAddonRepository(IAddonRepository):
    def __init__(self, db_session: Session):
        self.db = db_session

    def create(self, addon_model: models.Addon) -> models.Addon:
        self.db.add(addon_model)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise AlreadyExistsError(f"addons \"{addon_model.name}\" already exists") from e
        self.db.refresh(addon_model)
        return addon_model

    def find_by_cluster_and_name(self, cluster_id: str, name: str) -> Optional[models.Addon]:
        return self.db.query(models.Addon).filter(
            models.Addon.cluster_id == cluster_id,
            models.Addon.name == name
        ).first()

    def delete(self, addon: models.Addon) -> bool:
        if addon:
            self.db.delete(addon)
            self.db.commit()
            return True
        return False
