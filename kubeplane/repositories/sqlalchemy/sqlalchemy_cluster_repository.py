from typing import List, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from kubeplane.database import models
from kubeplane.repositories.exceptions import AlreadyExistsError
from kubeplane.repositories.interfaces import IClusterRepository

class SqlalchemyClusterRepository(IClusterRepository):
    def __init__(self, db_session: Session):
        self.db = db_session

    def create(self, cluster_model: models.Cluster) -> models.Cluster:
        self.db.add(cluster_model)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise AlreadyExistsError(f"clusters \"{cluster_model.id}\" already exists") from e
        self.db.refresh(cluster_model)
        return cluster_model

    def find_by_id(self, cluster_id: str) -> Optional[models.Cluster]:
        return self.db.query(models.Cluster).filter(models.Cluster.id == cluster_id).first()

    def list_by_project_id(self, project_id: str) -> List[models.Cluster]:
        return self.db.query(models.Cluster).filter(
            models.Cluster.project_id == project_id
        ).order_by(models.Cluster.created_at.asc(), models.Cluster.id.asc()).all()

    def count_by_project_id(self, project_id: str) -> int:
        return self.db.query(models.Cluster).filter(models.Cluster.project_id == project_id).count()

    def update_phase(self, cluster: models.Cluster, phase: models.ClusterPhase) -> models.Cluster:
        cluster.phase = phase.value
        self.db.commit()
        self.db.refresh(cluster)
        return cluster

    def delete(self, cluster: models.Cluster) -> bool:
        if cluster:
            self.db.delete(cluster)
            self.db.commit()
            return True
        return False
