# FILE: uigen/projects/service.py
"""
Saved project service layer.

Plain functions over a SQLAlchemy Session. Lookups return None / False for
missing rows; the router turns that into 404.
"""
import logging
from typing import List, Optional
from sqlalchemy.orm import Session
from uigen.projects import models, schemas

logger = logging.getLogger(__name__)


def create_project(db: Session, data: schemas.SavedProjectCreate) -> models.SavedProject:
    project = models.SavedProject(
        name=data.name,
        request_text=data.request_text,
        unit=data.unit,
        category=data.category,
        scope=data.scope,
    )
    db.add(project)
    db.commit()
    db.refresh(project)
    logger.info("[projects] saved project %d (%s)", project.id, project.name)
    return project


def get_project(db: Session, project_id: int) -> Optional[models.SavedProject]:
    return db.query(models.SavedProject).filter(models.SavedProject.id == project_id).first()


def list_projects(db: Session) -> List[models.SavedProject]:
    return (
        db.query(models.SavedProject)
        .order_by(models.SavedProject.created_at.desc(), models.SavedProject.id.desc())
        .all()
    )


def update_project(db: Session, project_id: int, data: schemas.SavedProjectUpdate) -> Optional[models.SavedProject]:
    project = get_project(db, project_id)
    if not project:
        return None
    for field, value in data.model_dump(exclude_unset=True).items():
        if value is None and field != "scope":
            continue
        setattr(project, field, value)
    db.commit()
    db.refresh(project)
    return project


def delete_project(db: Session, project_id: int) -> bool:
    project = get_project(db, project_id)
    if not project:
        return False
    db.delete(project)
    db.commit()
    logger.info("[projects] deleted project %d", project_id)
    return True
