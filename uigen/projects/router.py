# FILE: uigen/projects/router.py
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from uigen.db import get_db
from uigen.generation.errors import InputError
from uigen.generation.gateway import ModelGateway
from uigen.generation.pipeline import SessionRegistry, get_gateway, get_session_registry
from uigen.projects import service, schemas

router = APIRouter(
    prefix="/projects",
    tags=["projects"],
)


# ============== SAVED PROJECTS ==============

@router.post("", response_model=schemas.SavedProjectOut, status_code=201)
def create_project(data: schemas.SavedProjectCreate, db: Session = Depends(get_db)):
    return service.create_project(db, data)


@router.get("", response_model=List[schemas.SavedProjectOut])
def list_projects(db: Session = Depends(get_db)):
    return service.list_projects(db)


@router.get("/{project_id}", response_model=schemas.SavedProjectOut)
def get_project(project_id: int, db: Session = Depends(get_db)):
    project = service.get_project(db, project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    return project


@router.patch("/{project_id}", response_model=schemas.SavedProjectOut)
def update_project(project_id: int, data: schemas.SavedProjectUpdate, db: Session = Depends(get_db)):
    project = service.update_project(db, project_id, data)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    return project


@router.delete("/{project_id}", status_code=204)
def delete_project(project_id: int, db: Session = Depends(get_db)):
    success = service.delete_project(db, project_id)
    if not success:
        raise HTTPException(status_code=404, detail="Project not found")
    return None


# ============== OPEN IN PREVIEW ==============

@router.post("/{project_id}/open")
def open_project(
    project_id: int,
    data: schemas.OpenProjectRequest = schemas.OpenProjectRequest(),
    db: Session = Depends(get_db),
    sessions: SessionRegistry = Depends(get_session_registry),
    gateway: ModelGateway = Depends(get_gateway),
) -> Dict[str, Any]:
    project = service.get_project(db, project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")

    session = sessions.get_or_create(data.session_id, gateway)
    try:
        outcome = session.load_unit(
            project.unit,
            project.category,
            scope_override=project.scope,
            text=project.request_text,
        )
    except InputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"session_id": session.session_id, "project_id": project.id, **outcome.to_dict()}
