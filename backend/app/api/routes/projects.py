"""Project Routes — the company portfolio."""

import logging

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_admin
from app.core.domain_types import TimestampType
from app.infrastructure.clients import ExternalClients, get_clients
from app.infrastructure.database import get_db
from app.models.project import Project
from app.models.user import User
from app.schemas.common import dump
from app.schemas.content import ProjectOut
from app.services.timestamps import touch

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/projects", tags=["projects"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_project(
    name: str = Form(..., min_length=1, max_length=300),
    category: str = Form(..., min_length=1, max_length=100),
    date: str = Form(..., min_length=1, max_length=50),
    client: str = Form(..., min_length=1, max_length=200),
    description: str = Form(..., min_length=1),
    type: str = Form(..., min_length=1, max_length=100),
    images: list[UploadFile] | None = File(None),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    clients: ExternalClients = Depends(get_clients),
):
    uploaded = [
        await clients.media.upload(await f.read(), folder="projects")
        for f in images or []
    ]
    project = Project(
        name=name, category=category, date=date, client=client,
        description=description, type=type, images=uploaded,
    )
    db.add(project)
    await touch(db, TimestampType.PROJECT)
    await db.commit()
    await db.refresh(project)
    logger.info("Project created", extra={"resource": str(project.id)})
    return {"message": "Project created successfully", "project": dump(ProjectOut, project)}


@router.get("")
async def list_projects(db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(Project).order_by(Project.created_at.desc()))
    return {"message": "Projects fetched", "projects": dump(ProjectOut, list(result.scalars()))}
