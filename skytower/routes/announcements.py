# Announcement board: residents read, admins post. Append-only.
from datetime import datetime, timezone
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..db import get_db
from .. import models, schemas
from ..rate_limit import rate_limit
from .auth import get_verified_identity, require_admin

router = APIRouter()


@router.get(
    "/announcements",
    response_model=List[schemas.AnnouncementRead],
    dependencies=[Depends(get_verified_identity)],
)
def list_announcements(db: Session = Depends(get_db)) -> List[models.Announcement]:
    return (
        db.query(models.Announcement)
        .order_by(models.Announcement.created_at.desc(), models.Announcement.id.desc())
        .all()
    )


@router.post(
    "/announcements",
    response_model=schemas.CreatedResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limit("write"))],
)
def create_announcement(
    payload: schemas.AnnouncementCreate,
    db: Session = Depends(get_db),
    admin: schemas.VerifiedIdentity = Depends(require_admin),
) -> schemas.CreatedResponse:
    obj = models.Announcement(
        title=payload.title,
        description=payload.description,
        importance=payload.importance,
        type=payload.type,
        created_at=datetime.now(timezone.utc),
    )
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return schemas.CreatedResponse(message="Announcement created successfully", inserted_id=obj.id)
