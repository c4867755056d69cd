"""Journal API routes."""
from __future__ import annotations

from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from app.api.schemas.journal import JournalCreateRequest, JournalResponse
from app.core.auth import get_current_user_id
from app.db.deps import get_db
from app.observability.metrics import log_metric
from app.observability.tracing import trace
from app.services import storage
from app.services.user_service import get_or_create_user

router = APIRouter(prefix="/api")


@router.get("/journals", response_model=List[JournalResponse], tags=["journals"])
def list_journals(
    limit: Optional[int] = Query(default=None, ge=1, le=1000),
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> List[JournalResponse]:
    """List the caller's journal entries, most recent first."""
    journals = storage.get_recent_journals(db, user_id, limit)
    return [JournalResponse.model_validate(journal) for journal in journals]


@router.get("/journals/{journal_date}", response_model=JournalResponse, tags=["journals"])
def get_journal(
    journal_date: date,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> JournalResponse:
    journal = storage.get_journal_by_date(db, user_id, journal_date)
    if journal is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Journal not found")
    return JournalResponse.model_validate(journal)


@router.post("/journals", response_model=JournalResponse, status_code=status.HTTP_201_CREATED, tags=["journals"])
def create_journal(
    payload: JournalCreateRequest,
    http_request: Request,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> JournalResponse:
    """Create the entry for a date; each date can be written once."""
    request_id = getattr(http_request.state, "request_id", None)
    try:
        with trace(
            "journal.create",
            metadata={"route": "/api/journals", "date": payload.date.isoformat()},
            user_id=str(user_id),
            request_id=request_id,
        ):
            get_or_create_user(db, user_id)
            journal = storage.create_journal(db, user_id, payload.date, payload.content)
            db.commit()
            db.refresh(journal)
    except storage.DuplicateJournalError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Journal already exists for this date")
    except Exception:
        db.rollback()
        raise

    log_metric("journal.create.success", 1, metadata={"user_id": str(user_id)})
    log_metric("journal.create.word_count", journal.word_count, metadata={"user_id": str(user_id)})
    return JournalResponse.model_validate(journal)
