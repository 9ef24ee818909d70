from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import or_
from sqlalchemy.orm import Session
from typing import List
from datetime import date
import logging

from hrportal.core import roles
from hrportal.core.exceptions import AccessDeniedError, NotFoundError
from hrportal.database import get_db
from hrportal.models.document import Document
from hrportal.models.user import User
from hrportal.schemas.document import DocumentGenerateRequest, DocumentResponse
from hrportal.routers.auth_deps import RequestContext, get_request_context, require_director
from hrportal.services.audit import AuditService
from hrportal.services.document_generator import DocumentDataError, render_document
from hrportal.services.notification import NotificationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["documents"])


@router.post("/generate", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED)
def generate_document(
    data: DocumentGenerateRequest,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(require_director())
):
    """
    Render an HR letter for someone in the director's scope and store it.
    """
    ctx.require_visible(data.user_id, "Cannot generate documents for people outside your scope")
    subject = db.get(User, data.user_id)

    try:
        title, content = render_document(
            data.document_type, subject, date.today(), position=data.position, salary=data.salary
        )
    except DocumentDataError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    try:
        document = Document(
            user_id=subject.id,
            document_type=data.document_type.value,
            title=title,
            content=content,
            generated_by=ctx.user_id,
        )
        db.add(document)
        db.flush()
        AuditService.log(
            db,
            action="generate_document",
            entity_type="document",
            entity_id=document.id,
            user_id=ctx.user_id,
            user_role=ctx.user.role,
            details={"subject_id": subject.id, "document_type": data.document_type}
        )
        NotificationService.notify_user(
            db, subject.id, "Document Issued", f"Your {title} is available.", "info",
            link=f"/documents/{document.id}"
        )
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(document)
    logger.info(f"{data.document_type.value} generated for {subject.email}", extra={"actor_id": ctx.user.id})
    return document


@router.get("/", response_model=List[DocumentResponse])
def list_documents(
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context)
):
    """Documents about the caller plus those the caller generated."""
    return db.query(Document).filter(
        or_(Document.user_id == ctx.user_id, Document.generated_by == ctx.user_id)
    ).order_by(Document.created_at.desc(), Document.id.desc()).all()


@router.get("/{document_id}", response_model=DocumentResponse)
def get_document(
    document_id: int,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context)
):
    document = db.get(Document, document_id)
    if not document:
        raise NotFoundError("Document not found")
    if ctx.user_id in (document.user_id, document.generated_by):
        return document
    if roles.is_director(ctx.user.role) and ctx.can_see(document.user_id):
        return document
    raise AccessDeniedError("Not authorized to view this document")
