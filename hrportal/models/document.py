from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.sql import func
from hrportal.database import Base
import enum


class DocumentType(str, enum.Enum):
    OFFER_LETTER = "offer_letter"
    EXPERIENCE_CERTIFICATE = "experience_certificate"
    RECOMMENDATION_LETTER = "recommendation_letter"


class Document(Base):
    __tablename__ = "documents"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)  # subject
    document_type = Column(String, nullable=False, index=True)
    title = Column(String, nullable=False)
    content = Column(Text, nullable=False)
    generated_by = Column(String(36), ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
