from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Optional
from hrportal.models.document import DocumentType


class DocumentGenerateRequest(BaseModel):
    user_id: str
    document_type: DocumentType
    # Offer letters only
    position: Optional[str] = Field(None, max_length=200)
    salary: Optional[str] = Field(None, max_length=100)


class DocumentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    document_type: str
    title: str
    content: str
    generated_by: str
    created_at: Optional[datetime] = None
