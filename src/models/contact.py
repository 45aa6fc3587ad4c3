"""
Contact-related Pydantic models
"""

from typing import Optional
from datetime import datetime
from uuid import UUID
from pydantic import BaseModel, Field

class ContactResponse(BaseModel):
    id: UUID
    first_name: str
    last_name: str
    phone: str
    created_at: datetime
    updated_at: datetime


class ContactCreateRequest(BaseModel):
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)

class ContactUpdateRequest(BaseModel):
    """Partial update; omitted fields keep their stored values"""
    first_name: Optional[str] = Field(None, min_length=1)
    last_name: Optional[str] = Field(None, min_length=1)
    phone: Optional[str] = Field(None, min_length=1)
