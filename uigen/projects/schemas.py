# FILE: uigen/projects/schemas.py
"""Saved project Pydantic schemas."""
from datetime import datetime
from typing import Optional, Literal
from pydantic import BaseModel, ConfigDict, Field

CategoryName = Literal["simple", "complex"]
ScopeName = Literal["restricted", "expanded"]


# ============== PROJECT ==============

class SavedProjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    unit: str = Field(..., min_length=1)
    request_text: str = ""
    category: CategoryName = "simple"
    scope: Optional[ScopeName] = None


class SavedProjectUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    unit: Optional[str] = Field(None, min_length=1)
    request_text: Optional[str] = None
    category: Optional[CategoryName] = None
    scope: Optional[ScopeName] = None


class SavedProjectOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    request_text: str
    unit: str
    category: str
    scope: Optional[str]
    created_at: datetime
    updated_at: datetime


class OpenProjectRequest(BaseModel):
    session_id: Optional[str] = None
