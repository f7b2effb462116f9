# FILE: uigen/projects/models.py
"""
SQLAlchemy ORM model for saved preview projects.

All rows live in the single `uigen_saved_projects` table. The stored unit is
the normalized code exactly as it was previewed.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, DateTime
from uigen.db import Base


class SavedProject(Base):
    __tablename__ = "uigen_saved_projects"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False, index=True)
    request_text = Column(Text, nullable=False, default="")
    unit = Column(Text, nullable=False)
    category = Column(String(20), nullable=False, default="simple")
    scope = Column(String(20), nullable=True)  # None = category default
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
