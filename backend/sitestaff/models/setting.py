from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.sql import func

from sitestaff.db.base_class import Base


class Setting(Base):
    """Key/value settings edited by administrators (shared tenant, field configs)."""
    __tablename__ = "settings"

    id = Column(Integer, primary_key=True, index=True)
    key = Column(String(100), unique=True, nullable=False, index=True)
    value = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), nullable=True)
