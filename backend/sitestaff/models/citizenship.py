from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.sql import func

from sitestaff.db.base_class import Base


class Citizenship(Base):
    __tablename__ = "citizenships"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), unique=True, nullable=False)
    code = Column(String(10), nullable=True)  # ISO 3166-1 alpha-2
    # NULL is treated as "permit required"; only an explicit False waives it
    requires_patent = Column(Boolean, nullable=True, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
