import uuid

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Index
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from sitestaff.db.base_class import Base


class Status(Base):
    """Catalog entry. Seeded once by migration, never written at runtime."""
    __tablename__ = "statuses"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), unique=True, nullable=False)  # e.g. status_new, status_card_draft
    group = Column(String(50), nullable=False, index=True)  # status, status_card, status_active, ...
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        return f"<Status {self.name} ({self.group})>"


class EmployeeStatusMapping(Base):
    __tablename__ = "employees_statuses_mapping"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    employee_id = Column(String(36), ForeignKey("employees.id", ondelete="CASCADE"), nullable=False)
    status_id = Column(Integer, ForeignKey("statuses.id"), nullable=False)
    status_group = Column(String(50), nullable=False)  # denormalised from Status.group
    is_active = Column(Boolean, default=False, nullable=False)
    # Pending export to the HR system; always cleared on deactivation
    is_upload = Column(Boolean, default=False, nullable=False)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    updated_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Fetch server-generated timestamps on flush so rows stay readable after commit
    __mapper_args__ = {"eager_defaults": True}

    status = relationship("Status", lazy="joined")
    employee = relationship("Employee", back_populates="status_mappings")

    @property
    def status_name(self) -> str:
        return self.status.name

    def __repr__(self) -> str:
        return (
            f"<EmployeeStatusMapping {self.employee_id} {self.status_group} "
            f"status={self.status_id} active={self.is_active} upload={self.is_upload}>"
        )


Index('idx_esm_employee_id', EmployeeStatusMapping.employee_id)
Index('idx_esm_status_id', EmployeeStatusMapping.status_id)
Index('idx_esm_status_group', EmployeeStatusMapping.status_group)
Index('idx_esm_employee_group_active', EmployeeStatusMapping.employee_id,
      EmployeeStatusMapping.status_group, EmployeeStatusMapping.is_active)
