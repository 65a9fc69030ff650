import uuid

from sqlalchemy import Column, Integer, String, Date, DateTime, Text, ForeignKey, Index, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from sitestaff.db.base_class import Base


def _uuid() -> str:
    return str(uuid.uuid4())


PASSPORT_TYPE_RUSSIAN = "russian"
PASSPORT_TYPE_FOREIGN = "foreign"


class Employee(Base):
    __tablename__ = "employees"  # type: ignore[assignment]
    __mapper_args__ = {"eager_defaults": True}

    id = Column(String(36), primary_key=True, default=_uuid)

    # Identity
    last_name = Column(String, nullable=True)
    first_name = Column(String, nullable=True)
    middle_name = Column(String, nullable=True)
    gender = Column(String(10), nullable=True)
    birth_date = Column(Date, nullable=True)
    birth_country_id = Column(Integer, ForeignKey("citizenships.id", ondelete="SET NULL"), nullable=True)
    position_id = Column(Integer, nullable=True)
    citizenship_id = Column(Integer, ForeignKey("citizenships.id", ondelete="SET NULL"), nullable=True)

    # Documents (unique when present, absent while the card is a draft)
    inn = Column(String(12), unique=True, nullable=True)
    snils = Column(String(14), unique=True, nullable=True)
    kig = Column(String(50), unique=True, nullable=True)
    kig_end_date = Column(Date, nullable=True)
    passport_type = Column(String(20), nullable=True)  # russian, foreign
    passport_number = Column(String, unique=True, nullable=True)
    passport_date = Column(Date, nullable=True)
    passport_issuer = Column(Text, nullable=True)
    passport_expiry_date = Column(Date, nullable=True)
    patent_number = Column(String, nullable=True)
    patent_issue_date = Column(Date, nullable=True)
    blank_number = Column(String, nullable=True)

    # Contacts
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    registration_address = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    created_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    updated_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), nullable=True)

    citizenship = relationship("Citizenship", foreign_keys=[citizenship_id], lazy="joined")
    counterparty_mappings = relationship(
        "EmployeeCounterpartyMapping", back_populates="employee", cascade="all, delete-orphan"
    )
    user_mappings = relationship(
        "UserEmployeeMapping", back_populates="employee", cascade="all, delete-orphan"
    )
    status_mappings = relationship(
        "EmployeeStatusMapping", back_populates="employee", cascade="all, delete-orphan"
    )

    @property
    def full_name(self) -> str:
        parts = [self.last_name, self.first_name, self.middle_name]
        return " ".join(p for p in parts if p)


class EmployeeCounterpartyMapping(Base):
    __tablename__ = "employee_counterparty_mapping"

    id = Column(String(36), primary_key=True, default=_uuid)
    employee_id = Column(String(36), ForeignKey("employees.id", ondelete="CASCADE"), nullable=False)
    counterparty_id = Column(Integer, ForeignKey("counterparties.id", ondelete="CASCADE"), nullable=False)
    department_id = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("employee_id", "counterparty_id", name="unique_employee_counterparty"),
    )

    employee = relationship("Employee", back_populates="counterparty_mappings")


Index('idx_ecm_employee_id', EmployeeCounterpartyMapping.employee_id)
Index('idx_ecm_counterparty_id', EmployeeCounterpartyMapping.counterparty_id)


class UserEmployeeMapping(Base):
    """
    Links a shared-tenant user to the employees they own.

    counterparty_id is NULL for links in the shared (back-office) tenant.
    """
    __tablename__ = "user_employee_mapping"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    employee_id = Column(String(36), ForeignKey("employees.id", ondelete="CASCADE"), nullable=False)
    counterparty_id = Column(Integer, ForeignKey("counterparties.id", ondelete="CASCADE"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "employee_id", name="unique_user_employee"),
    )

    employee = relationship("Employee", back_populates="user_mappings")


Index('idx_uem_user_id', UserEmployeeMapping.user_id)
Index('idx_uem_employee_id', UserEmployeeMapping.employee_id)
