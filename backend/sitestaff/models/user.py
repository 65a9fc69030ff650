from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from sitestaff.db.base_class import Base

ROLE_ADMIN = "admin"
ROLE_MANAGER = "manager"
ROLE_USER = "user"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    full_name = Column(String, nullable=True)
    role = Column(String(20), default=ROLE_USER, nullable=False)  # admin, manager, user
    counterparty_id = Column(
        Integer, ForeignKey("counterparties.id", ondelete="SET NULL"), nullable=True, index=True
    )
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), nullable=True)

    counterparty = relationship("Counterparty", back_populates="users")

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN
