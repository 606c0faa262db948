from datetime import datetime

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, String

from maintenance_service.database import Base
from maintenance_service.models.enums import UserRole, check_in


class User(Base):
    """Engineer (or manager/admin) who can be named as an inspector."""
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(check_in("role", UserRole), name="ck_users_role"),
    )

    user_id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String, nullable=False, unique=True)
    full_name = Column(String, nullable=False)
    email = Column(String, nullable=False, unique=True, index=True)
    password_hash = Column(String, nullable=False)
    role = Column(String, nullable=False, default=UserRole.ENGINEER.value)
    created_at = Column(DateTime, default=datetime.now)
