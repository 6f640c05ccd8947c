"""ORM model for application users (credentials, lockout state and RBAC)."""

from sqlalchemy import Column, DateTime, Integer, String, func

from notevault.models.base import Base


class User(Base):
    """
    User account for password login, account lockout and role-based access control.

    role: 'admin' or 'user'
    failed_login_count / locked_until: lockout state, cleared lazily once locked_until passes.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(30), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False, default="user")
    failed_login_count = Column(Integer, nullable=False, default=0)
    locked_until = Column(DateTime(timezone=True), nullable=True)
    last_login_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
