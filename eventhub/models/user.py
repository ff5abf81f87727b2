"""
User model with hashed password storage and a role used by the access guard.
"""

from sqlalchemy import Column, Integer, String

from eventhub.db.base import Base, TimestampMixin


class User(Base, TimestampMixin):
    __tablename__ = "users"

    user_id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="user", server_default="user")

    def __repr__(self) -> str:
        return f"<User(id={self.user_id}, email={self.email}, role={self.role})>"
