from sqlalchemy import BigInteger, Column, Integer, String, Text, DateTime
from sqlalchemy.sql import func
from ..core.database import Base


DEFAULT_TASK_STATUS = "new"


class Task(Base):
    """Task model for database"""
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)

    # Owner reference, not enforced against the users table
    user_id = Column(BigInteger, nullable=False, index=True)

    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="", server_default="")

    # Assigned by storage, never through the API
    status = Column(
        String(20),
        default=DEFAULT_TASK_STATUS,
        server_default=DEFAULT_TASK_STATUS,
        nullable=False,
        index=True
    )

    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )

    def __repr__(self):
        return f"<Task(id={self.id}, title='{self.title}', status='{self.status}')>"
