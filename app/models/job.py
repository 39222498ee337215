from sqlalchemy import Column, String, Integer, ForeignKey, DateTime, Enum
from sqlalchemy.orm import relationship
import enum
from .base import BaseModel


class JobStatus(enum.Enum):
    OPEN = "open"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Job(BaseModel):
    __tablename__ = 'jobs'

    title = Column(String(255), nullable=False)
    status = Column(Enum(JobStatus), default=JobStatus.OPEN, index=True)

    # Parties
    client_id = Column(Integer, ForeignKey('users.id'))
    hired_freelancer_id = Column(Integer, ForeignKey('users.id'))

    completed_at = Column(DateTime)

    # Relationships
    client = relationship("User", foreign_keys=[client_id])
    hired_freelancer = relationship("User", foreign_keys=[hired_freelancer_id])
    reviews = relationship("Review", back_populates="job", lazy='dynamic')
