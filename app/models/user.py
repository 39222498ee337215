from sqlalchemy import Column, String, Boolean, Enum, JSON
from sqlalchemy.orm import relationship
import enum
from .base import BaseModel


class UserRole(enum.Enum):
    CLIENT = "client"
    FREELANCER = "freelancer"
    ADMIN = "admin"


class User(BaseModel):
    __tablename__ = 'users'

    # Basic Info
    email = Column(String(255), unique=True, nullable=False, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    role = Column(Enum(UserRole), nullable=False)

    # Status
    is_active = Column(Boolean, default=True)

    # Preferences
    notification_preferences = Column(JSON, default=lambda: {"email": True})

    # Relationships
    reviews_given = relationship("Review", back_populates="reviewer", lazy='dynamic', foreign_keys='Review.reviewer_id')
    reviews_received = relationship("Review", back_populates="recipient", lazy='dynamic', foreign_keys='Review.recipient_id')
    notifications = relationship("Notification", back_populates="recipient", lazy='dynamic')

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}"
