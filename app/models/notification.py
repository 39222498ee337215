from sqlalchemy import Column, String, Integer, Boolean, ForeignKey, Enum, JSON
from sqlalchemy.orm import relationship
import enum
from .base import BaseModel


class NotificationKind(enum.Enum):
    NEW_REVIEW = "new-review"
    REVIEW_UPDATED = "review-updated"
    REVIEW_REPORTED = "review-reported"
    SYSTEM = "system-notification"


class Notification(BaseModel):
    __tablename__ = 'notifications'

    recipient_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)
    kind = Column(Enum(NotificationKind), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(String(1000), nullable=False)
    data = Column(JSON, default=dict)
    is_read = Column(Boolean, default=False)

    recipient = relationship("User", back_populates="notifications")
