from sqlalchemy import Column, String, Integer, Boolean, ForeignKey, DateTime, Enum, Text, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship
import enum
from .base import BaseModel


class ReviewType(enum.Enum):
    CLIENT_TO_FREELANCER = "client-to-freelancer"
    FREELANCER_TO_CLIENT = "freelancer-to-client"


CATEGORY_FIELDS = ('communication', 'quality_of_work', 'value_for_money', 'expertise', 'professionalism')


class Review(BaseModel):
    __tablename__ = 'reviews'
    __table_args__ = (
        # One review per job per reviewer-recipient pair
        UniqueConstraint('job_id', 'reviewer_id', 'recipient_id', name='uq_review_job_reviewer_recipient'),
        CheckConstraint('rating >= 1 AND rating <= 5', name='ck_review_rating_range'),
    )

    job_id = Column(Integer, ForeignKey('jobs.id'), nullable=False, index=True)
    reviewer_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)
    recipient_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)

    rating = Column(Integer, nullable=False, index=True)  # 1-5 scale
    comment = Column(Text, nullable=False)
    type = Column(Enum(ReviewType), nullable=False, index=True)
    is_public = Column(Boolean, default=True, nullable=False)

    # Category ratings (1-5), default to the overall rating
    communication = Column(Integer, nullable=False)
    quality_of_work = Column(Integer, nullable=False)
    value_for_money = Column(Integer, nullable=False)
    expertise = Column(Integer, nullable=False)
    professionalism = Column(Integer, nullable=False)

    # Reports
    is_reported = Column(Boolean, default=False, nullable=False, index=True)
    report_reason = Column(String(500))
    reported_by_id = Column(Integer, ForeignKey('users.id'))
    reported_at = Column(DateTime)

    # Moderation
    is_hidden = Column(Boolean, default=False, nullable=False)
    moderation_reason = Column(String(500))
    admin_notes = Column(String(1000))

    # Relationships
    job = relationship("Job", back_populates="reviews")
    reviewer = relationship("User", back_populates="reviews_given", foreign_keys=[reviewer_id])
    recipient = relationship("User", back_populates="reviews_received", foreign_keys=[recipient_id])
    reported_by = relationship("User", foreign_keys=[reported_by_id])
    helpful_votes = relationship("ReviewHelpfulVote", back_populates="review", cascade="all, delete-orphan",
                                 passive_deletes=True)


class ReviewHelpfulVote(BaseModel):
    __tablename__ = 'review_helpful_votes'
    __table_args__ = (
        UniqueConstraint('review_id', 'user_id', name='uq_helpful_vote_review_user'),
    )

    review_id = Column(Integer, ForeignKey('reviews.id', ondelete='CASCADE'), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey('users.id'), nullable=False)

    review = relationship("Review", back_populates="helpful_votes")
