from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional, Tuple
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload
from app.database import get_db
from app.models import Review, ReviewHelpfulVote, Job, User
from app.models.job import JobStatus
from app.models.notification import NotificationKind
from app.models.review import ReviewType, CATEGORY_FIELDS
from app.models.user import UserRole
from app.services.notification_service import NotificationService
from app.utils.errors import (
    NotFoundError, InvalidStateError, ForbiddenError, ConflictError, InvalidArgumentError
)
from app.utils.validators import validate_score, validate_comment
from config.config import Config
from app.utils.logger import get_logger

logger = get_logger(__name__)

ALREADY_REVIEWED = 'You have already submitted a review for this job'

MODERATION_ACTIONS = ('approve', 'reject', 'delete')

# Payload keys accepted for each category score
CATEGORY_ALIASES = {
    'communication': ('communication',),
    'quality_of_work': ('quality_of_work', 'qualityOfWork'),
    'value_for_money': ('value_for_money', 'valueForMoney'),
    'expertise': ('expertise',),
    'professionalism': ('professionalism',),
}

REVIEW_TYPE_BY_ROLE = {
    UserRole.CLIENT.value: ReviewType.CLIENT_TO_FREELANCER,
    UserRole.FREELANCER.value: ReviewType.FREELANCER_TO_CLIENT,
}


def round_half_up(value) -> float:
    """Round to one decimal place, halves away from zero"""
    if value is None:
        return 0
    return float(Decimal(str(value)).quantize(Decimal('0.1'), rounding=ROUND_HALF_UP))


def serialize_review(review: Review) -> Dict:
    """Convert a review into a JSON-friendly dict"""
    return {
        'id': review.id,
        'job_id': review.job_id,
        'reviewer_id': review.reviewer_id,
        'recipient_id': review.recipient_id,
        'rating': review.rating,
        'comment': review.comment,
        'type': review.type.value,
        'categories': {field: getattr(review, field) for field in CATEGORY_FIELDS},
        'is_public': review.is_public,
        'is_hidden': review.is_hidden,
        'is_reported': review.is_reported,
        'report_reason': review.report_reason,
        'reported_by_id': review.reported_by_id,
        'reported_at': review.reported_at.isoformat() if review.reported_at else None,
        'moderation_reason': review.moderation_reason,
        'admin_notes': review.admin_notes,
        'helpful_count': len(review.helpful_votes),
        'created_at': review.created_at.isoformat() if review.created_at else None,
        'updated_at': review.updated_at.isoformat() if review.updated_at else None
    }


class ReviewService:
    """Service for creating, aggregating and moderating reviews"""

    def __init__(self, notification_service: NotificationService = None):
        self.notification_service = notification_service or NotificationService()

    def submit_review(self, job_id: int, reviewer_id: int, reviewer_role, recipient_id: int,
                      payload: Dict) -> Review:
        """Create a review for a completed job"""
        payload = payload or {}

        with get_db() as db:
            job = db.query(Job).filter_by(id=job_id).first()
            if not job:
                raise NotFoundError('Job not found')

            recipient = db.query(User).filter_by(id=recipient_id).first()
            if not recipient:
                raise NotFoundError('Recipient user not found')

            if job.status != JobStatus.COMPLETED:
                raise InvalidStateError('You can only review completed jobs')

            if not job.client_id or not job.hired_freelancer_id:
                raise InvalidStateError(
                    'Job must have both a client and hired freelancer to submit reviews'
                )

            review_type = self._derive_review_type(reviewer_role)

            # Advisory only, the unique constraint decides races
            if self._find_existing(db, job_id, reviewer_id, recipient_id):
                raise ConflictError(ALREADY_REVIEWED)

            rating, categories = self._validate_scores(payload)
            comment = self._validate_comment(payload.get('comment'))
            job_title = job.title

        try:
            with get_db() as db:
                review = Review(
                    job_id=job_id,
                    reviewer_id=reviewer_id,
                    recipient_id=recipient_id,
                    rating=rating,
                    comment=comment,
                    type=review_type,
                    is_public=payload.get('is_public', payload.get('isPublic')) is not False,
                    **categories
                )
                db.add(review)
                db.flush()
                review.helpful_votes  # load before the session closes
        except IntegrityError:
            with get_db() as db:
                duplicate = self._find_existing(db, job_id, reviewer_id, recipient_id)
            if not duplicate:
                raise
            logger.warning(
                f"Duplicate review rejected by constraint for job {job_id}, "
                f"reviewer {reviewer_id}, recipient {recipient_id}"
            )
            raise ConflictError(ALREADY_REVIEWED)

        logger.info(f"Review {review.id} submitted for job {job_id} with rating {rating}")

        self.notification_service.notify(
            recipient_id,
            NotificationKind.NEW_REVIEW,
            'New Review Received',
            f'You\'ve received a {rating}-star review for the job "{job_title}"',
            data={
                'job': job_id,
                'job_title': job_title,
                'reviewer': reviewer_id,
                'review': review.id,
                'rating': rating
            },
            send_email=True
        )

        return review

    def get_review(self, review_id: int) -> Review:
        """Get a single review"""
        with get_db() as db:
            review = db.query(Review).options(selectinload(Review.helpful_votes)).filter_by(id=review_id).first()
            if not review:
                raise NotFoundError('Review not found')
            return review

    def get_stats_for_user(self, user_id: int) -> Dict:
        """Aggregate rating statistics for reviews a user has received"""
        return self._aggregate(Review.recipient_id == user_id)

    def get_global_stats(self) -> Dict:
        """Aggregate rating statistics across every review"""
        return self._aggregate()

    def get_reviews_for_job(self, job_id: int) -> Dict[str, Optional[Review]]:
        """Get the client's and the hired freelancer's review for a job"""
        with get_db() as db:
            job = db.query(Job).filter_by(id=job_id).first()
            if not job:
                raise NotFoundError('Job not found')

            def authored_by(user_id):
                if not user_id:
                    return None
                return db.query(Review).options(selectinload(Review.helpful_votes)).filter_by(
                    job_id=job_id, reviewer_id=user_id
                ).first()

            return {
                'client_review': authored_by(job.client_id),
                'freelancer_review': authored_by(job.hired_freelancer_id)
            }

    def get_reviews_for_user(self, user_id: int, viewer_id: int = None) -> Dict:
        """Get reviews a user has received, with their statistics"""
        with get_db() as db:
            if not db.query(User.id).filter_by(id=user_id).first():
                raise NotFoundError('User not found')

            query = db.query(Review).options(selectinload(Review.helpful_votes)).filter(
                Review.recipient_id == user_id
            )

            # Only the recipient sees private or hidden reviews
            if viewer_id != user_id:
                query = query.filter(Review.is_public == True, Review.is_hidden == False)  # noqa: E712

            reviews = query.order_by(Review.created_at.desc(), Review.id.desc()).all()

        return {
            'reviews': reviews,
            'stats': self.get_stats_for_user(user_id)
        }

    def update_review(self, review_id: int, editor_id: int, payload: Dict) -> Review:
        """Update the author's own review within the edit window"""
        payload = payload or {}

        with get_db() as db:
            review = db.query(Review).options(selectinload(Review.helpful_votes)).filter_by(id=review_id).first()
            if not review:
                raise NotFoundError('Review not found')

            if review.reviewer_id != editor_id:
                raise ForbiddenError('You can only update your own reviews')

            window_start = datetime.utcnow() - timedelta(days=Config.REVIEW_EDIT_WINDOW_DAYS)
            if review.created_at < window_start:
                raise InvalidStateError(
                    f'Reviews can only be updated within {Config.REVIEW_EDIT_WINDOW_DAYS} days of creation'
                )

            if payload.get('rating') is not None:
                review.rating = self._validate_score(payload['rating'], 'rating')

            for field, aliases in CATEGORY_ALIASES.items():
                value = self._first_present(payload, aliases)
                if value is not None:
                    setattr(review, field, self._validate_score(value, field))

            if payload.get('comment') is not None:
                review.comment = self._validate_comment(payload['comment'])

            is_public = payload.get('is_public', payload.get('isPublic'))
            if is_public is not None:
                review.is_public = is_public is not False

            db.flush()
            recipient_id = review.recipient_id
            job_id = review.job_id

        logger.info(f"Review {review_id} updated by user {editor_id}")

        self.notification_service.notify(
            recipient_id,
            NotificationKind.REVIEW_UPDATED,
            'Review Updated',
            'A review you received has been updated',
            data={'job': job_id, 'sender': editor_id, 'review': review_id}
        )

        return review

    def delete_review(self, review_id: int, actor_id: int, actor_role) -> bool:
        """Delete a review as its author or an administrator"""
        with get_db() as db:
            review = db.query(Review).filter_by(id=review_id).first()
            if not review:
                raise NotFoundError('Review not found')

            if review.reviewer_id != actor_id and self._role_value(actor_role) != UserRole.ADMIN.value:
                raise ForbiddenError('You can only delete your own reviews')

            db.delete(review)

        logger.info(f"Review {review_id} deleted by user {actor_id}")
        return True

    def report_review(self, review_id: int, reporter_id: int, reason: str) -> Review:
        """Flag a review for moderation, allowed for its recipient only"""
        if not reason or not str(reason).strip():
            raise InvalidArgumentError('Report reason is required')
        reason = str(reason).strip()

        with get_db() as db:
            review = db.query(Review).options(selectinload(Review.helpful_votes)).filter_by(id=review_id).first()
            if not review:
                raise NotFoundError('Review not found')

            if review.recipient_id != reporter_id:
                raise ForbiddenError('You can only report reviews about yourself')

            # A repeated report overwrites the previous one
            review.is_reported = True
            review.report_reason = reason
            review.reported_by_id = reporter_id
            review.reported_at = datetime.utcnow()
            db.flush()

        logger.info(f"Review {review_id} reported by user {reporter_id}")

        self.notification_service.notify_admins(
            NotificationKind.REVIEW_REPORTED,
            'Review Reported',
            f'A review has been reported for violation. Reason: {reason}',
            data={'review': review_id, 'sender': reporter_id}
        )

        return review

    def toggle_helpful_vote(self, review_id: int, user_id: int) -> Dict:
        """Add the user's helpful vote, or remove it if already present"""
        marked = False
        try:
            with get_db() as db:
                if not db.query(Review.id).filter_by(id=review_id).first():
                    raise NotFoundError('Review not found')

                vote = db.query(ReviewHelpfulVote).filter_by(review_id=review_id, user_id=user_id).first()
                if vote:
                    db.delete(vote)
                else:
                    db.add(ReviewHelpfulVote(review_id=review_id, user_id=user_id))
                    marked = True
                db.flush()
        except IntegrityError:
            # A concurrent toggle by the same user already inserted the vote
            logger.warning(f"Concurrent helpful vote for review {review_id} by user {user_id}")
            marked = True

        return {
            'helpful_count': self._helpful_count(review_id),
            'marked': marked
        }

    def list_reported(self) -> List[Review]:
        """Get reviews with an active report, most recently reported first"""
        with get_db() as db:
            return db.query(Review).options(selectinload(Review.helpful_votes)).filter(
                Review.is_reported == True  # noqa: E712
            ).order_by(Review.reported_at.desc(), Review.id.desc()).all()

    def moderate_reported_review(self, review_id: int, action: str, admin_notes: str = None,
                                 admin_id: int = None) -> Optional[Review]:
        """Resolve a report: keep the review, hide it, or delete it"""
        if action not in MODERATION_ACTIONS:
            raise InvalidArgumentError('Invalid action. Must be approve, reject, or delete.')

        with get_db() as db:
            review = db.query(Review).options(selectinload(Review.helpful_votes)).filter_by(id=review_id).first()
            if not review:
                raise NotFoundError('Review not found')

            if not review.is_reported:
                raise NotFoundError('This review has not been reported')

            reviewer_id = review.reviewer_id
            recipient_id = review.recipient_id
            reporter_id = review.reported_by_id

            if action == 'delete':
                db.delete(review)
                review = None
            elif action == 'approve':
                review.is_reported = False
                review.admin_notes = admin_notes or 'Report reviewed and approved by admin'
            else:
                review.is_public = False
                review.is_hidden = True
                review.is_reported = False
                review.admin_notes = admin_notes or 'Report reviewed and rejected by admin'
                review.moderation_reason = review.admin_notes

        logger.info(f"Reported review {review_id} moderated with action '{action}' by admin {admin_id}")

        self._notify_moderation(action, reviewer_id, recipient_id, reporter_id, admin_id)

        return review

    def _notify_moderation(self, action: str, reviewer_id: int, recipient_id: int,
                           reporter_id: Optional[int], admin_id: Optional[int]):
        data = {'sender': admin_id}

        if action == 'delete':
            message = ('A review you were involved with has been removed by an administrator '
                       'for violating our guidelines.')
            for user_id in (reviewer_id, recipient_id):
                self.notification_service.notify(
                    user_id, NotificationKind.SYSTEM, 'Review Removed', message, data, send_email=True
                )
            return

        if action == 'approve':
            reviewer_title = 'Review Report Resolved'
            reviewer_message = ('A report against your review has been reviewed and the review '
                                'has been maintained.')
            reporter_message = ('Thank you for your report. After careful review, we have determined '
                                'that the review does not violate our guidelines.')
        else:
            reviewer_title = 'Review Hidden'
            reviewer_message = ('Your review has been hidden as it was found to violate our '
                                'community guidelines.')
            reporter_message = ('Thank you for your report. After careful review, we have hidden '
                                'the review as it violated our guidelines.')

        self.notification_service.notify(
            reviewer_id, NotificationKind.SYSTEM, reviewer_title, reviewer_message, data, send_email=True
        )
        if reporter_id:
            self.notification_service.notify(
                reporter_id, NotificationKind.SYSTEM, 'Review Report Resolved', reporter_message, data,
                send_email=True
            )

    def _aggregate(self, *criteria) -> Dict:
        """Recompute rating statistics from review rows"""
        with get_db() as db:
            totals = db.query(
                func.count(Review.id),
                func.avg(Review.rating),
                *[func.avg(getattr(Review, field)) for field in CATEGORY_FIELDS]
            ).filter(*criteria).one()

            buckets = db.query(Review.rating, func.count(Review.id)).filter(
                *criteria
            ).group_by(Review.rating).all()

        total_reviews = totals[0] or 0
        distribution = {star: 0 for star in range(5, 0, -1)}
        for rating, count in buckets:
            distribution[rating] = count

        return {
            'average_rating': round_half_up(totals[1]) if total_reviews else 0,
            'total_reviews': total_reviews,
            'category_averages': {
                field: round_half_up(avg) if total_reviews else 0
                for field, avg in zip(CATEGORY_FIELDS, totals[2:])
            },
            'rating_distribution': distribution
        }

    def _helpful_count(self, review_id: int) -> int:
        with get_db() as db:
            return db.query(func.count(ReviewHelpfulVote.id)).filter(
                ReviewHelpfulVote.review_id == review_id
            ).scalar()

    @staticmethod
    def _find_existing(db, job_id: int, reviewer_id: int, recipient_id: int):
        return db.query(Review.id).filter_by(
            job_id=job_id, reviewer_id=reviewer_id, recipient_id=recipient_id
        ).first()

    @staticmethod
    def _role_value(role) -> str:
        return role.value if isinstance(role, UserRole) else str(role)

    def _derive_review_type(self, reviewer_role) -> ReviewType:
        review_type = REVIEW_TYPE_BY_ROLE.get(self._role_value(reviewer_role))
        if not review_type:
            raise ForbiddenError(
                'You must be either the client or the hired freelancer to submit a review'
            )
        return review_type

    def _validate_scores(self, payload: Dict) -> Tuple[int, Dict[str, int]]:
        rating = self._validate_score(payload.get('rating'), 'rating')

        categories = {}
        for field, aliases in CATEGORY_ALIASES.items():
            value = self._first_present(payload, aliases)
            categories[field] = rating if value is None else self._validate_score(value, field)

        return rating, categories

    @staticmethod
    def _validate_score(value, field: str) -> int:
        valid, result = validate_score(value, field)
        if not valid:
            raise InvalidArgumentError(result)
        return result

    @staticmethod
    def _validate_comment(comment) -> str:
        valid, result = validate_comment(comment)
        if not valid:
            raise InvalidArgumentError(result)
        return result

    @staticmethod
    def _first_present(payload: Dict, keys):
        for key in keys:
            if payload.get(key) is not None:
                return payload[key]
        return None
