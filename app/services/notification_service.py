import atexit
from typing import Dict, Optional
from apscheduler.schedulers.background import BackgroundScheduler
from app.database import get_db
from app.models import Notification, User
from app.models.notification import NotificationKind
from app.models.user import UserRole
from app.integrations import SendGridClient
from config.config import Config
from app.utils.logger import get_logger

logger = get_logger(__name__)


class NotificationService:
    """Fire-and-forget in-app notifications with best-effort email"""

    def __init__(self, async_dispatch: Optional[bool] = None, email_client: SendGridClient = None):
        self.sendgrid = email_client or SendGridClient()
        self.async_dispatch = Config.NOTIFICATIONS_ASYNC if async_dispatch is None else async_dispatch
        self.scheduler = None

        if self.async_dispatch:
            # Queued deliveries must run however late the pool frees up
            self.scheduler = BackgroundScheduler(job_defaults={
                'misfire_grace_time': None,
                'coalesce': False
            })
            self.scheduler.start()
            atexit.register(self.shutdown)

    def shutdown(self, wait: bool = False):
        """Stop the background scheduler if it is still running"""
        if self.scheduler and self.scheduler.running:
            self.scheduler.shutdown(wait=wait)

    def notify(self, recipient_id: int, kind: NotificationKind, title: str, message: str,
               data: Dict = None, send_email: bool = False):
        """Queue a notification for a user; never raises"""
        args = [recipient_id, kind, title, message, data or {}, send_email]

        if not self.scheduler:
            self._deliver_safely(*args)
            return

        try:
            # No trigger means the job runs once, immediately, on the scheduler's pool
            self.scheduler.add_job(func=self._deliver_safely, args=args)
        except Exception as e:
            logger.error(f"Error queueing notification for user {recipient_id}: {str(e)}")

    def notify_admins(self, kind: NotificationKind, title: str, message: str, data: Dict = None):
        """Notify every active administrator"""
        try:
            with get_db() as db:
                admin_ids = [
                    admin_id for (admin_id,) in db.query(User.id).filter(
                        User.role == UserRole.ADMIN,
                        User.is_active == True  # noqa: E712
                    ).all()
                ]
        except Exception as e:
            logger.error(f"Error looking up administrators: {str(e)}")
            return

        for admin_id in admin_ids:
            self.notify(admin_id, kind, title, message, data)

    def _deliver_safely(self, recipient_id: int, kind: NotificationKind, title: str, message: str,
                        data: Dict, send_email: bool):
        try:
            self._deliver(recipient_id, kind, title, message, data, send_email)
        except Exception as e:
            logger.error(f"Error delivering {kind.value} notification to user {recipient_id}: {str(e)}")

    def _deliver(self, recipient_id: int, kind: NotificationKind, title: str, message: str,
                 data: Dict, send_email: bool):
        """Persist the notification and send the matching email"""
        with get_db() as db:
            db.add(Notification(
                recipient_id=recipient_id,
                kind=kind,
                title=title,
                message=message,
                data=data
            ))
            user = db.query(User).filter_by(id=recipient_id).first()

        logger.info(f"Sent {kind.value} notification to user {recipient_id}")

        if not send_email or not user or not user.email:
            return
        if not (user.notification_preferences or {}).get('email', True):
            return

        self._send_email(user, kind, title, message, data)

    def _send_email(self, user: User, kind: NotificationKind, title: str, message: str, data: Dict):
        try:
            if kind == NotificationKind.NEW_REVIEW:
                self.sendgrid.send_review_received(
                    user.email,
                    user.full_name,
                    data.get('rating', 0),
                    data.get('job_title', ''),
                    f"{Config.APP_URL}/users/{user.id}/reviews"
                )
            else:
                self.sendgrid.send_moderation_notice(user.email, user.full_name, title, message)
        except Exception as e:
            logger.error(f"Error sending {kind.value} email to user {user.id}: {str(e)}")
