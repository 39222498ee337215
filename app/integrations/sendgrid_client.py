import sendgrid
from sendgrid.helpers.mail import Mail, Email, To, Content
from typing import Dict, Optional
from config.config import Config
from app.utils.logger import get_logger

logger = get_logger(__name__)


class SendGridClient:
    """Wrapper for SendGrid email operations"""

    def __init__(self):
        self.api_key = Config.SENDGRID_API_KEY
        self.from_email = Config.SENDGRID_FROM_EMAIL

        if self.api_key:
            self.client = sendgrid.SendGridAPIClient(api_key=self.api_key)
        else:
            self.client = None
            logger.warning("SendGrid API key not configured")

    def send_email(self, to_email: str, subject: str, html_content: str,
                   plain_content: str = None) -> Optional[Dict]:
        """Send email via SendGrid"""
        if not self.client:
            logger.error("SendGrid client not initialized")
            return None

        try:
            message = Mail(
                from_email=Email(self.from_email, "GigMarket"),
                to_emails=To(to_email),
                subject=subject,
                html_content=Content("text/html", html_content)
            )

            if plain_content:
                message.plain_text_content = Content("text/plain", plain_content)

            response = self.client.send(message)

            return {
                'status_code': response.status_code,
                'message_id': response.headers.get('X-Message-Id')
            }
        except Exception as e:
            logger.error(f"Error sending email to {to_email}: {str(e)}")
            return None

    def send_review_received(self, to_email: str, name: str, rating: int,
                             job_title: str, profile_link: str) -> Optional[Dict]:
        """Send new review notification"""
        subject = f"You received a {rating}-star review on GigMarket"
        html_content = f"""
        <html>
            <body style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
                <h2>New Review Received</h2>
                <p>Hi {name},</p>
                <p>You've received a new review for the job <strong>{job_title}</strong>:</p>
                <div style="background-color: #f5f5f5; padding: 20px; border-radius: 8px; margin: 20px 0;">
                    <p><strong>Rating:</strong> {'&#9733;' * rating}{'&#9734;' * (5 - rating)} ({rating}/5)</p>
                </div>
                <p style="margin: 30px 0;">
                    <a href="{profile_link}"
                       style="background-color: #FF9800; color: white; padding: 14px 28px;
                              text-decoration: none; border-radius: 4px; display: inline-block;">
                        View Review
                    </a>
                </p>
                <p style="color: #666; font-size: 12px; margin-top: 40px;">
                    If you believe this review violates our guidelines, you can report it from your profile.
                </p>
            </body>
        </html>
        """
        plain_content = f"""
        Hi {name},

        You've received a {rating}-star review for the job "{job_title}".

        View it here: {profile_link}
        """

        return self.send_email(to_email, subject, html_content, plain_content)

    def send_moderation_notice(self, to_email: str, name: str, title: str, message: str) -> Optional[Dict]:
        """Send the outcome of a review moderation decision"""
        subject = f"{title} - GigMarket"
        html_content = f"""
        <html>
            <body style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
                <h2>{title}</h2>
                <p>Hi {name},</p>
                <p>{message}</p>
                <p>Thank you for helping keep GigMarket reviews trustworthy.</p>
            </body>
        </html>
        """

        return self.send_email(to_email, subject, html_content, f"Hi {name},\n\n{message}")
