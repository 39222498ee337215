import os

# Must be set before config.config is imported
os.environ['DATABASE_URL'] = 'sqlite:///test_gigmarket.db'
os.environ['NOTIFICATIONS_ASYNC'] = 'false'
os.environ['LOG_FILE'] = 'logs/test_gigmarket.log'

import pytest  # noqa: E402
from datetime import datetime  # noqa: E402
from unittest.mock import Mock  # noqa: E402
from app.database import drop_db, init_db, DatabaseManager  # noqa: E402
from app.models import User, Job  # noqa: E402
from app.models.job import JobStatus  # noqa: E402
from app.models.user import UserRole  # noqa: E402
from app.services.notification_service import NotificationService  # noqa: E402
from app.services.review_service import ReviewService  # noqa: E402


@pytest.fixture
def marketplace():
    """Set up test database with a completed job and its parties"""
    drop_db()
    init_db()

    user_db = DatabaseManager(User)
    job_db = DatabaseManager(Job)

    client = user_db.create(
        email='client@test.com',
        first_name='Test',
        last_name='Client',
        role=UserRole.CLIENT
    )

    freelancer = user_db.create(
        email='freelancer@test.com',
        first_name='Test',
        last_name='Freelancer',
        role=UserRole.FREELANCER
    )

    outsider = user_db.create(
        email='outsider@test.com',
        first_name='Test',
        last_name='Outsider',
        role=UserRole.CLIENT
    )

    admin = user_db.create(
        email='admin@test.com',
        first_name='Test',
        last_name='Admin',
        role=UserRole.ADMIN
    )

    job = job_db.create(
        title='Build a landing page',
        status=JobStatus.COMPLETED,
        client_id=client.id,
        hired_freelancer_id=freelancer.id,
        completed_at=datetime.utcnow()
    )

    yield {
        'client': client,
        'freelancer': freelancer,
        'outsider': outsider,
        'admin': admin,
        'job': job,
        'job_db': job_db
    }

    drop_db()


@pytest.fixture
def email_client():
    """Stand-in for the SendGrid client"""
    return Mock()


@pytest.fixture
def review_service(email_client):
    """Review service that delivers notifications inline"""
    return ReviewService(NotificationService(async_dispatch=False, email_client=email_client))


@pytest.fixture
def make_job(marketplace):
    """Factory for extra jobs between the marketplace parties"""
    def _make_job(status=JobStatus.COMPLETED, title='Another job', client=None, freelancer=None):
        client = client or marketplace['client']
        freelancer = freelancer or marketplace['freelancer']
        return marketplace['job_db'].create(
            title=title,
            status=status,
            client_id=client.id,
            hired_freelancer_id=freelancer.id
        )
    return _make_job
