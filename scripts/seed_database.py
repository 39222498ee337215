#!/usr/bin/env python3
"""
Script to seed the database with sample data for testing
"""

import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from datetime import datetime, timedelta
from app.database import init_db, drop_db, get_db
from app.models import User, Job
from app.models.job import JobStatus
from app.models.user import UserRole
from app.services.notification_service import NotificationService
from app.services.review_service import ReviewService
from app.utils.security import generate_user_token
import random


SAMPLE_COMMENTS = [
    'Great work, delivered ahead of schedule!',
    'Clear communication throughout the project.',
    'Solid result, a few revisions were needed.',
    'Responsive and professional, would hire again.',
    'Did the job but missed a couple of deadlines.'
]


def create_users(db):
    """Create an admin plus sample clients and freelancers"""
    users = {'admin': None, 'clients': [], 'freelancers': []}

    users['admin'] = User(
        email='admin@gigmarket.com',
        first_name='Admin',
        last_name='User',
        role=UserRole.ADMIN
    )
    db.add(users['admin'])

    for i in range(3):
        client = User(
            email=f'client{i + 1}@example.com',
            first_name='Client',
            last_name=str(i + 1),
            role=UserRole.CLIENT
        )
        freelancer = User(
            email=f'freelancer{i + 1}@example.com',
            first_name='Freelancer',
            last_name=str(i + 1),
            role=UserRole.FREELANCER
        )
        db.add_all([client, freelancer])
        users['clients'].append(client)
        users['freelancers'].append(freelancer)

    db.flush()
    return users


def create_jobs(db, users):
    """Create completed jobs pairing every client with every freelancer"""
    jobs = []
    for client in users['clients']:
        for freelancer in users['freelancers']:
            job = Job(
                title=f'Landing page for {client.last_name}-{freelancer.last_name}',
                status=JobStatus.COMPLETED,
                client_id=client.id,
                hired_freelancer_id=freelancer.id,
                completed_at=datetime.utcnow() - timedelta(days=random.randint(1, 20))
            )
            db.add(job)
            jobs.append(job)

    # One job still in progress, which cannot be reviewed yet
    db.add(Job(
        title='Mobile app prototype',
        status=JobStatus.IN_PROGRESS,
        client_id=users['clients'][0].id,
        hired_freelancer_id=users['freelancers'][0].id
    ))

    db.flush()
    return jobs


def create_reviews(jobs):
    """Have both parties of each completed job review each other"""
    review_service = ReviewService(NotificationService(async_dispatch=False))

    for job in jobs:
        review_service.submit_review(
            job.id, job.client_id, 'client', job.hired_freelancer_id,
            {'rating': random.randint(3, 5), 'comment': random.choice(SAMPLE_COMMENTS)}
        )
        review_service.submit_review(
            job.id, job.hired_freelancer_id, 'freelancer', job.client_id,
            {'rating': random.randint(2, 5), 'comment': random.choice(SAMPLE_COMMENTS),
             'communication': random.randint(1, 5)}
        )


def main():
    """Seed the database"""
    print("Dropping existing tables...")
    drop_db()

    print("Creating tables...")
    init_db()

    with get_db() as db:
        users = create_users(db)
        jobs = create_jobs(db, users)

    print("Creating reviews...")
    create_reviews(jobs)

    print("\nDatabase seeded successfully!")
    print("\nSample tokens:")
    print(f"Admin:      {generate_user_token(users['admin'])}")
    print(f"Client:     {generate_user_token(users['clients'][0])}")
    print(f"Freelancer: {generate_user_token(users['freelancers'][0])}")


if __name__ == "__main__":
    main()
