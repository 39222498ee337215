#!/usr/bin/env python3
"""
Check the reviews table: counts, orphaned rows, duplicate triples and the
unique (job, reviewer, recipient) index. Pass --fix to delete orphaned rows
and create the index when it is missing.
"""

import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import argparse
from sqlalchemy import Index, inspect, func, select
from app.database import engine, get_db, init_db
from app.models import Review, Job, User
from app.utils.logger import get_logger

logger = get_logger('check_reviews')

UNIQUE_COLUMNS = ['job_id', 'reviewer_id', 'recipient_id']
INDEX_NAME = 'uq_review_job_reviewer_recipient'


def has_unique_triple_index():
    """Check for a unique constraint or index over the review triple"""
    inspector = inspect(engine)
    for constraint in inspector.get_unique_constraints('reviews'):
        if sorted(constraint['column_names']) == sorted(UNIQUE_COLUMNS):
            return True
    for index in inspector.get_indexes('reviews'):
        if index.get('unique') and sorted(index['column_names']) == sorted(UNIQUE_COLUMNS):
            return True
    return False


def find_orphans(db):
    """Reviews pointing at a job or user that no longer exists"""
    job_ids = select(Job.id)
    user_ids = select(User.id)
    return db.query(Review).filter(
        ~Review.job_id.in_(job_ids) |
        ~Review.reviewer_id.in_(user_ids) |
        ~Review.recipient_id.in_(user_ids)
    ).all()


def find_duplicates(db):
    return db.query(
        Review.job_id, Review.reviewer_id, Review.recipient_id, func.count(Review.id)
    ).group_by(
        Review.job_id, Review.reviewer_id, Review.recipient_id
    ).having(func.count(Review.id) > 1).all()


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument('--fix', action='store_true', help='delete orphans and create the unique index')
    args = parser.parse_args()

    init_db()

    with get_db() as db:
        total = db.query(func.count(Review.id)).scalar()
        print(f"Total reviews in database: {total}")

        orphans = find_orphans(db)
        print(f"Reviews with missing job/reviewer/recipient: {len(orphans)}")
        for review in orphans:
            print(f"  - review {review.id}: job={review.job_id} reviewer={review.reviewer_id} "
                  f"recipient={review.recipient_id}")

        duplicates = find_duplicates(db)
        print(f"Duplicate (job, reviewer, recipient) triples: {len(duplicates)}")
        for job_id, reviewer_id, recipient_id, count in duplicates:
            print(f"  - job={job_id} reviewer={reviewer_id} recipient={recipient_id}: {count} reviews")

        if args.fix and orphans:
            for review in orphans:
                db.delete(review)
            logger.info(f"Removed {len(orphans)} orphaned reviews")

    if has_unique_triple_index():
        print("Unique review index present")
    elif not args.fix:
        print("Unique review index MISSING, rerun with --fix")
    elif duplicates:
        print("Cannot create unique index while duplicate reviews exist")
        sys.exit(1)
    else:
        Index(INDEX_NAME, *[getattr(Review, column) for column in UNIQUE_COLUMNS], unique=True).create(engine)
        logger.info(f"Created unique index {INDEX_NAME}")
        print(f"Created unique index {INDEX_NAME}")


if __name__ == "__main__":
    main()
